"""
Candidate reduction and the exact covering solve.

The relaxed solution decides which candidates are kept; the binary program
is then solved over the kept columns only.
"""

import logging
from enum import Enum
from typing import Optional, Union
import numpy as np

from vantage.core.visibility import find_unobservable_cells
from vantage.exceptions import InfeasibleInstance
from vantage.optimization.lp import build_lp_problem
from vantage.optimization.solvers import LPSolver, get_solver, raise_for_status

logger = logging.getLogger(__name__)

DEFAULT_SELECTION_TOLERANCE = 1e-6


class SelectionRule(str, Enum):
    """
    Which relaxed values mark a candidate as retained.

    SUPPORT keeps candidates with a value above the tolerance. The relaxed
    solution covers every cell, so its support always contains a cover.

    ZERO keeps candidates whose value is zero within the tolerance. It can
    leave cells without any retained candidate, in which case the final
    solve reports the instance infeasible.
    """
    SUPPORT = "support"
    ZERO = "zero"


def select_candidates(
    solution: np.ndarray,
    rule: Union[str, SelectionRule] = SelectionRule.SUPPORT,
    tolerance: float = DEFAULT_SELECTION_TOLERANCE,
) -> np.ndarray:
    """
    Indices of the candidates retained for the exact solve.

    Args:
        solution: Relaxed solution vector
        rule: SelectionRule or its name
        tolerance: Absolute tolerance around zero

    Returns:
        Ascending integer array of retained candidate indices
    """
    rule = SelectionRule(rule)
    solution = np.asarray(solution, dtype=np.float64)

    if rule == SelectionRule.SUPPORT:
        mask = solution > tolerance
    else:
        mask = np.abs(solution) <= tolerance

    return np.flatnonzero(mask)


def reduce_visibility(visibility: np.ndarray, retained: np.ndarray) -> np.ndarray:
    """Copy of the visibility matrix restricted to the retained columns."""
    visibility = np.asarray(visibility)
    retained = np.asarray(retained, dtype=np.int64)
    if len(retained) > visibility.shape[1]:
        raise ValueError(
            f"Cannot retain {len(retained)} of {visibility.shape[1]} candidates"
        )
    return visibility[:, retained].copy()


def solve_reduced_problem(
    visibility: np.ndarray,
    retained: np.ndarray,
    solver: Union[str, LPSolver, None] = None,
    rule: Optional[Union[str, SelectionRule]] = None,
) -> np.ndarray:
    """
    Solve the binary covering program over the retained candidates.

    Args:
        visibility: Full (N, M) visibility matrix
        retained: Indices of retained candidates
        solver: Solver name or adapter (default: HiGHS)
        rule: Selection rule that produced ``retained`` (for error messages)

    Returns:
        Ascending indices (into the full candidate list) of the selected poses

    Raises:
        InfeasibleInstance: If the retained candidates cannot cover every
            cell, or the solver reports infeasibility
        UnboundedProblem, SolverError: On other solver failures
    """
    solver = get_solver(solver)
    retained = np.asarray(retained, dtype=np.int64)

    origin = f" by the '{SelectionRule(rule).value}' rule" if rule is not None else ""

    if len(retained) == 0:
        raise InfeasibleInstance(f"No candidates were retained{origin} for the final solve")

    reduced = reduce_visibility(visibility, retained)
    uncovered = find_unobservable_cells(reduced)
    if len(uncovered) > 0:
        raise InfeasibleInstance(
            f"{len(uncovered)} cells are not visible from any candidate retained{origin}",
            cell_indices=uncovered.tolist(),
        )

    logger.info(
        "Final solve over %d of %d candidates",
        len(retained), np.asarray(visibility).shape[1],
    )

    problem = build_lp_problem(reduced, integer=True)
    result = raise_for_status(solver.solve(problem), context="Final integer")

    selected = retained[result.x > 0.5]
    logger.info("Selected %d poses (objective %.1f)", len(selected), result.objective)
    return selected
