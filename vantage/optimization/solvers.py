"""
LP/MILP solver adapters.

Each adapter takes an LPProblem and returns a SolverResult with a uniform
status. Two backends are available:

    - "highs": SciPy's HiGHS interface (linprog / milp), the default
    - "pulp": PuLP with the bundled CBC solver (optional dependency)
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Type, Union
import numpy as np

from vantage.exceptions import InfeasibleInstance, SolverError, UnboundedProblem
from vantage.optimization.lp import LPProblem

logger = logging.getLogger(__name__)


class SolveStatus(str, Enum):
    """Outcome of a solve."""
    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    ERROR = "error"


@dataclass
class SolverResult:
    """
    Result of a single LP/MILP solve.

    Attributes:
        status: Uniform solve status
        x: Solution vector (None unless status is OPTIMAL)
        objective: Objective value (None unless status is OPTIMAL)
        message: Backend message
        solver_name: Name of the adapter that produced the result
        runtime_seconds: Wall-clock solve time
    """
    status: SolveStatus
    x: Optional[np.ndarray] = None
    objective: Optional[float] = None
    message: str = ""
    solver_name: str = "unknown"
    runtime_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.status == SolveStatus.OPTIMAL

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "status": self.status.value,
            "objective": self.objective,
            "message": self.message,
            "solver_name": self.solver_name,
            "runtime_seconds": self.runtime_seconds,
        }


class LPSolver(ABC):
    """
    Base class for solver adapters.

    Subclasses implement ``_solve``; ``solve`` handles the trivial cases
    (no variables, a covering row with no variables) and timing.
    """

    name = "base"

    def solve(self, problem: LPProblem) -> SolverResult:
        """
        Solve the problem.

        Args:
            problem: LPProblem to solve (continuous or integer per its flag)

        Returns:
            SolverResult; errors are reported through the status, not raised.
        """
        t0 = time.time()

        if problem.num_variables == 0:
            if any(rhs > 0 for rhs in problem.rhs):
                result = SolverResult(
                    SolveStatus.INFEASIBLE, message="Covering constraints without variables"
                )
            else:
                result = SolverResult(
                    SolveStatus.OPTIMAL, x=np.zeros(0), objective=0.0, message="Empty problem"
                )
        elif any(len(row) == 0 and rhs > 0 for row, rhs in zip(problem.rows, problem.rhs)):
            result = SolverResult(
                SolveStatus.INFEASIBLE, message="A covering constraint has no variables"
            )
        else:
            result = self._solve(problem)

        result.solver_name = self.name
        result.runtime_seconds = time.time() - t0
        logger.debug(
            "%s solve (%d vars, %d rows, integer=%s): %s in %.3fs",
            self.name, problem.num_variables, problem.num_constraints,
            problem.integer, result.status.value, result.runtime_seconds,
        )
        return result

    @abstractmethod
    def _solve(self, problem: LPProblem) -> SolverResult:
        """Solve a non-trivial problem with the backend."""


class HighsSolver(LPSolver):
    """
    SciPy HiGHS backend.

    Continuous problems go through ``scipy.optimize.linprog(method="highs")``
    and integer problems through ``scipy.optimize.milp``.

    Args:
        time_limit: Optional time limit per solve in seconds
        presolve: Enable HiGHS presolve
    """

    name = "highs"

    # Shared by linprog and milp
    _STATUS = {
        0: SolveStatus.OPTIMAL,
        2: SolveStatus.INFEASIBLE,
        3: SolveStatus.UNBOUNDED,
    }

    def __init__(self, time_limit: Optional[float] = None, presolve: bool = True):
        self.time_limit = time_limit
        self.presolve = presolve

    def _options(self) -> dict:
        options = {"presolve": self.presolve}
        if self.time_limit is not None:
            options["time_limit"] = float(self.time_limit)
        return options

    def _solve(self, problem: LPProblem) -> SolverResult:
        from scipy.optimize import Bounds, LinearConstraint, linprog, milp

        c = problem.objective()
        lower, upper = problem.bounds()
        A = problem.constraint_matrix()
        b = problem.constraint_rhs()

        if problem.integer:
            constraints = []
            if problem.num_constraints > 0:
                constraints.append(LinearConstraint(A, lb=b, ub=np.inf))
            res = milp(
                c,
                integrality=np.ones(problem.num_variables),
                bounds=Bounds(lower, upper),
                constraints=constraints,
                options=self._options(),
            )
        else:
            # linprog only takes A_ub x <= b_ub
            res = linprog(
                c,
                A_ub=-A if problem.num_constraints > 0 else None,
                b_ub=-b if problem.num_constraints > 0 else None,
                bounds=np.column_stack([lower, upper]),
                method="highs",
                options=self._options(),
            )

        status = self._STATUS.get(res.status, SolveStatus.ERROR)
        if status == SolveStatus.OPTIMAL and res.x is None:
            status = SolveStatus.ERROR
        if status == SolveStatus.ERROR and "unbounded" in str(res.message).lower():
            status = self._classify_unbounded_or_infeasible(c, A, b, lower, upper)
        if status != SolveStatus.OPTIMAL:
            return SolverResult(status, message=str(res.message))

        x = np.asarray(res.x, dtype=np.float64)
        return SolverResult(
            SolveStatus.OPTIMAL,
            x=x,
            objective=float(c @ x),
            message=str(res.message),
        )

    def _classify_unbounded_or_infeasible(self, c, A, b, lower, upper) -> SolveStatus:
        """
        Resolve HiGHS' "unbounded or infeasible" outcome.

        Presolve can stop without deciding which of the two holds. The
        continuous relaxation solved without presolve tells them apart. A
        relaxation that solves to optimality leaves the outcome undecided,
        which is reported as an error.
        """
        from scipy.optimize import linprog

        has_rows = A.shape[0] > 0
        res = linprog(
            c,
            A_ub=-A if has_rows else None,
            b_ub=-b if has_rows else None,
            bounds=np.column_stack([lower, upper]),
            method="highs",
            options={"presolve": False},
        )
        if res.status == 2:
            return SolveStatus.INFEASIBLE
        if res.status == 3:
            return SolveStatus.UNBOUNDED
        return SolveStatus.ERROR


class PulpSolver(LPSolver):
    """
    PuLP backend solving with CBC.

    Args:
        lp_path: Optional path; when set, the LP-format text of each solved
            model is written there (overwriting the previous one)
        time_limit: Optional time limit per solve in seconds
    """

    name = "pulp"

    def __init__(self, lp_path: Optional[str] = None, time_limit: Optional[float] = None):
        self.lp_path = lp_path
        self.time_limit = time_limit

    def _solve(self, problem: LPProblem) -> SolverResult:
        try:
            import pulp
        except ImportError:
            raise ImportError(
                "pulp is required for the 'pulp' solver. "
                "Install with: pip install pulp"
            )

        category = pulp.LpInteger if problem.integer else pulp.LpContinuous
        try:
            model = pulp.LpProblem(problem.name, pulp.LpMinimize)
            # PuLP spells an infinite bound as None
            x = [
                pulp.LpVariable(
                    f"x_{j}",
                    lowBound=lo if np.isfinite(lo) else None,
                    upBound=hi if np.isfinite(hi) else None,
                    cat=category,
                )
                for j, (lo, hi) in enumerate(zip(problem.lower, problem.upper))
            ]
            model += pulp.lpSum(cost * var for cost, var in zip(problem.costs, x)), "weighted_count"
            for i, (row, rhs) in enumerate(zip(problem.rows, problem.rhs)):
                if len(row) == 0:
                    continue
                model += pulp.lpSum(x[j] for j in row) >= rhs, f"cover_{i}"

            if self.lp_path is not None:
                model.writeLP(self.lp_path)

            model.solve(pulp.PULP_CBC_CMD(msg=False, timeLimit=self.time_limit))
        except (pulp.PulpError, pulp.PulpSolverError) as e:
            logger.error("PuLP failed: %s", e)
            return SolverResult(SolveStatus.ERROR, message=str(e))

        status = {
            pulp.LpStatusOptimal: SolveStatus.OPTIMAL,
            pulp.LpStatusInfeasible: SolveStatus.INFEASIBLE,
            pulp.LpStatusUnbounded: SolveStatus.UNBOUNDED,
        }.get(model.status, SolveStatus.ERROR)
        message = pulp.LpStatus.get(model.status, str(model.status))

        if status != SolveStatus.OPTIMAL:
            return SolverResult(status, message=message)

        values = np.array(
            [0.0 if var.varValue is None else var.varValue for var in x],
            dtype=np.float64,
        )
        return SolverResult(
            SolveStatus.OPTIMAL,
            x=values,
            objective=float(problem.objective() @ values),
            message=message,
        )


SOLVERS: Dict[str, Type[LPSolver]] = {
    "highs": HighsSolver,
    "pulp": PulpSolver,
}


def get_solver(solver: Union[str, LPSolver, None] = "highs", **options) -> LPSolver:
    """
    Resolve a solver name (or pass through an adapter instance).

    Args:
        solver: "highs", "pulp", an LPSolver instance, or None for the default
        **options: Constructor arguments for the named adapter

    Raises:
        ValueError: If the name is unknown
    """
    if isinstance(solver, LPSolver):
        return solver
    if solver is None:
        solver = "highs"
    if solver not in SOLVERS:
        raise ValueError(f"Unknown solver: {solver}. Available: {list(SOLVERS.keys())}")
    return SOLVERS[solver](**options)


def raise_for_status(result: SolverResult, context: str = "LP") -> SolverResult:
    """
    Convert a non-optimal result into the matching exception.

    Returns:
        The result itself when it is optimal.

    Raises:
        InfeasibleInstance, UnboundedProblem or SolverError
    """
    if result.status == SolveStatus.OPTIMAL:
        return result

    message = f"{context} solve failed ({result.solver_name}): {result.status.value}"
    if result.message:
        message += f" - {result.message}"

    if result.status == SolveStatus.INFEASIBLE:
        raise InfeasibleInstance(message, status=result.status.value)
    if result.status == SolveStatus.UNBOUNDED:
        raise UnboundedProblem(message, status=result.status.value)
    raise SolverError(message, status=result.status.value)
