"""
Reweighted l1 relaxation of the covering problem.

The binary set-cover program is approximated by a sequence of weighted LP
relaxations. After each solve the weights are recomputed as

    w_i = eps_k / (eps_k + C_i),   eps_k = (1 / (e - 1)) ** (1 + 0.1 * (k - 1))

so that candidates driven towards zero become more expensive in the next
round, pushing the relaxation towards a sparse solution. The loop stops once
the number of near-zero variables has been stable for a window of
iterations, or after a fixed number of solves.

The loop state is an explicit RelaxationState that each step consumes and
returns; nothing is kept between calls.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union
import numpy as np

from vantage.optimization.lp import build_lp_problem
from vantage.optimization.solvers import LPSolver, get_solver, raise_for_status

logger = logging.getLogger(__name__)

SPARSITY_EPSILON = 0.01
DEFAULT_SPARSITY_CHECK_RANGE = 20
DEFAULT_MAX_ITERATIONS = 200


def weight_epsilon(iteration: int) -> float:
    """Epsilon term of the weight update for a 1-based iteration number."""
    return float((1.0 / (np.e - 1.0)) ** (1.0 + 0.1 * (iteration - 1)))


def update_weights(solution: np.ndarray, iteration: int) -> np.ndarray:
    """
    Next weight vector from a relaxed solution.

    Args:
        solution: Relaxed solution vector C
        iteration: 1-based iteration that produced C

    Returns:
        Weights eps / (eps + C), one per candidate
    """
    eps = weight_epsilon(iteration)
    solution = np.asarray(solution, dtype=np.float64)
    return eps / (eps + solution)


def sparsity_measure(solution: np.ndarray, epsilon: float = SPARSITY_EPSILON) -> int:
    """Number of variables with value <= epsilon."""
    return int(np.count_nonzero(np.asarray(solution) <= epsilon))


def has_converged(history: List[int], check_range: int) -> bool:
    """
    Whether the last ``check_range`` sparsity measures are all equal.

    Raises:
        ValueError: If check_range < 1
    """
    if check_range < 1:
        raise ValueError(f"check_range must be >= 1, got {check_range}")
    if len(history) < check_range:
        return False
    latest = history[-1]
    return all(value == latest for value in history[-check_range:])


@dataclass
class RelaxationState:
    """
    Loop state of the reweighted relaxation.

    Attributes:
        weights: Objective weights for the next solve
        iteration: Number of solves performed so far
        sparsity_history: Sparsity measure after each solve
        solution: Solution of the most recent solve (None before the first)
        converged: Whether the sparsity measure is stable
        objective: Weighted objective of the most recent solve
    """
    weights: np.ndarray
    iteration: int = 0
    sparsity_history: List[int] = field(default_factory=list)
    solution: Optional[np.ndarray] = None
    converged: bool = False
    objective: Optional[float] = None

    @classmethod
    def initial(cls, num_candidates: int) -> "RelaxationState":
        """Unit weights, no solves yet."""
        return cls(weights=np.ones(num_candidates, dtype=np.float64))


def relaxation_step(
    state: RelaxationState,
    visibility: np.ndarray,
    solver: LPSolver,
    sparsity_check_range: int = DEFAULT_SPARSITY_CHECK_RANGE,
    sparsity_epsilon: float = SPARSITY_EPSILON,
) -> RelaxationState:
    """
    Solve one weighted relaxation and return the next loop state.

    The input state is not modified.

    Raises:
        InfeasibleInstance, UnboundedProblem, SolverError: If the solve fails
    """
    iteration = state.iteration + 1

    problem = build_lp_problem(visibility, weights=state.weights, integer=False)
    result = raise_for_status(
        solver.solve(problem), context=f"Relaxation iteration {iteration}"
    )

    solution = result.x
    sparsity = sparsity_measure(solution, sparsity_epsilon)
    history = state.sparsity_history + [sparsity]

    logger.info("Iteration %d, sparsity %d", iteration, sparsity)

    return RelaxationState(
        weights=update_weights(solution, iteration),
        iteration=iteration,
        sparsity_history=history,
        solution=solution,
        converged=has_converged(history, sparsity_check_range),
        objective=result.objective,
    )


@dataclass
class RelaxationResult:
    """
    Outcome of the reweighted relaxation.

    Attributes:
        solution: Relaxed solution of the final solve
        weights: Weights computed from the final solution
        iterations: Number of LP solves
        sparsity_history: Sparsity measure after each solve
        converged: Whether the loop stopped on a stable sparsity measure
        termination_reason: "converged" or "max_iterations"
        trace: Solution of every iteration (only when recorded)
        runtime_seconds: Wall-clock time of the loop
    """
    solution: np.ndarray
    weights: np.ndarray
    iterations: int
    sparsity_history: List[int]
    converged: bool
    termination_reason: str
    trace: List[np.ndarray] = field(default_factory=list)
    runtime_seconds: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "iterations": self.iterations,
            "converged": self.converged,
            "termination_reason": self.termination_reason,
            "sparsity_history": list(self.sparsity_history),
            "final_sparsity": self.sparsity_history[-1] if self.sparsity_history else None,
            "runtime_seconds": self.runtime_seconds,
        }


def run_reweighted_relaxation(
    visibility: np.ndarray,
    solver: Union[str, LPSolver, None] = None,
    sparsity_check_range: int = DEFAULT_SPARSITY_CHECK_RANGE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    sparsity_epsilon: float = SPARSITY_EPSILON,
    callback: Optional[Callable[[RelaxationState], None]] = None,
    record_trace: bool = False,
) -> RelaxationResult:
    """
    Run reweighted relaxations until the sparsity measure stabilizes.

    Args:
        visibility: (N, M) visibility matrix
        solver: Solver name or adapter (default: HiGHS)
        sparsity_check_range: Number of equal consecutive sparsity measures
            required for convergence
        max_iterations: Hard cap on the number of LP solves
        sparsity_epsilon: Threshold below which a variable counts as zero
        callback: Called with the new state after every iteration
        record_trace: Keep the solution of every iteration

    Returns:
        RelaxationResult with the final relaxed solution

    Raises:
        ValueError: If max_iterations or sparsity_check_range is < 1
        InfeasibleInstance, UnboundedProblem, SolverError: On a failed solve

    Example:
        >>> V = np.eye(3, dtype=np.uint8)
        >>> result = run_reweighted_relaxation(V, sparsity_check_range=2)
        >>> result.converged
        True
    """
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")
    if sparsity_check_range < 1:
        raise ValueError(f"sparsity_check_range must be >= 1, got {sparsity_check_range}")

    solver = get_solver(solver)
    visibility = np.asarray(visibility)

    t0 = time.time()
    state = RelaxationState.initial(visibility.shape[1])
    trace = []

    while True:
        state = relaxation_step(
            state,
            visibility,
            solver,
            sparsity_check_range=sparsity_check_range,
            sparsity_epsilon=sparsity_epsilon,
        )
        if record_trace:
            trace.append(state.solution.copy())
        if callback is not None:
            callback(state)

        if state.converged:
            reason = "converged"
            break
        if state.iteration >= max_iterations:
            reason = "max_iterations"
            logger.warning(
                "Relaxation stopped after %d iterations without a stable sparsity measure",
                state.iteration,
            )
            break

    runtime = time.time() - t0
    logger.info(
        "Relaxation %s after %d iterations (sparsity %d, %.2fs)",
        reason, state.iteration, state.sparsity_history[-1], runtime,
    )

    return RelaxationResult(
        solution=state.solution,
        weights=state.weights,
        iterations=state.iteration,
        sparsity_history=list(state.sparsity_history),
        converged=state.converged,
        termination_reason=reason,
        trace=trace,
        runtime_seconds=runtime,
    )
