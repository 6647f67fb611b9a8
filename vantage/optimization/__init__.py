"""
Sensor placement optimization module.

This module provides:
    - SensorPlacementProblem: The geometry phase results for one instance
    - LPProblem and solver adapters (SciPy HiGHS, PuLP/CBC)
    - The reweighted l1 relaxation loop
    - Candidate reduction and the exact covering solve
    - plan_sensing_poses: the end-to-end entry point
"""

from vantage.optimization.problem import SensorPlacementProblem
from vantage.optimization.lp import LPProblem, build_lp_problem
from vantage.optimization.solvers import (
    HighsSolver,
    LPSolver,
    PulpSolver,
    SolverResult,
    SolveStatus,
    get_solver,
    raise_for_status,
)
from vantage.optimization.reweighting import (
    RelaxationResult,
    RelaxationState,
    has_converged,
    relaxation_step,
    run_reweighted_relaxation,
    sparsity_measure,
    update_weights,
    weight_epsilon,
)
from vantage.optimization.reduction import (
    SelectionRule,
    reduce_visibility,
    select_candidates,
    solve_reduced_problem,
)
from vantage.optimization.runner import (
    PlacementResult,
    plan_from_config,
    plan_sensing_poses,
)

__all__ = [
    "SensorPlacementProblem",
    "LPProblem",
    "build_lp_problem",
    "HighsSolver",
    "LPSolver",
    "PulpSolver",
    "SolverResult",
    "SolveStatus",
    "get_solver",
    "raise_for_status",
    "RelaxationResult",
    "RelaxationState",
    "has_converged",
    "relaxation_step",
    "run_reweighted_relaxation",
    "sparsity_measure",
    "update_weights",
    "weight_epsilon",
    "SelectionRule",
    "reduce_visibility",
    "select_candidates",
    "solve_reduced_problem",
    "PlacementResult",
    "plan_from_config",
    "plan_sensing_poses",
]
