"""
Sensor placement runner.

This module provides the high-level entry point that chains the geometry
phase, the reweighted relaxation, the candidate reduction and the exact
solve into a single call.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union
import logging
import time
import numpy as np

from vantage.core.discretization import BoundingRegion
from vantage.core.sensors import CandidatePose, FOVModel, Pose2D
from vantage.exceptions import SolverError
from vantage.maps.occupancy import OccupancyMap
from vantage.optimization.problem import SensorPlacementProblem
from vantage.optimization.reduction import (
    DEFAULT_SELECTION_TOLERANCE,
    SelectionRule,
    select_candidates,
    solve_reduced_problem,
)
from vantage.optimization.reweighting import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_SPARSITY_CHECK_RANGE,
    SPARSITY_EPSILON,
    RelaxationResult,
    RelaxationState,
    run_reweighted_relaxation,
)
from vantage.optimization.solvers import LPSolver, get_solver

logger = logging.getLogger(__name__)


@dataclass
class PlacementResult:
    """
    Result of a sensor placement run.

    Attributes:
        poses: Selected sensing poses in world coordinates
        candidate_indices: Indices of the selected candidates
        candidates: Selected candidate poses in pixel coordinates
        num_cells: Number of cells to cover
        num_candidates: Number of candidate poses
        num_retained: Candidates kept for the exact solve
        dropped_cells: Pixel positions of cells no candidate could see
            (only non-empty with drop_unobservable_cells)
        coverage: Fraction of cells covered by the selected poses
        relaxation: Outcome of the reweighted relaxation
        runtime_seconds: Wall-clock time of the whole run
        solver_name: Name of the LP backend
        selection_rule: Rule used to retain candidates
        problem: The geometry phase results (not serialized)
    """
    poses: List[Pose2D]
    candidate_indices: List[int]
    candidates: List[CandidatePose]
    num_cells: int
    num_candidates: int
    num_retained: int
    coverage: float
    relaxation: RelaxationResult
    runtime_seconds: float
    dropped_cells: np.ndarray = field(default_factory=lambda: np.zeros((0, 2), dtype=np.int64))
    solver_name: str = "unknown"
    selection_rule: str = SelectionRule.SUPPORT.value
    problem: Optional[SensorPlacementProblem] = field(default=None, repr=False)

    @property
    def num_poses(self) -> int:
        return len(self.poses)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "poses": [pose.to_dict() for pose in self.poses],
            "candidate_indices": [int(i) for i in self.candidate_indices],
            "candidates": [c.to_dict() for c in self.candidates],
            "num_poses": self.num_poses,
            "num_cells": self.num_cells,
            "num_candidates": self.num_candidates,
            "num_retained": self.num_retained,
            "dropped_cells": np.asarray(self.dropped_cells).tolist(),
            "coverage": self.coverage,
            "relaxation": self.relaxation.to_dict(),
            "runtime_seconds": self.runtime_seconds,
            "solver_name": self.solver_name,
            "selection_rule": self.selection_rule,
        }


def plan_sensing_poses(
    occupancy_map: OccupancyMap,
    fov: FOVModel,
    cell_size: int = 1,
    angular_step: float = np.pi / 2,
    bounding_region: Optional[BoundingRegion] = None,
    min_range: Optional[float] = None,
    max_range: Optional[float] = None,
    solver: Union[str, LPSolver] = "highs",
    solver_options: Optional[Dict[str, Any]] = None,
    selection_rule: Union[str, SelectionRule] = SelectionRule.SUPPORT,
    selection_tolerance: float = DEFAULT_SELECTION_TOLERANCE,
    sparsity_check_range: int = DEFAULT_SPARSITY_CHECK_RANGE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    sparsity_epsilon: float = SPARSITY_EPSILON,
    drop_unobservable_cells: bool = False,
    record_trace: bool = False,
    callback: Optional[Callable[[RelaxationState], None]] = None,
    verbose: bool = False,
) -> PlacementResult:
    """
    Compute a minimal set of sensing poses covering the free space of a map.

    This is the main entry point for sensor placement.

    Args:
        occupancy_map: Input map
        fov: Sensor field of view
        cell_size: Cell edge length in pixels
        angular_step: Heading sampling step in radians
        bounding_region: Optional (min_x, min_y, max_x, max_y) pixel box
        min_range: Override of fov.min_range in meters
        max_range: Override of fov.max_range in meters
        solver: LP backend. Options:
            - "highs": SciPy HiGHS (default)
            - "pulp": PuLP with CBC
        solver_options: Constructor arguments for the named backend
        selection_rule: "support" (default) or "zero"
        selection_tolerance: Tolerance of the selection rule
        sparsity_check_range: Window of equal sparsity measures for convergence
        max_iterations: Hard cap on relaxation solves
        sparsity_epsilon: Threshold below which a variable counts as zero
        drop_unobservable_cells: Drop cells no candidate sees instead of failing
        record_trace: Keep every relaxed solution (for animation)
        callback: Called with the loop state after every relaxation iteration
        verbose: Print progress information

    Returns:
        PlacementResult with the selected poses

    Raises:
        DegenerateInput: No free cell in the region
        InfeasibleInstance: Some cell cannot be covered
        UnboundedProblem, SolverError: The LP backend failed

    Example:
        >>> from vantage.maps import create_empty_map
        >>> occ = create_empty_map(3, 3)
        >>> result = plan_sensing_poses(occ, FOVModel.omnidirectional(1.0), angular_step=2 * np.pi)
        >>> result.num_poses
        3
    """
    t0 = time.time()
    backend = get_solver(solver, **(solver_options or {}))
    rule = SelectionRule(selection_rule)

    problem = SensorPlacementProblem(
        occupancy_map=occupancy_map,
        fov=fov,
        cell_size=cell_size,
        angular_step=angular_step,
        bounding_region=bounding_region,
        min_range=min_range,
        max_range=max_range,
        drop_unobservable_cells=drop_unobservable_cells,
    )

    if verbose:
        print(f"Sensor Placement")
        print(f"  Map shape: {occupancy_map.shape} @ {occupancy_map.resolution} m/px")
        print(f"  Cells: {problem.num_cells}")
        print(f"  Candidates: {problem.num_candidates} ({problem.num_headings} headings)")
        if len(problem.dropped_cells) > 0:
            print(f"  Dropped cells: {len(problem.dropped_cells)}")
        print(f"  Solver: {backend.name}")

    def _report(state: RelaxationState) -> None:
        if verbose and state.iteration % 10 == 0:
            print(f"  Iter {state.iteration}: sparsity={state.sparsity_history[-1]}")
        if callback is not None:
            callback(state)

    relaxation = run_reweighted_relaxation(
        problem.visibility,
        solver=backend,
        sparsity_check_range=sparsity_check_range,
        max_iterations=max_iterations,
        sparsity_epsilon=sparsity_epsilon,
        callback=_report,
        record_trace=record_trace,
    )

    retained = select_candidates(relaxation.solution, rule=rule, tolerance=selection_tolerance)
    if verbose:
        print(f"  Relaxation: {relaxation.termination_reason} after {relaxation.iterations} iterations")
        print(f"  Retained: {len(retained)} of {problem.num_candidates} candidates")

    selected = solve_reduced_problem(problem.visibility, retained, solver=backend, rule=rule)

    coverage = problem.evaluate_coverage(selected)
    if coverage["covered_cells"] != coverage["total_cells"]:
        raise SolverError(
            f"Final solution covers {coverage['covered_cells']} of {coverage['total_cells']} cells"
        )

    runtime = time.time() - t0
    indices = [int(i) for i in selected]

    if verbose:
        print(f"  Selected poses: {len(indices)}")
        print(f"  Runtime: {runtime:.2f}s")

    return PlacementResult(
        poses=problem.world_poses(indices),
        candidate_indices=indices,
        candidates=[problem.candidates[i] for i in indices],
        num_cells=problem.num_cells,
        num_candidates=problem.num_candidates,
        num_retained=len(retained),
        coverage=coverage["coverage"],
        relaxation=relaxation,
        runtime_seconds=runtime,
        dropped_cells=problem.dropped_cells,
        solver_name=backend.name,
        selection_rule=rule.value,
        problem=problem,
    )


def plan_from_config(
    occupancy_map: OccupancyMap,
    config,
    verbose: Optional[bool] = None,
    **kwargs,
) -> PlacementResult:
    """
    Run plan_sensing_poses with the settings of a VantageConfig.

    Args:
        occupancy_map: Input map
        config: VantageConfig instance
        verbose: Override of config.verbose
        **kwargs: Extra arguments for plan_sensing_poses (e.g. callback)
    """
    config.validate()
    return plan_sensing_poses(
        occupancy_map,
        config.fov.to_fov_model(),
        cell_size=config.discretization.cell_size,
        angular_step=config.discretization.angular_step,
        bounding_region=config.discretization.bounding_region,
        solver=config.solver.name,
        solver_options=config.solver.options(),
        selection_rule=config.relaxation.selection_rule,
        selection_tolerance=config.relaxation.selection_tolerance,
        sparsity_check_range=config.relaxation.sparsity_check_range,
        max_iterations=config.relaxation.max_iterations,
        sparsity_epsilon=config.relaxation.sparsity_epsilon,
        drop_unobservable_cells=config.discretization.drop_unobservable_cells,
        verbose=config.verbose if verbose is None else verbose,
        **kwargs,
    )
