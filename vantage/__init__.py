"""
Vantage - convex sensor placement on occupancy maps.

This package computes a small set of robot sensing poses that together
observe every free cell of a 2D occupancy map. The covering problem is
relaxed to a sequence of reweighted linear programs, and an exact integer
program is solved over the candidates the relaxation keeps.

Main modules:
    - vantage.maps: Occupancy maps, synthetic maps, loading and coordinates
    - vantage.core: Sensor models, discretization and visibility
    - vantage.optimization: LP building, solvers, relaxation and runner
    - vantage.visualization: Plotting and animation utilities
    - vantage.config: Configuration management

Quick start:
    >>> import numpy as np
    >>> from vantage import FOVModel, plan_sensing_poses
    >>> from vantage.maps import create_empty_map
    >>>
    >>> occ = create_empty_map(40, 60, resolution=0.05, border=1)
    >>> fov = FOVModel.omnidirectional(radius=0.5)
    >>> result = plan_sensing_poses(occ, fov, cell_size=4, angular_step=2 * np.pi)
    >>> print(f"{result.num_poses} poses")
"""

__version__ = "0.1.0"

# Core exports
from vantage.core.sensors import CandidatePose, FOVModel, Pose2D
from vantage.core.visibility import build_visibility, compute_coverage

# Map exports
from vantage.maps.occupancy import OccupancyMap

# Optimization exports
from vantage.optimization.problem import SensorPlacementProblem
from vantage.optimization.runner import PlacementResult, plan_from_config, plan_sensing_poses

# Errors
from vantage.exceptions import (
    DegenerateInput,
    InfeasibleInstance,
    PlacementError,
    SolverError,
    UnboundedProblem,
)

# Config exports
from vantage.config.settings import VantageConfig, load_config

__all__ = [
    # Version
    "__version__",
    # Core
    "CandidatePose",
    "FOVModel",
    "Pose2D",
    "build_visibility",
    "compute_coverage",
    # Maps
    "OccupancyMap",
    # Optimization
    "SensorPlacementProblem",
    "PlacementResult",
    "plan_from_config",
    "plan_sensing_poses",
    # Errors
    "DegenerateInput",
    "InfeasibleInstance",
    "PlacementError",
    "SolverError",
    "UnboundedProblem",
    # Config
    "VantageConfig",
    "load_config",
]
