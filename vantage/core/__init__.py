"""
Core geometry: sensor models, discretization and visibility.

This module provides:
    - FOVModel, CandidatePose and Pose2D data structures
    - Discretization of free space into cells and candidate poses
    - The cell x candidate visibility matrix (range, angle, footprint and
      line-of-sight tests)
"""

from vantage.core.sensors import (
    CandidatePose,
    FOVModel,
    Pose2D,
    candidates_to_array,
    rotation_matrix,
)
from vantage.core.discretization import (
    candidate_angles,
    discretize,
    generate_candidates,
)
from vantage.core.visibility import (
    bresenham_line,
    build_visibility,
    compute_coverage,
    find_unobservable_cells,
    has_line_of_sight,
    transform_footprint,
)

__all__ = [
    "CandidatePose",
    "FOVModel",
    "Pose2D",
    "candidates_to_array",
    "rotation_matrix",
    "candidate_angles",
    "discretize",
    "generate_candidates",
    "bresenham_line",
    "build_visibility",
    "compute_coverage",
    "find_unobservable_cells",
    "has_line_of_sight",
    "transform_footprint",
]
