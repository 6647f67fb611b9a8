"""
Visualization tools for sensor placement.

This module provides:
    - Static plots of maps, selected poses, footprints and coverage
    - The sparsity convergence curve of the relaxation
    - GIF generation for the relaxation progress
"""

from vantage.visualization.plotting import (
    draw_footprints,
    draw_pose_markers,
    plot_occupancy_map,
    plot_placement,
    plot_sparsity_convergence,
)
from vantage.visualization.animation import (
    create_relaxation_frame,
    create_relaxation_gif,
)

__all__ = [
    "draw_footprints",
    "draw_pose_markers",
    "plot_occupancy_map",
    "plot_placement",
    "plot_sparsity_convergence",
    "create_relaxation_frame",
    "create_relaxation_gif",
]
