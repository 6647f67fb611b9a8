"""
Static plotting functions for sensor placement visualization.

All plots are drawn in pixel coordinates with the y axis pointing up, so
headings are displayed counter-clockwise from +x as in the world frame.
"""

from typing import List, Optional, Sequence, Tuple, Union
from pathlib import Path
import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches

from vantage.core.sensors import CandidatePose
from vantage.maps.occupancy import OccupancyMap


def draw_pose_markers(
    ax: plt.Axes,
    poses: Sequence[CandidatePose],
    scale: float = 1.0,
    color: str = 'red',
    show_labels: bool = False,
    arrow_length: float = 4.0,
) -> None:
    """
    Draw pose positions with heading arrows on a matplotlib axes.

    Args:
        ax: Matplotlib axes to draw on
        poses: Candidate poses in pixel coordinates
        scale: Scale factor for arrows
        color: Marker and arrow color
        show_labels: Whether to show pose number labels
        arrow_length: Base length for heading arrows, in pixels
    """
    for i, pose in enumerate(poses):
        ax.plot(
            pose.x, pose.y, 'o',
            color=color,
            markersize=6,
            markeredgecolor='white',
            markeredgewidth=1,
            zorder=10
        )

        arrow_len = arrow_length * scale
        dx = arrow_len * np.cos(pose.theta)
        dy = arrow_len * np.sin(pose.theta)

        ax.annotate(
            '', xy=(pose.x + dx, pose.y + dy), xytext=(pose.x, pose.y),
            arrowprops=dict(arrowstyle='->', color=color, lw=1.5),
            zorder=9
        )

        if show_labels:
            ax.annotate(
                f'{i+1}', (pose.x + 1, pose.y + 1),
                fontsize=8, color='white', fontweight='bold',
                zorder=11,
                bbox=dict(boxstyle='round,pad=0.2', facecolor=color, alpha=0.7)
            )


def plot_occupancy_map(
    occupancy_map: OccupancyMap,
    ax: Optional[plt.Axes] = None,
    cells: Optional[np.ndarray] = None,
    title: Optional[str] = None,
) -> plt.Axes:
    """
    Plot an occupancy map, free space white and obstacles black.

    Args:
        occupancy_map: Map to plot
        ax: Matplotlib axes (creates new figure if None)
        cells: Optional (N, 2) cell centers to overlay
        title: Optional title

    Returns:
        Matplotlib axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 8))

    ax.imshow(
        occupancy_map.free, cmap='gray', origin='lower',
        aspect='equal', vmin=0, vmax=1, interpolation='nearest'
    )

    if cells is not None and len(cells) > 0:
        cells = np.asarray(cells)
        ax.scatter(cells[:, 0], cells[:, 1], s=4, color='tab:blue', alpha=0.6, zorder=5)

    if title:
        ax.set_title(title, fontweight='bold')

    ax.set_xlabel('X (px)')
    ax.set_ylabel('Y (px)')

    return ax


def draw_footprints(
    ax: plt.Axes,
    footprints: List[np.ndarray],
    color: str = 'orange',
    alpha: float = 0.25,
) -> None:
    """Draw footprint polygons (pixel coordinates) on an axes."""
    for polygon in footprints:
        ax.add_patch(mpatches.Polygon(
            polygon, closed=True, facecolor=color, edgecolor=color,
            alpha=alpha, zorder=4
        ))


def plot_placement(
    result,
    title: str = "Sensor Placement",
    output_path: Optional[Union[str, Path]] = None,
    figsize: Tuple[int, int] = (16, 5),
    dpi: int = 200,
) -> plt.Figure:
    """
    Create a summary visualization of a placement result.

    Shows three panels:
    1. Map with cells and the selected poses with their footprints
    2. Per-cell number of observing poses
    3. Final relaxed value of every candidate, selected ones highlighted

    Args:
        result: PlacementResult (with its problem attached)
        title: Figure title
        output_path: Optional path to save figure
        figsize: Figure size
        dpi: Resolution of the saved figure

    Returns:
        Matplotlib figure
    """
    problem = result.problem
    if problem is None:
        raise ValueError("PlacementResult has no problem attached")

    occ = problem.occupancy_map
    coverage = problem.evaluate_coverage(result.candidate_indices)

    fig, axes = plt.subplots(1, 3, figsize=figsize)
    ax1, ax2, ax3 = axes

    # Panel 1: Map + poses + footprints
    plot_occupancy_map(occ, ax=ax1, cells=problem.cells)
    draw_footprints(ax1, problem.footprints(result.candidate_indices))
    draw_pose_markers(ax1, result.candidates, show_labels=True)
    ax1.set_title(f'{title}\n{result.num_poses} poses', fontsize=11, fontweight='bold')
    ax1.set_xlim(0, occ.width)
    ax1.set_ylim(0, occ.height)

    # Panel 2: Redundancy per cell
    ax2.set_title(f'Coverage: {100*coverage["coverage"]:.1f}%', fontsize=11, fontweight='bold')
    plot_occupancy_map(occ, ax=ax2)
    sc = ax2.scatter(
        problem.cells[:, 0], problem.cells[:, 1],
        c=coverage["counts"], cmap='hot', s=12,
        vmin=0, vmax=max(int(coverage["counts"].max()), 1), zorder=5
    )
    draw_pose_markers(ax2, result.candidates, color='cyan')
    plt.colorbar(sc, ax=ax2, label='# Poses', shrink=0.7)

    # Panel 3: Relaxed solution
    ax3.set_title('Final Relaxed Solution', fontsize=11, fontweight='bold')
    values = result.relaxation.solution
    ax3.bar(np.arange(len(values)), values, color='gray', width=1.0)
    if result.candidate_indices:
        ax3.bar(
            result.candidate_indices, values[result.candidate_indices],
            color='red', width=1.0, label='Selected'
        )
        ax3.legend(loc='upper right', fontsize=8)
    ax3.set_xlabel('Candidate')
    ax3.set_ylabel('Value')
    ax3.set_ylim(0, 1.05)

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=dpi, bbox_inches='tight')

    return fig


def plot_sparsity_convergence(
    sparsity_history: List[int],
    num_candidates: Optional[int] = None,
    output_path: Optional[Union[str, Path]] = None,
    title: str = "Relaxation Convergence",
) -> plt.Figure:
    """
    Plot the sparsity measure over the relaxation iterations.

    Args:
        sparsity_history: Sparsity measure after each iteration
        num_candidates: Optional total candidate count, drawn as a reference line
        output_path: Optional path to save figure
        title: Figure title

    Returns:
        Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=(10, 5))

    iterations = list(range(1, len(sparsity_history) + 1))

    ax.plot(iterations, sparsity_history, 'b-', linewidth=2, marker='o', markersize=3)
    if num_candidates is not None:
        ax.axhline(num_candidates, color='gray', linestyle='--', label='Candidates')
        ax.legend(loc='lower right', fontsize=8)

    ax.set_xlabel('Iteration')
    ax.set_ylabel('Variables <= epsilon')
    ax.set_title(title, fontweight='bold')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=150, bbox_inches='tight')

    return fig
