"""
Animation and GIF generation for the reweighted relaxation.

Each frame shows the relaxed value of the candidates at one iteration, so
the GIF shows the solution concentrating on fewer poses as the weights are
updated.
"""

from typing import Optional, Tuple, Union
from pathlib import Path
import numpy as np
import matplotlib.pyplot as plt

from vantage.visualization.plotting import plot_occupancy_map


def create_relaxation_frame(
    problem,
    solution: np.ndarray,
    iteration: Optional[int] = None,
    sparsity: Optional[int] = None,
    title: str = "Relaxation",
    figsize: Tuple[int, int] = (10, 5),
) -> np.ndarray:
    """
    Create a single frame for a relaxation GIF.

    Args:
        problem: SensorPlacementProblem the solution belongs to
        solution: Relaxed solution vector (one value per candidate)
        iteration: Optional iteration number to display
        sparsity: Optional sparsity measure to display
        title: Frame title
        figsize: Figure size

    Returns:
        RGB image as numpy array (H, W, 3)
    """
    solution = np.asarray(solution, dtype=np.float64)
    positions = np.array([c.position for c in problem.candidates]).reshape(-1, 2)

    # Largest value over the headings at each position
    unique, inverse = np.unique(positions, axis=0, return_inverse=True)
    inverse = np.asarray(inverse).ravel()
    per_position = np.zeros(len(unique))
    np.maximum.at(per_position, inverse, solution)

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)

    frame_title = title
    if iteration is not None:
        frame_title += f'\nIteration {iteration}'
    if sparsity is not None:
        frame_title += f' - Sparsity: {sparsity}/{len(solution)}'

    # Left: map + candidate values
    plot_occupancy_map(problem.occupancy_map, ax=ax1)
    sc = ax1.scatter(
        unique[:, 0], unique[:, 1], c=per_position, cmap='viridis',
        s=16, vmin=0, vmax=1, zorder=5
    )
    ax1.set_title(frame_title, fontsize=10, fontweight='bold')
    plt.colorbar(sc, ax=ax1, label='Value', shrink=0.7)

    # Right: sorted values
    ax2.set_title('Candidate Values (sorted)', fontsize=10)
    ax2.plot(np.sort(solution)[::-1], 'b-', linewidth=1.5)
    ax2.set_xlabel('Rank')
    ax2.set_ylabel('Value')
    ax2.set_ylim(-0.05, 1.05)
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()

    # Convert to image array
    fig.canvas.draw()
    buf = fig.canvas.buffer_rgba()
    image = np.asarray(buf)[:, :, :3].copy()

    plt.close(fig)

    return image


def create_relaxation_gif(
    result,
    output_path: Union[str, Path],
    title: str = "Reweighted Relaxation",
    fps: int = 5,
    max_frames: int = 50,
    pause_at_end: int = 2,
) -> bool:
    """
    Create a GIF of the relaxation from a placement result.

    The run must have been made with ``record_trace=True``.

    Args:
        result: PlacementResult (with its problem attached)
        output_path: Path to save the GIF
        title: GIF title
        fps: Frames per second
        max_frames: Maximum number of frames to include
        pause_at_end: Seconds to pause on final frame

    Returns:
        True if a GIF was written, False if there was no trace
    """
    try:
        import imageio.v2 as imageio
    except ImportError:
        raise ImportError("imageio is required for GIF generation. Install with: pip install imageio")

    trace = result.relaxation.trace
    history = result.relaxation.sparsity_history
    if len(trace) == 0 or result.problem is None:
        print(f"No trace data available for GIF generation")
        return False

    n_frames = len(trace)

    # Select frames to include (evenly spaced)
    if n_frames > max_frames:
        indices = np.linspace(0, n_frames - 1, max_frames, dtype=int)
    else:
        indices = list(range(n_frames))

    print(f"Generating relaxation GIF with {len(indices)} frames...")

    frames = []
    for idx in indices:
        frame = create_relaxation_frame(
            result.problem,
            trace[idx],
            iteration=idx + 1,
            sparsity=history[idx],
            title=title,
        )
        frames.append(frame)

    for _ in range(fps * pause_at_end):
        frames.append(frames[-1])

    imageio.mimsave(str(output_path), frames, fps=fps, loop=0)
    print(f"GIF saved to: {output_path}")
    return True
