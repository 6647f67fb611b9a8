"""
Cell x pose visibility computation.

For every (cell, candidate pose) pair this module decides whether the sensor
at that pose observes the cell. A pair is visible when it passes four tests,
applied from cheapest to most expensive:

1. Range: the cell distance lies in [min_range, max_range] (inclusive)
2. Angle: the angle between the rotated boresight and the pose-to-cell
   vector does not exceed the FOV half-angle
3. Footprint: the cell center lies inside the footprint polygon placed at
   the pose (boundary inclusive)
4. Line of sight: no occupied pixel on the Bresenham line from pose to cell

The result is a binary matrix of shape (n_cells, n_candidates).
"""

import logging
from typing import Dict, Optional, Sequence, Tuple
import numpy as np
import shapely

from vantage.core.sensors import CandidatePose, FOVModel
from vantage.maps.occupancy import OccupancyMap

logger = logging.getLogger(__name__)

# Absolute tolerances, in pixels / radians
RANGE_TOLERANCE = 1e-9
ANGLE_TOLERANCE = 1e-9
CONTAINMENT_TOLERANCE = 1e-9


def bresenham_line(x0: int, y0: int, x1: int, y1: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Pixels on the 8-connected Bresenham line between two pixels.

    Both endpoints are included. The traversal starts at (x0, y0).

    Returns:
        xs, ys: Integer arrays of pixel coordinates along the line.

    Example:
        >>> xs, ys = bresenham_line(0, 0, 3, 1)
        >>> list(zip(xs.tolist(), ys.tolist()))
        [(0, 0), (1, 0), (2, 1), (3, 1)]
    """
    x0, y0, x1, y1 = int(x0), int(y0), int(x1), int(y1)
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    xs = []
    ys = []
    while True:
        xs.append(x0)
        ys.append(y0)
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy

    return np.array(xs, dtype=np.int64), np.array(ys, dtype=np.int64)


def has_line_of_sight(free: np.ndarray, x0: int, y0: int, x1: int, y1: int) -> bool:
    """Whether every pixel on the line from (x0, y0) to (x1, y1) is free."""
    xs, ys = bresenham_line(x0, y0, x1, y1)
    return bool(free[ys, xs].all())


def transform_footprint(
    fov: FOVModel,
    pose: CandidatePose,
    occupancy_map: OccupancyMap,
) -> np.ndarray:
    """
    Footprint polygon of a candidate pose in pixel coordinates.

    The footprint is rotated by the heading and translated to the pose in
    world coordinates, then converted back to pixels. Vertices are clamped to
    [0, width] x [0, height].

    Returns:
        (K, 2) float array of (x, y) pixel vertices.
    """
    ox, oy = occupancy_map.origin
    res = occupancy_map.resolution

    world = fov.transform(pose.x * res + ox, pose.y * res + oy, pose.theta)
    pixels = (world - np.array([ox, oy])) / res

    pixels[:, 0] = np.clip(pixels[:, 0], 0, occupancy_map.width)
    pixels[:, 1] = np.clip(pixels[:, 1], 0, occupancy_map.height)
    return pixels


def build_visibility(
    occupancy_map: OccupancyMap,
    cells: np.ndarray,
    candidates: Sequence[CandidatePose],
    fov: FOVModel,
    min_range: Optional[float] = None,
    max_range: Optional[float] = None,
) -> np.ndarray:
    """
    Compute the binary visibility matrix between cells and candidate poses.

    Entry [i, j] is 1 iff candidate j observes cell i. The map is only read.
    Line-of-sight does not depend on the heading, so it is evaluated once
    per (pose position, cell) pair and shared by all headings.

    Args:
        occupancy_map: Map providing free space, resolution and origin
        cells: (N, 2) integer cell centers as (x, y)
        candidates: M candidate poses
        fov: Sensor field of view
        min_range: Smallest observable distance in meters (default: fov.min_range)
        max_range: Largest observable distance in meters (default: fov.max_range)

    Returns:
        Read-only uint8 array of shape (N, M).

    Example:
        >>> from vantage.maps import create_empty_map
        >>> from vantage.core.discretization import discretize, generate_candidates
        >>> occ = create_empty_map(10, 10)
        >>> cells = discretize(occ, cell_size=2)
        >>> candidates = generate_candidates(cells, np.pi / 2)
        >>> V = build_visibility(occ, cells, candidates, FOVModel.omnidirectional(3.0))
        >>> V.shape
        (25, 100)
    """
    cells = np.asarray(cells, dtype=np.int64).reshape(-1, 2)
    min_range = fov.min_range if min_range is None else min_range
    max_range = fov.max_range if max_range is None else max_range
    if min_range < 0 or min_range > max_range:
        raise ValueError(f"Invalid range interval [{min_range}, {max_range}]")

    n_cells = len(cells)
    n_poses = len(candidates)
    visibility = np.zeros((n_cells, n_poses), dtype=np.uint8)

    if n_cells == 0 or n_poses == 0:
        visibility.setflags(write=False)
        return visibility

    res = occupancy_map.resolution
    lo = min_range / res - RANGE_TOLERANCE
    hi = max_range / res + RANGE_TOLERANCE

    cell_xy = cells.astype(np.float64)
    cell_points = shapely.points(cell_xy)
    boresight_norm = float(np.hypot(*fov.boresight))

    # Lazily filled line-of-sight results: -1 unknown, 0 blocked, 1 clear
    los_cache: Dict[Tuple[int, int], np.ndarray] = {}

    for j, pose in enumerate(candidates):
        offsets = cell_xy - np.array([pose.x, pose.y], dtype=np.float64)
        distances = np.hypot(offsets[:, 0], offsets[:, 1])

        # 1. Range
        mask = (distances >= lo) & (distances <= hi)
        if not mask.any():
            continue

        # 2. Angle to the rotated boresight; undefined (and accepted) at the pose itself
        direction = fov.rotated_boresight(pose.theta)
        with np.errstate(invalid="ignore", divide="ignore"):
            cosines = offsets @ direction / (distances * boresight_norm)
        angles = np.arccos(np.clip(cosines, -1.0, 1.0))
        angles[distances == 0] = 0.0
        mask &= angles <= fov.max_angle + ANGLE_TOLERANCE

        indices = np.flatnonzero(mask)
        if len(indices) == 0:
            continue

        # 3. Footprint containment
        polygon = shapely.Polygon(transform_footprint(fov, pose, occupancy_map))
        if not polygon.is_valid:
            # Clamping can fold the outline onto the map border
            polygon = shapely.make_valid(polygon)
        polygon = polygon.buffer(CONTAINMENT_TOLERANCE)
        shapely.prepare(polygon)
        indices = indices[shapely.covers(polygon, cell_points[indices])]
        if len(indices) == 0:
            continue

        # 4. Line of sight
        los = los_cache.get((pose.x, pose.y))
        if los is None:
            los = np.full(n_cells, -1, dtype=np.int8)
            los_cache[(pose.x, pose.y)] = los
        for i in indices[los[indices] < 0]:
            los[i] = has_line_of_sight(
                occupancy_map.free, pose.x, pose.y, cells[i, 0], cells[i, 1]
            )

        visibility[indices[los[indices] == 1], j] = 1

    logger.info(
        "Visibility matrix: %d cells x %d candidates, %d visible pairs",
        n_cells, n_poses, int(visibility.sum()),
    )

    visibility.setflags(write=False)
    return visibility


def find_unobservable_cells(visibility: np.ndarray) -> np.ndarray:
    """Indices of cells that no candidate pose observes (all-zero rows)."""
    return np.flatnonzero(~np.asarray(visibility, dtype=bool).any(axis=1))


def compute_coverage(visibility: np.ndarray, selected: Sequence[int]) -> dict:
    """
    Compute coverage statistics for a set of selected candidates.

    Args:
        visibility: (N, M) visibility matrix
        selected: Indices of the selected candidate columns

    Returns:
        Dictionary with coverage statistics:
        - coverage: Fraction of cells observed by at least one selected pose
        - covered_cells: Number of observed cells
        - total_cells: Number of cells
        - redundancy: Average number of selected poses observing each covered cell
        - uncovered_cells: Indices of cells no selected pose observes
        - counts: Per-cell number of observing poses
    """
    visibility = np.asarray(visibility)
    selected = np.asarray(selected, dtype=np.int64)
    n_cells = visibility.shape[0]

    if len(selected) > 0:
        counts = visibility[:, selected].sum(axis=1, dtype=np.int64)
    else:
        counts = np.zeros(n_cells, dtype=np.int64)

    covered = counts > 0
    num_covered = int(covered.sum())

    return {
        "coverage": float(num_covered / n_cells) if n_cells > 0 else 0.0,
        "covered_cells": num_covered,
        "total_cells": int(n_cells),
        "redundancy": float(counts[covered].mean()) if num_covered > 0 else 0.0,
        "uncovered_cells": np.flatnonzero(~covered),
        "counts": counts,
    }
