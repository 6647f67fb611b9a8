"""
Discretization of free space into cells and candidate sensing poses.

Cells are sampled on a regular lattice of cell centers inside a rectangular
region of interest; a center becomes a cell when its pixel is free. Every
cell location then yields one candidate pose per sampled heading.
"""

import logging
from typing import List, Optional, Tuple
import numpy as np

from vantage.core.sensors import CandidatePose
from vantage.exceptions import DegenerateInput
from vantage.maps.occupancy import OccupancyMap

logger = logging.getLogger(__name__)

BoundingRegion = Tuple[int, int, int, int]


def _clip_region(
    occupancy_map: OccupancyMap,
    bounding_region: Optional[BoundingRegion],
) -> BoundingRegion:
    """Clip (min_x, min_y, max_x, max_y) to the map, defaulting to the whole map."""
    if bounding_region is None:
        return (0, 0, occupancy_map.width - 1, occupancy_map.height - 1)

    min_x, min_y, max_x, max_y = (int(v) for v in bounding_region)
    min_x = max(min_x, 0)
    min_y = max(min_y, 0)
    max_x = min(max_x, occupancy_map.width - 1)
    max_y = min(max_y, occupancy_map.height - 1)

    if min_x > max_x or min_y > max_y:
        raise ValueError(
            f"bounding_region {bounding_region} does not overlap map of shape {occupancy_map.shape}"
        )
    return (min_x, min_y, max_x, max_y)


def discretize(
    occupancy_map: OccupancyMap,
    cell_size: int,
    bounding_region: Optional[BoundingRegion] = None,
) -> np.ndarray:
    """
    Sample the free space of a map into cells.

    Cell centers start half a cell inside the region and advance by
    ``cell_size`` pixels, row by row. A center whose pixel is free becomes a
    cell.

    Args:
        occupancy_map: Input map
        cell_size: Cell edge length in pixels (>= 1)
        bounding_region: Optional (min_x, min_y, max_x, max_y) pixel box,
            inclusive. Defaults to the whole map.

    Returns:
        Integer array (N, 2) of cell centers as (x, y), in row-major order.

    Raises:
        ValueError: If cell_size < 1 or the region misses the map
        DegenerateInput: If no free cell is found
    """
    if cell_size < 1:
        raise ValueError(f"cell_size must be >= 1 pixel, got {cell_size}")

    min_x, min_y, max_x, max_y = _clip_region(occupancy_map, bounding_region)

    xs = np.arange(int(min_x + 0.5 * cell_size), max_x + 1, cell_size)
    ys = np.arange(int(min_y + 0.5 * cell_size), max_y + 1, cell_size)

    grid_y, grid_x = np.meshgrid(ys, xs, indexing="ij")
    centers = np.stack([grid_x.ravel(), grid_y.ravel()], axis=1).astype(np.int64)

    if len(centers) > 0:
        centers = centers[occupancy_map.free[centers[:, 1], centers[:, 0]]]

    if len(centers) == 0:
        raise DegenerateInput(
            f"No free cells in region {(min_x, min_y, max_x, max_y)} "
            f"with cell size {cell_size}"
        )

    logger.debug("Discretized region %s into %d cells", (min_x, min_y, max_x, max_y), len(centers))
    return centers


def candidate_angles(angular_step: float) -> np.ndarray:
    """
    Headings sampled over [0, 2*pi) at a fixed step.

    Angles are computed as multiples of the step rather than accumulated, so
    no spurious heading appears just below 2*pi.

    Args:
        angular_step: Step in radians (> 0)

    Returns:
        Array of headings starting at 0.
    """
    if angular_step <= 0:
        raise ValueError(f"angular_step must be positive, got {angular_step}")
    count = max(1, int(np.ceil(2 * np.pi / angular_step - 1e-9)))
    return angular_step * np.arange(count)


def generate_candidates(cells: np.ndarray, angular_step: float) -> List[CandidatePose]:
    """
    Candidate sensing poses: every sampled heading at every cell center.

    Args:
        cells: (N, 2) cell centers as (x, y)
        angular_step: Heading step in radians

    Returns:
        List of CandidatePose, grouped by cell (all headings of cell 0 first).
    """
    angles = candidate_angles(angular_step)
    candidates = [
        CandidatePose(x=int(x), y=int(y), theta=float(theta))
        for x, y in cells
        for theta in angles
    ]
    logger.debug(
        "Generated %d candidate poses (%d cells x %d headings)",
        len(candidates), len(cells), len(angles),
    )
    return candidates
