"""
Synthetic occupancy map generation for testing and development.

This module provides functions for generating empty rooms, corridors and
multi-room floorplans for exercising the sensor placement pipeline.
Occupancy maps are immutable, so every helper returns a new map.
"""

from typing import List, Optional, Tuple
import numpy as np

from vantage.maps.occupancy import OccupancyMap


def create_empty_map(
    height: int,
    width: int,
    resolution: float = 1.0,
    origin: Tuple[float, float] = (0.0, 0.0),
    border: int = 0,
) -> OccupancyMap:
    """
    Create a map of free space, optionally surrounded by walls.

    Args:
        height: Number of rows.
        width: Number of columns.
        resolution: Meters per pixel.
        origin: World coordinates of pixel (0, 0).
        border: Thickness of the surrounding wall in pixels (0 = no wall).

    Returns:
        OccupancyMap of shape (height, width).
    """
    free = np.ones((height, width), dtype=bool)
    if border > 0:
        free[:border, :] = False
        free[-border:, :] = False
        free[:, :border] = False
        free[:, -border:] = False
    return OccupancyMap(free, resolution=resolution, origin=origin)


def add_wall_lines(
    occupancy_map: OccupancyMap,
    lines: List[Tuple[Tuple[int, int], Tuple[int, int]]],
    thickness: int = 1,
) -> OccupancyMap:
    """
    Add wall segments to a map.

    Rasterizes line segments onto the grid with the specified thickness.

    Args:
        occupancy_map: Existing map.
        lines: List of ((x1, y1), (x2, y2)) pixel segments.
        thickness: Wall thickness in pixels.

    Returns:
        New OccupancyMap with the walls marked occupied.

    Example:
        >>> occ = create_empty_map(20, 20)
        >>> occ = add_wall_lines(occ, [((10, 0), (10, 19))])
        >>> bool(occ.free[5, 10])
        False
    """
    free = occupancy_map.free.copy()
    height, width = free.shape

    for (x1, y1), (x2, y2) in lines:
        dx = abs(x2 - x1)
        dy = abs(y2 - y1)
        steps = max(dx, dy, 1)

        for i in range(steps + 1):
            t = i / steps
            x = int(round(x1 + t * (x2 - x1)))
            y = int(round(y1 + t * (y2 - y1)))

            half_thick = thickness // 2
            for dy_off in range(-half_thick, half_thick + 1):
                for dx_off in range(-half_thick, half_thick + 1):
                    xx = x + dx_off
                    yy = y + dy_off
                    if 0 <= xx < width and 0 <= yy < height:
                        free[yy, xx] = False

    return OccupancyMap(free, resolution=occupancy_map.resolution, origin=occupancy_map.origin)


def add_rectangles(
    occupancy_map: OccupancyMap,
    rectangles: List[Tuple[int, int, int, int]],
) -> OccupancyMap:
    """
    Mark axis-aligned rectangular obstacles as occupied.

    Args:
        occupancy_map: Existing map.
        rectangles: List of (min_x, min_y, max_x, max_y) pixel boxes, inclusive.

    Returns:
        New OccupancyMap with the rectangles marked occupied.
    """
    free = occupancy_map.free.copy()
    for min_x, min_y, max_x, max_y in rectangles:
        free[min_y:max_y + 1, min_x:max_x + 1] = False
    return OccupancyMap(free, resolution=occupancy_map.resolution, origin=occupancy_map.origin)


def create_corridor_map(
    length: int = 60,
    corridor_width: int = 7,
    resolution: float = 0.1,
    wall_thickness: int = 1,
) -> OccupancyMap:
    """
    Create a straight horizontal corridor enclosed by walls.

    Args:
        length: Corridor length in pixels (map width).
        corridor_width: Free width in pixels.
        resolution: Meters per pixel.
        wall_thickness: Wall thickness in pixels.

    Returns:
        OccupancyMap of shape (corridor_width + 2 * wall_thickness, length).
    """
    height = corridor_width + 2 * wall_thickness
    return create_empty_map(height, length, resolution=resolution, border=wall_thickness)


def create_floorplan_map(
    height: int = 120,
    width: int = 160,
    resolution: float = 0.05,
    seed: Optional[int] = None,
    num_obstacles: int = 4,
) -> OccupancyMap:
    """
    Create an indoor floorplan with rooms, doorways and furniture.

    Generates a multi-room layout useful for testing coverage planning.

    Args:
        height: Number of rows.
        width: Number of columns.
        resolution: Meters per pixel.
        seed: Random seed for reproducibility.
        num_obstacles: Number of furniture-like blocks to place.

    Returns:
        OccupancyMap with a room layout.

    Example:
        >>> occ = create_floorplan_map(120, 160, seed=42)
        >>> print(f"Free pixels: {occ.free_count}")
    """
    rng = np.random.default_rng(seed)

    free = np.ones((height, width), dtype=bool)

    # Outer walls
    wall_thickness = 2
    free[:wall_thickness, :] = False
    free[-wall_thickness:, :] = False
    free[:, :wall_thickness] = False
    free[:, -wall_thickness:] = False

    # Vertical walls with door gaps
    door = max(4, height // 10)
    for vw in (width // 3, 2 * width // 3):
        gap_pos = int(rng.integers(height // 4, 3 * height // 4))
        free[:gap_pos - door // 2, vw - 1:vw + 1] = False
        free[gap_pos + door // 2:, vw - 1:vw + 1] = False

    # Horizontal wall in the middle room with a door gap
    hw = height // 2
    start, end = width // 3 + 1, 2 * width // 3 - 1
    gap_pos = int(rng.integers(start + door, max(start + door + 1, end - door)))
    free[hw - 1:hw + 1, start:gap_pos - door // 2] = False
    free[hw - 1:hw + 1, gap_pos + door // 2:end] = False

    # Furniture-like obstacles, only where nothing is occupied yet
    for _ in range(num_obstacles):
        ox = int(rng.integers(8, width - 20))
        oy = int(rng.integers(8, height - 20))
        ow = int(rng.integers(4, 10))
        oh = int(rng.integers(4, 10))
        if free[oy - 3:oy + oh + 3, ox - 3:ox + ow + 3].all():
            free[oy:oy + oh, ox:ox + ow] = False

    return OccupancyMap(free, resolution=resolution)
