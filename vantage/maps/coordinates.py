"""
Coordinate transformations for occupancy maps.

This module provides tools for converting between grid coordinates
(pixel x = column, pixel y = row) and world coordinates (meters), and for
exporting sensing poses to GeoJSON.
"""

from typing import List, Optional, Sequence, Tuple, Union
import numpy as np

from vantage.maps.occupancy import OccupancyMap


def grid_to_world(
    x: Union[float, np.ndarray],
    y: Union[float, np.ndarray],
    occupancy_map: OccupancyMap,
) -> Tuple[Union[float, np.ndarray], Union[float, np.ndarray]]:
    """
    Convert pixel coordinates (x, y) to world coordinates.

    World = pixel * resolution + origin. The y axis is not flipped.

    Args:
        x: Pixel column(s)
        y: Pixel row(s)
        occupancy_map: Map providing resolution and origin

    Returns:
        wx: World x coordinate(s)
        wy: World y coordinate(s)

    Example:
        >>> occ = OccupancyMap(np.ones((10, 10), bool), resolution=0.5, origin=(1.0, 2.0))
        >>> grid_to_world(4, 2, occ)
        (3.0, 3.0)
    """
    ox, oy = occupancy_map.origin
    res = occupancy_map.resolution
    return x * res + ox, y * res + oy


def world_to_grid(
    wx: Union[float, np.ndarray],
    wy: Union[float, np.ndarray],
    occupancy_map: OccupancyMap,
    clamp: bool = False,
    as_int: bool = False,
) -> Tuple[Union[float, np.ndarray], Union[float, np.ndarray]]:
    """
    Convert world coordinates to pixel coordinates (x, y).

    Args:
        wx: World x coordinate(s)
        wy: World y coordinate(s)
        occupancy_map: Map providing resolution and origin
        clamp: If True, clamp to the valid pixel range
        as_int: If True, round to the nearest pixel index

    Returns:
        x: Pixel column(s)
        y: Pixel row(s)
    """
    ox, oy = occupancy_map.origin
    res = occupancy_map.resolution

    x = (np.asarray(wx, dtype=float) - ox) / res
    y = (np.asarray(wy, dtype=float) - oy) / res

    if as_int:
        x = np.rint(x).astype(int)
        y = np.rint(y).astype(int)

    if clamp:
        x = np.clip(x, 0, occupancy_map.width - 1)
        y = np.clip(y, 0, occupancy_map.height - 1)

    if x.ndim == 0:
        return x.item(), y.item()
    return x, y


def poses_to_geojson(
    poses: Sequence,
    footprints: Optional[List[np.ndarray]] = None,
) -> dict:
    """
    Convert world sensing poses to GeoJSON for visualization.

    Args:
        poses: Sequence of objects with x, y, theta attributes (world units)
        footprints: Optional list of (K, 2) world-frame footprint polygons,
            one per pose

    Returns:
        GeoJSON FeatureCollection dict
    """
    features = []

    for i, pose in enumerate(poses):
        features.append({
            "type": "Feature",
            "geometry": {
                "type": "Point",
                "coordinates": [float(pose.x), float(pose.y)],
            },
            "properties": {
                "pose_id": i,
                "theta": float(pose.theta),
                "theta_degrees": float(np.rad2deg(pose.theta)),
            },
        })

        if footprints is not None:
            ring = [[float(px), float(py)] for px, py in footprints[i]]
            ring.append(ring[0])
            features.append({
                "type": "Feature",
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [ring],
                },
                "properties": {
                    "pose_id": i,
                    "type": "footprint",
                },
            })

    return {
        "type": "FeatureCollection",
        "features": features,
    }
