"""
Occupancy maps: data structure, generation, and coordinate handling.

This module provides tools for working with 2D occupancy grids:
    - The immutable OccupancyMap input type
    - Loading maps from images and map_server YAML descriptors
    - Generating synthetic rooms, corridors and floorplans
    - Grid/world coordinate transformations and GeoJSON export
"""

from vantage.maps.occupancy import OccupancyMap

from vantage.maps.synthetic import (
    create_empty_map,
    create_corridor_map,
    create_floorplan_map,
    add_wall_lines,
    add_rectangles,
)

from vantage.maps.coordinates import (
    grid_to_world,
    world_to_grid,
    poses_to_geojson,
)

from vantage.maps.loader import (
    MapMetadata,
    load_map_image,
    load_map_yaml,
    save_map_image,
)

__all__ = [
    # Data structure
    "OccupancyMap",
    # Loading
    "MapMetadata",
    "load_map_image",
    "load_map_yaml",
    "save_map_image",
    # Synthetic generation
    "create_empty_map",
    "create_corridor_map",
    "create_floorplan_map",
    "add_wall_lines",
    "add_rectangles",
    # Coordinates
    "grid_to_world",
    "world_to_grid",
    "poses_to_geojson",
]
