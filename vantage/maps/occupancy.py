"""
Occupancy map data structure.

An occupancy map is the immutable input of the placement pipeline: a 2D grid
of free/occupied pixels plus the metric information needed to convert between
grid and world coordinates.
"""

from dataclasses import dataclass, field
from typing import Tuple, Union
import numpy as np


@dataclass
class OccupancyMap:
    """
    Binary occupancy grid with metric resolution and origin.

    Pixels are addressed as (x, y) with x = column and y = row, so the
    underlying array is indexed ``free[y, x]``.

    Attributes:
        free: Boolean array (H, W), True where the pixel is free space
        resolution: Length of one pixel in world units (meters per pixel)
        origin: (x, y) world coordinates of pixel (0, 0)

    Example:
        >>> grid = np.ones((50, 80), dtype=bool)
        >>> grid[20, :] = False  # wall
        >>> occ = OccupancyMap(grid, resolution=0.05, origin=(-2.0, -1.25))
        >>> print(occ.shape, occ.free_count)
        (50, 80) 3920
    """
    free: np.ndarray
    resolution: float = 1.0
    origin: Tuple[float, float] = (0.0, 0.0)

    height: int = field(init=False)
    width: int = field(init=False)

    def __post_init__(self):
        free = np.array(self.free, dtype=bool)
        if free.ndim != 2:
            raise ValueError(f"Occupancy grid must be 2D, got shape {free.shape}")
        if self.resolution <= 0:
            raise ValueError(f"resolution must be positive, got {self.resolution}")

        free.setflags(write=False)
        self.free = free
        self.origin = (float(self.origin[0]), float(self.origin[1]))
        self.height, self.width = free.shape

    @classmethod
    def from_image(
        cls,
        image: np.ndarray,
        resolution: float = 1.0,
        origin: Tuple[float, float] = (0.0, 0.0),
        free_threshold: int = 250,
    ) -> "OccupancyMap":
        """
        Create a map from a grayscale image (255 = free, 0 = occupied).

        Color images are reduced to their first channel.

        Args:
            image: 2D or 3D uint8 image array
            resolution: Meters per pixel
            origin: World coordinates of pixel (0, 0)
            free_threshold: Pixel values >= this are free space
        """
        image = np.asarray(image)
        if image.ndim == 3:
            image = image[:, :, 0]
        return cls(image >= free_threshold, resolution=resolution, origin=origin)

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width) in pixels."""
        return (self.height, self.width)

    @property
    def occupied(self) -> np.ndarray:
        """Boolean array (H, W), True where the pixel is occupied."""
        return ~self.free

    @property
    def free_count(self) -> int:
        """Number of free pixels."""
        return int(self.free.sum())

    def in_bounds(self, x: int, y: int) -> bool:
        """Whether pixel (x, y) lies inside the grid."""
        return 0 <= x < self.width and 0 <= y < self.height

    def is_free(self, x: Union[int, np.ndarray], y: Union[int, np.ndarray]):
        """Free-space lookup for pixel (x, y); scalars or integer arrays."""
        return self.free[y, x]

    def to_image(self) -> np.ndarray:
        """Grayscale uint8 rendering (255 = free, 0 = occupied)."""
        return np.where(self.free, 255, 0).astype(np.uint8)

    def to_dict(self) -> dict:
        """Convert metadata to dictionary for serialization (without the grid)."""
        return {
            "width": self.width,
            "height": self.height,
            "resolution": self.resolution,
            "origin": list(self.origin),
            "free_cells": self.free_count,
        }
