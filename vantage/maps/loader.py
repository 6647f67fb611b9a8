"""
Occupancy map loading from image files.

This module reads grayscale map images (PNG, PGM, ...) and map_server style
YAML descriptors into OccupancyMap objects.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union
import numpy as np

from vantage.maps.occupancy import OccupancyMap


@dataclass
class MapMetadata:
    """
    Metadata of a map_server style map descriptor.

    Attributes:
        image: Path of the map image (resolved against the YAML file)
        resolution: Meters per pixel
        origin: (x, y, yaw) of the lower-left pixel in the world frame
        negate: Whether white means occupied instead of free
        occupied_thresh: Occupancy probability above which a pixel is occupied
        free_thresh: Occupancy probability below which a pixel is free
    """
    image: str
    resolution: float
    origin: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    negate: bool = False
    occupied_thresh: float = 0.65
    free_thresh: float = 0.196

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "image": self.image,
            "resolution": self.resolution,
            "origin": list(self.origin),
            "negate": int(self.negate),
            "occupied_thresh": self.occupied_thresh,
            "free_thresh": self.free_thresh,
        }

    @classmethod
    def from_dict(cls, data: dict, base_dir: Optional[Path] = None) -> "MapMetadata":
        """Create from dictionary; relative image paths are resolved against base_dir."""
        image = Path(data["image"])
        if base_dir is not None and not image.is_absolute():
            image = base_dir / image
        origin = list(data.get("origin", [0.0, 0.0, 0.0])) + [0.0, 0.0, 0.0]
        return cls(
            image=str(image),
            resolution=float(data["resolution"]),
            origin=(float(origin[0]), float(origin[1]), float(origin[2])),
            negate=bool(data.get("negate", 0)),
            occupied_thresh=float(data.get("occupied_thresh", 0.65)),
            free_thresh=float(data.get("free_thresh", 0.196)),
        )


def _read_image(path: Union[str, Path]) -> np.ndarray:
    try:
        import imageio.v2 as imageio
    except ImportError:
        raise ImportError("imageio is required for reading map images. Install with: pip install imageio")

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Map image not found: {path}")

    image = np.asarray(imageio.imread(path))
    if image.ndim == 3:
        image = image[:, :, 0]
    if image.ndim != 2:
        raise ValueError(f"Map image must be grayscale or RGB, got shape {image.shape}")
    return image


def load_map_image(
    path: Union[str, Path],
    resolution: float = 1.0,
    origin: Tuple[float, float] = (0.0, 0.0),
    free_threshold: int = 250,
    flip_vertical: bool = False,
) -> OccupancyMap:
    """
    Load an occupancy map from a grayscale image.

    Args:
        path: Image file path
        resolution: Meters per pixel
        origin: World coordinates of pixel (0, 0)
        free_threshold: Pixel values >= this are free space
        flip_vertical: Flip rows so that image row 0 becomes the largest y

    Returns:
        OccupancyMap

    Raises:
        ImportError: If imageio is not installed
        FileNotFoundError: If the file doesn't exist
    """
    image = _read_image(path)
    if flip_vertical:
        image = np.flipud(image)
    return OccupancyMap.from_image(
        image, resolution=resolution, origin=origin, free_threshold=free_threshold
    )


def load_map_yaml(path: Union[str, Path]) -> Tuple[OccupancyMap, MapMetadata]:
    """
    Load a map_server style YAML descriptor and its image.

    The image is flipped so that pixel (0, 0) is the lower-left corner,
    matching the descriptor's origin. Only pixels whose occupancy
    probability is below ``free_thresh`` are free; unknown pixels count as
    occupied.

    Returns:
        (occupancy_map, metadata)

    Example:
        >>> occ, meta = load_map_yaml("maps/office.yaml")
        >>> print(occ.shape, meta.resolution)
    """
    try:
        import yaml
    except ImportError:
        raise ImportError("PyYAML is required for map descriptors. Install with: pip install pyyaml")

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Map descriptor not found: {path}")

    with open(path, 'r') as f:
        data = yaml.safe_load(f)

    metadata = MapMetadata.from_dict(data, base_dir=path.parent)
    image = np.flipud(_read_image(metadata.image)).astype(np.float64)

    if metadata.negate:
        occupancy = image / 255.0
    else:
        occupancy = (255.0 - image) / 255.0

    occupancy_map = OccupancyMap(
        occupancy < metadata.free_thresh,
        resolution=metadata.resolution,
        origin=(metadata.origin[0], metadata.origin[1]),
    )
    return occupancy_map, metadata


def save_map_image(occupancy_map: OccupancyMap, path: Union[str, Path]) -> None:
    """Write a map as a grayscale image (255 = free, 0 = occupied)."""
    try:
        import imageio.v2 as imageio
    except ImportError:
        raise ImportError("imageio is required for writing map images. Install with: pip install imageio")

    imageio.imwrite(str(path), occupancy_map.to_image())
