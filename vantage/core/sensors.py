"""
Sensor field-of-view model and pose data structures.

This module defines the sensor footprint (FOVModel), the candidate sensing
poses generated on the grid, and the world-frame poses returned to callers,
as well as constructors for common footprint shapes.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import numpy as np


def rotation_matrix(theta: float) -> np.ndarray:
    """2D rotation matrix for a counter-clockwise angle in radians."""
    c, s = np.cos(theta), np.sin(theta)
    return np.array([[c, -s], [s, c]])


@dataclass
class Pose2D:
    """
    Sensing pose in world coordinates.

    Attributes:
        x: X position in world units (meters)
        y: Y position in world units (meters)
        theta: Heading in radians (0 = +X, CCW positive)
    """
    x: float
    y: float
    theta: float

    @property
    def theta_degrees(self) -> float:
        """Heading in degrees."""
        return float(np.rad2deg(self.theta))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"x": float(self.x), "y": float(self.y), "theta": float(self.theta)}

    @classmethod
    def from_dict(cls, data: dict) -> "Pose2D":
        """Create from dictionary."""
        return cls(x=data["x"], y=data["y"], theta=data["theta"])


@dataclass
class CandidatePose:
    """
    Candidate sensing pose on the grid.

    Candidates sit on cell centers, so the position is in integer pixel
    coordinates (x = column, y = row). Read-only once generated.

    Attributes:
        x: Pixel column
        y: Pixel row
        theta: Heading in radians
    """
    x: int
    y: int
    theta: float

    @property
    def position(self) -> Tuple[int, int]:
        """(x, y) pixel position."""
        return (self.x, self.y)

    def to_array(self) -> np.ndarray:
        """Convert to numpy array [x, y, theta]."""
        return np.array([self.x, self.y, self.theta], dtype=np.float64)

    def to_world(self, occupancy_map) -> Pose2D:
        """Convert to a world pose using the map's resolution and origin."""
        ox, oy = occupancy_map.origin
        res = occupancy_map.resolution
        return Pose2D(
            x=self.x * res + ox,
            y=self.y * res + oy,
            theta=float(self.theta),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"x": int(self.x), "y": int(self.y), "theta": float(self.theta)}

    @classmethod
    def from_dict(cls, data: dict) -> "CandidatePose":
        """Create from dictionary."""
        return cls(x=int(data["x"]), y=int(data["y"]), theta=float(data["theta"]))


@dataclass
class FOVModel:
    """
    Sensor field of view in the robot's local frame.

    The footprint is the area the sensor observes, as a polygon in meters
    with x pointing forward. The boresight, maximum half-angle and range
    interval are precomputed so that most cells can be rejected before the
    polygon test.

    Attributes:
        footprint: (K, 2) polygon vertices in meters, robot frame
        boresight: Vector from the robot to the middle of the footprint
        max_angle: Largest angle (radians) between the boresight and an
            observable direction
        min_range: Smallest observable distance in meters
        max_range: Largest observable distance in meters

    Example:
        >>> fov = FOVModel.frustum(hfov=np.deg2rad(90), max_range=2.0, min_range=0.3)
        >>> print(f"Half angle: {fov.max_angle_degrees:.0f} deg")
        Half angle: 45 deg
    """
    footprint: np.ndarray
    boresight: Tuple[float, float] = (1.0, 0.0)
    max_angle: float = np.pi
    min_range: float = 0.0
    max_range: float = 1.0

    num_vertices: int = field(init=False)

    def __post_init__(self):
        footprint = np.asarray(self.footprint, dtype=np.float64)
        if footprint.ndim != 2 or footprint.shape[1] != 2:
            raise ValueError(f"footprint must have shape (K, 2), got {footprint.shape}")
        if footprint.shape[0] < 3:
            raise ValueError(f"footprint needs at least 3 vertices, got {footprint.shape[0]}")
        if np.hypot(*self.boresight) == 0:
            raise ValueError("boresight must be a non-zero vector")
        if self.min_range < 0 or self.max_range < 0:
            raise ValueError(
                f"ranges must be non-negative, got [{self.min_range}, {self.max_range}]"
            )
        if self.min_range > self.max_range:
            raise ValueError(
                f"min_range {self.min_range} exceeds max_range {self.max_range}"
            )
        if not 0.0 <= self.max_angle <= np.pi:
            raise ValueError(f"max_angle must be in [0, pi], got {self.max_angle}")

        self.footprint = footprint
        self.boresight = (float(self.boresight[0]), float(self.boresight[1]))
        self.num_vertices = footprint.shape[0]

    @property
    def max_angle_degrees(self) -> float:
        """Maximum half-angle in degrees."""
        return float(np.rad2deg(self.max_angle))

    def rotated_boresight(self, theta: float) -> np.ndarray:
        """Boresight vector rotated by the pose heading."""
        return rotation_matrix(theta) @ np.asarray(self.boresight)

    def transform(self, x: float, y: float, theta: float) -> np.ndarray:
        """
        Footprint placed at a world pose.

        Args:
            x, y: World position of the robot (meters)
            theta: Heading in radians

        Returns:
            (K, 2) polygon in world coordinates
        """
        return self.footprint @ rotation_matrix(theta).T + np.array([x, y])

    @classmethod
    def from_footprint(
        cls,
        footprint: Sequence[Sequence[float]],
        boresight: Optional[Sequence[float]] = None,
    ) -> "FOVModel":
        """
        Derive boresight, half-angle and ranges from a footprint polygon.

        The boresight defaults to the vertex centroid; the half-angle is the
        largest angle between the boresight and any vertex; the range
        interval spans the smallest and largest vertex distances. A footprint
        centered on the robot has no preferred direction and is treated as
        omnidirectional (half-angle pi).

        Args:
            footprint: (K, 2) polygon vertices in meters, robot frame
            boresight: Optional explicit boresight vector

        Returns:
            FOVModel instance

        Raises:
            ValueError: If an explicit boresight has zero length
        """
        points = np.asarray(footprint, dtype=np.float64)
        distances = np.hypot(points[:, 0], points[:, 1])

        derived = boresight is None
        if derived:
            boresight = points.mean(axis=0)
        boresight = np.asarray(boresight, dtype=np.float64)

        if np.hypot(*boresight) < 1e-12:
            if not derived:
                raise ValueError("boresight must be a non-zero vector")
            boresight = np.array([1.0, 0.0])
            max_angle = np.pi
        else:
            nonzero = distances > 1e-12
            cosines = points[nonzero] @ boresight / (distances[nonzero] * np.hypot(*boresight))
            max_angle = float(np.max(np.arccos(np.clip(cosines, -1.0, 1.0))))

        return cls(
            footprint=points,
            boresight=(boresight[0], boresight[1]),
            max_angle=max_angle,
            min_range=float(distances.min()),
            max_range=float(distances.max()),
        )

    @classmethod
    def omnidirectional(cls, radius: float, num_vertices: int = 16) -> "FOVModel":
        """
        360 degree sensor observing a disc of the given radius.

        The footprint is a regular polygon circumscribing the disc, with
        vertices on the coordinate axes.

        Args:
            radius: Sensing radius in meters
            num_vertices: Number of polygon vertices (>= 3)
        """
        if radius <= 0:
            raise ValueError(f"radius must be positive, got {radius}")
        angles = 2 * np.pi * np.arange(num_vertices) / num_vertices
        outer = radius / np.cos(np.pi / num_vertices)
        footprint = np.stack([outer * np.cos(angles), outer * np.sin(angles)], axis=1)
        return cls(
            footprint=footprint,
            boresight=(1.0, 0.0),
            max_angle=np.pi,
            min_range=0.0,
            max_range=float(radius),
        )

    @classmethod
    def frustum(
        cls,
        hfov: float,
        max_range: float,
        min_range: float = 0.0,
        num_arc_points: int = 7,
    ) -> "FOVModel":
        """
        Forward-looking wedge, e.g. a camera or a limited-angle range sensor.

        The far arc is approximated by a polyline circumscribing the
        max-range arc, so every point of the true wedge lies in the polygon.

        Args:
            hfov: Horizontal field of view in radians, in (0, 2*pi)
            max_range: Largest observable distance in meters
            min_range: Smallest observable distance in meters
            num_arc_points: Vertices along each arc (>= 2)
        """
        if not 0 < hfov < 2 * np.pi:
            raise ValueError(f"hfov must be in (0, 2*pi), got {hfov}")
        if max_range <= 0:
            raise ValueError(f"max_range must be positive, got {max_range}")

        half = hfov / 2
        arc = np.linspace(-half, half, num_arc_points)
        step = arc[1] - arc[0]
        outer = max_range / np.cos(step / 2)

        far = np.stack([outer * np.cos(arc), outer * np.sin(arc)], axis=1)
        if min_range > 0:
            near_arc = arc[::-1]
            near = np.stack([min_range * np.cos(near_arc), min_range * np.sin(near_arc)], axis=1)
        else:
            near = np.zeros((1, 2))

        return cls(
            footprint=np.vstack([far, near]),
            boresight=(1.0, 0.0),
            max_angle=float(min(half, np.pi)),
            min_range=float(min_range),
            max_range=float(max_range),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "footprint": self.footprint.tolist(),
            "boresight": list(self.boresight),
            "max_angle": float(self.max_angle),
            "min_range": float(self.min_range),
            "max_range": float(self.max_range),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FOVModel":
        """Create from dictionary."""
        return cls(
            footprint=np.asarray(data["footprint"], dtype=np.float64),
            boresight=tuple(data["boresight"]),
            max_angle=data["max_angle"],
            min_range=data["min_range"],
            max_range=data["max_range"],
        )


def candidates_to_array(candidates: List[CandidatePose]) -> np.ndarray:
    """Stack candidate poses into an (M, 3) array of [x, y, theta]."""
    if len(candidates) == 0:
        return np.zeros((0, 3), dtype=np.float64)
    return np.stack([c.to_array() for c in candidates], axis=0)
