"""
Sensor placement problem definition.

This module defines the SensorPlacementProblem class, which runs the
geometry phase once (discretization, candidate generation, visibility) and
holds its read-only results for the optimization phase.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import numpy as np

from vantage.core.discretization import (
    BoundingRegion,
    candidate_angles,
    discretize,
    generate_candidates,
)
from vantage.core.sensors import CandidatePose, FOVModel, Pose2D
from vantage.core.visibility import (
    build_visibility,
    compute_coverage,
    find_unobservable_cells,
    transform_footprint,
)
from vantage.exceptions import DegenerateInput, InfeasibleInstance
from vantage.maps.occupancy import OccupancyMap
from vantage.optimization.lp import LPProblem, build_lp_problem

logger = logging.getLogger(__name__)


@dataclass
class SensorPlacementProblem:
    """
    Sensor placement problem on an occupancy map.

    Construction performs the whole geometry phase and fails fast:
    - Discretize the free space into cells
    - Generate candidate poses at every cell and sampled heading
    - Build the cell x candidate visibility matrix
    - Check that every cell is visible from some candidate

    Attributes:
        occupancy_map: Input map (not modified)
        fov: Sensor field of view
        cell_size: Cell edge length in pixels
        angular_step: Heading sampling step in radians
        bounding_region: Optional (min_x, min_y, max_x, max_y) pixel box
        min_range: Override of fov.min_range in meters
        max_range: Override of fov.max_range in meters
        drop_unobservable_cells: Remove cells no candidate can see instead
            of raising InfeasibleInstance
        name: Optional name for logging/visualization

    Example:
        >>> from vantage.maps import create_empty_map
        >>> occ = create_empty_map(20, 20, resolution=0.1)
        >>> problem = SensorPlacementProblem(
        ...     occupancy_map=occ,
        ...     fov=FOVModel.omnidirectional(0.5),
        ...     cell_size=4,
        ...     angular_step=np.pi,
        ... )
        >>> problem.visibility.shape
        (25, 50)
    """
    occupancy_map: OccupancyMap
    fov: FOVModel
    cell_size: int = 1
    angular_step: float = np.pi / 2
    bounding_region: Optional[BoundingRegion] = None
    min_range: Optional[float] = None
    max_range: Optional[float] = None
    drop_unobservable_cells: bool = False
    name: str = "unknown"

    # Geometry phase results (set in __post_init__)
    cells: np.ndarray = field(init=False)
    candidates: List[CandidatePose] = field(init=False)
    visibility: np.ndarray = field(init=False)
    dropped_cells: np.ndarray = field(init=False)

    def __post_init__(self):
        """Run the geometry phase."""
        cells = discretize(self.occupancy_map, self.cell_size, self.bounding_region)
        self.candidates = generate_candidates(cells, self.angular_step)

        visibility = build_visibility(
            self.occupancy_map,
            cells,
            self.candidates,
            self.fov,
            min_range=self.min_range,
            max_range=self.max_range,
        )

        unobservable = find_unobservable_cells(visibility)
        self.dropped_cells = np.zeros((0, 2), dtype=np.int64)

        if len(unobservable) > 0:
            if not self.drop_unobservable_cells:
                raise InfeasibleInstance(
                    f"{len(unobservable)} of {len(cells)} cells are not visible from any "
                    f"candidate pose: {cells[unobservable[:10]].tolist()}",
                    cell_indices=unobservable.tolist(),
                )

            logger.warning(
                "Dropping %d cells not visible from any candidate pose",
                len(unobservable),
            )
            keep = np.ones(len(cells), dtype=bool)
            keep[unobservable] = False
            self.dropped_cells = cells[unobservable]
            cells = cells[keep]
            visibility = visibility[keep]
            visibility.setflags(write=False)

            if len(cells) == 0:
                raise DegenerateInput("No cell is visible from any candidate pose")

        self.cells = cells
        self.visibility = visibility

        logger.info(
            "Problem '%s': %d cells, %d candidates (%d headings)",
            self.name, self.num_cells, self.num_candidates, self.num_headings,
        )

    @property
    def num_cells(self) -> int:
        return int(self.visibility.shape[0])

    @property
    def num_candidates(self) -> int:
        return int(self.visibility.shape[1])

    @property
    def num_headings(self) -> int:
        return len(candidate_angles(self.angular_step))

    def build_lp(self, weights: Optional[np.ndarray] = None, integer: bool = False) -> LPProblem:
        """Covering program over all candidates."""
        return build_lp_problem(self.visibility, weights=weights, integer=integer)

    def world_poses(self, indices: Sequence[int]) -> List[Pose2D]:
        """World-frame poses of the given candidates, in the given order."""
        return [self.candidates[i].to_world(self.occupancy_map) for i in indices]

    def evaluate_coverage(self, indices: Sequence[int]) -> dict:
        """Coverage statistics of a candidate selection."""
        return compute_coverage(self.visibility, indices)

    def footprints(self, indices: Sequence[int]) -> List[np.ndarray]:
        """Pixel footprints of the given candidates."""
        return [
            transform_footprint(self.fov, self.candidates[i], self.occupancy_map)
            for i in indices
        ]

    def summary(self) -> dict:
        """Problem sizes for logging and serialization."""
        return {
            "name": self.name,
            "map_shape": list(self.occupancy_map.shape),
            "resolution": self.occupancy_map.resolution,
            "cell_size": self.cell_size,
            "angular_step": self.angular_step,
            "num_cells": self.num_cells,
            "num_candidates": self.num_candidates,
            "num_dropped_cells": int(len(self.dropped_cells)),
            "visible_pairs": int(np.count_nonzero(self.visibility)),
        }
