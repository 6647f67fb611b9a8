"""
Configuration settings as nested dataclasses.

This module provides typed configuration classes for all vantage settings,
supporting loading from and saving to YAML/JSON files.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union
import json
import numpy as np

from vantage.core.sensors import FOVModel

FOV_KINDS = ("omnidirectional", "frustum", "footprint")
SOLVER_NAMES = ("highs", "pulp")
SELECTION_RULES = ("support", "zero")


@dataclass
class FOVConfig:
    """
    Sensor field-of-view configuration.

    Attributes:
        kind: "omnidirectional", "frustum" or "footprint"
        radius: Sensing radius in meters (omnidirectional)
        hfov_degrees: Horizontal field of view in degrees (frustum)
        min_range: Smallest observable distance in meters (frustum)
        max_range: Largest observable distance in meters (frustum)
        footprint: Polygon vertices in meters, robot frame (footprint)
        boresight: Optional explicit boresight (footprint)
    """
    kind: str = "omnidirectional"
    radius: float = 1.0
    hfov_degrees: float = 90.0
    min_range: float = 0.0
    max_range: float = 2.0
    footprint: Optional[List[List[float]]] = None
    boresight: Optional[Tuple[float, float]] = None

    def to_fov_model(self) -> FOVModel:
        """Build the FOVModel described by this configuration."""
        if self.kind == "omnidirectional":
            return FOVModel.omnidirectional(self.radius)
        if self.kind == "frustum":
            return FOVModel.frustum(
                hfov=np.deg2rad(self.hfov_degrees),
                max_range=self.max_range,
                min_range=self.min_range,
            )
        if self.kind == "footprint":
            if self.footprint is None:
                raise ValueError("fov.footprint is required when fov.kind is 'footprint'")
            return FOVModel.from_footprint(self.footprint, boresight=self.boresight)
        raise ValueError(f"Unknown FOV kind: {self.kind}. Available: {list(FOV_KINDS)}")


@dataclass
class DiscretizationConfig:
    """
    Cell and candidate sampling configuration.

    Attributes:
        cell_size: Cell edge length in pixels
        angular_step_degrees: Heading sampling step in degrees
        bounding_region: Optional (min_x, min_y, max_x, max_y) pixel box
        drop_unobservable_cells: Drop cells no candidate sees instead of failing
    """
    cell_size: int = 1
    angular_step_degrees: float = 90.0
    bounding_region: Optional[Tuple[int, int, int, int]] = None
    drop_unobservable_cells: bool = False

    @property
    def angular_step(self) -> float:
        """Heading sampling step in radians."""
        return float(np.deg2rad(self.angular_step_degrees))


@dataclass
class RelaxationConfig:
    """
    Reweighted relaxation and reduction settings.

    Attributes:
        sparsity_check_range: Equal consecutive sparsity measures for convergence
        max_iterations: Hard cap on relaxation solves
        sparsity_epsilon: Threshold below which a variable counts as zero
        selection_rule: "support" or "zero"
        selection_tolerance: Tolerance of the selection rule
    """
    sparsity_check_range: int = 20
    max_iterations: int = 200
    sparsity_epsilon: float = 0.01
    selection_rule: str = "support"
    selection_tolerance: float = 1e-6


@dataclass
class SolverConfig:
    """
    LP backend settings.

    Attributes:
        name: "highs" or "pulp"
        time_limit: Optional time limit per solve in seconds
        presolve: Enable presolve (highs)
        lp_path: Optional path for the LP-format model (pulp)
    """
    name: str = "highs"
    time_limit: Optional[float] = None
    presolve: bool = True
    lp_path: Optional[str] = None

    def options(self) -> dict:
        """Constructor arguments for the selected backend."""
        if self.name == "pulp":
            return {"lp_path": self.lp_path, "time_limit": self.time_limit}
        return {"time_limit": self.time_limit, "presolve": self.presolve}


@dataclass
class VisualizationConfig:
    """
    Visualization settings.

    Attributes:
        output_dir: Directory for output files
        generate_gifs: Whether to generate the relaxation GIF
        gif_fps: Frames per second for GIFs
        gif_max_frames: Maximum frames in GIFs
        dpi: Resolution for saved images
        figsize: Default figure size (width, height)
    """
    output_dir: str = "outputs"
    generate_gifs: bool = False
    gif_fps: int = 5
    gif_max_frames: int = 50
    dpi: int = 150
    figsize: Tuple[int, int] = (10, 8)


@dataclass
class VantageConfig:
    """
    Main vantage configuration.

    This is the top-level configuration class that contains all settings
    for a sensor placement run.

    Attributes:
        fov: Sensor field of view
        discretization: Cell and candidate sampling
        relaxation: Reweighted relaxation and reduction
        solver: LP backend
        visualization: Visualization settings
        map_path: Optional path to an occupancy image
        resolution: Meters per pixel of the map image
        free_threshold: Minimum pixel value counted as free space
        verbose: Print progress information
    """
    fov: FOVConfig = field(default_factory=FOVConfig)
    discretization: DiscretizationConfig = field(default_factory=DiscretizationConfig)
    relaxation: RelaxationConfig = field(default_factory=RelaxationConfig)
    solver: SolverConfig = field(default_factory=SolverConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)
    map_path: Optional[str] = None
    resolution: float = 0.05
    free_threshold: int = 250
    verbose: bool = False

    def validate(self) -> None:
        """
        Check settings that would otherwise fail deep inside the pipeline.

        Raises:
            ValueError: On the first invalid setting
        """
        if self.fov.kind not in FOV_KINDS:
            raise ValueError(f"Unknown FOV kind: {self.fov.kind}. Available: {list(FOV_KINDS)}")
        if self.discretization.cell_size < 1:
            raise ValueError(f"cell_size must be >= 1, got {self.discretization.cell_size}")
        if self.discretization.angular_step_degrees <= 0:
            raise ValueError(
                f"angular_step_degrees must be positive, got {self.discretization.angular_step_degrees}"
            )
        if self.relaxation.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.relaxation.max_iterations}")
        if self.relaxation.sparsity_check_range < 1:
            raise ValueError(
                f"sparsity_check_range must be >= 1, got {self.relaxation.sparsity_check_range}"
            )
        if self.relaxation.selection_rule not in SELECTION_RULES:
            raise ValueError(
                f"Unknown selection rule: {self.relaxation.selection_rule}. "
                f"Available: {list(SELECTION_RULES)}"
            )
        if self.solver.name not in SOLVER_NAMES:
            raise ValueError(f"Unknown solver: {self.solver.name}. Available: {list(SOLVER_NAMES)}")
        if self.resolution <= 0:
            raise ValueError(f"resolution must be positive, got {self.resolution}")

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        def convert(obj):
            if hasattr(obj, '__dataclass_fields__'):
                return {k: convert(v) for k, v in obj.__dict__.items()}
            elif isinstance(obj, (list, tuple)):
                return [convert(v) for v in obj]
            elif isinstance(obj, np.ndarray):
                return obj.tolist()
            else:
                return obj
        return convert(self)

    @classmethod
    def from_dict(cls, data: dict) -> "VantageConfig":
        """Create from dictionary."""
        fov = FOVConfig(**data.get('fov', {}))
        if fov.boresight is not None:
            fov.boresight = tuple(fov.boresight)

        discretization = DiscretizationConfig(**data.get('discretization', {}))
        if discretization.bounding_region is not None:
            discretization.bounding_region = tuple(discretization.bounding_region)

        visualization = VisualizationConfig(**data.get('visualization', {}))
        visualization.figsize = tuple(visualization.figsize)

        return cls(
            fov=fov,
            discretization=discretization,
            relaxation=RelaxationConfig(**data.get('relaxation', {})),
            solver=SolverConfig(**data.get('solver', {})),
            visualization=visualization,
            map_path=data.get('map_path'),
            resolution=data.get('resolution', 0.05),
            free_threshold=data.get('free_threshold', 250),
            verbose=data.get('verbose', False),
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "VantageConfig":
        """Load configuration from YAML file."""
        try:
            import yaml
        except ImportError:
            raise ImportError("PyYAML is required for YAML config files. Install with: pip install pyyaml")

        path = Path(path)
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "VantageConfig":
        """Load configuration from JSON file."""
        path = Path(path)
        with open(path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        try:
            import yaml
        except ImportError:
            raise ImportError("PyYAML is required for YAML config files")

        path = Path(path)
        with open(path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_json(self, path: Union[str, Path]) -> None:
        """Save configuration to JSON file."""
        path = Path(path)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def for_omnidirectional_robot(cls) -> "VantageConfig":
        """Preset for a 360 degree range sensor on a 5 cm grid."""
        return cls(
            fov=FOVConfig(kind="omnidirectional", radius=1.5),
            discretization=DiscretizationConfig(cell_size=10, angular_step_degrees=360.0),
            resolution=0.05,
        )

    @classmethod
    def for_camera_robot(cls) -> "VantageConfig":
        """Preset for a forward-looking camera on a 5 cm grid."""
        return cls(
            fov=FOVConfig(kind="frustum", hfov_degrees=90.0, min_range=0.2, max_range=2.0),
            discretization=DiscretizationConfig(cell_size=10, angular_step_degrees=45.0),
            resolution=0.05,
        )


def load_config(path: Optional[Union[str, Path]] = None) -> VantageConfig:
    """
    Load configuration from file or return defaults.

    Supports YAML and JSON files based on extension.

    Args:
        path: Path to configuration file (optional)

    Returns:
        VantageConfig instance
    """
    if path is None:
        return VantageConfig()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in ['.yaml', '.yml']:
        return VantageConfig.from_yaml(path)
    elif suffix == '.json':
        return VantageConfig.from_json(path)
    else:
        raise ValueError(f"Unsupported configuration format: {suffix}")
