"""
Configuration management for vantage.

This module provides dataclass-based configuration with YAML/JSON
loading, presets and validation.
"""

from vantage.config.settings import (
    VantageConfig,
    FOVConfig,
    DiscretizationConfig,
    RelaxationConfig,
    SolverConfig,
    VisualizationConfig,
    load_config,
)

__all__ = [
    "VantageConfig",
    "FOVConfig",
    "DiscretizationConfig",
    "RelaxationConfig",
    "SolverConfig",
    "VisualizationConfig",
    "load_config",
]
