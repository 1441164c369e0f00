"""Configuration schema, loading and mode precedence."""

from fastdeps.config.loader import build_config, find_config_file, load_config
from fastdeps.config.modes import mode_overrides, resolve_modes
from fastdeps.config.schema import (
    AnalyzerConfig,
    GitInfoConfig,
    OutputConfig,
    RangeOrder,
)

__all__ = [
    "AnalyzerConfig",
    "GitInfoConfig",
    "OutputConfig",
    "RangeOrder",
    "build_config",
    "find_config_file",
    "load_config",
    "mode_overrides",
    "resolve_modes",
]
