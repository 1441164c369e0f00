"""YAML config loader for fastdeps."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from fastdeps.config.modes import mode_overrides, resolve_modes
from fastdeps.config.schema import (
    DEFAULT_TARGET_FILES,
    AnalyzerConfig,
    GitInfoConfig,
    OutputConfig,
    RangeOrder,
)
from fastdeps.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = ("fastdeps.yaml", "fastdeps.yml", ".fastdeps/config.yaml")


def find_config_file(start: Path | None = None) -> Path | None:
    """Find the nearest fastdeps config file in *start* or its parents."""
    current = (start or Path.cwd()).resolve()
    for parent in [current, *current.parents]:
        for name in CONFIG_FILE_NAMES:
            candidate = parent / name
            if candidate.is_file():
                return candidate
    return None


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load a YAML config file, returning empty dict if not found."""
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Cannot parse {path}: {exc}") from exc
    return data if isinstance(data, dict) else {}


def load_config(
    path: str | Path | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
    resolve: bool = True,
) -> AnalyzerConfig:
    """Load configuration from *path* (or the nearest config file).

    Priority: *overrides* (CLI options) > config file > defaults. The mode
    precedence rules are applied last unless *resolve* is false.
    """
    raw: dict[str, Any] = {}
    config_path = Path(path) if path else find_config_file()
    if config_path is not None:
        raw = load_yaml_config(config_path)
        # A relative context is relative to the config file, not the cwd.
        ctx = raw.get("context")
        if isinstance(ctx, str) and not Path(ctx).is_absolute():
            raw["context"] = str((config_path.parent / ctx).resolve())
        elif "context" not in raw:
            raw["context"] = str(config_path.parent.resolve())
    if overrides:
        raw = _deep_merge(raw, overrides)
    return build_config(raw, resolve=resolve)


def build_config(raw: Mapping[str, Any], *, resolve: bool = True) -> AnalyzerConfig:
    """Build an :class:`AnalyzerConfig` from a plain mapping."""
    git_raw = raw.get("analyze_git_info", {}) if isinstance(raw.get("analyze_git_info"), Mapping) else {}
    output_raw = raw.get("output", {}) if isinstance(raw.get("output"), Mapping) else {}

    top = _pick(raw, AnalyzerConfig)
    top.pop("analyze_git_info", None)
    top.pop("output", None)
    for flag in ("tree", "reverse", "relative_path"):
        if flag in top:
            top[flag] = _as_bool(top[flag], flag)
    if "ignore" in top:
        top["ignore"] = _as_str_tuple(top["ignore"], "ignore")
    if isinstance(top.get("entry"), list):
        top["entry"] = tuple(top["entry"])
    if "context" in top:
        top["context"] = str(top["context"])

    git = _pick(git_raw, GitInfoConfig)
    if "enable" in git:
        git["enable"] = _as_bool(git["enable"], "analyze_git_info.enable")
    if "commit_range" in git:
        git["commit_range"] = _as_str_tuple(git["commit_range"], "analyze_git_info.commit_range")
    if "target_files" in git:
        git["target_files"] = _as_str_tuple(git["target_files"], "analyze_git_info.target_files") or DEFAULT_TARGET_FILES
    if "range_order" in git:
        try:
            git["range_order"] = RangeOrder(git["range_order"])
        except ValueError as exc:
            allowed = ", ".join(o.value for o in RangeOrder)
            raise ConfigurationError(
                f"analyze_git_info.range_order must be one of: {allowed}",
                key="analyze_git_info.range_order",
            ) from exc

    config = AnalyzerConfig(
        **top,
        analyze_git_info=GitInfoConfig(**git),
        output=OutputConfig(**_pick(output_raw, OutputConfig)),
    )
    if not resolve:
        return config
    resolved = resolve_modes(config)
    for name, (before, after) in mode_overrides(config, resolved).items():
        logger.debug("Mode override: %s %r -> %r", name, before, after)
    return resolved


def _pick(raw: Mapping[str, Any], model_type: type[Any]) -> dict[str, Any]:
    allowed = set(model_type.__dataclass_fields__.keys())
    return {k: v for k, v in raw.items() if k in allowed}


def _deep_merge(base: Mapping[str, Any], extra: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in extra.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("1", "true", "yes", "on", "0", "false", "no", "off"):
        return value.lower() in ("1", "true", "yes", "on")
    raise ConfigurationError(f"{key} must be a boolean, got {value!r}", key=key)


def _as_str_tuple(value: Any, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise ConfigurationError(f"{key} must be a string or a list of strings", key=key)
