"""Mode precedence for mutually exclusive graph options.

Two hard overrides, applied in order:

1. ``tree=True`` forces ``reverse=False``: a nested tree has no reverse form.
2. ``analyze_git_info.enable=True`` forces ``tree=False, reverse=True,
   relative_path=True``: impact analysis walks the flat reverse table and
   matches git's repository-relative file names.

Explicit user values for the overridden fields are discarded.
"""

from __future__ import annotations

import dataclasses
from typing import Any

from fastdeps.config.schema import AnalyzerConfig

_MODE_FIELDS = ("tree", "reverse", "relative_path")


def resolve_modes(config: AnalyzerConfig) -> AnalyzerConfig:
    """Return *config* with the mode overrides applied.

    Pure and idempotent: ``resolve_modes(resolve_modes(c)) == resolve_modes(c)``.
    """
    resolved = config
    if resolved.tree:
        resolved = dataclasses.replace(resolved, reverse=False)
    if resolved.analyze_git_info.enable:
        resolved = dataclasses.replace(resolved, tree=False, reverse=True, relative_path=True)
    return resolved


def mode_overrides(raw: AnalyzerConfig, resolved: AnalyzerConfig) -> dict[str, tuple[Any, Any]]:
    """Fields changed by :func:`resolve_modes`, as ``{name: (raw, effective)}``."""
    changes: dict[str, tuple[Any, Any]] = {}
    for name in _MODE_FIELDS:
        before = getattr(raw, name)
        after = getattr(resolved, name)
        if before != after:
            changes[name] = (before, after)
    return changes
