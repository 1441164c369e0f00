"""Read edges written by an external discovery pass.

Accepted formats:

- a JSON array of ``[issuer, dependency]`` pairs
- a JSON array of ``{"issuer": ..., "path": ...}`` objects
- JSON Lines with one such object (or pair) per line

A missing or empty issuer marks the dependency as an entry point.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from fastdeps.errors import ConfigurationError

Edge = tuple[str, str]


def load_edges(path: str | Path) -> list[Edge]:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read edges file {p}: {exc}") from exc
    return list(parse_edges(text, source=str(p)))


def parse_edges(text: str, *, source: str = "<edges>") -> Iterator[Edge]:
    stripped = text.strip()
    if not stripped:
        return
    if stripped.startswith("["):
        try:
            items = json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"{source}: invalid JSON: {exc}") from exc
        for index, item in enumerate(items):
            yield _to_edge(item, f"{source}[{index}]")
        return
    for line_no, line in enumerate(stripped.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            item = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"{source}:{line_no}: invalid JSON: {exc}") from exc
        yield _to_edge(item, f"{source}:{line_no}")


def _to_edge(item: Any, where: str) -> Edge:
    if isinstance(item, dict):
        issuer = item.get("issuer") or ""
        dependency = item.get("path") or item.get("dependency")
    elif isinstance(item, (list, tuple)) and len(item) == 2:
        issuer, dependency = item[0] or "", item[1]
    else:
        raise ConfigurationError(f"{where}: expected [issuer, dependency] or an object, got {item!r}")
    if not isinstance(issuer, str) or not isinstance(dependency, str) or not dependency:
        raise ConfigurationError(f"{where}: issuer and dependency must be strings")
    return issuer, dependency
