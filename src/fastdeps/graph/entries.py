"""Entry (root artifact) registry."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from fastdeps.errors import ConfigurationError
from fastdeps.graph.paths import PathNormalizer


def entry_paths(raw: Any) -> list[str]:
    """Flatten a raw entry setting into a list of paths.

    Accepts a single path, a list of paths, or a mapping of entry name to a
    path (or list of paths).
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, Mapping):
        paths: list[str] = []
        for value in raw.values():
            paths.extend(entry_paths(value))
        return paths
    if isinstance(raw, (list, tuple)):
        paths = []
        for item in raw:
            if not isinstance(item, str):
                raise ConfigurationError(f"Entry paths must be strings, got {item!r}", key="entry")
            paths.append(item)
        return paths
    raise ConfigurationError(f"Unsupported entry setting: {raw!r}", key="entry")


class EntryRegistry:
    """Ordered, immutable set of canonical entry ids."""

    __slots__ = ("_ids",)

    def __init__(self, ids: list[str] | tuple[str, ...] = ()) -> None:
        self._ids: dict[str, None] = dict.fromkeys(i for i in ids if i)

    @classmethod
    def from_raw(cls, raw: Any, normalizer: PathNormalizer) -> EntryRegistry:
        return cls([normalizer.normalize(p) for p in entry_paths(raw)])

    def __contains__(self, node: object) -> bool:
        return node in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"EntryRegistry({list(self._ids)!r})"

    def as_list(self) -> list[str]:
        return list(self._ids)
