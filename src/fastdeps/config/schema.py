"""Configuration schema for fastdeps."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, TypeAlias

# A path written as JSON, or a handler receiving the payload. None disables the output.
OutputTarget: TypeAlias = str | Callable[[Any], None] | None
RawEntry: TypeAlias = str | tuple[str, ...] | Mapping[str, Any] | None

DEFAULT_TARGET_FILES = ("entry",)
DEFAULT_IGNORE = ("node_modules",)


class RangeOrder(StrEnum):
    """How a two-commit range is split into (base, head)."""

    OLDEST_FIRST = "oldest-first"   # [c1, c2] -> base=c1, head=c2
    NEWEST_FIRST = "newest-first"   # [c1, c2] -> base=c2, head=c1


@dataclass(slots=True, frozen=True)
class GitInfoConfig:
    enable: bool = False
    commit_range: tuple[str, ...] = ()
    target_files: tuple[str, ...] = DEFAULT_TARGET_FILES
    range_order: RangeOrder = RangeOrder.OLDEST_FIRST


@dataclass(slots=True, frozen=True)
class OutputConfig:
    dependencies: OutputTarget = "./fastdeps-dependencies.json"
    analyze_git_result: OutputTarget = "./fastdeps-git-result.json"


@dataclass(slots=True, frozen=True)
class AnalyzerConfig:
    context: str = "."
    entry: RawEntry = None
    tree: bool = False          # nested dependency tree instead of a flat table
    reverse: bool = False       # key the flat table by dependency (ignored when tree=True)
    relative_path: bool = True
    ignore: tuple[str, ...] = DEFAULT_IGNORE
    analyze_git_info: GitInfoConfig = field(default_factory=GitInfoConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @property
    def mode(self) -> str:
        if self.tree:
            return "tree"
        return "reverse" if self.reverse else "forward"
