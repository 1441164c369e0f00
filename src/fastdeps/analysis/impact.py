"""Change-impact analysis: which top-level artifacts does a change touch?"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from fastdeps.graph.query import AncestorFinder

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FileImpact:
    """Impact of a single changed file."""

    filename: str
    pattern: str | None = None          # first pattern that matched; None if none did
    impacted: list[str] = field(default_factory=list)


class ImpactAnalyzer:
    """Runs ancestor searches for every changed file.

    Patterns are tried in the given order and the first one with a non-empty
    result wins for that file. Callers put the most specific pattern first.
    """

    def __init__(self, finder: AncestorFinder) -> None:
        self._finder = finder

    def analyze(self, change_set: Iterable[str], patterns: Sequence[str]) -> list[str]:
        """De-duplicated impacted ids in first-seen order."""
        return merge_impacts(self.analyze_detailed(change_set, patterns))

    def analyze_detailed(self, change_set: Iterable[str], patterns: Sequence[str]) -> list[FileImpact]:
        impacts: list[FileImpact] = []
        for filename in change_set:
            impact = FileImpact(filename=filename)
            for pattern in patterns:
                found = self._finder.find(pattern, filename)
                if found:
                    impact.pattern = pattern
                    impact.impacted = found
                    break
            if impact.pattern is None:
                logger.debug("No impacted target for %s", filename)
            impacts.append(impact)
        return impacts


def merge_impacts(impacts: Iterable[FileImpact]) -> list[str]:
    merged: dict[str, None] = {}
    for impact in impacts:
        for node in impact.impacted:
            if node:
                merged.setdefault(node, None)
    return list(merged)
