"""Upward (ancestor) search over the reverse dependency table."""

from __future__ import annotations

import pathspec

from fastdeps.errors import GraphStateError, QueryModeError
from fastdeps.graph.entries import EntryRegistry
from fastdeps.graph.recorder import DependencyGraph

ENTRY_PATTERN = "entry"


class AncestorFinder:
    """Finds the closest ancestors of a node that match a target pattern.

    A branch stops at its first matching node; the node's own dependents are
    not explored. Other branches keep walking until they match or run out of
    dependents. Every node is visited at most once per query, so cycles
    terminate.

    Target patterns are gitignore-style path globs: `*` stays within one path
    segment and `**/` also matches zero directories.
    """

    def __init__(self, graph: DependencyGraph, entries: EntryRegistry) -> None:
        self._graph = graph
        self._entries = entries
        self._specs: dict[str, pathspec.PathSpec] = {}

    def matches(self, pattern: str, node: str) -> bool:
        if pattern == ENTRY_PATTERN:
            return node in self._entries
        spec = self._specs.get(pattern)
        if spec is None:
            spec = pathspec.PathSpec.from_lines("gitwildmatch", [pattern])
            self._specs[pattern] = spec
        # Leading "/" only anchors the pattern; node ids are matched the same way.
        return spec.match_file(node.lstrip("/"))

    def find(
        self,
        pattern: str,
        start: str,
        visited: set[str] | None = None,
        results: list[str] | None = None,
    ) -> list[str]:
        """Return matching ancestors of *start* in discovery order.

        *visited* and *results* may be passed in to share state across calls;
        *results* is appended to and returned.
        """
        if not self._graph.finalized:
            raise GraphStateError("Graph must be finalized before running queries")
        if self._graph.mode != "reverse":
            raise QueryModeError(self._graph.mode)

        visited = set() if visited is None else visited
        results = [] if results is None else results

        # Explicit stack in the same pre-order as the recursive walk.
        stack = [self._graph.normalizer.normalize(start)]
        while stack:
            node = stack.pop()
            if not self._graph.has_node(node) or node in visited:
                continue
            visited.add(node)
            if self.matches(pattern, node):
                results.append(node)
                continue
            stack.extend(reversed(self._graph.neighbors(node)))
        return results
