"""Dependency graph recording.

Edges arrive as ``(issuer, dependency)`` pairs from an external discovery pass
and are stored in one of three shapes, fixed at construction:

``forward``
    flat table ``issuer -> [dependency, ...]``
``reverse``
    flat table ``dependency -> [issuer, ...]`` (the shape impact analysis walks)
``tree``
    nested dependency tree rooted at the entries (edges with an empty issuer)

The tree is kept as an arena: every node id maps to the ordered ids of its
children, so a module required from several places is stored once and every
parent sees the same children. Serialising it with :meth:`to_nested` builds
one mapping per node and reuses it for every parent; a cycle has no finite
nested form and raises :class:`CircularDependencyError`.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from fastdeps.errors import CircularDependencyError, GraphFinalizedError, GraphStateError
from fastdeps.graph.paths import PathNormalizer

logger = logging.getLogger(__name__)

NestedTree = dict[str, "NestedTree"]


@dataclass(slots=True)
class FinalizeResult:
    """Outcome of :meth:`DependencyGraph.finalize`."""

    success: bool
    mode: str
    nodes: int
    edges: int
    roots: int = 0
    cycle: list[str] = field(default_factory=list)
    error: str = ""


class DependencyGraph:
    """Edge recorder and read-only graph view.

    ``record`` may be called from several discovery threads; every mutation is
    serialised by an internal lock. After :meth:`finalize` the graph is
    immutable and may be queried concurrently.
    """

    def __init__(
        self,
        normalizer: PathNormalizer,
        *,
        tree: bool = False,
        reverse: bool = False,
    ) -> None:
        self._normalizer = normalizer
        self._tree = tree
        self._reverse = reverse and not tree
        self._lock = threading.Lock()
        self._finalized: FinalizeResult | None = None

        self._nodes: dict[str, None] = {}           # ordered node set
        self._adjacency: dict[str, list[str]] = {}  # flat modes
        self._edges: set[tuple[str, str]] = set()
        self._children: dict[str, list[str]] = {}   # tree arena
        self._roots: dict[str, None] = {}

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record(self, issuer: str | None, dependency: str | None) -> bool:
        """Record one edge. Returns ``True`` if the graph shape changed."""
        issuer_id = self._normalizer.normalize(issuer)
        dep_id = self._normalizer.normalize(dependency)

        with self._lock:
            if self._finalized is not None:
                raise GraphFinalizedError(issuer_id, dep_id)
            for node in (issuer_id, dep_id):
                if node:
                    self._nodes.setdefault(node, None)
            if not dep_id or issuer_id == dep_id:
                return False
            if self._tree:
                return self._record_tree(issuer_id, dep_id)
            return self._record_flat(issuer_id, dep_id)

    def _record_flat(self, issuer: str, dependency: str) -> bool:
        if not issuer:
            return False
        key, neighbor = (dependency, issuer) if self._reverse else (issuer, dependency)
        if (key, neighbor) in self._edges:
            return False
        self._edges.add((key, neighbor))
        self._adjacency.setdefault(key, []).append(neighbor)
        return True

    def _record_tree(self, issuer: str, dependency: str) -> bool:
        self._children.setdefault(dependency, [])
        if not issuer:
            if dependency in self._roots:
                return False
            self._roots[dependency] = None
            return True
        if (issuer, dependency) in self._edges:
            return False
        self._edges.add((issuer, dependency))
        self._children.setdefault(issuer, []).append(dependency)
        return True

    def finalize(self) -> FinalizeResult:
        """Freeze the graph. Idempotent; later calls return the first result."""
        with self._lock:
            if self._finalized is not None:
                return self._finalized
            result = FinalizeResult(
                success=True,
                mode=self.mode,
                nodes=len(self._nodes),
                edges=len(self._edges),
                roots=len(self._roots),
            )
            if self._tree:
                try:
                    self._build_nested()
                except CircularDependencyError as exc:
                    result.success = False
                    result.cycle = exc.cycle
                    result.error = str(exc)
            self._finalized = result
        if result.success:
            logger.debug(
                "Graph finalized: mode=%s nodes=%d edges=%d", result.mode, result.nodes, result.edges
            )
        else:
            logger.warning("Graph finalized with errors: %s", result.error)
        return result

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def mode(self) -> str:
        if self._tree:
            return "tree"
        return "reverse" if self._reverse else "forward"

    @property
    def normalizer(self) -> PathNormalizer:
        return self._normalizer

    @property
    def finalized(self) -> bool:
        return self._finalized is not None

    @property
    def nodes(self) -> list[str]:
        return list(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    @property
    def roots(self) -> list[str]:
        return list(self._roots)

    def __contains__(self, node: object) -> bool:
        return node in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def has_node(self, node: str) -> bool:
        """Membership for an already-canonical id."""
        return node in self._nodes

    def neighbors(self, node: str) -> list[str]:
        """Flat-table neighbours of a canonical id (parents in reverse mode)."""
        return list(self._adjacency.get(node, ()))

    def children(self, node: str) -> list[str]:
        """Tree-mode children of a canonical id."""
        return list(self._children.get(node, ()))

    def as_table(self) -> dict[str, list[str]]:
        """Copy of the flat adjacency table."""
        if self._tree:
            raise GraphStateError("Graph was built in tree mode; use to_nested()")
        return {key: list(values) for key, values in self._adjacency.items()}

    def to_nested(self) -> NestedTree:
        """Nested ``{root: {child: {...}}}`` mapping for tree mode.

        Shared sub-trees are the same mapping object under every parent.
        Raises :class:`CircularDependencyError` on a cycle reachable from a root.
        """
        if not self._tree:
            raise GraphStateError(f"Graph was built in {self.mode} mode; use as_table()")
        return self._build_nested()

    def to_output(self) -> dict[str, Any]:
        """The dependency table in whichever shape the mode produces."""
        return self.to_nested() if self._tree else self.as_table()

    def _build_nested(self) -> NestedTree:
        built: dict[str, NestedTree] = {}
        for root in self._roots:
            if root in built:
                continue
            path = [root]
            on_path = {root}
            stack = [(root, iter(self._children.get(root, ())))]
            while stack:
                node, pending = stack[-1]
                child = next(pending, None)
                if child is None:
                    stack.pop()
                    path.pop()
                    on_path.discard(node)
                    built[node] = {c: built[c] for c in self._children.get(node, ())}
                    continue
                if child in built:
                    continue
                if child in on_path:
                    raise CircularDependencyError(path[path.index(child):] + [child])
                path.append(child)
                on_path.add(child)
                stack.append((child, iter(self._children.get(child, ()))))
        return {root: built[root] for root in self._roots}
