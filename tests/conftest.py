"""Global test fixtures for fastdeps."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import pytest

from fastdeps.graph.entries import EntryRegistry
from fastdeps.graph.paths import PathNormalizer
from fastdeps.graph.query import AncestorFinder
from fastdeps.graph.recorder import DependencyGraph

GraphFactory = Callable[..., tuple[DependencyGraph, AncestorFinder]]


@pytest.fixture
def normalizer() -> PathNormalizer:
    """Absolute ids rooted at /p, so test paths read like real files."""
    return PathNormalizer("/p", relative=False)


@pytest.fixture
def reverse_graph(normalizer: PathNormalizer) -> GraphFactory:
    """Build a finalized reverse graph and a finder over it."""

    def _build(
        edges: Iterable[tuple[str, str]],
        entries: Iterable[str] = (),
    ) -> tuple[DependencyGraph, AncestorFinder]:
        graph = DependencyGraph(normalizer, reverse=True)
        for issuer, dependency in edges:
            graph.record(issuer, dependency)
        graph.finalize()
        registry = EntryRegistry([normalizer.normalize(e) for e in entries])
        return graph, AncestorFinder(graph, registry)

    return _build
