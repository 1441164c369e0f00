"""Graph recording and querying."""

from fastdeps.graph.entries import EntryRegistry, entry_paths
from fastdeps.graph.paths import PathNormalizer
from fastdeps.graph.query import ENTRY_PATTERN, AncestorFinder
from fastdeps.graph.recorder import DependencyGraph, FinalizeResult

__all__ = [
    "ENTRY_PATTERN",
    "AncestorFinder",
    "DependencyGraph",
    "EntryRegistry",
    "FinalizeResult",
    "PathNormalizer",
    "entry_paths",
]
