"""Edge sources."""

from fastdeps.discovery.edges_file import Edge, load_edges, parse_edges

__all__ = ["Edge", "load_edges", "parse_edges"]
