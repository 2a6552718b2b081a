"""Graph snapshots consumed by the shortest-path solver."""

from netimpact.graph.build import VisibilityFilter, build_graph, graph_from_records
from netimpact.graph.strict_multidigraph import StrictMultiDiGraph

__all__ = [
    "StrictMultiDiGraph",
    "VisibilityFilter",
    "build_graph",
    "graph_from_records",
]
