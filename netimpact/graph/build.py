"""Build visibility-filtered graph snapshots from a topology.

Nodes and edges are filtered together: an edge is kept only when both of its
endpoints are kept, so no path can ever pass through a hidden router.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional

import networkx as nx

from netimpact.graph.strict_multidigraph import StrictMultiDiGraph
from netimpact.logging import get_logger
from netimpact.model.topology import DirectedEdge, Node, Topology, TopologyChange

logger = get_logger(__name__)

VisibilityFilter = Callable[[str], bool]


def build_graph(
    topology: Topology,
    visible: Optional[VisibilityFilter] = None,
    change: TopologyChange = None,
) -> StrictMultiDiGraph:
    """Create a frozen StrictMultiDiGraph for the solver.

    Args:
        topology: Baseline snapshot. Not modified.
        visible: Optional predicate on node id; False hides the node. Applied
            on top of ``Node.is_visible``.
        change: Optional cost override, new link or edge-cost mapping applied
            to a copy of the topology before building.

    Returns:
        A frozen graph. Edge keys are edge ids, edge attributes are ``cost``
        and ``link_id``; node attributes are ``region`` and ``label``.
    """
    topology = topology.apply(change)

    graph = StrictMultiDiGraph()
    hidden = 0
    for node in topology.nodes:
        if not node.is_visible or (visible is not None and not visible(node.id)):
            hidden += 1
            continue
        graph.add_node(node.id, region=node.region, label=node.label)

    dropped = 0
    for edge in topology.edges:
        if edge.source not in graph or edge.target not in graph:
            dropped += 1
            continue
        graph.add_edge(
            edge.source,
            edge.target,
            key=edge.id,
            cost=edge.cost,
            link_id=edge.link_id,
        )

    logger.debug(
        f"Built graph: {graph.number_of_nodes()} nodes ({hidden} hidden), "
        f"{graph.number_of_edges()} edges ({dropped} dropped)"
    )
    return nx.freeze(graph)


def graph_from_records(
    nodes: Iterable[Node],
    edges: Iterable[DirectedEdge],
    visible: Optional[VisibilityFilter] = None,
) -> StrictMultiDiGraph:
    """Shortcut for ``build_graph(Topology(nodes, edges), visible)``."""
    return build_graph(Topology.from_records(nodes, edges), visible)
