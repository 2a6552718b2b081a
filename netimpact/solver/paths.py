"""Shortest-path solver returning complete ECMP results.

Functions here never raise for missing or hidden endpoints: an unknown source
or destination, like an unreachable one, yields ``None``.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from netimpact.algorithms.path_utils import (
    canonical_path,
    count_paths,
    ecmp_subgraph,
    wavefront_steps,
)
from netimpact.algorithms.spf import PredMap, spf
from netimpact.graph.build import VisibilityFilter, graph_from_records
from netimpact.graph.strict_multidigraph import StrictMultiDiGraph
from netimpact.logging import get_logger
from netimpact.model.topology import DirectedEdge, Node
from netimpact.types.base import Cost, NodeID
from netimpact.types.dto import PathResult

logger = get_logger(__name__)


def _trivial_result(node: NodeID) -> PathResult:
    return PathResult(
        cost=0,
        canonical_path=(node,),
        involved_edge_ids=frozenset(),
        involved_node_ids=frozenset({node}),
        is_ecmp=False,
        wavefront_steps=((node,),),
        path_count=1,
    )


def _build_result(
    graph: StrictMultiDiGraph,
    src: NodeID,
    dst: NodeID,
    costs: Dict[NodeID, Cost],
    pred: PredMap,
) -> Optional[PathResult]:
    if dst not in costs:
        return None

    edge_ids, node_ids = ecmp_subgraph(src, dst, pred)
    paths = count_paths(src, dst, pred)
    return PathResult(
        cost=costs[dst],
        canonical_path=tuple(canonical_path(src, dst, pred)),
        involved_edge_ids=frozenset(edge_ids),
        involved_node_ids=frozenset(node_ids),
        is_ecmp=paths > 1,
        wavefront_steps=tuple(wavefront_steps(graph, src, edge_ids, node_ids)),
        path_count=paths,
    )


def shortest_path(
    graph: StrictMultiDiGraph, src: NodeID, dst: NodeID
) -> Optional[PathResult]:
    """Return every minimum-cost path from ``src`` to ``dst``.

    Args:
        graph: Graph snapshot (see :func:`netimpact.graph.build_graph`).
        src: Source node id.
        dst: Destination node id.

    Returns:
        PathResult, or None when either endpoint is absent from the graph or
        ``dst`` is unreachable.
    """
    if src not in graph or dst not in graph:
        logger.debug(f"Endpoint missing from graph: {src} -> {dst}")
        return None
    if src == dst:
        return _trivial_result(src)

    costs, pred = spf(graph, src, dst)
    return _build_result(graph, src, dst, costs, pred)


def shortest_paths_from(
    graph: StrictMultiDiGraph,
    src: NodeID,
    destinations: Optional[Iterable[NodeID]] = None,
) -> Dict[NodeID, Optional[PathResult]]:
    """Solve ``src`` to many destinations with a single SPF run.

    Results are identical to calling :func:`shortest_path` per destination.

    Args:
        graph: Graph snapshot.
        src: Source node id.
        destinations: Destination ids; defaults to every graph node other than
            ``src``.

    Returns:
        Mapping of destination -> PathResult or None (unreachable or unknown).
    """
    if destinations is None:
        destinations = [n for n in graph.nodes if n != src]

    if src not in graph:
        return {dst: None for dst in destinations}

    costs, pred = spf(graph, src)
    results: Dict[NodeID, Optional[PathResult]] = {}
    for dst in destinations:
        if dst == src:
            results[dst] = _trivial_result(src)
        elif dst not in graph:
            results[dst] = None
        else:
            results[dst] = _build_result(graph, src, dst, costs, pred)
    return results


def find_path(
    src: NodeID,
    dest: NodeID,
    nodes: Iterable[Node],
    edges: Iterable[DirectedEdge],
    visible: Optional[VisibilityFilter] = None,
) -> Optional[PathResult]:
    """Compute the ECMP shortest-path result for one flow from raw records.

    Hidden nodes (``Node.is_visible`` False or rejected by ``visible``) and every
    edge touching them are excluded before solving.

    Args:
        src: Source router id.
        dest: Destination router id.
        nodes: Router records.
        edges: Directed edge records.
        visible: Optional additional visibility predicate on node id.

    Returns:
        PathResult, or None when no path exists or an endpoint is unknown or
        hidden.
    """
    graph = graph_from_records(nodes, edges, visible)
    return shortest_path(graph, src, dest)
