from __future__ import annotations

from heapq import heappop, heappush
from typing import Dict, List, Optional, Tuple

from netimpact.graph.strict_multidigraph import StrictMultiDiGraph
from netimpact.types.base import Cost, EdgeID, NodeID

#: Predecessor map: node -> {predecessor -> [edge ids from predecessor to node]}.
PredMap = Dict[NodeID, Dict[NodeID, List[EdgeID]]]


def spf(
    graph: StrictMultiDiGraph,
    src_node: NodeID,
    dst_node: Optional[NodeID] = None,
) -> Tuple[Dict[NodeID, Cost], PredMap]:
    """
    Dijkstra's SPF that keeps every equal-cost predecessor.

    For each neighbor, all parallel edges sharing the minimum cost are selected.
    A strictly cheaper route to a node replaces its predecessor set; an equally
    cheap route adds the new predecessor to it. Predecessors are kept in
    discovery order, so the first entry of ``pred[node]`` is the predecessor
    that first reached the node at its final cost.

    Edge costs must be non-negative.

    Args:
        graph: Directed graph with a ``cost`` attribute on every edge.
        src_node: Source node.
        dst_node: Optional destination. When given, the search stops as soon as
            every node that could still offer an equal-cost predecessor to
            ``dst_node`` has been settled.

    Returns:
        A tuple of (costs, pred):
          - costs: Maps each reached node to its minimal cost from src_node.
          - pred: For each reached node, a dict of predecessor -> list of edges
            from that predecessor. ``pred[src_node]`` is always empty.

    Raises:
        KeyError: If src_node does not exist in graph.
    """
    outgoing_adjacencies = graph._adj
    if src_node not in outgoing_adjacencies:
        raise KeyError(f"Source node '{src_node}' is not in the graph.")

    costs: Dict[NodeID, Cost] = {src_node: 0}
    pred: PredMap = {src_node: {}}
    # (cost, discovery sequence, node): ties pop in discovery order
    min_pq: List[Tuple[Cost, int, NodeID]] = [(0, 0, src_node)]
    sequence = 1
    dst_cost: Optional[Cost] = None

    while min_pq:
        current_cost, _, node_id = heappop(min_pq)
        if current_cost > costs[node_id]:
            continue

        if dst_node is not None:
            if dst_cost is not None and current_cost > dst_cost:
                break
            if node_id == dst_node:
                dst_cost = current_cost

        for neighbor_id, edges_map in outgoing_adjacencies[node_id].items():
            # Routes back into the source are never part of a shortest path
            if neighbor_id == src_node:
                continue

            min_edge_cost: Optional[Cost] = None
            selected_edges: List[EdgeID] = []
            for e_id, e_attr in edges_map.items():
                edge_cost = e_attr["cost"]
                if min_edge_cost is None or edge_cost < min_edge_cost:
                    min_edge_cost = edge_cost
                    selected_edges = [e_id]
                elif edge_cost == min_edge_cost:
                    selected_edges.append(e_id)

            if min_edge_cost is None:
                continue

            new_cost = current_cost + min_edge_cost
            if (neighbor_id not in costs) or (new_cost < costs[neighbor_id]):
                costs[neighbor_id] = new_cost
                pred[neighbor_id] = {node_id: selected_edges}
                heappush(min_pq, (new_cost, sequence, neighbor_id))
                sequence += 1
            elif new_cost == costs[neighbor_id]:
                pred[neighbor_id][node_id] = selected_edges

    return costs, pred
