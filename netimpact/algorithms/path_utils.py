"""Helpers that turn an SPF predecessor map into path views.

All helpers walk only the predecessor map produced by
:func:`netimpact.algorithms.spf.spf`; ``wavefront_steps`` additionally reads
the graph's outgoing adjacency to keep the solver's edge order.
"""

from __future__ import annotations

from collections import deque
from itertools import product
from typing import Dict, Iterator, List, Set, Tuple

from netimpact.algorithms.spf import PredMap
from netimpact.graph.strict_multidigraph import StrictMultiDiGraph
from netimpact.types.base import EdgeID, NodeID

#: A path element: a node and the parallel edge ids leading to the next node.
#: The final element carries an empty tuple.
PathElement = Tuple[NodeID, Tuple[EdgeID, ...]]
PathTuple = Tuple[PathElement, ...]


def _has_pred_loop(dst_node: NodeID, pred: PredMap) -> bool:
    """Return True if the predecessor sets behind ``dst_node`` contain a cycle.

    Cycles appear only where equal-cost routers are joined by zero-cost edges.
    """
    done: Set[NodeID] = set()
    on_path = {dst_node}
    stack = [(dst_node, iter(pred.get(dst_node, {})))]

    while stack:
        node, parents = stack[-1]
        for prev in parents:
            if prev in on_path:
                return True
            if prev not in done:
                on_path.add(prev)
                stack.append((prev, iter(pred.get(prev, {}))))
                break
        else:
            stack.pop()
            on_path.discard(node)
            done.add(node)

    return False


def ecmp_subgraph(
    src_node: NodeID, dst_node: NodeID, pred: PredMap
) -> Tuple[Set[EdgeID], Set[NodeID]]:
    """Collect every edge and node lying on any shortest path into ``dst_node``.

    Walks the predecessor sets backwards from ``dst_node`` breadth-first. When
    the walk meets a zero-cost loop, a dead-end router inside the loop would be
    collected too, so the sets are taken from the loop-free paths instead.

    Returns:
        (edge ids, node ids). Empty edges and ``{dst_node}`` when the node has
        no predecessors.
    """
    edge_ids: Set[EdgeID] = set()
    node_ids: Set[NodeID] = {dst_node}

    if _has_pred_loop(dst_node, pred):
        for path in resolve_to_paths(src_node, dst_node, pred):
            for node, edges in path:
                node_ids.add(node)
                edge_ids.update(edges)
        return edge_ids, node_ids

    queue = deque([dst_node])

    while queue:
        current = queue.popleft()
        for prev, edge_list in pred.get(current, {}).items():
            edge_ids.update(edge_list)
            if prev not in node_ids:
                node_ids.add(prev)
                queue.append(prev)

    return edge_ids, node_ids


def canonical_path(src_node: NodeID, dst_node: NodeID, pred: PredMap) -> List[NodeID]:
    """Follow the first-discovered predecessor from ``dst_node`` back to ``src_node``.

    The first predecessor of a node was settled before the node itself, so the
    walk cannot loop.
    """
    path = [dst_node]
    current = dst_node
    while current != src_node:
        parents = pred.get(current)
        if not parents:
            break
        current = next(iter(parents))
        path.append(current)
    path.reverse()
    return path


def wavefront_steps(
    graph: StrictMultiDiGraph,
    src_node: NodeID,
    edge_ids: Set[EdgeID],
    node_ids: Set[NodeID],
) -> List[Tuple[NodeID, ...]]:
    """Breadth-first layers of the ECMP subgraph starting at ``src_node``.

    Step k holds the subgraph nodes first reached over k subgraph edges. Within
    a step, nodes appear in the order the previous step's adjacency lists
    reach them.
    """
    steps: List[Tuple[NodeID, ...]] = []
    seen = {src_node}
    layer = [src_node]
    adjacency = graph._adj

    while layer:
        steps.append(tuple(layer))
        next_layer: List[NodeID] = []
        for node in layer:
            for neighbor, edges_map in adjacency[node].items():
                if neighbor in seen or neighbor not in node_ids:
                    continue
                if any(e_id in edge_ids for e_id in edges_map):
                    seen.add(neighbor)
                    next_layer.append(neighbor)
        layer = next_layer

    return steps


def count_paths(src_node: NodeID, dst_node: NodeID, pred: PredMap) -> int:
    """Count distinct edge-level paths from ``src_node`` to ``dst_node``.

    Parallel edges between the same two nodes count as separate paths.
    Only loop-free paths count. Loops are possible only over zero-cost edges;
    when one is met the paths are enumerated instead. Returns 0 when
    ``dst_node`` was not reached.
    """
    if dst_node not in pred:
        return 0

    counts: Dict[NodeID, int] = {src_node: 1}
    if dst_node in counts:
        return 1

    on_path = {dst_node}
    stack = [(dst_node, iter(pred[dst_node]))]
    looped = False

    while stack:
        node, parents = stack[-1]
        descended = False
        for prev in parents:
            if prev in on_path:
                looped = True
                continue
            if prev in counts:
                continue
            on_path.add(prev)
            stack.append((prev, iter(pred.get(prev, {}))))
            descended = True
            break
        if descended:
            continue

        stack.pop()
        on_path.discard(node)
        counts[node] = sum(
            len(edge_list) * counts.get(prev, 0)
            for prev, edge_list in pred.get(node, {}).items()
            if prev not in on_path
        )

    if looped:
        # Memoized counts depend on visit order once a loop was cut
        return sum(
            1
            for _ in resolve_to_paths(
                src_node, dst_node, pred, split_parallel_edges=True
            )
        )
    return counts[dst_node]


def resolve_to_paths(
    src_node: NodeID,
    dst_node: NodeID,
    pred: PredMap,
    split_parallel_edges: bool = False,
) -> Iterator[PathTuple]:
    """
    Enumerate every source->destination path encoded in a predecessor map.

    Args:
        src_node: Source node ID.
        dst_node: Destination node ID.
        pred: Predecessor map from SPF.
        split_parallel_edges: If True, yield one path per choice of parallel
            edge on every hop.

    Yields:
        Tuples of (node, (edge ids,)) from src_node to dst_node.
    """
    if dst_node not in pred:
        return
    if src_node == dst_node:
        yield ((src_node, ()),)
        return

    # trail[i] = (node, edges from node towards dst); trail[0] is dst
    trail: List[PathElement] = [(dst_node, ())]
    branches = [iter(pred[dst_node].items())]
    on_path = {dst_node}

    while branches:
        step = next(branches[-1], None)
        if step is None:
            branches.pop()
            node, _ = trail.pop()
            on_path.discard(node)
            continue

        prev, edge_list = step
        if prev in on_path:
            continue

        if prev == src_node:
            path = ((src_node, tuple(edge_list)),) + tuple(reversed(trail))
            if not split_parallel_edges:
                yield path
                continue
            choices = [seg[1] for seg in path[:-1]]
            for combo in product(*choices):
                yield tuple(
                    (seg[0], (combo[i],)) for i, seg in enumerate(path[:-1])
                ) + ((dst_node, ()),)
            continue

        on_path.add(prev)
        trail.append((prev, tuple(edge_list)))
        branches.append(iter(pred.get(prev, {}).items()))
