"""Strict multi-directed graph used as the solver's adjacency structure."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

import networkx as nx

from netimpact.types.base import EdgeID, NodeID

AttrDict = Dict[str, Any]
EdgeTuple = Tuple[NodeID, NodeID, EdgeID, AttrDict]


class StrictMultiDiGraph(nx.MultiDiGraph):
    """A multi-directed graph with strict rules and caller-supplied edge ids.

    Differences from ``nx.MultiDiGraph``: adding an edge never creates its
    endpoints, a node cannot be added twice, and every edge needs a unique
    caller-supplied key (the directed edge id). Violations raise ValueError.

    Outgoing adjacency (``graph._adj[u][v][edge_id] -> attrs``) keeps insertion
    order, which the solver relies on for deterministic tie-breaking.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._edge_index: Dict[EdgeID, EdgeTuple] = {}

    def add_node(self, n: NodeID, **attr: Any) -> None:
        """Add a single node, disallowing duplicates.

        Raises:
            ValueError: If the node already exists in the graph.
        """
        if n in self:
            raise ValueError(f"Node '{n}' already exists in this graph.")
        super().add_node(n, **attr)

    def add_edge(
        self,
        u: NodeID,
        v: NodeID,
        key: EdgeID = None,
        **attr: Any,
    ) -> EdgeID:
        """Add a directed edge between two existing nodes.

        Args:
            u: Source node. Must exist in the graph.
            v: Target node. Must exist in the graph.
            key: Unique edge id. Required.
            **attr: Edge attributes (``cost``, ``link_id``).

        Returns:
            The edge id.

        Raises:
            ValueError: If a node is missing, the key is missing, or the key
                is already in use.
        """
        if u not in self:
            raise ValueError(f"Source node '{u}' is not in the graph.")
        if v not in self:
            raise ValueError(f"Target node '{v}' is not in the graph.")
        if key is None:
            raise ValueError(f"Edge {u}->{v} has no id.")
        if key in self._edge_index:
            raise ValueError(f"Edge with id '{key}' already exists.")

        super().add_edge(u, v, key=key, **attr)
        self._edge_index[key] = (u, v, key, self._adj[u][v][key])
        return key

    def get_edge(self, key: EdgeID) -> EdgeTuple:
        """Return ``(source, target, key, attrs)`` for an edge id.

        Raises:
            KeyError: If no edge with this id exists.
        """
        return self._edge_index[key]

    def has_edge_id(self, key: EdgeID) -> bool:
        return key in self._edge_index

    def edge_ids(self) -> List[EdgeID]:
        """Edge ids in insertion order."""
        return list(self._edge_index)

    def edges_between(self, u: NodeID, v: NodeID) -> List[EdgeID]:
        """Edge ids from u to v, or an empty list."""
        if u not in self._succ or v not in self._succ[u]:
            return []
        return list(self._succ[u][v])
