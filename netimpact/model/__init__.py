"""Topology model package.

Routers, directed edges, immutable snapshots, and the change records that
derive a modified snapshot from a baseline.
"""

from netimpact.model.topology import (
    CostOverride,
    DirectedEdge,
    NewLink,
    Node,
    Topology,
    TopologyChange,
)

__all__ = [
    "Node",
    "DirectedEdge",
    "Topology",
    "CostOverride",
    "NewLink",
    "TopologyChange",
]
