"""Router topology records and immutable change application.

A :class:`Topology` is a frozen snapshot of routers (:class:`Node`) and directed,
cost-weighted edges (:class:`DirectedEdge`). A physical link is two directed
edges sharing a ``logical_id``; their costs are independent.

Proposed changes (:class:`CostOverride`, :class:`NewLink`, or a mapping of edge
id to cost) are applied with :meth:`Topology.apply`, which returns a new
snapshot and never touches the original.
"""

from __future__ import annotations

import base64
import math
import uuid
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from netimpact.logging import get_logger
from netimpact.types.base import Cost

logger = get_logger(__name__)


def _require_id(value: object, what: str) -> None:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{what} must be a non-empty string, got {value!r}.")


def _require_cost(value: object, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{what} must be a number, got {value!r}.")
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"{what} must be finite, got {value!r}.")
    if value < 0:
        raise ValueError(f"{what} must be non-negative, got {value!r}.")


@dataclass(frozen=True)
class Node:
    """A router.

    Attributes:
        id: Unique router identifier.
        is_visible: False when an external filter (e.g. a hidden region) removes
            the router from analysis.
        region: Grouping attribute used by aggregation (country, site, ...).
        label: Display name.
    """

    id: str
    is_visible: bool = True
    region: Optional[str] = None
    label: Optional[str] = None

    def __post_init__(self) -> None:
        _require_id(self.id, "Node id")


@dataclass(frozen=True)
class DirectedEdge:
    """One direction of a link, with its own OSPF cost.

    Attributes:
        id: Unique edge identifier.
        source: Router the edge leaves.
        target: Router the edge enters.
        cost: Non-negative cost.
        logical_id: Identifier shared by the forward and reverse edges of one
            physical link. Defaults to the edge id.
    """

    id: str
    source: str
    target: str
    cost: Cost
    logical_id: Optional[str] = None

    def __post_init__(self) -> None:
        _require_id(self.id, "Edge id")
        _require_id(self.source, f"Source of edge '{self.id}'")
        _require_id(self.target, f"Target of edge '{self.id}'")
        _require_cost(self.cost, f"Cost of edge '{self.id}'")

    @property
    def link_id(self) -> str:
        """Logical link this edge belongs to."""
        return self.logical_id if self.logical_id is not None else self.id


@dataclass(frozen=True)
class CostOverride:
    """Proposed cost change on one logical link.

    The forward direction is the (source, target) of the first edge listed for
    the link in the topology; reverse edges run the other way. A cost left as
    None keeps that direction unchanged.
    """

    logical_id: str
    forward_cost: Optional[Cost] = None
    reverse_cost: Optional[Cost] = None

    def __post_init__(self) -> None:
        if self.forward_cost is None and self.reverse_cost is None:
            raise ValueError(
                f"Cost override for link '{self.logical_id}' sets no cost."
            )
        if self.forward_cost is not None:
            _require_cost(self.forward_cost, "Forward cost")
        if self.reverse_cost is not None:
            _require_cost(self.reverse_cost, "Reverse cost")


@dataclass(frozen=True)
class NewLink:
    """A candidate link to insert as a forward/reverse edge pair."""

    source: str
    target: str
    forward_cost: Cost
    reverse_cost: Cost
    link_id: str = ""

    def __post_init__(self) -> None:
        _require_id(self.source, "New link source")
        _require_id(self.target, "New link target")
        _require_cost(self.forward_cost, "Forward cost")
        _require_cost(self.reverse_cost, "Reverse cost")
        if not self.link_id:
            token = base64.urlsafe_b64encode(uuid.uuid4().bytes)[:-2].decode("ascii")
            object.__setattr__(
                self, "link_id", f"{self.source}|{self.target}|{token}"
            )

    def edges(self) -> Tuple[DirectedEdge, DirectedEdge]:
        """Return the (forward, reverse) edges of this link."""
        return (
            DirectedEdge(
                id=f"{self.link_id}_f",
                source=self.source,
                target=self.target,
                cost=self.forward_cost,
                logical_id=self.link_id,
            ),
            DirectedEdge(
                id=f"{self.link_id}_r",
                source=self.target,
                target=self.source,
                cost=self.reverse_cost,
                logical_id=self.link_id,
            ),
        )


TopologyChange = Union[CostOverride, NewLink, Mapping[str, Cost], None]


@dataclass(frozen=True)
class Topology:
    """Immutable (nodes, edges) snapshot.

    Raises:
        ValueError: On duplicate node ids or duplicate edge ids.
    """

    nodes: Tuple[Node, ...] = ()
    edges: Tuple[DirectedEdge, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "edges", tuple(self.edges))

        seen_nodes = set()
        for node in self.nodes:
            if node.id in seen_nodes:
                raise ValueError(f"Node '{node.id}' is defined more than once.")
            seen_nodes.add(node.id)

        seen_edges: Dict[str, DirectedEdge] = {}
        for edge in self.edges:
            other = seen_edges.get(edge.id)
            if other is not None:
                if (other.source, other.target) != (edge.source, edge.target):
                    raise ValueError(
                        f"Edge id '{edge.id}' is used for {other.source}->{other.target} "
                        f"and {edge.source}->{edge.target}."
                    )
                raise ValueError(f"Edge '{edge.id}' is defined more than once.")
            seen_edges[edge.id] = edge

    @classmethod
    def from_records(
        cls, nodes: Iterable[Node], edges: Iterable[DirectedEdge]
    ) -> Topology:
        return cls(nodes=tuple(nodes), edges=tuple(edges))

    #
    # Read helpers
    #
    @property
    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    @property
    def edge_ids(self) -> List[str]:
        return [e.id for e in self.edges]

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def links(self) -> Dict[str, List[DirectedEdge]]:
        """Group edges by logical link, preserving edge order."""
        grouped: Dict[str, List[DirectedEdge]] = {}
        for edge in self.edges:
            grouped.setdefault(edge.link_id, []).append(edge)
        return grouped

    def regions(self) -> Dict[str, Optional[str]]:
        """Map node id to region."""
        return {n.id: n.region for n in self.nodes}

    #
    # Change application
    #
    def apply(self, change: TopologyChange) -> Topology:
        """Return the snapshot produced by ``change``.

        Args:
            change: A CostOverride, a NewLink, a mapping of edge id to new cost,
                or None (returns this snapshot).

        Raises:
            TypeError: If the change type is not supported.
        """
        if change is None:
            return self
        if isinstance(change, CostOverride):
            return self.with_cost_override(change)
        if isinstance(change, NewLink):
            return self.with_new_link(change)
        if isinstance(change, Mapping):
            return self.with_edge_costs(change)
        raise TypeError(f"Unsupported topology change: {type(change).__name__}")

    def with_cost_override(self, override: CostOverride) -> Topology:
        """Replace forward and/or reverse costs of one logical link.

        Raises:
            ValueError: If no edge belongs to ``override.logical_id``.
        """
        members = self.links().get(override.logical_id)
        if not members:
            raise ValueError(f"Link '{override.logical_id}' not found in topology.")

        forward = (members[0].source, members[0].target)
        new_edges = []
        for edge in self.edges:
            if edge.link_id == override.logical_id:
                endpoints = (edge.source, edge.target)
                if endpoints == forward and override.forward_cost is not None:
                    edge = replace(edge, cost=override.forward_cost)
                elif endpoints != forward and override.reverse_cost is not None:
                    edge = replace(edge, cost=override.reverse_cost)
            new_edges.append(edge)

        logger.debug(
            f"Cost override on link {override.logical_id}: "
            f"forward={override.forward_cost} reverse={override.reverse_cost}"
        )
        return Topology(nodes=self.nodes, edges=tuple(new_edges))

    def with_new_link(self, link: NewLink) -> Topology:
        """Insert a candidate forward/reverse edge pair.

        Raises:
            ValueError: If an endpoint is unknown or the link id is taken.
        """
        known = set(self.node_ids)
        for endpoint in (link.source, link.target):
            if endpoint not in known:
                raise ValueError(f"Node '{endpoint}' not found in topology.")
        if link.link_id in self.links():
            raise ValueError(f"Link '{link.link_id}' already exists in topology.")

        logger.debug(
            f"New link {link.link_id}: {link.source}->{link.target} ({link.forward_cost}) "
            f"/ {link.target}->{link.source} ({link.reverse_cost})"
        )
        return Topology(nodes=self.nodes, edges=self.edges + link.edges())

    def with_edge_costs(self, costs: Mapping[str, Cost]) -> Topology:
        """Set individual directed edge costs.

        Raises:
            ValueError: If a referenced edge does not exist.
        """
        missing = set(costs) - set(self.edge_ids)
        if missing:
            raise ValueError(f"Edges not found in topology: {sorted(missing)}")
        new_edges = tuple(
            replace(e, cost=costs[e.id]) if e.id in costs else e for e in self.edges
        )
        return Topology(nodes=self.nodes, edges=new_edges)
