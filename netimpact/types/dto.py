"""Immutable result containers returned by the solver and the impact analyzer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional, Tuple

from netimpact.types.base import Cost, ImpactClass


@dataclass(frozen=True)
class PathResult:
    """All minimum-cost paths between one ordered pair of nodes.

    Attributes:
        cost: Minimum total cost from source to destination.
        canonical_path: One representative path (first-discovered predecessor
            at every hop). Display only; when ``is_ecmp`` is True it is not
            "the" path.
        involved_edge_ids: Union of edges over every minimum-cost path.
        involved_node_ids: Union of nodes over every minimum-cost path.
        is_ecmp: True iff more than one minimum-cost path exists.
        wavefront_steps: Breadth-first layers of the ECMP subgraph from the
            source; step k holds the nodes first reached after k hops.
        path_count: Number of distinct edge-level minimum-cost paths.
    """

    cost: Cost
    canonical_path: Tuple[str, ...]
    involved_edge_ids: FrozenSet[str]
    involved_node_ids: FrozenSet[str]
    is_ecmp: bool
    wavefront_steps: Tuple[Tuple[str, ...], ...]
    path_count: int = 1

    @property
    def hops(self) -> int:
        """Hop count of the canonical path."""
        return len(self.canonical_path) - 1

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly representation with sorted id lists."""
        return {
            "cost": self.cost,
            "canonical_path": list(self.canonical_path),
            "involved_edge_ids": sorted(self.involved_edge_ids),
            "involved_node_ids": sorted(self.involved_node_ids),
            "is_ecmp": self.is_ecmp,
            "wavefront_steps": [list(step) for step in self.wavefront_steps],
            "path_count": self.path_count,
        }


@dataclass(frozen=True)
class ImpactRecord:
    """Baseline vs modified outcome for one ordered (src, dest) pair.

    Costs, hops and paths of an unreachable side are None / empty.
    """

    src: str
    dest: str
    baseline_cost: Optional[Cost]
    modified_cost: Optional[Cost]
    baseline_hops: Optional[int]
    modified_hops: Optional[int]
    classification: ImpactClass
    baseline_path: Tuple[str, ...] = ()
    modified_path: Tuple[str, ...] = ()
    was_ecmp: bool = False
    is_ecmp: bool = False
    path_changed: bool = False
    uses_new_edges: bool = False

    @property
    def cost_delta(self) -> Optional[Cost]:
        """Modified minus baseline cost, or None unless both are reachable."""
        if self.baseline_cost is None or self.modified_cost is None:
            return None
        return self.modified_cost - self.baseline_cost

    @property
    def cost_change_pct(self) -> Optional[float]:
        """Relative cost change in percent; None when undefined."""
        delta = self.cost_delta
        if delta is None or not self.baseline_cost:
            return None
        return delta / self.baseline_cost * 100.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "src": self.src,
            "dest": self.dest,
            "baseline_cost": self.baseline_cost,
            "modified_cost": self.modified_cost,
            "baseline_hops": self.baseline_hops,
            "modified_hops": self.modified_hops,
            "classification": self.classification.name,
            "baseline_path": list(self.baseline_path),
            "modified_path": list(self.modified_path),
            "was_ecmp": self.was_ecmp,
            "is_ecmp": self.is_ecmp,
            "path_changed": self.path_changed,
            "uses_new_edges": self.uses_new_edges,
            "cost_delta": self.cost_delta,
        }
