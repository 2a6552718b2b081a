"""netimpact: ECMP shortest paths and change impact analysis for OSPF topologies.

netimpact computes every equal-cost shortest path between routers of a link-state
topology and classifies how each router-to-router flow is affected by a proposed
change, such as a link cost override or a new link.

Primary API:
    find_path() - ECMP shortest-path result for one flow
    analyze_impact() - Classify every flow under a proposed change
    ImpactAnalyzer - Reusable analyzer with progress, cancellation and workers
    Topology, Node, DirectedEdge - Immutable topology snapshot
    CostOverride, NewLink - What-if changes applied to a snapshot
    aggregate_impacts(), region_summaries() - Grouped summaries
    calculate_blast_radius_score() - Overall risk of a change

Example:
    from netimpact import (
        CostOverride, DirectedEdge, ImpactAnalyzer, Node, Topology, find_path,
    )

    topo = Topology(
        nodes=[Node("A"), Node("B"), Node("C")],
        edges=[
            DirectedEdge("ab", "A", "B", 5, logical_id="L1"),
            DirectedEdge("ba", "B", "A", 5, logical_id="L1"),
            DirectedEdge("ac", "A", "C", 6),
            DirectedEdge("cb", "C", "B", 6),
        ],
    )

    # Single flow
    result = find_path("A", "B", topo.nodes, topo.edges)

    # What-if: raise the cost of link L1
    analyzer = ImpactAnalyzer.from_change(topo, CostOverride("L1", forward_cost=50))
    records = analyzer.run(parallelism=4)
"""

from __future__ import annotations

from netimpact import logging
from netimpact._version import __version__
from netimpact.analysis import (
    AnalysisCancelled,
    BlastRadiusScore,
    ImpactAnalyzer,
    ImpactGroupSummary,
    RegionSummary,
    aggregate_impacts,
    analyze_impact,
    calculate_blast_radius_score,
    region_pair_key,
    region_summaries,
    sort_records,
)
from netimpact.graph import build_graph
from netimpact.model import CostOverride, DirectedEdge, NewLink, Node, Topology
from netimpact.solver import find_path
from netimpact.types import ImpactClass, ImpactRecord, PathResult, RiskLevel

__all__ = [
    # Version
    "__version__",
    # Model
    "Node",
    "DirectedEdge",
    "Topology",
    "CostOverride",
    "NewLink",
    "build_graph",
    # Solver
    "find_path",
    "PathResult",
    # Impact analysis
    "analyze_impact",
    "ImpactAnalyzer",
    "AnalysisCancelled",
    "ImpactRecord",
    "ImpactClass",
    "sort_records",
    # Aggregation and scoring
    "aggregate_impacts",
    "region_pair_key",
    "region_summaries",
    "ImpactGroupSummary",
    "RegionSummary",
    "calculate_blast_radius_score",
    "BlastRadiusScore",
    "RiskLevel",
    # Utilities
    "logging",
]
