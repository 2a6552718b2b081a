"""Grouped summaries over impact records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    Any,
    Callable,
    Dict,
    Hashable,
    Iterable,
    List,
    Mapping,
    Optional,
    Tuple,
)

from netimpact.config import RISK_CONFIG, RiskScoringConfig
from netimpact.types.base import Cost, ImpactClass, RiskLevel
from netimpact.types.dto import ImpactRecord

RecordKey = Callable[[ImpactRecord], Hashable]


def _empty_counts() -> Dict[ImpactClass, int]:
    return {classification: 0 for classification in ImpactClass}


@dataclass
class ImpactGroupSummary:
    """Fold of all impact records sharing one grouping key.

    Attributes:
        key: Grouping key produced by the key function.
        total_flows: Number of records in the group.
        counts: Records per ImpactClass (every class present, possibly 0).
        path_changes: Records whose edge set changed.
        avg_cost_delta: Mean cost delta over records reachable on both sides.
        max_cost_delta: Largest cost delta (worst increase), if any.
        min_cost_delta: Smallest cost delta (best decrease), if any.
        avg_cost_change_pct: Mean absolute cost change percentage.
        max_cost_change_pct: Largest absolute cost change percentage, if any.
        records: Member records in input order.
    """

    key: Hashable
    total_flows: int = 0
    counts: Dict[ImpactClass, int] = field(default_factory=_empty_counts)
    path_changes: int = 0
    avg_cost_delta: float = 0.0
    max_cost_delta: Optional[Cost] = None
    min_cost_delta: Optional[Cost] = None
    avg_cost_change_pct: float = 0.0
    max_cost_change_pct: Optional[float] = None
    records: List[ImpactRecord] = field(default_factory=list)

    def count(self, classification: ImpactClass) -> int:
        return self.counts.get(classification, 0)

    @property
    def affected_flows(self) -> int:
        """Records whose classification is not UNCHANGED."""
        return self.total_flows - self.count(ImpactClass.UNCHANGED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": list(self.key) if isinstance(self.key, tuple) else self.key,
            "total_flows": self.total_flows,
            "counts": {c.name: n for c, n in self.counts.items()},
            "path_changes": self.path_changes,
            "avg_cost_delta": self.avg_cost_delta,
            "max_cost_delta": self.max_cost_delta,
            "min_cost_delta": self.min_cost_delta,
            "avg_cost_change_pct": self.avg_cost_change_pct,
            "max_cost_change_pct": self.max_cost_change_pct,
        }


def _summarize(key: Hashable, records: List[ImpactRecord]) -> ImpactGroupSummary:
    summary = ImpactGroupSummary(key=key, total_flows=len(records), records=records)

    deltas: List[Cost] = []
    pcts: List[float] = []
    for record in records:
        summary.counts[record.classification] += 1
        if record.path_changed:
            summary.path_changes += 1
        if record.cost_delta is not None:
            deltas.append(record.cost_delta)
        if record.cost_change_pct is not None:
            pcts.append(abs(record.cost_change_pct))

    if deltas:
        summary.avg_cost_delta = sum(deltas) / len(deltas)
        summary.max_cost_delta = max(deltas)
        summary.min_cost_delta = min(deltas)
    if pcts:
        summary.avg_cost_change_pct = sum(pcts) / len(pcts)
        summary.max_cost_change_pct = max(pcts)
    return summary


def aggregate_impacts(
    records: Iterable[ImpactRecord], key: RecordKey
) -> List[ImpactGroupSummary]:
    """Group records by ``key(record)`` and fold each group.

    Args:
        records: Impact records, e.g. from :meth:`ImpactAnalyzer.run`.
        key: Function mapping a record to its group key.

    Returns:
        One summary per key, sorted by ``total_flows`` descending, then key.
    """
    groups: Dict[Hashable, List[ImpactRecord]] = {}
    for record in records:
        groups.setdefault(key(record), []).append(record)

    summaries = [_summarize(k, members) for k, members in groups.items()]
    summaries.sort(key=lambda s: (-s.total_flows, str(s.key)))
    return summaries


def region_pair_key(
    regions: Mapping[Hashable, Optional[str]], default: str = "Unknown"
) -> Callable[[ImpactRecord], Tuple[str, str]]:
    """Build a key function returning ``(src_region, dest_region)``.

    Nodes missing from ``regions`` or mapped to None fall into ``default``.
    """

    def key(record: ImpactRecord) -> Tuple[str, str]:
        return (
            regions.get(record.src) or default,
            regions.get(record.dest) or default,
        )

    return key


@dataclass
class RegionSummary:
    """Affected flows touching one region.

    Attributes:
        region: Region name.
        flows_as_source: Affected flows starting in the region.
        flows_as_destination: Affected flows ending in the region.
        total_flows_affected: Distinct affected flows touching the region;
            intra-region flows count once.
        avg_cost_change_pct: Mean absolute cost change percentage.
        max_cost_change_pct: Largest absolute cost change percentage.
        risk_level: Risk bucket of ``max_cost_change_pct``; lost connectivity
            in the region is always CRITICAL.
    """

    region: str
    flows_as_source: int = 0
    flows_as_destination: int = 0
    total_flows_affected: int = 0
    avg_cost_change_pct: float = 0.0
    max_cost_change_pct: float = 0.0
    risk_level: RiskLevel = RiskLevel.LOW

    def to_dict(self) -> Dict[str, Any]:
        return {
            "region": self.region,
            "flows_as_source": self.flows_as_source,
            "flows_as_destination": self.flows_as_destination,
            "total_flows_affected": self.total_flows_affected,
            "avg_cost_change_pct": self.avg_cost_change_pct,
            "max_cost_change_pct": self.max_cost_change_pct,
            "risk_level": self.risk_level.name,
        }


def region_summaries(
    records: Iterable[ImpactRecord],
    regions: Mapping[Hashable, Optional[str]],
    default: str = "Unknown",
    config: Optional[RiskScoringConfig] = None,
) -> List[RegionSummary]:
    """Summarize affected (non-UNCHANGED) flows per region.

    Args:
        records: Impact records.
        regions: Node id -> region name.
        default: Region used for nodes without one.
        config: Risk thresholds; defaults to ``RISK_CONFIG``.

    Returns:
        One summary per region touched by an affected flow, sorted by
        ``total_flows_affected`` descending, then region name.
    """
    config = config or RISK_CONFIG
    key = region_pair_key(regions, default)

    summaries: Dict[str, RegionSummary] = {}
    pcts: Dict[str, List[float]] = {}
    lost: Dict[str, bool] = {}

    for record in records:
        if record.classification == ImpactClass.UNCHANGED:
            continue
        src_region, dest_region = key(record)
        for region in {src_region, dest_region}:
            summary = summaries.get(region)
            if summary is None:
                summary = summaries[region] = RegionSummary(region=region)
                pcts[region] = []
                lost[region] = False
            summary.total_flows_affected += 1
            if record.cost_change_pct is not None:
                pcts[region].append(abs(record.cost_change_pct))
            if record.classification == ImpactClass.LOST_CONNECTIVITY:
                lost[region] = True
        summaries[src_region].flows_as_source += 1
        summaries[dest_region].flows_as_destination += 1

    for region, summary in summaries.items():
        values = pcts[region]
        if values:
            summary.avg_cost_change_pct = sum(values) / len(values)
            summary.max_cost_change_pct = max(values)
        if lost[region]:
            summary.risk_level = RiskLevel.CRITICAL
        else:
            summary.risk_level = config.classify_change_pct(summary.max_cost_change_pct)

    return sorted(
        summaries.values(), key=lambda s: (-s.total_flows_affected, s.region)
    )
