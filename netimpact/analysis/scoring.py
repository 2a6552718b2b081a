"""Blast-radius risk score for a proposed topology change.

The score sums four capped factors computed over the affected
(non-UNCHANGED) flows:

- flow impact: share of all ordered router pairs that are affected;
- cost magnitude: mean absolute cost change percentage;
- region diversity: number of distinct regions touched;
- critical paths: share of affected flows that cross regions and changed path.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Hashable, Iterable, Mapping, Optional

from netimpact.config import RISK_CONFIG, RiskScoringConfig
from netimpact.logging import get_logger
from netimpact.types.base import ImpactClass, RiskLevel
from netimpact.types.dto import ImpactRecord

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScoreBreakdown:
    """Points contributed by each factor (each already capped)."""

    flow_impact: float
    cost_magnitude: float
    region_diversity: float
    critical_paths: float

    def total(self) -> float:
        return (
            self.flow_impact
            + self.cost_magnitude
            + self.region_diversity
            + self.critical_paths
        )


@dataclass(frozen=True)
class BlastRadiusScore:
    """Overall risk of a change.

    Attributes:
        overall: Rounded sum of the factor points (0-100).
        risk_level: Bucket of ``overall``.
        breakdown: Per-factor points.
        total_flows: Ordered router pairs considered, at least 1.
        affected_flows: Records not classified UNCHANGED.
        affected_pct: ``affected_flows / total_flows`` in percent.
        avg_cost_change_pct: Mean absolute cost change of affected flows.
        regions_affected: Distinct regions touched by affected flows.
        critical_flows: Affected inter-region flows whose path changed.
    """

    overall: int
    risk_level: RiskLevel
    breakdown: ScoreBreakdown
    total_flows: int
    affected_flows: int
    affected_pct: float
    avg_cost_change_pct: float
    regions_affected: int
    critical_flows: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall,
            "risk_level": self.risk_level.name,
            "breakdown": {
                "flow_impact": self.breakdown.flow_impact,
                "cost_magnitude": self.breakdown.cost_magnitude,
                "region_diversity": self.breakdown.region_diversity,
                "critical_paths": self.breakdown.critical_paths,
            },
            "total_flows": self.total_flows,
            "affected_flows": self.affected_flows,
            "affected_pct": self.affected_pct,
            "avg_cost_change_pct": self.avg_cost_change_pct,
            "regions_affected": self.regions_affected,
            "critical_flows": self.critical_flows,
        }


def calculate_blast_radius_score(
    records: Iterable[ImpactRecord],
    node_count: int,
    regions: Optional[Mapping[Hashable, Optional[str]]] = None,
    config: Optional[RiskScoringConfig] = None,
    default_region: str = "Unknown",
) -> BlastRadiusScore:
    """Score the blast radius of a change from its impact records.

    Args:
        records: Impact records of the change.
        node_count: Number of visible routers; ``N * (N - 1)`` flows exist.
        regions: Optional node id -> region name. Without it the region and
            critical-path factors are 0.
        config: Factor caps and thresholds; defaults to ``RISK_CONFIG``.
        default_region: Region of nodes missing from ``regions``.

    Returns:
        BlastRadiusScore.
    """
    config = config or RISK_CONFIG
    affected = [r for r in records if r.classification != ImpactClass.UNCHANGED]
    total_flows = max(1, node_count * (node_count - 1))

    affected_pct = len(affected) / total_flows * 100.0
    flow_impact = min(config.flow_impact_max, affected_pct)

    pcts = [abs(r.cost_change_pct) for r in affected if r.cost_change_pct is not None]
    avg_pct = sum(pcts) / len(pcts) if pcts else 0.0
    cost_magnitude = min(config.cost_magnitude_max, avg_pct)

    regions_affected = 0
    critical_flows = 0
    if regions is not None:
        touched = set()
        for record in affected:
            src_region = regions.get(record.src) or default_region
            dest_region = regions.get(record.dest) or default_region
            touched.update((src_region, dest_region))
            if src_region != dest_region and record.path_changed:
                critical_flows += 1
        regions_affected = len(touched)

    region_diversity = min(
        config.region_diversity_max, regions_affected * config.region_points
    )
    critical_paths = min(
        config.critical_paths_max,
        critical_flows / max(1, len(affected)) * config.critical_path_multiplier,
    )

    breakdown = ScoreBreakdown(
        flow_impact=flow_impact,
        cost_magnitude=cost_magnitude,
        region_diversity=region_diversity,
        critical_paths=critical_paths,
    )
    overall = round(breakdown.total())
    risk_level = config.classify(overall)
    logger.debug(
        f"Blast radius score {overall} ({risk_level.name}): {len(affected)}/{total_flows} "
        f"flows affected, {regions_affected} regions, {critical_flows} critical"
    )

    return BlastRadiusScore(
        overall=overall,
        risk_level=risk_level,
        breakdown=breakdown,
        total_flows=total_flows,
        affected_flows=len(affected),
        affected_pct=affected_pct,
        avg_cost_change_pct=avg_pct,
        regions_affected=regions_affected,
        critical_flows=critical_flows,
    )
