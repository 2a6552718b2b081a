"""Change impact analysis, aggregation and risk scoring."""

from netimpact.analysis.aggregate import (
    ImpactGroupSummary,
    RegionSummary,
    aggregate_impacts,
    region_pair_key,
    region_summaries,
)
from netimpact.analysis.impact import (
    AnalysisCancelled,
    ImpactAnalyzer,
    analyze_impact,
    classify_impact,
    compare_paths,
    sort_records,
)
from netimpact.analysis.scoring import (
    BlastRadiusScore,
    ScoreBreakdown,
    calculate_blast_radius_score,
)

__all__ = [
    "AnalysisCancelled",
    "ImpactAnalyzer",
    "analyze_impact",
    "classify_impact",
    "compare_paths",
    "sort_records",
    "ImpactGroupSummary",
    "RegionSummary",
    "aggregate_impacts",
    "region_pair_key",
    "region_summaries",
    "BlastRadiusScore",
    "ScoreBreakdown",
    "calculate_blast_radius_score",
]
