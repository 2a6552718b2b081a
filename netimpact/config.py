"""Configuration classes for netimpact components."""

from dataclasses import dataclass

from netimpact.types.base import RiskLevel


@dataclass
class ImpactAnalysisConfig:
    """Configuration for the all-pairs impact analysis loop."""

    # Pairs between two progress callbacks in serial mode
    progress_interval: int = 50

    # Below this many pairs a process pool costs more than it saves
    parallel_min_pairs: int = 200

    # Chunks submitted per worker; more chunks give finer progress and cancellation
    chunks_per_worker: int = 4

    # Keep UNCHANGED records in the output
    include_unchanged: bool = True

    # Relative tolerance when comparing path costs
    cost_rel_tol: float = 1e-9

    def chunk_size(self, total_pairs: int, workers: int) -> int:
        """Return the number of pairs per parallel task."""
        chunks = max(1, workers * self.chunks_per_worker)
        return max(1, -(-total_pairs // chunks))


@dataclass
class RiskScoringConfig:
    """Weights and thresholds for the blast-radius risk score."""

    # Factor caps (points)
    flow_impact_max: float = 40.0
    cost_magnitude_max: float = 30.0
    region_diversity_max: float = 20.0
    critical_paths_max: float = 10.0

    # Points per affected region
    region_points: float = 3.0

    # Multiplier applied to the share of inter-region reroutes
    critical_path_multiplier: float = 20.0

    # Upper bounds (exclusive) for LOW, MEDIUM and HIGH
    low_threshold: int = 20
    medium_threshold: int = 40
    high_threshold: int = 70

    # Per-region risk from the largest absolute cost change (percent)
    region_pct_low: float = 10.0
    region_pct_medium: float = 25.0
    region_pct_high: float = 50.0

    def classify(self, score: float) -> RiskLevel:
        """Map a score onto a risk level."""
        if score < self.low_threshold:
            return RiskLevel.LOW
        if score < self.medium_threshold:
            return RiskLevel.MEDIUM
        if score < self.high_threshold:
            return RiskLevel.HIGH
        return RiskLevel.CRITICAL

    def classify_change_pct(self, pct: float) -> RiskLevel:
        """Map an absolute cost change percentage onto a risk level."""
        if pct < self.region_pct_low:
            return RiskLevel.LOW
        if pct < self.region_pct_medium:
            return RiskLevel.MEDIUM
        if pct < self.region_pct_high:
            return RiskLevel.HIGH
        return RiskLevel.CRITICAL


# Global configuration instances
IMPACT_CONFIG = ImpactAnalysisConfig()
RISK_CONFIG = RiskScoringConfig()
