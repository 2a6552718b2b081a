"""Shared typing constructs for netimpact.

Type aliases, enums and the immutable result containers exchanged between the
solver, the impact analyzer and callers. No computation lives here.
"""

from netimpact.types.base import Cost, EdgeID, ImpactClass, NodeID, RiskLevel
from netimpact.types.dto import ImpactRecord, PathResult

__all__ = [
    # Enums
    "ImpactClass",
    "RiskLevel",
    # Type aliases
    "Cost",
    "NodeID",
    "EdgeID",
    # DTOs
    "PathResult",
    "ImpactRecord",
]
