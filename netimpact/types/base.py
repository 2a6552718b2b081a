"""Base type aliases and enums shared by the solver and the analyzers."""

from __future__ import annotations

from enum import IntEnum
from typing import Hashable, Union

#: Represents numeric cost in the network (OSPF metric).
Cost = Union[int, float]

NodeID = Hashable
EdgeID = Hashable


class _NamedEnum(IntEnum):
    @classmethod
    def from_string(cls, value: str):
        """Parse a case-insensitive member name.

        Raises:
            ValueError: If the string doesn't match any member.
        """
        try:
            return cls[value.strip().upper()]
        except KeyError:
            valid = ", ".join(e.name for e in cls)
            raise ValueError(
                f"Invalid {cls.__name__} '{value}'. Valid values are: {valid}"
            ) from None


class ImpactClass(_NamedEnum):
    """How one (src, dest) flow is affected by a proposed change."""

    #: Same reachability, same edge set, same cost (or no flow on either side).
    UNCHANGED = 1
    #: Same edge set, different cost.
    COST_CHANGED = 2
    #: Different edge set.
    REROUTED = 3
    #: Different edge set that now splits across equal-cost paths.
    MIGRATED_TO_ECMP = 4
    #: Reachable before, unreachable after.
    LOST_CONNECTIVITY = 5
    #: Unreachable before, reachable after.
    GAINED_CONNECTIVITY = 6


class RiskLevel(_NamedEnum):
    """Blast-radius risk buckets, ordered by severity."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4
