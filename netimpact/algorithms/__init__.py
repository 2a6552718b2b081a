"""Shortest-path algorithms over StrictMultiDiGraph snapshots."""

from netimpact.algorithms.path_utils import (
    PathElement,
    PathTuple,
    canonical_path,
    count_paths,
    ecmp_subgraph,
    resolve_to_paths,
    wavefront_steps,
)
from netimpact.algorithms.spf import PredMap, spf

__all__ = [
    "spf",
    "PredMap",
    "PathElement",
    "PathTuple",
    "canonical_path",
    "count_paths",
    "ecmp_subgraph",
    "resolve_to_paths",
    "wavefront_steps",
]
