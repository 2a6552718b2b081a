"""Solver entry points for single flows."""

from netimpact.solver.paths import find_path, shortest_path, shortest_paths_from

__all__ = ["find_path", "shortest_path", "shortest_paths_from"]
