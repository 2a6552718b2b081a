"""Global pytest configuration.

Registers the sample graph fixtures in `tests.algorithms.sample_graphs` as a
plugin so every test folder can use them. The plugin is not imported here so
that pytest applies assertion rewriting to it.
"""

from __future__ import annotations

from importlib.util import find_spec

pytest_plugins: list[str] = []
if find_spec("tests.algorithms.sample_graphs") is not None:
    pytest_plugins = ["tests.algorithms.sample_graphs"]
