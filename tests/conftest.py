"""Pytest configuration & shared problem fixtures.

Also ensures the project root is on sys.path so 'import molb.*' works
without installing the package.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_root = Path(__file__).resolve().parents[1]
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from molb.instances import reference_instance  # noqa: E402
from molb.models import ProblemConfig, Task  # noqa: E402


@pytest.fixture
def diamond_config() -> ProblemConfig:
    """A -> {B, C} -> D, takt 10, default tool limits (2)."""
    config = ProblemConfig(takt_time=10)
    config.add_task(Task("A", 5, "M1"))
    config.add_task(Task("B", 3, "M2"))
    config.add_task(Task("C", 4, "M1"))
    config.add_task(Task("D", 2))
    config.add_precedence("A", "B")
    config.add_precedence("A", "C")
    config.add_precedence("B", "D")
    config.add_precedence("C", "D")
    return config


@pytest.fixture
def pair_config() -> ProblemConfig:
    """Two independent 5s tasks sharing tool M1, takt 10."""
    config = ProblemConfig(takt_time=10)
    config.add_task(Task("P", 5, "M1"))
    config.add_task(Task("Q", 5, "M1"))
    return config


@pytest.fixture
def tool_scenario_config() -> ProblemConfig:
    """T1(10,M1) -> T2(10,M1), T3(10,M2); takt 15, M1 limited to one task."""
    config = ProblemConfig(takt_time=15)
    config.add_task(Task("T1", 10, "M1"))
    config.add_task(Task("T2", 10, "M1"))
    config.add_task(Task("T3", 10, "M2"))
    config.add_precedence("T1", "T2")
    config.set_tool_limit("M1", 1)
    return config


@pytest.fixture
def reference_config() -> ProblemConfig:
    return reference_instance()
