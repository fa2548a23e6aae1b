"""Bundled and generated problem instances."""

import math
import random
from typing import Sequence

from molb.models import NO_TOOL, ProblemConfig, Task

# (id, processing time, tool) of the 30-task reference line
REFERENCE_TASKS = [
    ("T1", 14, None), ("T2", 14, "M3"), ("T3", 11, "M1"), ("T4", 11, None),
    ("T5", 9, "M3"), ("T6", 9, "M2"), ("T7", 6, "M3"), ("T8", 15, "M2"),
    ("T9", 14, None), ("T10", 11, None), ("T11", 11, "M3"), ("T12", 14, None),
    ("T13", 5, "M1"), ("T14", 13, "M1"), ("T15", 10, "M2"), ("T16", 9, "M2"),
    ("T17", 7, "M1"), ("T18", 6, "M1"), ("T19", 8, "M1"), ("T20", 11, "M3"),
    ("T21", 14, "M3"), ("T22", 7, None), ("T23", 14, "M1"), ("T24", 6, "M2"),
    ("T25", 7, "M2"), ("T26", 9, "M1"), ("T27", 11, "M2"), ("T28", 6, "M3"),
    ("T29", 11, "M3"), ("T30", 7, None),
]  # fmt: skip

REFERENCE_PRECEDENCE = [
    ("T1", "T3"), ("T3", "T6"), ("T6", "T10"), ("T6", "T11"), ("T10", "T14"),
    ("T11", "T14"), ("T14", "T18"), ("T18", "T22"), ("T18", "T23"), ("T22", "T26"),
    ("T23", "T26"), ("T23", "T27"), ("T26", "T27"), ("T2", "T4"), ("T4", "T7"),
    ("T4", "T8"), ("T7", "T11"), ("T7", "T12"), ("T11", "T15"), ("T12", "T15"),
    ("T15", "T19"), ("T19", "T23"), ("T19", "T24"), ("T24", "T27"), ("T24", "T28"),
    ("T26", "T29"), ("T27", "T29"), ("T29", "T30"), ("T5", "T8"), ("T8", "T13"),
    ("T12", "T13"), ("T12", "T16"), ("T13", "T16"), ("T13", "T17"), ("T16", "T20"),
    ("T17", "T21"), ("T20", "T24"), ("T20", "T25"), ("T21", "T25"), ("T25", "T28"),
    ("T28", "T29"), ("T9", "T17"),
]  # fmt: skip


def reference_instance() -> ProblemConfig:
    """30 tasks, tools M1-M3 (limit 3 each), takt time 47."""
    config = ProblemConfig(takt_time=47)
    for task_id, processing_time, tool in REFERENCE_TASKS:
        config.add_task(Task(task_id, processing_time, tool or NO_TOOL))
    for before, after in REFERENCE_PRECEDENCE:
        config.add_precedence(before, after)
    for tool in ("M1", "M2", "M3"):
        config.set_tool_limit(tool, 3)
    return config


def generate_instance(
    num_tasks: int,
    seed: int = 0,
    edge_probability: float = 0.15,
    tool_types: Sequence[str] = ("M1", "M2", "M3"),
    min_time: int = 3,
    max_time: int = 15,
    tool_limit: int = 3,
    takt_time: int | None = None,
) -> ProblemConfig:
    """Random acyclic instance (edges only from lower to higher task index).

    Roughly one task in five has no tool. Without an explicit ``takt_time``
    the takt is three mean task times, never below the longest task.
    """
    if num_tasks <= 0:
        raise ValueError("num_tasks must be positive")
    rng = random.Random(seed)
    config = ProblemConfig()
    ids = [f"T{i + 1}" for i in range(num_tasks)]
    for task_id in ids:
        tool = NO_TOOL if rng.random() < 0.2 else rng.choice(list(tool_types))
        config.add_task(Task(task_id, rng.randint(min_time, max_time), tool))
    for i in range(num_tasks):
        for j in range(i + 1, num_tasks):
            if rng.random() < edge_probability:
                config.add_precedence(ids[i], ids[j])
    for tool in tool_types:
        config.set_tool_limit(tool, tool_limit)
    if takt_time is None:
        mean = config.total_processing_time() / num_tasks
        longest = max(t.processing_time for t in config.tasks.values())
        takt_time = max(longest, math.ceil(3 * mean))
    config.takt_time = takt_time
    return config
