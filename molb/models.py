"""Core data structures for multi-objective line balancing instances.

This module defines:
    Task          -- immutable record describing one assembly operation.
    Station       -- ordered container of tasks with incremental time/tool totals.
    Scores        -- objective values attached to a solution.
    Weights       -- caller supplied objective weights.
    Solution      -- ordered list of stations plus scores and validity state.
    ProblemConfig -- the instance: tasks, bidirectional precedence, limits.
"""

from __future__ import annotations

from dataclasses import dataclass, field

NO_TOOL = "none"
DEFAULT_TOOL_LIMIT = 2
DEFAULT_TAKT_TIME = 12
DEFAULT_MAX_STDEV = 24.0


@dataclass(frozen=True)
class Task:
    """Single assembly operation.

    Attributes:
        id: Unique task key.
        processing_time: Duration in seconds (positive integer).
        tool_type: Tool category used by the task, ``NO_TOOL`` when none.
        env_score: Environmental impact weight (reserved, not used by scoring).
    """

    id: str
    processing_time: int
    tool_type: str = NO_TOOL
    env_score: float = 1.0

    def __post_init__(self) -> None:
        if self.processing_time <= 0:
            raise ValueError(
                f"Task {self.id}: processing time must be positive, got {self.processing_time}"
            )
        if self.tool_type is None:
            object.__setattr__(self, "tool_type", NO_TOOL)


@dataclass
class Station:
    """Workstation holding tasks in execution order.

    ``total_time`` and ``tools`` are derived from ``tasks``; they are rebuilt
    from the initial list and afterwards only change through ``add_task`` /
    ``remove_task``.
    """

    id: str
    tasks: list[Task] = field(default_factory=list)
    total_time: int = field(init=False, default=0)
    tools: dict[str, int] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        initial = list(self.tasks)
        self.tasks = []
        for task in initial:
            self.add_task(task)

    def add_task(self, task: Task) -> None:
        self.tasks.append(task)
        self.total_time += task.processing_time
        self.tools[task.tool_type] = self.tools.get(task.tool_type, 0) + 1

    def remove_task(self, task_id: str) -> Task:
        for idx, task in enumerate(self.tasks):
            if task.id == task_id:
                break
        else:
            raise KeyError(f"Task {task_id} not in station {self.id}")
        del self.tasks[idx]
        self.total_time -= task.processing_time
        remaining = self.tools[task.tool_type] - 1
        if remaining:
            self.tools[task.tool_type] = remaining
        else:
            del self.tools[task.tool_type]
        return task

    def task_ids(self) -> list[str]:
        return [t.id for t in self.tasks]

    def distinct_tools(self) -> int:
        return len(self.tools)

    def idle_time(self, takt_time: int) -> int:
        return takt_time - self.total_time

    def clone(self) -> Station:
        return Station(self.id, list(self.tasks))


@dataclass
class Scores:
    """Normalized objective values (1 = best) plus the weighted aggregate."""

    economic: float = 0.0
    social: float = 0.0
    environmental: float = 0.0
    weighted: float = 0.0

    def objectives(self) -> tuple[float, float, float]:
        return (self.economic, self.social, self.environmental)


@dataclass
class Weights:
    """Objective weights; need not sum to one, normalized at scoring time."""

    economic: float = 0.4
    social: float = 0.3
    environmental: float = 0.3

    def __post_init__(self) -> None:
        for name in ("economic", "social", "environmental"):
            if getattr(self, name) < 0:
                raise ValueError(f"Weight '{name}' must be non-negative")

    def total(self) -> float:
        return self.economic + self.social + self.environmental

    def normalized(self) -> Weights:
        total = self.total()
        if total <= 0:
            return Weights(0.0, 0.0, 0.0)
        return Weights(
            self.economic / total,
            self.social / total,
            self.environmental / total,
        )


@dataclass
class Solution:
    """Complete line balancing candidate.

    Fields:
        stations: Stations in line order (index is used by precedence checks).
        scores: Objective values, all zero until computed.
        is_valid: Result of the last feasibility check.
        violations: Human readable descriptions of every violated constraint.
    """

    stations: list[Station] = field(default_factory=list)
    scores: Scores = field(default_factory=Scores)
    is_valid: bool = True
    violations: list[str] = field(default_factory=list)

    @property
    def num_stations(self) -> int:
        return len(self.stations)

    def add_station(self, station: Station) -> None:
        self.stations.append(station)

    def total_time(self) -> int:
        return sum(s.total_time for s in self.stations)

    def idle_time(self, takt_time: int) -> int:
        return sum(s.idle_time(takt_time) for s in self.stations)

    def station_times(self) -> list[int]:
        return [s.total_time for s in self.stations]

    def assigned_task_ids(self) -> list[str]:
        return [tid for s in self.stations for tid in s.task_ids()]

    def canonical_hash(self) -> str:
        """Station partition key: sorted ids per station, stations in line order."""
        return "|".join(",".join(sorted(s.task_ids())) for s in self.stations)

    def clone(self) -> Solution:
        return Solution(
            stations=[s.clone() for s in self.stations],
            scores=Scores(**vars(self.scores)),
            is_valid=self.is_valid,
            violations=list(self.violations),
        )


@dataclass
class ProblemConfig:
    """Line balancing instance.

    Precedence is stored twice: ``predecessors[t]`` lists tasks that must run
    before ``t`` and ``successors[t]`` the tasks that wait for ``t``. Every
    mutator below updates both maps together.
    """

    tasks: dict[str, Task] = field(default_factory=dict)
    predecessors: dict[str, list[str]] = field(default_factory=dict)
    successors: dict[str, list[str]] = field(default_factory=dict)
    takt_time: int = DEFAULT_TAKT_TIME
    tool_limits: dict[str, int] = field(default_factory=dict)
    weights: Weights = field(default_factory=Weights)
    max_stdev: float = DEFAULT_MAX_STDEV

    def __len__(self) -> int:
        return len(self.tasks)

    def add_task(self, task: Task) -> None:
        """Insert a task or replace the record with the same id.

        A new tool type gets ``DEFAULT_TOOL_LIMIT``; tasks without a tool stay
        unconstrained.
        """
        self.tasks[task.id] = task
        self.predecessors.setdefault(task.id, [])
        self.successors.setdefault(task.id, [])
        if task.tool_type != NO_TOOL and task.tool_type not in self.tool_limits:
            self.tool_limits[task.tool_type] = DEFAULT_TOOL_LIMIT

    def remove_task(self, task_id: str) -> None:
        self.tasks.pop(task_id, None)
        self.predecessors.pop(task_id, None)
        self.successors.pop(task_id, None)
        for tid, preds in self.predecessors.items():
            self.predecessors[tid] = [p for p in preds if p != task_id]
        for tid, succs in self.successors.items():
            self.successors[tid] = [s for s in succs if s != task_id]

    def add_precedence(self, before: str, after: str) -> None:
        """Record that ``before`` must complete before ``after`` starts."""
        preds = self.predecessors.setdefault(after, [])
        if before not in preds:
            preds.append(before)
        succs = self.successors.setdefault(before, [])
        if after not in succs:
            succs.append(after)

    def remove_precedence(self, before: str, after: str) -> None:
        if after in self.predecessors:
            self.predecessors[after] = [p for p in self.predecessors[after] if p != before]
        if before in self.successors:
            self.successors[before] = [s for s in self.successors[before] if s != after]

    def set_tool_limit(self, tool_type: str, limit: int) -> None:
        if limit < 0:
            raise ValueError(f"Tool limit for {tool_type} must be non-negative")
        self.tool_limits[tool_type] = limit

    def task_list(self) -> list[Task]:
        return list(self.tasks.values())

    def tool_types(self) -> list[str]:
        seen: dict[str, None] = {}
        for task in self.tasks.values():
            seen.setdefault(task.tool_type, None)
        return list(seen)

    def edges(self) -> list[tuple[str, str]]:
        """All precedence edges as (before, after) pairs."""
        return [(before, after) for after, preds in self.predecessors.items() for before in preds]

    def total_processing_time(self) -> int:
        return sum(t.processing_time for t in self.tasks.values())
