"""Precedence graph analysis.

Concepts
--------
Precedence graph
    Directed graph over task ids stored in ``ProblemConfig.predecessors`` and
    ``ProblemConfig.successors``. A valid instance is acyclic and references
    only defined task ids; ``validate_config`` enforces both before any
    solution is generated.
Positional weight
    Own processing time plus the positional weight of every direct successor.
    Computed with an explicit work list and a per-call memo so deep graphs do
    not hit the recursion limit.
"""

from __future__ import annotations

import math
from collections import deque
from typing import Iterable

from molb.models import ProblemConfig, Task

DIRECTIONS = ("successors", "predecessors")


class ConfigurationError(ValueError):
    """Instance that cannot be solved at all (cycle, undefined id, bad takt)."""


def has_cycle(config: ProblemConfig) -> bool:
    """Depth-first search for a back edge into the active path."""
    visited: set[str] = set()
    on_stack: set[str] = set()
    for root in config.tasks:
        if root in visited:
            continue
        visited.add(root)
        on_stack.add(root)
        stack = [(root, iter(config.successors.get(root, [])))]
        while stack:
            node, children = stack[-1]
            for child in children:
                if child in on_stack:
                    return True
                if child not in visited:
                    visited.add(child)
                    on_stack.add(child)
                    stack.append((child, iter(config.successors.get(child, []))))
                    break
            else:
                on_stack.discard(node)
                stack.pop()
    return False


def topological_order(config: ProblemConfig) -> list[Task] | None:
    """Kahn's algorithm with FIFO queue; ``None`` for cyclic or broken graphs."""
    if has_cycle(config):
        return None
    in_degree = {tid: len(config.predecessors.get(tid, [])) for tid in config.tasks}
    queue = deque(tid for tid, degree in in_degree.items() if degree == 0)
    result: list[Task] = []
    while queue:
        current = queue.popleft()
        result.append(config.tasks[current])
        for succ in config.successors.get(current, []):
            if succ not in in_degree:
                continue
            in_degree[succ] -= 1
            if in_degree[succ] == 0:
                queue.append(succ)
    if len(result) != len(config.tasks):
        return None
    return result


def available_tasks(config: ProblemConfig, assigned: Iterable[str]) -> list[Task]:
    """Unassigned tasks whose direct predecessors are all assigned."""
    done = assigned if isinstance(assigned, (set, frozenset)) else set(assigned)
    return [
        task
        for tid, task in config.tasks.items()
        if tid not in done and all(p in done for p in config.predecessors.get(tid, []))
    ]


def positional_weights(
    config: ProblemConfig,
    task_ids: Iterable[str] | None = None,
    memo: dict[str, int] | None = None,
) -> dict[str, int]:
    """Positional weight for ``task_ids`` (all tasks when omitted).

    Args:
        config: Acyclic problem instance.
        task_ids: Tasks to evaluate; successors are evaluated on the way.
        memo: Optional result map reused across calls by the caller.

    Returns:
        The memo map, containing at least every requested task id.

    Raises:
        ConfigurationError: If a cycle is met during the traversal.
    """
    if memo is None:
        memo = {}
    roots = list(config.tasks) if task_ids is None else list(task_ids)
    in_progress: set[str] = set()
    for root in roots:
        if root in memo:
            continue
        work: list[tuple[str, bool]] = [(root, False)]
        while work:
            node, expanded = work.pop()
            if node in memo:
                continue
            task = config.tasks.get(node)
            if task is None:
                memo[node] = 0
                continue
            succs = config.successors.get(node, [])
            if expanded:
                in_progress.discard(node)
                memo[node] = task.processing_time + sum(memo[s] for s in succs)
                continue
            if node in in_progress:
                raise ConfigurationError(f"Cycle detected through task {node}")
            in_progress.add(node)
            work.append((node, True))
            for succ in succs:
                if succ in in_progress:
                    raise ConfigurationError(f"Cycle detected between {node} and {succ}")
                if succ not in memo:
                    work.append((succ, False))
    return memo


def positional_weight(
    config: ProblemConfig, task_id: str, memo: dict[str, int] | None = None
) -> int:
    return positional_weights(config, [task_id], memo)[task_id]


def slack(config: ProblemConfig, task_id: str, memo: dict[str, int] | None = None) -> int:
    """Idle room left in the stations a task's successor chain would need.

    Heuristic urgency proxy: ``ceil(pw / takt) * takt - pw``.
    """
    weight = positional_weight(config, task_id, memo)
    stations_needed = math.ceil(weight / config.takt_time)
    return stations_needed * config.takt_time - weight


def transitive_closure(
    config: ProblemConfig, task_id: str, direction: str = "successors"
) -> set[str]:
    """All tasks reachable from ``task_id`` along one relation (BFS)."""
    if direction not in DIRECTIONS:
        raise ValueError(f"Unknown direction={direction}")
    relation = config.successors if direction == "successors" else config.predecessors
    result: set[str] = set()
    queue = deque(relation.get(task_id, []))
    while queue:
        current = queue.popleft()
        if current in result:
            continue
        result.add(current)
        queue.extend(relation.get(current, []))
    return result


def all_successors(config: ProblemConfig, task_id: str) -> set[str]:
    return transitive_closure(config, task_id, "successors")


def all_predecessors(config: ProblemConfig, task_id: str) -> set[str]:
    return transitive_closure(config, task_id, "predecessors")


def station_lower_bound(config: ProblemConfig) -> int:
    """Theoretical minimum number of stations: ceil(total work / takt)."""
    if not config.tasks:
        return 0
    return math.ceil(config.total_processing_time() / config.takt_time)


def layers(config: ProblemConfig) -> dict[str, int]:
    """Longest-path depth of each task from the sources (0 = no predecessors).

    Requires an acyclic graph; iterates in topological order.
    """
    order = topological_order(config)
    if order is None:
        raise ConfigurationError("Precedence graph contains a cycle")
    depth: dict[str, int] = {}
    for task in order:
        preds = [p for p in config.predecessors.get(task.id, []) if p in depth]
        depth[task.id] = 1 + max(depth[p] for p in preds) if preds else 0
    return depth


def validate_config(config: ProblemConfig) -> None:
    """Reject instances that must not reach the generator.

    Raises:
        ConfigurationError: Non-positive takt time, a precedence edge that
            references an undefined task, or a cyclic precedence graph.
    """
    if config.takt_time <= 0:
        raise ConfigurationError(f"Takt time must be positive, got {config.takt_time}")
    for relation in (config.predecessors, config.successors):
        for tid, linked in relation.items():
            for other in (tid, *linked):
                if other not in config.tasks:
                    raise ConfigurationError(f"Precedence references undefined task {other}")
    if has_cycle(config):
        raise ConfigurationError("Precedence graph contains a cycle")
