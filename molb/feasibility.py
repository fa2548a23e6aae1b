"""Feasibility checks for complete solutions and single task insertions."""

from __future__ import annotations

from typing import Collection

from molb.models import ProblemConfig, Solution, Station, Task


def check_feasibility(solution: Solution, config: ProblemConfig) -> tuple[bool, list[str]]:
    """Validate a complete solution against every constraint.

    Runs four independent passes (completeness, takt time, tool limits,
    precedence) and accumulates all violations so the caller sees every
    problem at once.

    Args:
        solution: Candidate assignment.
        config: Problem instance.

    Returns:
        Tuple ``(valid, violations)`` where ``violations`` is a list of human
        readable messages, empty when ``valid`` is True.
    """
    violations: list[str] = []

    assigned: set[str] = set()
    for station in solution.stations:
        for task in station.tasks:
            if task.id in assigned:
                violations.append(f"Task {task.id} is assigned more than once")
            elif task.id not in config.tasks:
                violations.append(f"Task {task.id} in station {station.id} is not defined")
            assigned.add(task.id)
    for task_id in config.tasks:
        if task_id not in assigned:
            violations.append(f"Task {task_id} is not assigned")

    for station in solution.stations:
        if station.total_time > config.takt_time:
            violations.append(
                f"Station {station.id}: time {station.total_time}s exceeds "
                f"takt time {config.takt_time}s"
            )

    for station in solution.stations:
        for tool_type, count in station.tools.items():
            limit = config.tool_limits.get(tool_type)
            if limit is not None and count > limit:
                violations.append(
                    f"Station {station.id}: {count}x {tool_type} exceeds limit of {limit}"
                )

    task_station: dict[str, int] = {}
    for index, station in enumerate(solution.stations):
        for task in station.tasks:
            task_station[task.id] = index
    for task_id, preds in config.predecessors.items():
        station_idx = task_station.get(task_id)
        if station_idx is None:
            continue
        for pred_id in preds:
            pred_idx = task_station.get(pred_id)
            if pred_idx is None:
                violations.append(
                    f"Precedence violation: {pred_id} -> {task_id}, but {pred_id} is not assigned"
                )
            elif pred_idx > station_idx:
                violations.append(
                    f"Precedence violation: {pred_id} must precede {task_id}, "
                    "but is in a later station"
                )
            elif pred_idx == station_idx:
                station = solution.stations[station_idx]
                ids = station.task_ids()
                if ids.index(pred_id) > ids.index(task_id):
                    violations.append(
                        f"Precedence violation: {pred_id} must precede {task_id} "
                        f"within station {station.id}"
                    )

    return not violations, violations


def can_add_task(
    task: Task,
    station: Station,
    config: ProblemConfig,
    assigned: Collection[str],
) -> tuple[bool, str | None]:
    """Check whether ``task`` may be appended to ``station`` right now.

    Returns the first failing reason only (takt, tool limit, precedence).
    """
    if station.total_time + task.processing_time > config.takt_time:
        return False, "Takt time exceeded"
    limit = config.tool_limits.get(task.tool_type)
    if limit is not None and station.tools.get(task.tool_type, 0) + 1 > limit:
        return False, f"Tool limit for {task.tool_type} reached"
    for pred_id in config.predecessors.get(task.id, []):
        if pred_id not in assigned:
            return False, f"Waiting for task {pred_id}"
    return True, None


def validate_solution(solution: Solution, config: ProblemConfig) -> Solution:
    """Run ``check_feasibility`` and store the outcome on the solution."""
    valid, violations = check_feasibility(solution, config)
    solution.is_valid = valid
    solution.violations = violations
    return solution
