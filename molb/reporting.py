"""Read-only views for report rendering and tabular export."""

from __future__ import annotations

import csv
import os
import re
from typing import Any, Sequence

from molb.models import ProblemConfig, Solution
from molb.precedence import layers

_DIGITS = re.compile(r"\d+")


def numeric_key(identifier: str) -> tuple[int, str]:
    """Sort key using the first number in an id (``T10`` after ``T9``)."""
    match = _DIGITS.search(identifier)
    return (int(match.group()) if match else -1, identifier)


def population_statistics(solutions: Sequence[Solution]) -> dict[str, Any]:
    """Counts, score extrema/averages and station-count range of a population."""
    if not solutions:
        return {
            "count": 0,
            "best_weighted": None,
            "avg_weighted": None,
            "min_stations": 0,
            "max_stations": 0,
            "avg_stations": 0.0,
        }
    n = len(solutions)
    stations = [s.num_stations for s in solutions]
    stats: dict[str, Any] = {
        "count": n,
        "best_weighted": max(s.scores.weighted for s in solutions),
        "avg_weighted": sum(s.scores.weighted for s in solutions) / n,
        "min_stations": min(stations),
        "max_stations": max(stations),
        "avg_stations": sum(stations) / n,
    }
    for objective in ("economic", "social", "environmental"):
        values = [getattr(s.scores, objective) for s in solutions]
        stats[f"avg_{objective}"] = sum(values) / n
        stats[f"min_{objective}"] = min(values)
        stats[f"max_{objective}"] = max(values)
    return stats


def station_rows(solution: Solution) -> list[tuple[str, list[str]]]:
    """One row per station: (station id, task ids), both sorted numerically."""
    ordered = sorted(solution.stations, key=lambda s: numeric_key(s.id))
    return [(s.id, sorted(s.task_ids(), key=numeric_key)) for s in ordered]


def write_solutions_csv(solutions: Sequence[Solution], path: str) -> str:
    """Write each solution as a block of ``station, tasks`` rows."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        for index, solution in enumerate(solutions, start=1):
            writer.writerow([f"Solution {index}"])
            writer.writerow(["Workstation", "Assigned tasks"])
            for station_id, task_ids in station_rows(solution):
                writer.writerow([station_id, ", ".join(task_ids)])
            writer.writerow([])
    return path


def graph_view(config: ProblemConfig) -> dict[str, Any]:
    """Layout independent graph description: nodes with attributes, edges."""
    depth = layers(config) if config.tasks else {}
    return {
        "nodes": [
            {
                "id": t.id,
                "processing_time": t.processing_time,
                "tool_type": t.tool_type,
                "layer": depth.get(t.id, 0),
            }
            for t in config.tasks.values()
        ],
        "edges": [{"from": before, "to": after} for before, after in config.edges()],
    }


def solution_breakdown(solution: Solution, config: ProblemConfig) -> dict[str, Any]:
    """Per-station load and tool usage plus the solution's scores."""
    return {
        "hash": solution.canonical_hash(),
        "num_stations": solution.num_stations,
        "is_valid": solution.is_valid,
        "violations": list(solution.violations),
        "idle_time": solution.idle_time(config.takt_time),
        "stations": [
            {
                "id": s.id,
                "tasks": s.task_ids(),
                "total_time": s.total_time,
                "idle_time": s.idle_time(config.takt_time),
                "utilization": s.total_time / config.takt_time if config.takt_time else 0.0,
                "tools": dict(s.tools),
            }
            for s in solution.stations
        ],
        "scores": {
            "economic": solution.scores.economic,
            "social": solution.scores.social,
            "environmental": solution.scores.environmental,
            "weighted": solution.scores.weighted,
        },
    }
