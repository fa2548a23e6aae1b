"""Plain-data (de)serialization of problem instances and solutions.

The dictionaries produced here are JSON compatible and reconstruct the
objects losslessly: a round trip keeps every task, edge, limit, weight, the
station order, the canonical hash and the scores.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Iterable

import yaml

from molb.models import NO_TOOL, ProblemConfig, Scores, Solution, Station, Task, Weights

logger = logging.getLogger("molb.serialization")


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "processing_time": task.processing_time,
        "tool_type": task.tool_type,
        "env_score": task.env_score,
    }


def config_to_dict(config: ProblemConfig) -> dict[str, Any]:
    return {
        "tasks": [task_to_dict(t) for t in config.tasks.values()],
        "precedence": [{"from": before, "to": after} for before, after in config.edges()],
        "takt_time": config.takt_time,
        "tool_limits": dict(config.tool_limits),
        "weights": {
            "economic": config.weights.economic,
            "social": config.weights.social,
            "environmental": config.weights.environmental,
        },
        "max_stdev": config.max_stdev,
    }


def _edge(entry: Any) -> tuple[str, str]:
    if isinstance(entry, dict):
        return str(entry["from"]), str(entry["to"])
    if isinstance(entry, (list, tuple)) and len(entry) == 2:
        return str(entry[0]), str(entry[1])
    raise ValueError(f"Invalid precedence entry: {entry!r}")


def config_from_dict(data: dict[str, Any]) -> ProblemConfig:
    """Rebuild a ProblemConfig.

    Precedence entries may be ``{"from": a, "to": b}`` objects or ``[a, b]``
    pairs. Tool limits listed explicitly override the defaults added while
    inserting tasks.

    Raises:
        ValueError: On a missing ``tasks`` list or a malformed entry.
    """
    if not isinstance(data.get("tasks"), list):
        raise ValueError("Invalid problem format: expected a 'tasks' list")
    config = ProblemConfig()
    for t in data["tasks"]:
        config.add_task(
            Task(
                id=str(t["id"]),
                processing_time=int(t["processing_time"]),
                tool_type=t.get("tool_type") or NO_TOOL,
                env_score=float(t.get("env_score", 1.0)),
            )
        )
    for entry in data.get("precedence") or []:
        config.add_precedence(*_edge(entry))
    if "takt_time" in data:
        config.takt_time = int(data["takt_time"])
    for tool_type, limit in (data.get("tool_limits") or {}).items():
        config.set_tool_limit(str(tool_type), int(limit))
    if data.get("weights"):
        config.weights = Weights(**{k: float(v) for k, v in data["weights"].items()})
    if data.get("max_stdev") is not None:
        config.max_stdev = float(data["max_stdev"])
    return config


def solution_to_dict(solution: Solution) -> dict[str, Any]:
    return {
        "stations": [
            {"id": s.id, "tasks": s.task_ids(), "total_time": s.total_time}
            for s in solution.stations
        ],
        "scores": {
            "economic": solution.scores.economic,
            "social": solution.scores.social,
            "environmental": solution.scores.environmental,
            "weighted": solution.scores.weighted,
        },
        "is_valid": solution.is_valid,
        "violations": list(solution.violations),
        "hash": solution.canonical_hash(),
    }


def solution_from_dict(data: dict[str, Any], config: ProblemConfig) -> Solution:
    """Rebuild a Solution, resolving task ids against ``config``.

    Unknown task ids are skipped with a warning; the feasibility check then
    reports the affected tasks as unassigned.
    """
    stations = []
    for s_data in data.get("stations", []):
        station = Station(str(s_data["id"]))
        for task_id in s_data.get("tasks", []):
            task = config.tasks.get(str(task_id))
            if task is None:
                logger.warning("Unknown task %s in station %s skipped", task_id, station.id)
                continue
            station.add_task(task)
        stations.append(station)
    solution = Solution(stations=stations)
    if data.get("scores"):
        solution.scores = Scores(**{k: float(v) for k, v in data["scores"].items()})
    if "is_valid" in data:
        solution.is_valid = bool(data["is_valid"])
    solution.violations = list(data.get("violations", []))
    return solution


def export_solutions(solutions: Iterable[Solution]) -> dict[str, Any]:
    return {
        "solutions": [solution_to_dict(s) for s in solutions],
        "exported_at": datetime.now().isoformat(timespec="seconds"),
    }


def import_solutions(data: dict[str, Any], config: ProblemConfig) -> list[Solution]:
    if not isinstance(data.get("solutions"), list):
        raise ValueError("Invalid format: expected a 'solutions' list")
    return [solution_from_dict(entry, config) for entry in data["solutions"]]


def load_structured(path: str) -> dict[str, Any]:
    """Read a JSON or YAML document (chosen by file extension)."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"File not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    if path.endswith((".yml", ".yaml")):
        return yaml.safe_load(text) or {}
    return json.loads(text)


def load_problem(path: str) -> ProblemConfig:
    return config_from_dict(load_structured(path))


def save_json(payload: dict[str, Any], path: str) -> str:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    return path
