"""Constructive heuristics assigning tasks to stations.

Two generators live here:

* ``build_solution`` -- priority-rule station filling. Available tasks are
  ordered by a rule and the first admissible one is appended to the open
  station; when none fits, the station is closed and a new one opened.
* ``build_targeted_solution`` -- scored station filling aimed at a given
  station count, used by the station-count sweep. Diversity comes only from
  the caller supplied ``seed``.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Callable, Optional

from molb.feasibility import can_add_task
from molb.models import ProblemConfig, Solution, Station, Task
from molb.objectives import station_time_stdev
from molb.precedence import all_successors, available_tasks, positional_weights, slack

logger = logging.getLogger("molb.heuristics")

PRIORITY_RULES = ("lpt", "slack", "weight", "random", "hybrid")
HYBRID_TOLERANCE = 0.1

FIT_BONUS = 100.0
SUCCESSOR_BONUS = 3.0
TOOL_REUSE_BONUS = 30.0
TOOL_VARIETY_PENALTY = 500.0
PERTURBATION_SCALE = 20.0


def _by_lpt(tasks, config, rng, weights):
    return sorted(tasks, key=lambda t: t.processing_time, reverse=True)


def _by_slack(tasks, config, rng, weights):
    return sorted(tasks, key=lambda t: slack(config, t.id, weights))


def _by_weight(tasks, config, rng, weights):
    positional_weights(config, [t.id for t in tasks], weights)
    return sorted(tasks, key=lambda t: weights[t.id], reverse=True)


def _by_random(tasks, config, rng, weights):
    shuffled = list(tasks)
    rng.shuffle(shuffled)
    return shuffled


def _by_hybrid(tasks, config, rng, weights):
    ordered = _by_weight(tasks, config, rng, weights)
    for i in range(len(ordered) - 1):
        w_a = weights[ordered[i].id]
        w_b = weights[ordered[i + 1].id]
        if abs(w_a - w_b) < HYBRID_TOLERANCE * max(w_a, w_b) and rng.random() < 0.5:
            ordered[i], ordered[i + 1] = ordered[i + 1], ordered[i]
    return ordered


_RULES: dict[str, Callable] = {
    "lpt": _by_lpt,
    "slack": _by_slack,
    "weight": _by_weight,
    "random": _by_random,
    "hybrid": _by_hybrid,
}


def order_tasks(
    tasks: list[Task],
    config: ProblemConfig,
    rule: str,
    rng: Optional[random.Random] = None,
    weights: Optional[dict[str, int]] = None,
) -> list[Task]:
    """Order candidate tasks by a priority rule.

    Args:
        tasks: Available tasks (any order).
        config: Problem instance.
        rule: One of ``PRIORITY_RULES``.
        rng: Random generator for ``random`` / ``hybrid``; a fresh unseeded
            one is used when omitted.
        weights: Positional weight memo shared across calls of one build.

    Returns:
        New list in priority order; sorting is stable so ties keep the input
        order.

    Raises:
        ValueError: If ``rule`` is unknown.
    """
    fn = _RULES.get(rule)
    if fn is None:
        raise ValueError(f"Unknown priority rule: {rule}")
    if rng is None:
        rng = random.Random()
    if weights is None:
        weights = {}
    return fn(tasks, config, rng, weights)


def build_solution(
    config: ProblemConfig,
    rule: str = "lpt",
    rng: Optional[random.Random] = None,
) -> Solution | None:
    """Greedy station filling driven by a priority rule.

    Returns:
        A solution with every task assigned, or ``None`` when construction
        stalls (no available task, or none fits into an empty station).
    """
    if rule not in _RULES:
        raise ValueError(f"Unknown priority rule: {rule}")
    if rng is None:
        rng = random.Random()
    weights: dict[str, int] = {}
    solution = Solution()
    assigned: set[str] = set()
    station = Station(f"S{solution.num_stations + 1}")

    while len(assigned) < len(config.tasks):
        candidates = available_tasks(config, assigned)
        if not candidates:
            logger.debug("Stall (%s): no available task, %d assigned", rule, len(assigned))
            return None
        placed = False
        for task in order_tasks(candidates, config, rule, rng, weights):
            ok, _reason = can_add_task(task, station, config, assigned)
            if ok:
                station.add_task(task)
                assigned.add(task.id)
                placed = True
                break
        if placed:
            continue
        if not station.tasks:
            logger.debug(
                "Stall (%s): no available task fits an empty station (%d assigned)",
                rule,
                len(assigned),
            )
            return None
        solution.add_station(station)
        station = Station(f"S{solution.num_stations + 1}")

    if station.tasks:
        solution.add_station(station)
    return solution


def generate_solutions(
    config: ProblemConfig,
    rule: str,
    iterations: int = 50,
    rng: Optional[random.Random] = None,
) -> list[Solution]:
    """Repeat ``build_solution`` and keep one solution per canonical hash."""
    if rng is None:
        rng = random.Random()
    seen: set[str] = set()
    solutions: list[Solution] = []
    for _ in range(iterations):
        solution = build_solution(config, rule, rng)
        if solution is None:
            continue
        key = solution.canonical_hash()
        if key not in seen:
            seen.add(key)
            solutions.append(solution)
    return solutions


def generate_all_solutions(
    config: ProblemConfig,
    rules: tuple[str, ...] | list[str] = PRIORITY_RULES,
    iterations: int = 100,
    rng: Optional[random.Random] = None,
) -> list[Solution]:
    """Split the iteration budget over several rules and merge unique results."""
    if not rules:
        return []
    if rng is None:
        rng = random.Random()
    per_rule = math.ceil(iterations / len(rules))
    seen: set[str] = set()
    merged: list[Solution] = []
    for rule in rules:
        for solution in generate_solutions(config, rule, per_rule, rng):
            key = solution.canonical_hash()
            if key not in seen:
                seen.add(key)
                merged.append(solution)
    return merged


def successor_counts(config: ProblemConfig) -> dict[str, int]:
    """Size of the transitive successor set of every task."""
    return {tid: len(all_successors(config, tid)) for tid in config.tasks}


def build_targeted_solution(
    config: ProblemConfig,
    target_stations: int,
    seed: int,
    max_stdev: float,
    max_time: int,
    tool_variety: int,
    fan_out: Optional[dict[str, int]] = None,
) -> Solution | None:
    """Scored station filling aiming at ``target_stations`` stations.

    Each available task is scored with a fit bonus (fits the ideal time left
    in the station), a fan-out bonus (transitive successors), a tool reuse
    bonus, a penalty for opening a tool beyond ``tool_variety`` and a
    deterministic perturbation ``(sin(seed * processing_time) + 1) * 20``.
    Tasks that would break the configured tool limit of the station are not
    candidates. A station closes when the best candidate would exceed
    ``max_time`` or the distinct tool cap.

    Args:
        config: Problem instance (acyclic).
        target_stations: Maximum number of stations to open.
        seed: Perturbation key; the only source of diversity between calls.
        max_stdev: Late rejection ceiling for the stdev of station times.
        max_time: Time ceiling per station.
        tool_variety: Maximum distinct tool types per station.
        fan_out: Precomputed ``successor_counts(config)``.

    Returns:
        The solution or ``None`` when tasks remain unassigned or a late
        rejection filter fires.
    """
    if fan_out is None:
        fan_out = successor_counts(config)
    task_list = config.task_list()
    if not task_list or target_stations <= 0:
        return None
    ideal_time = min(config.total_processing_time() / target_stations, max_time)
    solution = Solution()
    assigned: set[str] = set()

    for index in range(target_stations):
        if len(assigned) == len(task_list):
            break
        station = Station(f"WS{index + 1}")
        while True:
            candidates = [
                t
                for t in available_tasks(config, assigned)
                if station.tools.get(t.tool_type, 0) < config.tool_limits.get(t.tool_type, math.inf)
            ]
            if not candidates:
                break
            remaining = ideal_time - station.total_time
            scored = []
            for task in candidates:
                score = 0.0
                if task.processing_time <= remaining:
                    score += FIT_BONUS
                score += fan_out.get(task.id, 0) * SUCCESSOR_BONUS
                opens_tool = task.tool_type not in station.tools
                if not opens_tool:
                    score += TOOL_REUSE_BONUS
                elif station.distinct_tools() >= tool_variety:
                    score -= TOOL_VARIETY_PENALTY
                score += (math.sin(seed * task.processing_time) + 1) * PERTURBATION_SCALE
                scored.append((score, task))
            best = max(scored, key=lambda pair: pair[0])[1]
            if station.total_time + best.processing_time > max_time:
                break
            if best.tool_type not in station.tools and station.distinct_tools() >= tool_variety:
                break
            station.add_task(best)
            assigned.add(best.id)
        if station.tasks:
            solution.add_station(station)

    if len(assigned) != len(task_list):
        logger.debug(
            "Targeted build (stations=%d seed=%d): %d/%d tasks placed",
            target_stations,
            seed,
            len(assigned),
            len(task_list),
        )
        return None
    if max(solution.station_times()) > max_time:
        return None
    if station_time_stdev(solution) > max_stdev:
        logger.debug(
            "Targeted build (stations=%d seed=%d) rejected: stdev %.2f > %.2f",
            target_stations,
            seed,
            station_time_stdev(solution),
            max_stdev,
        )
        return None
    return solution
