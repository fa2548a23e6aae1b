"""Objective functions (economic, social, environmental) and aggregation.

All three scores are normalized to [0, 1] with 1 meaning best. Degenerate
inputs (no stations, zero weights, zero stdev ceiling) return fixed sentinels
instead of raising so a batch of candidates is never aborted by one of them.
"""

from __future__ import annotations

import statistics
from typing import Iterable

from molb.models import ProblemConfig, Scores, Solution, Weights


def station_time_stdev(solution: Solution) -> float:
    """Population standard deviation of station times (0 for <= 1 station)."""
    times = solution.station_times()
    if len(times) <= 1:
        return 0.0
    return statistics.pstdev(times)


def economic_score(solution: Solution, config: ProblemConfig) -> float:
    """Line utilization: total work / (takt * stations), capped at 1."""
    if solution.num_stations == 0 or config.takt_time <= 0:
        return 0.0
    utilization = config.total_processing_time() / (config.takt_time * solution.num_stations)
    return min(1.0, utilization)


def social_score(solution: Solution, max_stdev: float) -> float:
    """Workload balance relative to the allowed stdev ceiling."""
    if solution.num_stations <= 1:
        return 1.0
    stdev = station_time_stdev(solution)
    if max_stdev <= 0:
        return 1.0 if stdev == 0 else 0.0
    return (max_stdev - min(stdev, max_stdev)) / max_stdev


def environmental_score(solution: Solution, config: ProblemConfig) -> float:
    """Tool variety: fewer distinct tool categories per station is better.

    ``used`` counts distinct categories per station (``NO_TOOL`` included),
    bounded above by the task count and below by the station count.
    """
    used = sum(station.distinct_tools() for station in solution.stations)
    upper = len(config.tasks)
    lower = solution.num_stations
    denominator = upper - lower
    if denominator <= 0:
        return 1.0
    return max(0.0, min(1.0, (upper - used) / denominator))


def weighted_score(scores: Scores, weights: Weights) -> float:
    total = weights.total()
    if total <= 0:
        return 0.0
    return (
        scores.economic * weights.economic
        + scores.social * weights.social
        + scores.environmental * weights.environmental
    ) / total


def calculate_all_scores(solution: Solution, config: ProblemConfig) -> Solution:
    """Fill ``solution.scores``; invalid solutions are left with zero scores."""
    if not solution.is_valid:
        solution.scores = Scores()
        return solution
    scores = Scores(
        economic=economic_score(solution, config),
        social=social_score(solution, config.max_stdev),
        environmental=environmental_score(solution, config),
    )
    scores.weighted = weighted_score(scores, config.weights)
    solution.scores = scores
    return solution


def update_weighted_scores(solutions: Iterable[Solution], weights: Weights) -> None:
    """Recompute only the weighted aggregate after a weight change."""
    for solution in solutions:
        solution.scores.weighted = weighted_score(solution.scores, weights)
