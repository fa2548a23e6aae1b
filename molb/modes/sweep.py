"""Station-count sweep mode.

For every target station count in a range, ``build_targeted_solution`` is
called with seeds ``seed .. seed + iterations - 1``. The seed drives the
deterministic perturbation of the builder, so repeated runs reproduce the
same population.
"""
from __future__ import annotations

import logging
import time
from functools import partial

from molb.heuristics import build_targeted_solution, successor_counts
from molb.models import ProblemConfig
from molb.precedence import station_lower_bound, validate_config
from .common import Population, SearchParams, SearchResult, run_attempts

logger = logging.getLogger("molb.sweep")


def station_range(config: ProblemConfig, params: SearchParams) -> tuple[int, int]:
    """Resolve the inclusive station-count range for a sweep.

    Defaults start at the theoretical lower bound and span at most
    ``max_sweep_width`` counts, never more than one station per task.
    """
    low = params.min_stations
    if low is None:
        low = max(1, station_lower_bound(config))
    high = params.max_stations
    if high is None:
        high = min(len(config.tasks), low + params.max_sweep_width - 1)
    if high < low:
        raise ValueError(f"Empty station range: {low}..{high}")
    return low, high


def run_station_sweep(config: ProblemConfig, params: SearchParams) -> SearchResult:
    """Sweep target station counts and reduce the population to a Pareto front.

    Args:
        config: Problem instance; validated before any attempt.
        params: Station bounds, ``iterations`` per station count, ``seed``,
            ``max_time`` (default: takt time), ``max_stdev`` (default:
            ``config.max_stdev``), ``tool_variety`` and ``workers``.

    Returns:
        SearchResult; ``meta`` holds the station range and the number of
        feasible solutions per target count.
    """
    validate_config(config)
    low, high = station_range(config, params)
    max_time = params.max_time if params.max_time is not None else config.takt_time
    max_stdev = params.max_stdev if params.max_stdev is not None else config.max_stdev
    fan_out = successor_counts(config)
    population = Population(config)
    t0 = time.perf_counter()
    count = 0
    stalled = 0
    per_target: dict[int, int] = {}
    for target in range(low, high + 1):
        before = len(population)
        attempts = [
            partial(
                build_targeted_solution,
                config,
                target,
                params.seed + i,
                max_stdev,
                max_time,
                params.tool_variety,
                fan_out,
            )
            for i in range(params.iterations)
        ]
        c, s = run_attempts(attempts, population, workers=params.workers)
        count += c
        stalled += s
        per_target[target] = len(population) - before
        logger.debug("Sweep target=%d: %d new solutions", target, per_target[target])
    result = SearchResult.from_population(
        population, count, stalled, time.perf_counter() - t0, label="sweep"
    )
    result.meta = {"station_range": [low, high], "per_target": per_target}
    logger.info(
        "Station sweep %d..%d: attempts=%d unique=%d discarded=%d rejected=%d front=%d (%.3fs)",
        low,
        high,
        count,
        len(population),
        stalled,
        result.rejected,
        len(result.front),
        result.elapsed,
    )
    return result
