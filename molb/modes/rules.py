"""Priority-rule multi-start mode.

Runs ``build_solution`` ``iterations`` times for every configured priority
rule. Each attempt owns a ``random.Random`` seeded from (seed, rule, attempt)
so the run is reproducible regardless of the worker count.
"""
from __future__ import annotations

import logging
import math
import random
import time
from functools import partial

from molb.heuristics import build_solution
from molb.models import ProblemConfig
from molb.precedence import validate_config
from .common import Population, SearchParams, SearchResult, run_attempts

logger = logging.getLogger("molb.rules")


def run_rule_search(config: ProblemConfig, params: SearchParams) -> SearchResult:
    """Sample solutions with every priority rule and reduce to a Pareto front.

    Args:
        config: Problem instance; validated before any attempt.
        params: ``rules``, ``iterations`` (total budget, split evenly over
            rules), ``seed`` and ``workers`` are read.

    Returns:
        SearchResult with the deduplicated feasible population and its front.

    Raises:
        ConfigurationError: If the instance is cyclic or references unknown
            tasks.
    """
    validate_config(config)
    rules = tuple(params.rules)
    per_rule = math.ceil(params.iterations / len(rules)) if rules else 0
    population = Population(config)
    t0 = time.perf_counter()
    attempts = [
        partial(build_solution, config, rule, random.Random(f"{params.seed}:{rule}:{i}"))
        for rule in rules
        for i in range(per_rule)
    ]
    count, stalled = run_attempts(attempts, population, workers=params.workers)
    result = SearchResult.from_population(
        population, count, stalled, time.perf_counter() - t0, label="rules"
    )
    logger.info(
        "Rule search: rules=%s attempts=%d unique=%d stalled=%d rejected=%d front=%d (%.3fs)",
        ",".join(rules),
        count,
        len(population),
        stalled,
        result.rejected,
        len(result.front),
        result.elapsed,
    )
    return result
