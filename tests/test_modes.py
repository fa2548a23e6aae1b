"""Tests for the search modes (rule multi-start and station sweep).

Covers:
- reproducibility for a fixed seed, with and without a thread pool
- deduplication and rejection accounting of Population
- configuration errors surfacing before any attempt runs
"""

from __future__ import annotations

import pytest

from molb.instances import generate_instance
from molb.models import ProblemConfig, Solution, Station, Task
from molb.modes import Population, SearchParams, run_rule_search, run_station_sweep
from molb.modes.common import run_attempts
from molb.modes.sweep import station_range
from molb.precedence import ConfigurationError


def _hashes(result) -> list[str]:
    return [s.canonical_hash() for s in result.solutions]


def test_population_deduplicates_and_rejects(diamond_config: ProblemConfig) -> None:
    t = diamond_config.tasks
    population = Population(diamond_config)
    good = Solution([Station("S1", [t["A"], t["C"]]), Station("S2", [t["B"], t["D"]])])
    same = Solution([Station("X", [t["C"], t["A"]]), Station("Y", [t["D"], t["B"]])])
    broken = Solution([Station("S1", [t["B"], t["A"]]), Station("S2", [t["C"], t["D"]])])

    assert population.offer(good) is True
    assert population.offer(same) is False
    assert population.offer(broken) is False
    assert len(population) == 1
    assert population.duplicates == 1
    assert population.rejected == 1
    assert list(population)[0].scores.economic == pytest.approx(0.7)


def test_run_attempts_counts_stalls(diamond_config: ProblemConfig) -> None:
    t = diamond_config.tasks
    population = Population(diamond_config)

    def ok():
        return Solution([Station("S1", [t["A"], t["C"]]), Station("S2", [t["B"], t["D"]])])

    count, stalled = run_attempts([ok, lambda: None, ok], population, workers=2)
    assert (count, stalled) == (3, 1)
    assert population.duplicates == 1


def test_rule_search_is_reproducible(reference_config: ProblemConfig) -> None:
    params = SearchParams(iterations=25, seed=9)
    first = run_rule_search(reference_config, params)
    second = run_rule_search(reference_config, params)
    assert _hashes(first) == _hashes(second)
    assert first.label == "rules"
    assert first.attempts == 25
    assert first.rejected == 0
    assert first.front


def test_rule_search_same_population_with_workers(reference_config: ProblemConfig) -> None:
    sequential = run_rule_search(reference_config, SearchParams(iterations=20, seed=1))
    threaded = run_rule_search(reference_config, SearchParams(iterations=20, seed=1, workers=4))
    assert _hashes(sequential) == _hashes(threaded)


def test_rule_search_front_sorted_by_weighted(reference_config: ProblemConfig) -> None:
    result = run_rule_search(reference_config, SearchParams(iterations=30, seed=2))
    weighted = [s.scores.weighted for s in result.front]
    assert weighted == sorted(weighted, reverse=True)
    assert all(s.is_valid for s in result.solutions)


def test_rule_search_rejects_cyclic_instance() -> None:
    config = ProblemConfig(takt_time=10)
    config.add_task(Task("A", 2))
    config.add_task(Task("B", 2))
    config.add_precedence("A", "B")
    config.add_precedence("B", "A")
    with pytest.raises(ConfigurationError):
        run_rule_search(config, SearchParams(iterations=5))
    with pytest.raises(ConfigurationError):
        run_station_sweep(config, SearchParams(iterations=5))


def test_station_range_defaults(diamond_config: ProblemConfig) -> None:
    assert station_range(diamond_config, SearchParams()) == (2, 4)
    assert station_range(diamond_config, SearchParams(max_sweep_width=2)) == (2, 3)
    assert station_range(diamond_config, SearchParams(min_stations=3, max_stations=3)) == (3, 3)
    with pytest.raises(ValueError):
        station_range(diamond_config, SearchParams(min_stations=4, max_stations=2))


def test_station_sweep_on_diamond(diamond_config: ProblemConfig) -> None:
    params = SearchParams(iterations=5, min_stations=2, max_stations=2)
    result = run_station_sweep(diamond_config, params)
    assert _hashes(result) == ["A,C|B,D"]
    assert result.attempts == 5
    assert result.duplicates == 4
    assert result.meta == {"station_range": [2, 2], "per_target": {2: 1}}
    assert result.label == "sweep"


def test_station_sweep_is_reproducible_and_feasible() -> None:
    config = generate_instance(20, seed=4)
    params = SearchParams(iterations=30, seed=3, max_stdev=100.0)
    first = run_station_sweep(config, params)
    second = run_station_sweep(config, SearchParams(iterations=30, seed=3, max_stdev=100.0, workers=3))
    assert _hashes(first) == _hashes(second)
    assert first.rejected == 0
    low, high = first.meta["station_range"]
    for solution in first.solutions:
        assert solution.is_valid
        assert low <= solution.num_stations <= high
