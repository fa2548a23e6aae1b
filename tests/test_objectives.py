import pytest

from molb.models import ProblemConfig, Scores, Solution, Station, Task, Weights
from molb.objectives import (
    calculate_all_scores,
    economic_score,
    environmental_score,
    social_score,
    station_time_stdev,
    update_weighted_scores,
    weighted_score,
)


def _diamond_solution(config: ProblemConfig) -> Solution:
    t = config.tasks
    return Solution([Station("S1", [t["A"], t["C"]]), Station("S2", [t["B"], t["D"]])])


def test_scores_of_two_station_diamond(diamond_config: ProblemConfig) -> None:
    solution = calculate_all_scores(_diamond_solution(diamond_config), diamond_config)
    assert solution.scores.economic == pytest.approx(0.7)
    assert solution.scores.social == pytest.approx(22 / 24)
    assert solution.scores.environmental == pytest.approx(0.5)
    assert solution.scores.weighted == pytest.approx(0.4 * 0.7 + 0.3 * 22 / 24 + 0.3 * 0.5)


def test_single_task_single_station_is_perfect() -> None:
    config = ProblemConfig(takt_time=8)
    task = Task("A", 8, "M1")
    config.add_task(task)
    solution = calculate_all_scores(Solution([Station("S1", [task])]), config)
    assert solution.scores.objectives() == (1.0, 1.0, 1.0)
    assert solution.scores.weighted == pytest.approx(1.0)


def test_equal_station_times_are_perfectly_balanced() -> None:
    solution = Solution([Station("S1", [Task("A", 20)]), Station("S2", [Task("B", 20)])])
    assert station_time_stdev(solution) == 0.0
    assert social_score(solution, 5.0) == 1.0


def test_social_score_clamps_at_ceiling() -> None:
    solution = Solution([Station("S1", [Task("A", 2)]), Station("S2", [Task("B", 40)])])
    assert station_time_stdev(solution) == pytest.approx(19.0)
    assert social_score(solution, 10.0) == 0.0
    assert social_score(solution, 38.0) == pytest.approx(0.5)
    assert social_score(solution, 0.0) == 0.0


def test_economic_score_edge_cases(diamond_config: ProblemConfig) -> None:
    assert economic_score(Solution(), diamond_config) == 0.0
    overloaded = Solution([Station("S1", list(diamond_config.tasks.values()))])
    assert economic_score(overloaded, diamond_config) == 1.0


def test_environmental_score_counts_distinct_tools_per_station() -> None:
    config = ProblemConfig(takt_time=20)
    tasks = [Task("A", 1, "M1"), Task("B", 1, "M2"), Task("C", 1, "M1"), Task("D", 1, "M2")]
    for task in tasks:
        config.add_task(task)
    mixed = Solution([Station("S1", [tasks[0], tasks[1]]), Station("S2", [tasks[2], tasks[3]])])
    grouped = Solution([Station("S1", [tasks[0], tasks[2]]), Station("S2", [tasks[1], tasks[3]])])
    assert environmental_score(mixed, config) == 0.0
    assert environmental_score(grouped, config) == 1.0


def test_weighted_score_normalizes_and_handles_zero_weights() -> None:
    scores = Scores(1.0, 0.5, 0.0)
    assert weighted_score(scores, Weights(2.0, 2.0, 0.0)) == pytest.approx(0.75)
    assert weighted_score(scores, Weights(0.0, 0.0, 0.0)) == 0.0


def test_invalid_solution_gets_zero_scores(diamond_config: ProblemConfig) -> None:
    solution = _diamond_solution(diamond_config)
    solution.is_valid = False
    calculate_all_scores(solution, diamond_config)
    assert solution.scores == Scores()


def test_update_weighted_scores(diamond_config: ProblemConfig) -> None:
    solution = calculate_all_scores(_diamond_solution(diamond_config), diamond_config)
    update_weighted_scores([solution], Weights(1.0, 0.0, 0.0))
    assert solution.scores.weighted == pytest.approx(0.7)
