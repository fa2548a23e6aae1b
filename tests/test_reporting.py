import csv
from pathlib import Path

import pytest

from molb.models import ProblemConfig, Scores, Solution, Station, Task
from molb.reporting import (
    graph_view,
    numeric_key,
    population_statistics,
    solution_breakdown,
    station_rows,
    write_solutions_csv,
)


def _solution(config: ProblemConfig) -> Solution:
    t = config.tasks
    return Solution([Station("S1", [t["A"], t["C"]]), Station("S2", [t["B"], t["D"]])])


def test_numeric_key_orders_ids_naturally() -> None:
    ids = ["T10", "T2", "T1", "WS3", "X"]
    assert sorted(ids, key=numeric_key) == ["X", "T1", "T2", "WS3", "T10"]


def test_station_rows_sorted_numerically() -> None:
    solution = Solution(
        [
            Station("S10", [Task("T12", 1), Task("T3", 1)]),
            Station("S2", [Task("T1", 1)]),
        ]
    )
    assert station_rows(solution) == [("S2", ["T1"]), ("S10", ["T3", "T12"])]


def test_population_statistics() -> None:
    assert population_statistics([])["count"] == 0
    a = Solution([Station("S1", [Task("A", 1)])], Scores(0.2, 0.4, 0.6, 0.3))
    b = Solution(
        [Station("S1", [Task("B", 1)]), Station("S2", [Task("C", 1)])],
        Scores(0.6, 0.8, 1.0, 0.7),
    )
    stats = population_statistics([a, b])
    assert stats["count"] == 2
    assert stats["best_weighted"] == pytest.approx(0.7)
    assert stats["avg_weighted"] == pytest.approx(0.5)
    assert (stats["min_stations"], stats["max_stations"]) == (1, 2)
    assert stats["avg_economic"] == pytest.approx(0.4)
    assert stats["max_environmental"] == pytest.approx(1.0)
    assert stats["min_social"] == pytest.approx(0.4)


def test_write_solutions_csv(tmp_path: Path, diamond_config: ProblemConfig) -> None:
    path = write_solutions_csv([_solution(diamond_config)], str(tmp_path / "out" / "pareto.csv"))
    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows == [
        ["Solution 1"],
        ["Workstation", "Assigned tasks"],
        ["S1", "A, C"],
        ["S2", "B, D"],
        [],
    ]


def test_graph_view(diamond_config: ProblemConfig) -> None:
    view = graph_view(diamond_config)
    layer = {n["id"]: n["layer"] for n in view["nodes"]}
    assert layer == {"A": 0, "B": 1, "C": 1, "D": 2}
    assert {"from": "A", "to": "B"} in view["edges"]
    assert len(view["edges"]) == 4


def test_solution_breakdown(diamond_config: ProblemConfig) -> None:
    breakdown = solution_breakdown(_solution(diamond_config), diamond_config)
    assert breakdown["hash"] == "A,C|B,D"
    assert breakdown["idle_time"] == 6
    first = breakdown["stations"][0]
    assert first["total_time"] == 9
    assert first["utilization"] == pytest.approx(0.9)
    assert first["tools"] == {"M1": 2}
