from pathlib import Path

from molb.modes import SearchParams, run_rule_search
from molb.visualization import plot_pareto_front, plot_station_loads


def test_charts_are_written(tmp_path: Path, reference_config) -> None:
    result = run_rule_search(reference_config, SearchParams(iterations=15, seed=0))
    best = result.front[0]

    pareto_png = plot_pareto_front(
        result.solutions, result.front, str(tmp_path / "charts" / "pareto.png"), best=best
    )
    loads_png = plot_station_loads(best, reference_config.takt_time, str(tmp_path / "loads.png"))
    assert Path(pareto_png).is_file()
    assert Path(loads_png).is_file()
