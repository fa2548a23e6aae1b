import pytest

from molb.models import ProblemConfig, Task
from molb.precedence import (
    ConfigurationError,
    all_predecessors,
    all_successors,
    available_tasks,
    has_cycle,
    layers,
    positional_weight,
    positional_weights,
    slack,
    station_lower_bound,
    topological_order,
    transitive_closure,
    validate_config,
)


def _cyclic_config() -> ProblemConfig:
    config = ProblemConfig(takt_time=10)
    config.add_task(Task("A", 2))
    config.add_task(Task("B", 2))
    config.add_precedence("A", "B")
    config.add_precedence("B", "A")
    return config


def _chain(n: int) -> ProblemConfig:
    config = ProblemConfig(takt_time=10)
    ids = [f"T{i}" for i in range(n)]
    for tid in ids:
        config.add_task(Task(tid, 1))
    for before, after in zip(ids, ids[1:]):
        config.add_precedence(before, after)
    return config


def test_cycle_detection(diamond_config: ProblemConfig) -> None:
    assert has_cycle(diamond_config) is False
    cyclic = _cyclic_config()
    assert has_cycle(cyclic) is True
    assert topological_order(cyclic) is None


def test_topological_order_is_fifo(diamond_config: ProblemConfig) -> None:
    order = topological_order(diamond_config)
    assert [t.id for t in order] == ["A", "B", "C", "D"]


def test_topological_order_respects_every_edge(reference_config: ProblemConfig) -> None:
    order = [t.id for t in topological_order(reference_config)]
    position = {tid: i for i, tid in enumerate(order)}
    assert len(order) == len(reference_config)
    for before, after in reference_config.edges():
        assert position[before] < position[after]


def test_available_tasks(diamond_config: ProblemConfig) -> None:
    assert [t.id for t in available_tasks(diamond_config, set())] == ["A"]
    assert [t.id for t in available_tasks(diamond_config, {"A"})] == ["B", "C"]
    assert [t.id for t in available_tasks(diamond_config, ["A", "B"])] == ["C"]
    assert [t.id for t in available_tasks(diamond_config, {"A", "B", "C"})] == ["D"]


def test_positional_weight_sums_direct_successors(diamond_config: ProblemConfig) -> None:
    weights = positional_weights(diamond_config)
    assert weights == {"A": 16, "B": 5, "C": 6, "D": 2}
    assert positional_weight(diamond_config, "C") == 6


def test_positional_weight_memo_is_reused(diamond_config: ProblemConfig) -> None:
    memo = {"D": 100}
    assert positional_weight(diamond_config, "B", memo) == 103
    assert memo["B"] == 103


def test_positional_weight_handles_deep_chains() -> None:
    config = _chain(3000)
    assert positional_weight(config, "T0") == 3000


def test_positional_weight_raises_on_cycle() -> None:
    with pytest.raises(ConfigurationError):
        positional_weights(_cyclic_config())


def test_slack(diamond_config: ProblemConfig) -> None:
    assert slack(diamond_config, "A") == 4
    assert slack(diamond_config, "B") == 5
    assert slack(diamond_config, "C") == 4
    assert slack(diamond_config, "D") == 8


def test_transitive_closure(diamond_config: ProblemConfig) -> None:
    assert all_successors(diamond_config, "A") == {"B", "C", "D"}
    assert all_successors(diamond_config, "D") == set()
    assert all_predecessors(diamond_config, "D") == {"A", "B", "C"}
    assert all_predecessors(diamond_config, "A") == set()
    assert transitive_closure(diamond_config, "B", "predecessors") == {"A"}
    with pytest.raises(ValueError):
        transitive_closure(diamond_config, "A", "sideways")


def test_transitive_closure_terminates_on_cycle() -> None:
    assert all_successors(_cyclic_config(), "A") == {"A", "B"}


def test_station_lower_bound(diamond_config: ProblemConfig, reference_config) -> None:
    assert station_lower_bound(diamond_config) == 2
    assert station_lower_bound(reference_config) == 7
    assert station_lower_bound(ProblemConfig()) == 0


def test_layers(diamond_config: ProblemConfig) -> None:
    assert layers(diamond_config) == {"A": 0, "B": 1, "C": 1, "D": 2}
    with pytest.raises(ConfigurationError):
        layers(_cyclic_config())


def test_validate_config(diamond_config: ProblemConfig) -> None:
    validate_config(diamond_config)

    with pytest.raises(ConfigurationError):
        validate_config(_cyclic_config())

    diamond_config.add_precedence("D", "GHOST")
    with pytest.raises(ConfigurationError, match="GHOST"):
        validate_config(diamond_config)


def test_validate_config_rejects_non_positive_takt(diamond_config: ProblemConfig) -> None:
    diamond_config.takt_time = 0
    with pytest.raises(ConfigurationError):
        validate_config(diamond_config)
    # ConfigurationError is a ValueError so generic callers can catch either
    assert issubclass(ConfigurationError, ValueError)
