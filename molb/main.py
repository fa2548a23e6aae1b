import argparse
import logging
import os
import sys
from datetime import datetime
from typing import Any, Dict, Optional

from molb.instances import generate_instance, reference_instance
from molb.models import ProblemConfig, Weights
from molb.modes.common import SearchParams, SearchResult
from molb.modes.rules import run_rule_search
from molb.modes.sweep import run_station_sweep
from molb.pareto import analyze_solutions, select_diverse
from molb.precedence import ConfigurationError
from molb.reporting import population_statistics, write_solutions_csv
from molb.serialization import (
    config_to_dict,
    export_solutions,
    load_problem,
    load_structured,
    save_json,
)

logger = logging.getLogger("molb")

MODES = ("sweep", "rules", "both")


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    return cfg.get(name, {}) if isinstance(cfg.get(name), dict) else {}


def build_problem(cfg: Dict[str, Any]) -> ProblemConfig:
    """Resolve ``instance`` (builtin / generated / path) and apply overrides."""
    instance = cfg.get("instance", "builtin")
    if instance == "builtin":
        config = reference_instance()
    elif instance == "generated":
        gen_cfg = _section(cfg, "generator")
        config = generate_instance(
            num_tasks=int(gen_cfg.get("tasks", 20)),
            seed=int(gen_cfg.get("seed", cfg.get("seed", 0))),
            edge_probability=float(gen_cfg.get("edge_probability", 0.15)),
            tool_types=tuple(gen_cfg.get("tool_types", ("M1", "M2", "M3"))),
        )
    else:
        config = load_problem(str(instance))

    problem_cfg = _section(cfg, "problem")
    if "takt_time" in problem_cfg:
        config.takt_time = int(problem_cfg["takt_time"])
    for tool_type, limit in (problem_cfg.get("tool_limits") or {}).items():
        config.set_tool_limit(str(tool_type), int(limit))
    if problem_cfg.get("weights"):
        config.weights = Weights(**{k: float(v) for k, v in problem_cfg["weights"].items()})
    if problem_cfg.get("max_stdev") is not None:
        config.max_stdev = float(problem_cfg["max_stdev"])
    return config


def build_params(cfg: Dict[str, Any]) -> SearchParams:
    search_cfg = _section(cfg, "search")
    params = SearchParams(
        iterations=int(search_cfg.get("iterations", 100)),
        seed=int(cfg.get("seed", 0)),
        min_stations=search_cfg.get("min_stations"),
        max_stations=search_cfg.get("max_stations"),
        max_time=search_cfg.get("max_time"),
        max_stdev=search_cfg.get("max_stdev"),
        tool_variety=int(search_cfg.get("tool_variety", 3)),
        workers=int(search_cfg.get("workers", 1)),
    )
    if search_cfg.get("rules"):
        params.rules = tuple(search_cfg["rules"])
    if search_cfg.get("max_sweep_width"):
        params.max_sweep_width = int(search_cfg["max_sweep_width"])
    return params


def run(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Execute one configured run and write its artifacts.

    Returns:
        The JSON payload written to ``results_<timestamp>.json`` with an extra
        ``artifacts`` list of produced file paths.

    Raises:
        ConfigurationError: If the instance cannot be solved at all.
        ValueError: On an unknown search mode.
    """
    config = build_problem(cfg)
    params = build_params(cfg)
    mode = _section(cfg, "search").get("mode", "sweep")
    if mode not in MODES:
        raise ValueError(f"Unknown search mode: {mode}")
    logger.info(
        "Instance: tasks=%d edges=%d takt=%d tools=%s",
        len(config),
        len(config.edges()),
        config.takt_time,
        ",".join(sorted(config.tool_types())),
    )

    results: list[SearchResult] = []
    if mode in ("sweep", "both"):
        results.append(run_station_sweep(config, params))
    if mode in ("rules", "both"):
        results.append(run_rule_search(config, params))

    merged: dict[str, Any] = {}
    for result in results:
        for solution in result.solutions:
            merged.setdefault(solution.canonical_hash(), solution)
    population = list(merged.values())
    analysis = analyze_solutions(population)
    front = sorted(analysis.front, key=lambda s: s.scores.weighted, reverse=True)

    out_cfg = _section(cfg, "output")
    out_dir = out_cfg.get("dir", "results")
    os.makedirs(out_dir, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    artifacts: list[str] = []

    diverse_n = out_cfg.get("diverse")
    reported = select_diverse(front, int(diverse_n)) if diverse_n else front
    payload: Dict[str, Any] = {
        "timestamp": stamp,
        "mode": mode,
        "problem": config_to_dict(config),
        "runs": [
            {
                "label": r.label,
                "attempts": r.attempts,
                "stalled": r.stalled,
                "duplicates": r.duplicates,
                "rejected": r.rejected,
                "unique": len(r.solutions),
                "front": len(r.front),
                "elapsed_s": r.elapsed,
                **r.meta,
            }
            for r in results
        ],
        "statistics": population_statistics(population),
        "front_size": analysis.front_size,
        "dominated": analysis.dominated,
        "best": analysis.best.canonical_hash() if analysis.best else None,
        "pareto": export_solutions(reported),
    }
    if not population:
        logger.warning("No feasible solutions found")

    csv_path = write_solutions_csv(reported, os.path.join(out_dir, f"pareto_{stamp}.csv"))
    artifacts.append(csv_path)
    if out_cfg.get("charts", False) and front:
        from molb.visualization import plot_pareto_front, plot_station_loads

        artifacts.append(
            plot_pareto_front(
                population,
                front,
                os.path.join(out_dir, f"pareto_{stamp}.png"),
                best=analysis.best,
            )
        )
        if analysis.best is not None:
            artifacts.append(
                plot_station_loads(
                    analysis.best,
                    config.takt_time,
                    os.path.join(out_dir, f"stations_best_{stamp}.png"),
                )
            )
    results_path = save_json(payload, os.path.join(out_dir, f"results_{stamp}.json"))
    artifacts.append(results_path)
    logger.info(
        "Solutions=%d Pareto=%d best weighted=%s -> %s",
        len(population),
        analysis.front_size,
        f"{analysis.best.scores.weighted:.4f}" if analysis.best else "n/a",
        results_path,
    )
    payload["artifacts"] = artifacts
    return payload


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Multi-objective assembly line balancing (config driven)"
    )
    parser.add_argument(
        "--config",
        required=True,
        help="Path to a YAML/JSON run configuration file",
    )
    args = parser.parse_args(argv)

    cfg: Dict[str, Any] = load_structured(args.config)
    log_level = cfg.get("log_level", "INFO")
    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        run(cfg)
    except ConfigurationError as e:
        logger.error("Invalid problem configuration: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
