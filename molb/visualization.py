import logging
import os
from typing import List, Optional, Sequence

import matplotlib

matplotlib.use("Agg")  # Must be set before importing pyplot
import matplotlib.pyplot as plt  # noqa: E402

from molb.models import Solution  # noqa: E402

logger = logging.getLogger("molb")


def _ensure_dir(path: str):
    if path:
        os.makedirs(path, exist_ok=True)


def plot_pareto_front(
    solutions: Sequence[Solution],
    front: Sequence[Solution],
    save_path: str,
    best: Optional[Solution] = None,
) -> str:
    """Scatter economic vs social score, colour = environmental score.

    Dominated solutions are drawn faded, Pareto members with a black edge and
    the recommended solution (if given) with a star marker.
    """
    fig, ax = plt.subplots(figsize=(9, 6), constrained_layout=True)
    front_keys = {s.canonical_hash() for s in front}
    others = [s for s in solutions if s.canonical_hash() not in front_keys]
    if others:
        ax.scatter(
            [s.scores.economic for s in others],
            [s.scores.social for s in others],
            c=[s.scores.environmental for s in others],
            cmap="viridis",
            vmin=0.0,
            vmax=1.0,
            alpha=0.3,
            s=25,
            label="dominated",
        )
    points = ax.scatter(
        [s.scores.economic for s in front],
        [s.scores.social for s in front],
        c=[s.scores.environmental for s in front],
        cmap="viridis",
        vmin=0.0,
        vmax=1.0,
        edgecolor="black",
        linewidth=0.8,
        s=60,
        label="Pareto front",
    )
    if best is not None:
        ax.scatter(
            [best.scores.economic],
            [best.scores.social],
            marker="*",
            s=260,
            color="#FF00CC",
            edgecolor="black",
            zorder=5,
            label=f"best weighted ({best.num_stations} stations)",
        )
    fig.colorbar(points, ax=ax, label="Environmental score")
    ax.set_xlabel("Economic score", fontsize=12)
    ax.set_ylabel("Social score", fontsize=12)
    ax.set_title(
        f"Pareto front - {len(front)} of {len(solutions)} solutions",
        fontsize=14,
        fontweight="bold",
    )
    ax.grid(True, alpha=0.25, linestyle="--", linewidth=0.7)
    ax.legend(loc="lower left", frameon=False, fontsize=9)
    _ensure_dir(os.path.dirname(save_path))
    fig.savefig(save_path, dpi=180)
    plt.close(fig)
    logger.info("Pareto chart saved as: %s", save_path)
    return save_path


def plot_station_loads(solution: Solution, takt_time: int, save_path: str) -> str:
    """Bar chart of station times, stacked per task, with the takt time line."""
    m = solution.num_stations
    fig, ax = plt.subplots(figsize=(min(6 + m * 0.5, 18), 6), constrained_layout=True)
    cmap = plt.get_cmap("tab20")
    tool_colors: dict = {}
    for idx, station in enumerate(solution.stations):
        bottom = 0
        for task in station.tasks:
            color = tool_colors.setdefault(task.tool_type, cmap(len(tool_colors) % 20))
            ax.bar(
                idx,
                task.processing_time,
                bottom=bottom,
                color=color,
                edgecolor="black",
                linewidth=0.6,
                alpha=0.85,
            )
            if task.processing_time >= takt_time * 0.08:
                ax.text(
                    idx,
                    bottom + task.processing_time / 2,
                    task.id,
                    ha="center",
                    va="center",
                    fontsize=7,
                )
            bottom += task.processing_time
    ax.axhline(y=takt_time, color="red", linestyle="--", linewidth=1.2, label="takt time")
    legend_elements: List = [
        plt.Rectangle((0, 0), 1, 1, facecolor=c, edgecolor="black", label=str(tool))
        for tool, c in tool_colors.items()
    ]
    legend_elements.append(plt.Line2D([0], [0], color="red", linestyle="--", label="takt time"))
    ax.legend(
        handles=legend_elements,
        bbox_to_anchor=(1.02, 1),
        loc="upper left",
        borderaxespad=0.0,
        fontsize=8,
        frameon=False,
    )
    ax.set_xticks(range(m))
    ax.set_xticklabels([s.id for s in solution.stations], rotation=45 if m > 12 else 0)
    ax.set_xlabel("Workstation", fontsize=12)
    ax.set_ylabel("Time [s]", fontsize=12)
    ax.set_title(
        f"Station loads - weighted score = {solution.scores.weighted:.3f}",
        fontsize=14,
        fontweight="bold",
    )
    ax.grid(True, alpha=0.25, axis="y", linestyle="--", linewidth=0.7)
    _ensure_dir(os.path.dirname(save_path))
    fig.savefig(save_path, dpi=180)
    plt.close(fig)
    logger.info("Station load chart saved as: %s", save_path)
    return save_path
