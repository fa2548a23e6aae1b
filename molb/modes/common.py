"""Shared primitives used by search modes.

This module isolates the parameter bundle (`SearchParams`), the
deduplicating `Population` every mode merges its candidates into, the
`SearchResult` returned to callers and a small executor helper
(`run_attempts`) so that each mode (priority-rule multi-start, station-count
sweep) only describes *which* attempts to run.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, Optional

from molb.feasibility import validate_solution
from molb.models import ProblemConfig, Solution
from molb.objectives import calculate_all_scores
from molb.pareto import pareto_front
from molb.heuristics import PRIORITY_RULES

logger = logging.getLogger("molb")


@dataclass(slots=True)
class SearchParams:
    """Bundle of all configurable knobs of the search modes.

    Station-count bounds, time ceiling and stdev ceiling default to values
    derived from the instance when left as ``None``.
    """
    iterations: int = 100
    rules: tuple[str, ...] = PRIORITY_RULES
    seed: int = 0
    min_stations: Optional[int] = None
    max_stations: Optional[int] = None
    max_sweep_width: int = 16
    max_time: Optional[int] = None
    max_stdev: Optional[float] = None
    tool_variety: int = 3
    workers: int = 1


class Population:
    """Hash-deduplicated set of validated and scored solutions.

    ``offer`` serializes insertion with a lock; solutions are never mutated
    after they are accepted.
    """

    def __init__(self, config: ProblemConfig):
        self.config = config
        self._lock = threading.Lock()
        self._seen: set[str] = set()
        self.solutions: list[Solution] = []
        self.duplicates = 0
        self.rejected = 0

    def offer(self, solution: Solution) -> bool:
        """Validate, score and keep ``solution`` unless its hash is known.

        Returns:
            True when the solution is new and feasible.
        """
        key = solution.canonical_hash()
        with self._lock:
            if key in self._seen:
                self.duplicates += 1
                return False
            self._seen.add(key)
            validate_solution(solution, self.config)
            if not solution.is_valid:
                self.rejected += 1
                logger.debug("Rejected %s: %s", key, "; ".join(solution.violations))
                return False
            calculate_all_scores(solution, self.config)
            self.solutions.append(solution)
            return True

    def __len__(self) -> int:
        return len(self.solutions)

    def __iter__(self) -> Iterator[Solution]:
        return iter(self.solutions)


@dataclass
class SearchResult:
    """Outcome of one search run."""

    solutions: list[Solution]
    front: list[Solution]
    attempts: int
    stalled: int
    duplicates: int
    rejected: int
    elapsed: float = 0.0
    label: str = ""
    meta: dict = field(default_factory=dict)

    @classmethod
    def from_population(
        cls, population: Population, attempts: int, stalled: int, elapsed: float, label: str
    ) -> SearchResult:
        front = sorted(
            pareto_front(population.solutions),
            key=lambda s: s.scores.weighted,
            reverse=True,
        )
        return cls(
            solutions=list(population.solutions),
            front=front,
            attempts=attempts,
            stalled=stalled,
            duplicates=population.duplicates,
            rejected=population.rejected,
            elapsed=elapsed,
            label=label,
        )


def run_attempts(
    attempts: Iterable[Callable[[], Optional[Solution]]],
    population: Population,
    workers: int = 1,
) -> tuple[int, int]:
    """Execute construction attempts and merge them into ``population``.

    Attempts run sequentially for ``workers <= 1`` and on a thread pool
    otherwise; results are merged in submission order so a seeded run
    yields the same population either way.

    Returns:
        Tuple ``(attempt_count, stalled_count)``.
    """
    count = 0
    stalled = 0
    if workers <= 1:
        for attempt in attempts:
            count += 1
            solution = attempt()
            if solution is None:
                stalled += 1
            else:
                population.offer(solution)
        return count, stalled
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(attempt) for attempt in attempts]
        for future in futures:
            count += 1
            solution = future.result()
            if solution is None:
                stalled += 1
            else:
                population.offer(solution)
    return count, stalled
