"""Pareto dominance analysis over scored solutions."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

from molb.models import Solution

OBJECTIVES = ("economic", "social", "environmental")


def dominates(a: Solution, b: Solution) -> bool:
    """True when ``a`` is no worse in every objective and better in one."""
    better = False
    for a_val, b_val in zip(a.scores.objectives(), b.scores.objectives()):
        if a_val < b_val:
            return False
        if a_val > b_val:
            better = True
    return better


def pareto_front(solutions: Sequence[Solution]) -> list[Solution]:
    """Valid solutions not dominated by any other valid solution (O(n^2))."""
    valid = [s for s in solutions if s.is_valid]
    front: list[Solution] = []
    for candidate in valid:
        if not any(other is not candidate and dominates(other, candidate) for other in valid):
            front.append(candidate)
    return front


def crowding_distance(front: Sequence[Solution]) -> dict[str, float]:
    """NSGA-II crowding distance keyed by canonical hash.

    Fronts with at most two members get infinite distance everywhere. For
    each objective the extremes are set to infinity and interior members
    accumulate the normalized gap between their neighbours.
    """
    if len(front) <= 2:
        return {s.canonical_hash(): math.inf for s in front}
    distances = {s.canonical_hash(): 0.0 for s in front}
    for objective in OBJECTIVES:
        ordered = sorted(front, key=lambda s: getattr(s.scores, objective))
        distances[ordered[0].canonical_hash()] = math.inf
        distances[ordered[-1].canonical_hash()] = math.inf
        span = getattr(ordered[-1].scores, objective) - getattr(ordered[0].scores, objective)
        if span == 0:
            continue
        for i in range(1, len(ordered) - 1):
            key = ordered[i].canonical_hash()
            if math.isinf(distances[key]):
                continue
            gap = getattr(ordered[i + 1].scores, objective) - getattr(
                ordered[i - 1].scores, objective
            )
            distances[key] += gap / span
    return distances


def select_diverse(front: Sequence[Solution], count: int) -> list[Solution]:
    """Pick ``count`` members with the largest crowding distance."""
    if len(front) <= count:
        return list(front)
    distances = crowding_distance(front)
    ordered = sorted(front, key=lambda s: distances[s.canonical_hash()], reverse=True)
    return ordered[:count]


def best_solution(solutions: Sequence[Solution]) -> Solution | None:
    """Valid solution with the highest weighted score (first one on ties)."""
    best = None
    for solution in solutions:
        if not solution.is_valid:
            continue
        if best is None or solution.scores.weighted > best.scores.weighted:
            best = solution
    return best


def best_pareto_solution(solutions: Sequence[Solution]) -> Solution | None:
    return best_solution(pareto_front(solutions))


def rank_solutions(solutions: Sequence[Solution]) -> list[Solution]:
    return sorted(
        (s for s in solutions if s.is_valid),
        key=lambda s: s.scores.weighted,
        reverse=True,
    )


def dominated_solutions(solutions: Sequence[Solution]) -> list[Solution]:
    front_keys = {s.canonical_hash() for s in pareto_front(solutions)}
    return [s for s in solutions if s.is_valid and s.canonical_hash() not in front_keys]


@dataclass
class ParetoAnalysis:
    """Summary of a population after dominance analysis."""

    total: int
    valid: int
    invalid: int
    front_size: int
    dominated: int
    best: Solution | None
    front: list[Solution] = field(default_factory=list)
    ranked: list[Solution] = field(default_factory=list)


def analyze_solutions(solutions: Sequence[Solution]) -> ParetoAnalysis:
    valid = [s for s in solutions if s.is_valid]
    front = pareto_front(valid)
    return ParetoAnalysis(
        total=len(solutions),
        valid=len(valid),
        invalid=len(solutions) - len(valid),
        front_size=len(front),
        dominated=len(valid) - len(front),
        best=best_solution(front),
        front=front,
        ranked=rank_solutions(valid),
    )
