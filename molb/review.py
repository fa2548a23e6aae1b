"""Peer review of solutions submitted by another team.

Validates and scores every submitted solution, classifies it as invalid,
Pareto-optimal or dominated, and optionally searches for own solutions that
dominate the submitted front or extend it.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Optional, Sequence

from molb.feasibility import validate_solution
from molb.heuristics import generate_all_solutions
from molb.models import ProblemConfig, Solution
from molb.objectives import calculate_all_scores
from molb.pareto import dominates, pareto_front

logger = logging.getLogger("molb.review")


@dataclass
class ReviewResult:
    solution: Solution
    is_valid: bool = True
    violations: list[str] = field(default_factory=list)
    is_dominated: bool = False
    dominated_by: Optional[Solution] = None


@dataclass
class Suggestion:
    """Own solution worth reporting back.

    ``kind`` is ``"dominating"`` (beats a submitted front member, named by
    ``their_hash``) or ``"extension"`` (new point on the combined front).
    """

    kind: str
    solution: Solution
    their_hash: Optional[str] = None


@dataclass
class PeerReviewReport:
    reviewed: list[ReviewResult] = field(default_factory=list)
    valid_count: int = 0
    invalid_count: int = 0
    dominated_count: int = 0
    pareto_count: int = 0
    improved: list[Solution] = field(default_factory=list)
    suggestions: list[Suggestion] = field(default_factory=list)

    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.reviewed),
            "valid": self.valid_count,
            "invalid": self.invalid_count,
            "dominated": self.dominated_count,
            "pareto_optimal": self.pareto_count,
            "improvements": len(self.improved),
        }


def review_solutions(
    solutions: Sequence[Solution],
    config: ProblemConfig,
    generate_improvements: bool = True,
    iterations: int = 50,
    rng: Optional[random.Random] = None,
) -> PeerReviewReport:
    """Review ``solutions`` against ``config``.

    Args:
        solutions: Submitted solutions; validity and scores are overwritten.
        config: Problem instance.
        generate_improvements: Run a short priority-rule search and report own
            solutions that dominate or extend the submitted front.
        iterations: Budget of that search.
        rng: Random generator for the search.

    Returns:
        PeerReviewReport with one ReviewResult per submitted solution.
    """
    report = PeerReviewReport()
    for solution in solutions:
        validate_solution(solution, config)
        calculate_all_scores(solution, config)
        result = ReviewResult(solution, solution.is_valid, list(solution.violations))
        if result.is_valid:
            report.valid_count += 1
        else:
            report.invalid_count += 1
        report.reviewed.append(result)

    valid = [s for s in solutions if s.is_valid]
    front = pareto_front(valid)
    front_keys = {s.canonical_hash() for s in front}
    for result in report.reviewed:
        if not result.is_valid:
            continue
        if result.solution.canonical_hash() in front_keys:
            report.pareto_count += 1
            continue
        result.is_dominated = True
        report.dominated_count += 1
        result.dominated_by = next((p for p in front if dominates(p, result.solution)), None)

    if not generate_improvements:
        return report

    own = generate_all_solutions(config, iterations=iterations, rng=rng)
    own_valid = []
    for solution in own:
        validate_solution(solution, config)
        if solution.is_valid:
            calculate_all_scores(solution, config)
            own_valid.append(solution)

    improved_keys: set[str] = set()
    for mine in own_valid:
        beaten = [theirs for theirs in front if dominates(mine, theirs)]
        for theirs in beaten:
            report.suggestions.append(
                Suggestion("dominating", mine, their_hash=theirs.canonical_hash())
            )
        if beaten:
            report.improved.append(mine)
            improved_keys.add(mine.canonical_hash())

    own_keys = {s.canonical_hash() for s in own_valid}
    for solution in pareto_front(valid + own_valid):
        key = solution.canonical_hash()
        if key in front_keys or key not in own_keys or key in improved_keys:
            continue
        report.improved.append(solution)
        improved_keys.add(key)
        report.suggestions.append(Suggestion("extension", solution))

    logger.info(
        "Peer review: %d submitted, %d valid, %d Pareto-optimal, %d improvements",
        len(report.reviewed),
        report.valid_count,
        report.pareto_count,
        len(report.improved),
    )
    return report


def _triple(solution: Solution) -> str:
    s = solution.scores
    return f"{s.economic:.2f}/{s.social:.2f}/{s.environmental:.2f}"


def format_review_report(report: PeerReviewReport) -> str:
    """Render the report as Markdown."""
    summary = report.summary()
    lines = [
        "# Peer review report",
        "",
        "## Summary",
        f"- Solutions reviewed: {summary['total']}",
        f"- Valid solutions: {summary['valid']}",
        f"- Invalid solutions: {summary['invalid']}",
        f"- Pareto-optimal solutions: {summary['pareto_optimal']}",
        f"- Dominated solutions: {summary['dominated']}",
        f"- Improved alternatives found: {summary['improvements']}",
        "",
    ]
    if summary["invalid"]:
        lines.append("## Invalid solutions")
        for index, result in enumerate(report.reviewed, start=1):
            if result.is_valid:
                continue
            lines += ["", f"### Solution {index}", "Violations:"]
            lines += [f"- {v}" for v in result.violations]
        lines.append("")
    if summary["dominated"]:
        lines += ["## Dominated solutions", "These solutions are not Pareto-optimal:"]
        for index, result in enumerate(report.reviewed, start=1):
            if not result.is_dominated:
                continue
            line = f"- Solution {index}"
            if result.dominated_by is not None:
                line += (
                    f" ({_triple(result.solution)}) dominated by "
                    f"({_triple(result.dominated_by)})"
                )
            lines.append(line)
        lines.append("")
    if summary["improvements"]:
        lines += ["## Improvements", f"Found {summary['improvements']} better solutions:", ""]
        for suggestion in report.suggestions:
            s = suggestion.solution.scores
            label = "Dominating solution" if suggestion.kind == "dominating" else "Pareto extension"
            lines.append(
                f"- **{label}**: econ={s.economic:.2f}, soc={s.social:.2f}, "
                f"env={s.environmental:.2f}"
            )
    return "\n".join(lines) + "\n"
