"""Search modes: priority-rule multi-start and station-count sweep."""

from molb.modes.common import Population, SearchParams, SearchResult
from molb.modes.rules import run_rule_search
from molb.modes.sweep import run_station_sweep

__all__ = [
    "Population",
    "SearchParams",
    "SearchResult",
    "run_rule_search",
    "run_station_sweep",
]
