"""Core package for multi-objective assembly line balancing.

Exports the data model and the analysis entry points.
"""

from molb.models import ProblemConfig, Scores, Solution, Station, Task, Weights  # noqa: F401
from molb.precedence import ConfigurationError, validate_config  # noqa: F401

__all__ = [
    "ConfigurationError",
    "ProblemConfig",
    "Scores",
    "Solution",
    "Station",
    "Task",
    "Weights",
    "validate_config",
]
