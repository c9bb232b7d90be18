"""Autonomous-vehicle fleet scenario simulator with anchor-merged history."""

from .anchors.classifier import SplitAnchors, classify
from .config.loader import load_config, load_profile
from .errors import InvalidParameterError
from .merge.timeline import MergedYearRecord, Provenance, last_anchor_year, merge_timeline
from .simulation.engine import (
    CohortSimulationEngine,
    SimulationResult,
    YearRecord,
    simulate,
    simulate_profile,
)

__version__ = "1.0.0"

__all__ = [
    "CohortSimulationEngine",
    "SimulationResult",
    "YearRecord",
    "simulate",
    "simulate_profile",
    "SplitAnchors",
    "classify",
    "MergedYearRecord",
    "Provenance",
    "merge_timeline",
    "last_anchor_year",
    "load_config",
    "load_profile",
    "InvalidParameterError",
]
