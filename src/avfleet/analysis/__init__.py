"""Analysis tools for fleet simulation."""

from .scenarios import (
    SCENARIO_LIBRARY,
    Scenario,
    ScenarioComparison,
    ScenarioRunner,
    apply_overrides,
    format_comparison_table,
)
from .summary import net_present_value, rd_amortized_per_mile, summarize

__all__ = [
    # Scenario comparison
    "Scenario",
    "ScenarioComparison",
    "ScenarioRunner",
    "SCENARIO_LIBRARY",
    "apply_overrides",
    "format_comparison_table",
    # Summary metrics
    "summarize",
    "net_present_value",
    "rd_amortized_per_mile",
]
