"""Predefined scenario library for fleet simulation comparison."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from pydantic import ValidationError

from ..config.schema import ScenarioProfile
from ..errors import InvalidParameterError
from ..simulation.engine import SimulationResult, simulate_profile
from .summary import summarize


@dataclass
class Scenario:
    """A named scenario with profile overrides."""
    name: str
    description: str
    category: str  # "outlook", "stress_test", "sensitivity"
    overrides: Dict[str, Any] = field(default_factory=dict)  # profile path -> value
    scales: Dict[str, float] = field(default_factory=dict)  # profile path -> multiplier


@dataclass
class ScenarioComparison:
    """Result of comparing multiple scenarios."""
    scenarios: Dict[str, Scenario]
    results: Dict[str, SimulationResult]
    summary: Dict[str, Dict[str, Any]]  # scenario_name -> metrics summary


# ============================================================================
# PREDEFINED SCENARIOS
# ============================================================================

SCENARIO_LIBRARY = {
    # === Outlook Scenarios ===
    "conservative": Scenario(
        name="Conservative",
        description="Slower city launches, longer ramps, lower utilization and margins",
        category="outlook",
        scales={
            "inputs.cities_per_year": 0.5,
            "inputs.ramp_time_per_city": 1.5,
            "inputs.profit_per_mile": 0.8,
            "multipliers.production_utilization": 0.75,
        }
    ),

    "base": Scenario(
        name="Base",
        description="Profile as configured",
        category="outlook",
    ),

    "aggressive": Scenario(
        name="Aggressive",
        description="Faster city launches, shorter ramps, higher utilization and margins",
        category="outlook",
        scales={
            "inputs.cities_per_year": 1.5,
            "inputs.ramp_time_per_city": 0.75,
            "inputs.profit_per_mile": 1.1,
            "multipliers.production_utilization": 1.25,
        }
    ),

    # === Stress Tests ===
    "no_taper": Scenario(
        name="No R&D Taper",
        description="R&D spend never tapers, even after break-even",
        category="stress_test",
        overrides={
            "multipliers.rd_taper_after_breakeven": 1.0,
        }
    ),

    "slow_ramp": Scenario(
        name="Slow Ramp",
        description="Cities take twice as long to reach production",
        category="stress_test",
        scales={
            "inputs.ramp_time_per_city": 2.0,
        }
    ),
}


def apply_overrides(profile: ScenarioProfile, scenario: Scenario) -> ScenarioProfile:
    """
    Build a new profile with a scenario's overrides and scales applied.

    Args:
        profile: Base profile (left untouched)
        scenario: Scenario with dotted-path overrides

    Returns:
        Re-validated profile

    Raises:
        InvalidParameterError: if the result violates the schema
    """
    data = profile.model_dump()

    for path, factor in scenario.scales.items():
        _set_path(data, path, _get_path(data, path) * factor)
    for path, value in scenario.overrides.items():
        _set_path(data, path, value)

    if scenario.overrides or scenario.scales:
        data["name"] = f"{profile.name} ({scenario.name})"

    try:
        return ScenarioProfile.model_validate(data)
    except ValidationError as exc:
        raise InvalidParameterError(str(exc)) from exc


def _get_path(data: Dict[str, Any], path: str) -> Any:
    obj = data
    for part in path.split('.'):
        obj = obj[part]
    return obj


def _set_path(data: Dict[str, Any], path: str, value: Any) -> None:
    """Set a value in a nested dict using dot-notation path."""
    parts = path.split('.')
    obj = data
    for part in parts[:-1]:
        obj = obj[part]
    if parts[-1] not in obj:
        raise ValueError(f"Unknown parameter: {path}")
    obj[parts[-1]] = value


class ScenarioRunner:
    """Run and compare predefined scenarios."""

    def __init__(self, base_profile: ScenarioProfile):
        """
        Initialize scenario runner.

        Args:
            base_profile: Profile to apply overrides to
        """
        self.base_profile = base_profile

    def get_available_scenarios(self) -> Dict[str, Scenario]:
        """Get all available scenarios."""
        return SCENARIO_LIBRARY.copy()

    def get_scenarios_by_category(self, category: str) -> Dict[str, Scenario]:
        """Get scenarios filtered by category."""
        return {
            name: scenario
            for name, scenario in SCENARIO_LIBRARY.items()
            if scenario.category == category
        }

    def run_scenario(self, scenario_name: str) -> SimulationResult:
        """
        Run a single scenario.

        Args:
            scenario_name: Name of scenario from library

        Returns:
            Simulation result
        """
        if scenario_name not in SCENARIO_LIBRARY:
            raise ValueError(f"Unknown scenario: {scenario_name}")

        profile = apply_overrides(self.base_profile, SCENARIO_LIBRARY[scenario_name])
        return simulate_profile(profile)

    def compare_scenarios(self, scenario_names: List[str]) -> ScenarioComparison:
        """
        Run and compare multiple scenarios.

        Unknown names are skipped.

        Args:
            scenario_names: List of scenario names to compare

        Returns:
            ScenarioComparison result
        """
        scenarios = {}
        results = {}
        summary = {}

        for name in scenario_names:
            if name not in SCENARIO_LIBRARY:
                continue

            scenarios[name] = SCENARIO_LIBRARY[name]
            results[name] = self.run_scenario(name)
            summary[name] = summarize(results[name])

        return ScenarioComparison(
            scenarios=scenarios,
            results=results,
            summary=summary
        )

    def compare_outlooks(self) -> ScenarioComparison:
        """Compare conservative, base and aggressive outlooks."""
        return self.compare_scenarios(["conservative", "base", "aggressive"])

    def run_stress_tests(self) -> ScenarioComparison:
        """Run all stress test scenarios alongside the base case."""
        stress_scenarios = list(self.get_scenarios_by_category("stress_test").keys())
        return self.compare_scenarios(["base"] + stress_scenarios)


def format_comparison_table(comparison: ScenarioComparison) -> str:
    """
    Format scenario comparison as a text table.

    Args:
        comparison: ScenarioComparison result

    Returns:
        Formatted table string
    """
    lines = []
    headers = ["Scenario", "Break-even", "ROI yr5 %", "ROI yr10 %", "Cash ($B)", "NPV ($B)"]
    lines.append(" | ".join(f"{h:>12}" for h in headers))
    lines.append("-" * 85)

    for name, summary in comparison.summary.items():
        scenario = comparison.scenarios.get(name)
        display_name = scenario.name if scenario else name
        break_even = summary['break_even_year']

        row = [
            f"{display_name[:12]:>12}",
            f"{break_even if break_even is not None else 'never':>12}",
            f"{summary['roi_year5']:>12.1f}",
            f"{summary['roi_year10']:>12.1f}",
            f"{summary['final_cumulative_net_cash']/1e9:>12,.1f}",
            f"{summary['npv']/1e9:>12,.1f}"
        ]
        lines.append(" | ".join(row))

    return "\n".join(lines)
