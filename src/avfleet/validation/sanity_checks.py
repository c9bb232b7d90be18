"""Sanity checks and validation for simulation inputs and outputs."""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..config.schema import ScenarioProfile
from ..simulation.engine import USD_PER_BILLION, SimulationResult, YearRecord

# Relative tolerance when re-deriving cumulative sums
SUM_TOLERANCE = 1e-9


@dataclass
class ValidationWarning:
    """A validation warning with severity and message."""
    severity: str  # "warning" or "error"
    category: str  # e.g., "input", "sequence", "cumulative", "nan"
    message: str
    details: Optional[str] = None


def _close(a: float, b: float) -> bool:
    return math.isclose(a, b, rel_tol=SUM_TOLERANCE, abs_tol=1e-6)


class SanityChecker:
    """Run sanity checks on a profile and its simulated series."""

    def __init__(self, profile: ScenarioProfile):
        """Initialize with a scenario profile."""
        self.profile = profile

    def check_profile_inputs(self) -> List[ValidationWarning]:
        """
        Check profile inputs for implausible values.

        Hard limits are enforced by the schema; these are soft warnings.

        Returns:
            List of validation warnings
        """
        warnings = []
        inputs = self.profile.inputs
        multipliers = self.profile.multipliers

        if inputs.years_to_simulate == 0:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="years_to_simulate is 0; the series will be empty",
            ))

        if inputs.years_to_simulate > 100:
            warnings.append(ValidationWarning(
                severity="warning",
                category="bounds",
                message="Horizon longer than 100 years",
                details=f"Current value: {inputs.years_to_simulate} years"
            ))

        if inputs.ramp_time_per_city > inputs.years_to_simulate > 0:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Ramp time exceeds the horizon; no cohort reaches production",
                details=f"Ramp: {inputs.ramp_time_per_city:.1f} yrs, Horizon: {inputs.years_to_simulate} yrs"
            ))

        if multipliers.production_utilization > 24 * 60:
            warnings.append(ValidationWarning(
                severity="warning",
                category="bounds",
                message="Production utilization implies an average speed above 60 mph around the clock",
                details=f"Current value: {multipliers.production_utilization:,.0f} mi/vehicle/day"
            ))

        if inputs.profit_per_mile <= 0:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Non-positive profit per mile; the scenario can never break even",
                details=f"Current value: ${inputs.profit_per_mile:.2f}/mi"
            ))

        return warnings

    def check_series(self, series: Sequence[YearRecord]) -> List[ValidationWarning]:
        """
        Re-derive the sequential invariants of a simulated series.

        Returns:
            List of validation warnings (errors for broken invariants)
        """
        warnings = []
        inputs = self.profile.inputs

        if len(series) != inputs.years_to_simulate:
            warnings.append(ValidationWarning(
                severity="error",
                category="sequence",
                message=f"Series has {len(series)} years, expected {inputs.years_to_simulate}",
            ))

        running_cash = 0.0
        running_rd = 0.0
        running_trips = 0
        running_profit = 0.0
        for i, record in enumerate(series):
            expected_year = inputs.start_year + i
            if record.year != expected_year:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="sequence",
                    message=f"Year {record.year} at position {i}, expected {expected_year}",
                ))

            for name in YearRecord.field_names():
                value = getattr(record, name)
                if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
                    warnings.append(ValidationWarning(
                        severity="error",
                        category="nan",
                        message=f"Invalid value detected in {name} for {record.year}",
                        details=f"Value: {value}"
                    ))

            running_cash += record.net_cash_flow
            running_rd += record.annual_rd_spend
            if not _close(running_cash, record.cumulative_net_cash):
                warnings.append(ValidationWarning(
                    severity="error",
                    category="cumulative",
                    message=f"cumulative_net_cash drifts from the running sum in {record.year}",
                    details=f"Expected {running_cash:,.0f}, got {record.cumulative_net_cash:,.0f}"
                ))
            if not _close(running_rd, record.cumulative_rd_spend):
                warnings.append(ValidationWarning(
                    severity="error",
                    category="cumulative",
                    message=f"cumulative_rd_spend drifts from the running sum in {record.year}",
                ))
            running_trips += record.production_trips
            running_profit += record.operating_profit
            if running_trips != record.cumulative_production_trips:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="cumulative",
                    message=f"cumulative_production_trips drifts from the running sum in {record.year}",
                ))
            if not _close(running_profit, record.cumulative_operating_profit):
                warnings.append(ValidationWarning(
                    severity="error",
                    category="cumulative",
                    message=f"cumulative_operating_profit drifts from the running sum in {record.year}",
                ))

            denominator = record.cumulative_rd_spend * USD_PER_BILLION
            expected_roi = record.cumulative_net_cash / denominator * 100 if denominator > 0 else 0.0
            if not _close(expected_roi, record.roi):
                warnings.append(ValidationWarning(
                    severity="error",
                    category="roi",
                    message=f"ROI inconsistent with cumulative cash and R&D in {record.year}",
                    details=f"Expected {expected_roi:.4f}%, got {record.roi:.4f}%"
                ))

        return warnings

    def check_break_even(self, result: SimulationResult) -> List[ValidationWarning]:
        """Check the break-even year is the first non-negative cumulative cash year."""
        first = next((r.year for r in result.series if r.cumulative_net_cash >= 0), None)
        if first != result.break_even_year:
            return [ValidationWarning(
                severity="error",
                category="break_even",
                message="Break-even year does not match the series",
                details=f"Expected {first}, got {result.break_even_year}"
            )]
        if first is None and result.series:
            return [ValidationWarning(
                severity="warning",
                category="sustainability",
                message="Scenario never breaks even within the horizon",
                details=f"Final cumulative cash: ${result.series[-1].cumulative_net_cash:,.0f}"
            )]
        return []


def validate_simulation_results(result: SimulationResult) -> List[ValidationWarning]:
    """
    Validate a complete simulation result.

    Args:
        result: Simulation result

    Returns:
        List of all validation warnings
    """
    checker = SanityChecker(result.profile)
    warnings = []

    # Check inputs first
    warnings.extend(checker.check_profile_inputs())
    warnings.extend(checker.check_series(result.series))
    warnings.extend(checker.check_break_even(result))

    return warnings
