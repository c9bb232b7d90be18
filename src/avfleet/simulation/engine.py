"""Cohort simulation engine - deterministic year-by-year fleet and cash flow.

Key Concepts:
- Each simulated year launches one cohort of cities; a cohort ramps its
  fleet linearly over ramp_time_per_city years
- A cohort's vehicles count as production once the cohort age reaches the
  ramp time, and as validation before that
- Cumulative cash, R&D and ROI are a strictly sequential scan over years
- R&D tapers whenever the previous year's cumulative net cash is >= 0
"""

import logging
import math
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from ..config.schema import ScenarioProfile, SimulationParameters, UtilizationProfile
from ..errors import InvalidParameterError

LOGGER = logging.getLogger(__name__)

AVG_TRIP_MILES = 6.0
WEEKS_PER_YEAR = 52
DAYS_PER_YEAR = 365
USD_PER_BILLION = 1e9


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounding towards +inf."""
    return int(math.floor(value + 0.5))


def camel_key(name: str) -> str:
    """Exchange key for a record field (annual_rd_spend -> annualRDSpend)."""
    head, *rest = name.split('_')
    return head + ''.join(part.upper() if part == 'rd' else part.capitalize() for part in rest)


def _require_finite(year: int, **values: float) -> None:
    for name, value in values.items():
        if not math.isfinite(value):
            raise InvalidParameterError(
                f"{name} is not finite in {year}; scale the inputs down"
            )


@dataclass(frozen=True)
class YearRecord:
    """Simulated fleet and cash position for one calendar year."""
    year: int
    cities_total: int
    vehicles_total: int
    vehicles_production: int
    vehicles_validation: int
    vehicles_added_this_year: int
    production_miles: float
    validation_miles: float
    cumulative_production_miles: float
    cumulative_validation_miles: float
    cumulative_total_miles: float
    production_trips: int
    cumulative_production_trips: int
    paid_trips_per_week: int
    annual_rd_spend: float  # billions USD
    cumulative_rd_spend: float  # billions USD
    operating_profit: float  # USD
    cumulative_operating_profit: float  # USD
    net_cash_flow: float  # USD
    cumulative_net_cash: float  # USD, negative until break-even
    roi: float  # percent of cumulative R&D

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(YearRecord)]

    def to_dict(self) -> Dict[str, Any]:
        """Exchange shape with camelCase keys."""
        return {camel_key(name): getattr(self, name) for name in YearRecord.field_names()}


@dataclass
class SimulationResult:
    """Complete simulation result."""
    profile: ScenarioProfile
    series: List[YearRecord]
    break_even_year: Optional[int] = None
    roi_year5: float = 0.0
    roi_year10: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)


def _coerce(model_cls, value):
    if isinstance(value, model_cls):
        return value
    try:
        return model_cls.model_validate(value)
    except ValidationError as exc:
        raise InvalidParameterError(str(exc)) from exc


class CohortSimulationEngine:
    """Year-by-year cohort fleet simulator."""

    def __init__(
        self,
        params: Union[SimulationParameters, Mapping[str, Any]],
        multipliers: Union[UtilizationProfile, Mapping[str, Any]],
        name: str = "Custom",
        description: str = "",
    ):
        """
        Initialize the engine, rejecting invalid parameters up front.

        Args:
            params: Deployment and spend inputs
            multipliers: Utilization and R&D taper profile
            name: Profile name recorded on the result

        Raises:
            InvalidParameterError: if the inputs fail validation
                (e.g. ramp_time_per_city <= 0 or years_to_simulate < 0)
        """
        self.params = _coerce(SimulationParameters, params)
        self.multipliers = _coerce(UtilizationProfile, multipliers)
        # Models built with model_construct() skip field validation.
        if self.params.ramp_time_per_city <= 0:
            raise InvalidParameterError("ramp_time_per_city must be greater than 0")
        if self.params.years_to_simulate < 0:
            raise InvalidParameterError("years_to_simulate must not be negative")
        self.profile = ScenarioProfile.model_construct(
            name=name,
            description=description,
            inputs=self.params,
            multipliers=self.multipliers,
        )

    @classmethod
    def from_profile(cls, profile: ScenarioProfile) -> 'CohortSimulationEngine':
        """Build an engine from a named profile."""
        return cls(profile.inputs, profile.multipliers, name=profile.name,
                   description=profile.description)

    def cohort_vehicles(self, year_offset: int) -> Dict[str, float]:
        """
        Sum vehicles across every cohort launched up to year_offset.

        Returns:
            Dict with total, production and validation vehicle counts
        """
        p = self.params
        vehicles_total = 0.0
        vehicles_production = 0.0
        vehicles_validation = 0.0

        for cohort_year in range(year_offset + 1):
            cohort_age = year_offset - cohort_year + 1
            ramp_progress = min(1.0, cohort_age / p.ramp_time_per_city)
            vehicles = p.cities_per_year * p.vehicles_per_city * ramp_progress

            vehicles_total += vehicles
            if cohort_age >= p.ramp_time_per_city:
                vehicles_production += vehicles
            else:
                vehicles_validation += vehicles

        return {
            'total': vehicles_total,
            'production': vehicles_production,
            'validation': vehicles_validation,
        }

    def _year_record(self, year_offset: int, previous: Optional[YearRecord]) -> YearRecord:
        p = self.params
        m = self.multipliers
        current_year = p.start_year + year_offset

        cities_total = min((year_offset + 1) * p.cities_per_year,
                           p.cities_per_year * p.years_to_simulate)
        vehicles = self.cohort_vehicles(year_offset)

        production_miles = vehicles['production'] * m.production_utilization * DAYS_PER_YEAR
        validation_miles = vehicles['validation'] * m.validation_utilization * DAYS_PER_YEAR
        operating_profit = production_miles * p.profit_per_mile

        # Lagged, non-sticky taper: only the prior year's cumulative cash counts.
        tapered = previous is not None and previous.cumulative_net_cash >= 0
        rd_multiplier = m.rd_taper_after_breakeven if tapered else 1.0
        annual_rd_spend = p.annual_rd_spend * rd_multiplier

        cumulative_rd_spend = annual_rd_spend
        net_cash_flow = operating_profit - annual_rd_spend * USD_PER_BILLION
        cumulative_net_cash = net_cash_flow
        cumulative_production_miles = production_miles
        cumulative_validation_miles = validation_miles
        cumulative_operating_profit = operating_profit
        if previous is not None:
            cumulative_rd_spend += previous.cumulative_rd_spend
            cumulative_net_cash += previous.cumulative_net_cash
            cumulative_production_miles += previous.cumulative_production_miles
            cumulative_validation_miles += previous.cumulative_validation_miles
            cumulative_operating_profit += previous.cumulative_operating_profit

        cumulative_total_miles = cumulative_production_miles + cumulative_validation_miles
        rd_investment = cumulative_rd_spend * USD_PER_BILLION
        roi = (cumulative_net_cash / rd_investment) * 100 if rd_investment > 0 else 0.0

        _require_finite(
            current_year,
            cities_total=cities_total,
            vehicles_total=vehicles['total'],
            production_miles=production_miles,
            validation_miles=validation_miles,
            cumulative_production_miles=cumulative_production_miles,
            cumulative_validation_miles=cumulative_validation_miles,
            cumulative_total_miles=cumulative_total_miles,
            operating_profit=operating_profit,
            cumulative_operating_profit=cumulative_operating_profit,
            net_cash_flow=net_cash_flow,
            cumulative_net_cash=cumulative_net_cash,
            cumulative_rd_spend=cumulative_rd_spend,
            roi=roi,
        )

        vehicles_total = round_half_up(vehicles['total'])
        production_trips = round_half_up(production_miles / AVG_TRIP_MILES)
        prior_trips = previous.cumulative_production_trips if previous else 0
        prior_vehicles = previous.vehicles_total if previous else 0

        return YearRecord(
            year=current_year,
            cities_total=round_half_up(cities_total),
            vehicles_total=vehicles_total,
            vehicles_production=round_half_up(vehicles['production']),
            vehicles_validation=round_half_up(vehicles['validation']),
            vehicles_added_this_year=vehicles_total - prior_vehicles,
            production_miles=production_miles,
            validation_miles=validation_miles,
            cumulative_production_miles=cumulative_production_miles,
            cumulative_validation_miles=cumulative_validation_miles,
            cumulative_total_miles=cumulative_total_miles,
            production_trips=production_trips,
            cumulative_production_trips=prior_trips + production_trips,
            paid_trips_per_week=round_half_up(production_trips / WEEKS_PER_YEAR),
            annual_rd_spend=annual_rd_spend,
            cumulative_rd_spend=cumulative_rd_spend,
            operating_profit=operating_profit,
            cumulative_operating_profit=cumulative_operating_profit,
            net_cash_flow=net_cash_flow,
            cumulative_net_cash=cumulative_net_cash,
            roi=roi,
        )

    def run(self) -> SimulationResult:
        """
        Run the simulation.

        Returns:
            Simulation result with the yearly series and break-even year

        Raises:
            InvalidParameterError: if the inputs drive a mileage, cash or ROI
                value past the float range; no partial series is returned
        """
        series: List[YearRecord] = []
        break_even_year = None
        previous = None

        for year_offset in range(self.params.years_to_simulate):
            record = self._year_record(year_offset, previous)
            series.append(record)
            if break_even_year is None and record.cumulative_net_cash >= 0:
                break_even_year = record.year
            previous = record

        roi_year5 = series[min(4, len(series) - 1)].roi if series else 0.0
        roi_year10 = series[min(9, len(series) - 1)].roi if series else 0.0

        LOGGER.debug(
            "Simulated %d years for profile %s (break-even: %s)",
            len(series), self.profile.name, break_even_year,
        )

        return SimulationResult(
            profile=self.profile,
            series=series,
            break_even_year=break_even_year,
            roi_year5=roi_year5,
            roi_year10=roi_year10,
        )


def simulate(
    params: Union[SimulationParameters, Mapping[str, Any]],
    multipliers: Union[UtilizationProfile, Mapping[str, Any]],
) -> SimulationResult:
    """Validate inputs and run one simulation."""
    return CohortSimulationEngine(params, multipliers).run()


def simulate_profile(profile: ScenarioProfile) -> SimulationResult:
    """Run one simulation for a named profile."""
    return CohortSimulationEngine.from_profile(profile).run()
