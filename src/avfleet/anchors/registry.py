"""Metric registry - maps anchor metric keys onto simulation fields.

The registry is a static, hand-curated table built once at import time.
It is only read through the lookup functions below.

View ids are the chart identifiers the presentation layer passes in:
``paidTrips``, ``fleetSize``, ``productionMiles``, ``netCash`` and ``map``.
They are matched exactly; any other id is an unknown view with no metrics.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class MetricRegistryEntry:
    """One anchor metric and where it lands in the simulated series."""
    metric_key: str
    sim_field: Optional[str]  # None = overlay-only, never overrides the series
    views: Tuple[str, ...]  # chart views this metric appears on
    binding: bool  # True = may pin history when anchored


METRIC_REGISTRY: Tuple[MetricRegistryEntry, ...] = (
    MetricRegistryEntry("paid_trips_per_week", "paid_trips_per_week", ("paidTrips",), True),
    MetricRegistryEntry("fleet_size", "vehicles_production", ("fleetSize",), True),
    MetricRegistryEntry("vehicles_in_city", "vehicles_production", ("fleetSize",), True),
    MetricRegistryEntry("cumulative_miles", "cumulative_production_miles", ("productionMiles",), True),
    MetricRegistryEntry("production_miles_per_year", "production_miles", ("productionMiles",), True),
    MetricRegistryEntry("cumulative_rides", "production_trips", (), True),
    MetricRegistryEntry("cumulative_net_cash", "cumulative_net_cash", ("netCash",), True),
    # Overlay-only annotation metrics
    MetricRegistryEntry("cash_loss_event", None, ("netCash",), False),
    MetricRegistryEntry("investment_event", None, ("netCash",), False),
    # City metrics, used by the network map rather than the charts
    MetricRegistryEntry("city_active", None, ("map",), True),
    MetricRegistryEntry("city_pilot", None, ("map",), False),
)

_BY_KEY: Dict[str, MetricRegistryEntry] = {e.metric_key: e for e in METRIC_REGISTRY}


def registry_entry(metric_key: str) -> Optional[MetricRegistryEntry]:
    return _BY_KEY.get(metric_key)


def known_metric_keys() -> Tuple[str, ...]:
    return tuple(_BY_KEY)


def metrics_for_view(view: str) -> Tuple[str, ...]:
    """All metric keys drawn on a chart view."""
    return tuple(e.metric_key for e in METRIC_REGISTRY if view in e.views)


def binding_metrics_for_view(view: str) -> Tuple[str, ...]:
    """Metric keys on a chart view that may pin the curve."""
    return tuple(e.metric_key for e in METRIC_REGISTRY if view in e.views and e.binding)


def binding_field_map() -> Dict[str, str]:
    """
    Map binding metric keys to the simulation field they override.

    Overlay-only metrics (no sim_field) and non-binding metrics are left out,
    so a failed lookup here is how unknown metrics get dropped.
    """
    return {
        e.metric_key: e.sim_field
        for e in METRIC_REGISTRY
        if e.binding and e.sim_field
    }


def bound_fields() -> Tuple[str, ...]:
    """Distinct simulation fields any binding metric can override, in registry order."""
    return tuple(dict.fromkeys(binding_field_map().values()))
