"""Headline metrics derived from a simulated series."""

from typing import Any, Dict, Sequence

import numpy as np

from ..simulation.engine import USD_PER_BILLION, SimulationResult, YearRecord

NPV_DISCOUNT_RATE = 0.08


def _at_year_index(series: Sequence[YearRecord], index: int):
    if not series:
        return None
    return series[min(index, len(series) - 1)]


def rd_amortized_per_mile(record: YearRecord) -> float:
    """Cumulative R&D dollars per cumulative network mile (0 before any miles)."""
    if record is None or record.cumulative_total_miles <= 0:
        return 0.0
    return record.cumulative_rd_spend * USD_PER_BILLION / record.cumulative_total_miles


def net_present_value(series: Sequence[YearRecord], discount_rate: float = NPV_DISCOUNT_RATE) -> float:
    """
    Discount yearly net cash flows back to the first simulated year.

    Args:
        series: Simulated yearly records
        discount_rate: Annual discount rate as a decimal

    Returns:
        NPV in USD
    """
    if not series:
        return 0.0
    cash = np.array([r.net_cash_flow for r in series], dtype=float)
    factors = (1.0 + discount_rate) ** np.arange(len(cash))
    return float(np.sum(cash / factors))


def summarize(result: SimulationResult) -> Dict[str, Any]:
    """Extract key metrics summary from a simulation result."""
    series = result.series
    year5 = _at_year_index(series, 4)
    year10 = _at_year_index(series, 9)
    final = series[-1] if series else None

    return {
        'profile': result.profile.name,
        'break_even_year': result.break_even_year,
        'roi_year5': result.roi_year5,
        'roi_year10': result.roi_year10,
        'total_network_miles_5y': year5.cumulative_total_miles if year5 else 0.0,
        'total_network_miles_10y': year10.cumulative_total_miles if year10 else 0.0,
        'rd_amortized_per_mile_5y': rd_amortized_per_mile(year5),
        'rd_amortized_per_mile_10y': rd_amortized_per_mile(year10),
        'final_cumulative_net_cash': final.cumulative_net_cash if final else 0.0,
        'final_vehicles_total': final.vehicles_total if final else 0,
        'npv': net_present_value(series),
    }
