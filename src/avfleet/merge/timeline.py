"""Timeline merge - overlay binding anchors onto the simulated series.

For every simulation field that has at least one binding anchor:
- anchor years take the (deduplicated) anchor value exactly
- years between two anchors are linearly interpolated
- years before the first anchor are zero (no activity before the record)
- years after the last anchor keep the simulated value
Every value is tagged with its provenance so the historical part of a
curve can be told apart from the projection.
"""

import logging
import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..anchors.classifier import AnchorRow, to_record
from ..anchors.records import AnchorRecord
from ..anchors.registry import binding_field_map, binding_metrics_for_view, bound_fields
from ..simulation.engine import YearRecord, camel_key, round_half_up

LOGGER = logging.getLogger(__name__)


class Provenance(str, Enum):
    """Where a merged value came from."""
    ANCHOR = "anchor"
    INTERPOLATED = "interpolated"
    SIMULATED = "simulated"


@dataclass(frozen=True)
class MergedYearRecord(YearRecord):
    """A YearRecord with a per-field provenance tag."""
    sources: Dict[str, Provenance] = field(default_factory=dict)

    def to_dict(self):
        data = super().to_dict()
        data['_sources'] = {camel_key(name): source.value for name, source in self.sources.items()}
        return data


def _resolve(anchors: Iterable[AnchorRow], field_map: Dict[str, str]) -> Dict[str, List[AnchorRecord]]:
    """Group anchors by the simulation field they override, dropping unmapped metrics."""
    by_field: Dict[str, List[AnchorRecord]] = {}
    for row in anchors:
        anchor = to_record(row)
        if anchor is None:
            continue
        sim_field = field_map.get(anchor.metric)
        if sim_field is None:
            LOGGER.debug("Ignoring anchor %s: metric %r is not bindable", anchor.id, anchor.metric)
            continue
        by_field.setdefault(sim_field, []).append(anchor)
    return by_field


def dedupe_by_year(anchors: Sequence[AnchorRecord]) -> Dict[int, float]:
    """
    Collapse anchors to one value per year.

    A month-specific report beats one without a month; otherwise the later
    anchor in the sequence wins.
    """
    chosen: Dict[int, AnchorRecord] = {}
    for anchor in anchors:
        existing = chosen.get(anchor.year)
        if existing is not None and existing.has_month and not anchor.has_month:
            continue
        if existing is not None:
            LOGGER.debug(
                "Anchor %s replaces %s for %s/%d",
                anchor.id, existing.id, anchor.metric, anchor.year,
            )
        chosen[anchor.year] = anchor
    return {year: anchor.value for year, anchor in chosen.items()}


def _interpolate(year: int, prev_year: int, prev_value: float,
                 next_year: int, next_value: float) -> float:
    t = (year - prev_year) / (next_year - prev_year)
    low, high = min(prev_value, next_value), max(prev_value, next_value)
    # Weighted form: no next - prev difference to overflow near the float limit.
    blended = prev_value * (1 - t) + next_value * t
    if not math.isfinite(blended):
        return high if blended > 0 else low
    # Rounding can step past a fractional bracket; keep within the two anchors.
    return min(max(round_half_up(blended), low), high)


def _apply_field(rows: List[dict], sources: List[Dict[str, Provenance]],
                 sim_field: str, by_year: Dict[int, float]) -> None:
    anchor_years = sorted(by_year)
    first_year, last_year = anchor_years[0], anchor_years[-1]

    for row, row_sources in zip(rows, sources):
        year = row['year']
        if year > last_year:
            row_sources[sim_field] = Provenance.SIMULATED
        elif year in by_year:
            row[sim_field] = by_year[year]
            row_sources[sim_field] = Provenance.ANCHOR
        elif year < first_year:
            row[sim_field] = 0
            row_sources[sim_field] = Provenance.INTERPOLATED
        else:
            prev_year = max(y for y in anchor_years if y < year)
            next_year = min(y for y in anchor_years if y > year)
            row[sim_field] = _interpolate(
                year, prev_year, by_year[prev_year], next_year, by_year[next_year]
            )
            row_sources[sim_field] = Provenance.INTERPOLATED


def merge_timeline(
    series: Sequence[YearRecord],
    binding_anchors: Iterable[AnchorRow],
) -> List[MergedYearRecord]:
    """
    Merge the simulated series with binding anchors.

    Anchors whose metric has no bindable simulation field, or that fail
    validation, are dropped silently. The inputs are never mutated.

    Args:
        series: Simulated yearly records
        binding_anchors: Approved, anchored rows (see classify())

    Returns:
        One MergedYearRecord per input year, in the same order
    """
    rows = [asdict(record) for record in series]
    for row in rows:
        row.pop('sources', None)
    sources: List[Dict[str, Provenance]] = [{} for _ in rows]

    by_field = _resolve(binding_anchors, binding_field_map())
    for sim_field, anchors in by_field.items():
        by_year = dedupe_by_year(anchors)
        if by_year:
            _apply_field(rows, sources, sim_field, by_year)

    for row_sources in sources:
        for sim_field in bound_fields():
            row_sources.setdefault(sim_field, Provenance.SIMULATED)

    return [
        MergedYearRecord(**row, sources=row_sources)
        for row, row_sources in zip(rows, sources)
    ]


def last_anchor_year(binding_anchors: Iterable[AnchorRow], view: str) -> Optional[int]:
    """
    Latest binding anchor year among a chart view's binding metrics.

    This is the boundary between history and forecast on that view.

    Returns:
        The year, or None when the view has no binding anchors
    """
    metrics = set(binding_metrics_for_view(view))
    years = [
        anchor.year
        for anchor in (to_record(row) for row in binding_anchors)
        if anchor is not None and anchor.metric in metrics
    ]
    return max(years) if years else None


def split_history(
    merged: Sequence[MergedYearRecord],
    binding_anchors: Iterable[AnchorRow],
    view: str,
) -> Tuple[List[MergedYearRecord], List[MergedYearRecord]]:
    """
    Split a merged series into (historical, forecast) parts for a view.

    Years up to and including the last anchor year are historical. With no
    anchors on the view, the whole series is forecast.
    """
    boundary = last_anchor_year(binding_anchors, view)
    if boundary is None:
        return [], list(merged)
    historical = [r for r in merged if r.year <= boundary]
    forecast = [r for r in merged if r.year > boundary]
    return historical, forecast
