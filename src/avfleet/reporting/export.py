"""Export functionality for CSV and JSON."""

import json
from typing import List, Optional, Sequence

import pandas as pd

from ..merge.timeline import MergedYearRecord
from ..simulation.engine import SimulationResult, YearRecord


def to_dataframe(records: Sequence[YearRecord]) -> pd.DataFrame:
    """
    Tabulate a series, one row per year.

    Merged records get one ``source_<field>`` column per bound field.
    """
    data = []
    for record in records:
        row = {name: getattr(record, name) for name in YearRecord.field_names()}
        if isinstance(record, MergedYearRecord):
            for name, source in record.sources.items():
                row[f"source_{name}"] = source.value
        data.append(row)

    return pd.DataFrame(data, columns=YearRecord.field_names() if not data else None)


def export_csv(records: Sequence[YearRecord], filepath: str):
    """Export a simulated or merged series to CSV."""
    df = to_dataframe(records)
    df.to_csv(filepath, index=False)


def export_json(
    result: SimulationResult,
    filepath: str,
    merged: Optional[List[MergedYearRecord]] = None
):
    """Export simulation results (and optionally the merged series) to JSON."""
    export_data = {
        'profile': result.profile.to_dict(),
        'profile_hash': result.profile.compute_hash(),
        'break_even_year': result.break_even_year,
        'roi_year5': result.roi_year5,
        'roi_year10': result.roi_year10,
        'yearly_data': [record.to_dict() for record in result.series],
    }
    if merged is not None:
        export_data['merged_data'] = [record.to_dict() for record in merged]

    with open(filepath, 'w') as f:
        json.dump(export_data, f, indent=2)
