"""Overlay binding anchors onto simulated series."""

from .timeline import MergedYearRecord, Provenance, last_anchor_year, merge_timeline, split_history

__all__ = ["MergedYearRecord", "Provenance", "merge_timeline", "last_anchor_year", "split_history"]
