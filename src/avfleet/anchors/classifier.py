"""Split raw anchor rows into binding, pending and annotation buckets."""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from .records import AnchorRecord, AnchorState
from .registry import known_metric_keys

LOGGER = logging.getLogger(__name__)

AnchorRow = Union[AnchorRecord, Mapping[str, Any]]


@dataclass
class SplitAnchors:
    """Anchor rows partitioned by review state."""
    binding_anchors: List[AnchorRecord] = field(default_factory=list)  # approved + anchored
    pending_points: List[AnchorRecord] = field(default_factory=list)  # pending, overlay only
    annotations: List[AnchorRecord] = field(default_factory=list)  # approved + annotated


@dataclass
class AnchorDebugInfo:
    """Counts and unknown metrics for a batch of anchor rows."""
    total_rows: int
    binding_count: int
    pending_count: int
    annotation_count: int
    unknown_metrics: List[str]


def to_record(row: AnchorRow) -> Optional[AnchorRecord]:
    """
    Validate one row into an AnchorRecord.

    Returns:
        The record, or None when the row cannot be parsed
    """
    if isinstance(row, AnchorRecord):
        return row
    try:
        return AnchorRecord.model_validate(row)
    except ValidationError as exc:
        LOGGER.debug("Dropping malformed anchor row %r: %s", row, exc)
        return None


def classify(rows: Iterable[AnchorRow]) -> SplitAnchors:
    """
    Partition anchor rows in a single pass.

    Only confidence and status are inspected; unknown metric keys pass
    through and are dropped later by the timeline merge. Rows that are
    rejected, deprecated or still proposed land in no bucket.

    Args:
        rows: AnchorRecord instances or raw mappings from the store

    Returns:
        SplitAnchors with pairwise disjoint buckets
    """
    split = SplitAnchors()
    for row in rows:
        record = to_record(row)
        if record is None:
            continue
        state = record.state
        if state is AnchorState.ANCHORED:
            split.binding_anchors.append(record)
        elif state is AnchorState.PENDING:
            split.pending_points.append(record)
        elif state is AnchorState.ANNOTATED:
            split.annotations.append(record)
    return split


def anchor_debug_info(rows: Iterable[AnchorRow]) -> AnchorDebugInfo:
    """Summarize a batch of rows for diagnostics."""
    records = [r for r in (to_record(row) for row in rows) if r is not None]
    split = classify(records)
    known = set(known_metric_keys())
    unknown = sorted({r.metric for r in records if r.metric not in known})
    return AnchorDebugInfo(
        total_rows=len(records),
        binding_count=len(split.binding_anchors),
        pending_count=len(split.pending_points),
        annotation_count=len(split.annotations),
        unknown_metrics=unknown,
    )
