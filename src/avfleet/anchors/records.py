"""Anchor record model and its review state.

Anchor rows come from an external review store. Each carries two free-form
flags: ``confidence`` (pending / approved / rejected) and ``status``
(proposed / anchored / annotated / deprecated). The pair is collapsed once
into an :class:`AnchorState` so downstream code never compares raw strings.
"""

import math
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnchorState(Enum):
    """Review state derived from a (confidence, status) pair."""
    PROPOSED = "proposed"      # no usable review outcome yet
    PENDING = "pending"        # community submission awaiting review
    ANCHORED = "anchored"      # approved and pinned to the curve
    ANNOTATED = "annotated"    # approved, informational overlay only
    REJECTED = "rejected"
    DEPRECATED = "deprecated"

    @classmethod
    def from_flags(cls, confidence: Optional[str], status: Optional[str]) -> 'AnchorState':
        """
        Collapse the stored flags into a single state.

        Args:
            confidence: Review confidence ('pending', 'approved', 'rejected')
            status: Lifecycle status ('proposed', 'anchored', 'annotated', 'deprecated')

        Returns:
            AnchorState for the pair
        """
        if confidence == "pending":
            return cls.PENDING
        if confidence == "approved":
            if status == "anchored":
                return cls.ANCHORED
            if status == "annotated":
                return cls.ANNOTATED
        if confidence == "rejected":
            return cls.REJECTED
        if status == "deprecated":
            return cls.DEPRECATED
        return cls.PROPOSED

    @property
    def is_binding(self) -> bool:
        return self is AnchorState.ANCHORED

    @property
    def is_visible(self) -> bool:
        """Whether the state is drawn at all (binding, pending or annotation)."""
        return self in (AnchorState.ANCHORED, AnchorState.PENDING, AnchorState.ANNOTATED)


class AnchorRecord(BaseModel):
    """A sourced real-world datapoint for one metric and year."""
    model_config = ConfigDict(frozen=True, extra="allow")

    id: str = ""
    company: str = ""
    year: int
    month: Optional[int] = Field(default=None, ge=0, le=12)
    metric: str
    value: Union[int, float]
    unit: str = ""
    city: Optional[str] = None
    confidence: Optional[str] = None
    status: Optional[str] = None
    source_title: Optional[str] = None
    source_publisher: Optional[str] = None
    source_date: Optional[str] = None
    source_url: Optional[str] = None
    contributor_name: Optional[str] = None
    contributor_link: Optional[str] = None
    show_contributor: Optional[bool] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        """Store ids as strings; the store may hand out integer keys."""
        if v is None:
            return ""
        return str(v)

    @field_validator("month", mode="before")
    @classmethod
    def blank_month_is_none(cls, v):
        if v == "" or v == 0:
            return None
        return v

    @field_validator("value")
    @classmethod
    def value_is_finite(cls, v):
        try:
            finite = math.isfinite(v)
        except OverflowError:
            finite = False
        if not finite:
            raise ValueError("anchor value must be finite")
        return v

    @property
    def state(self) -> AnchorState:
        return AnchorState.from_flags(self.confidence, self.status)

    @property
    def has_month(self) -> bool:
        """True when the anchor was reported for a specific month."""
        return bool(self.month)
