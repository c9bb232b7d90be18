"""Anchor records, metric registry and review-state classification."""

from .classifier import AnchorDebugInfo, SplitAnchors, anchor_debug_info, classify
from .public import latest_anchor, load_public_anchors
from .records import AnchorRecord, AnchorState
from .registry import (
    METRIC_REGISTRY,
    MetricRegistryEntry,
    binding_field_map,
    binding_metrics_for_view,
    metrics_for_view,
)

__all__ = [
    "AnchorRecord",
    "AnchorState",
    "SplitAnchors",
    "AnchorDebugInfo",
    "classify",
    "anchor_debug_info",
    "METRIC_REGISTRY",
    "MetricRegistryEntry",
    "metrics_for_view",
    "binding_metrics_for_view",
    "binding_field_map",
    "load_public_anchors",
    "latest_anchor",
]
