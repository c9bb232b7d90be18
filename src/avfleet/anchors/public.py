"""Bundled public anchors - cited datapoints usable without a review store."""

from pathlib import Path
from typing import List, Optional, Sequence

import yaml

from .records import AnchorRecord


def load_public_anchors(yaml_path: str = None) -> List[AnchorRecord]:
    """
    Load the bundled public anchors as approved, binding records.

    Args:
        yaml_path: Path to YAML file (defaults to public_anchors.yaml)

    Returns:
        Anchor records in file order
    """
    if yaml_path is None:
        yaml_path = Path(__file__).parent / "public_anchors.yaml"

    with open(yaml_path, 'r') as f:
        data = yaml.safe_load(f)

    return [
        AnchorRecord(**dict(row, confidence="approved", status="anchored"))
        for row in data.get("anchors", [])
    ]


def latest_anchor(anchors: Sequence[AnchorRecord]) -> Optional[AnchorRecord]:
    """Most recent anchor by (year, month); a missing month sorts first in its year."""
    if not anchors:
        return None
    return max(anchors, key=lambda a: (a.year, a.month or 0))
