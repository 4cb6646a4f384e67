"""Blink classification from an eye cluster's aspect ratio."""

from typing import Optional, Tuple

from expression.cluster_analyzer import ClusterMetrics
from expression.expression_state import ORIGIN, RenderPoint


def is_blinking(aspect_ratio: float, threshold: float) -> bool:
    """True when the eye is flatter than the threshold (closed)."""
    return aspect_ratio < threshold


def classify_eye(metrics: Optional[ClusterMetrics], threshold: float) -> Tuple[RenderPoint, bool]:
    """(center, blink) for an eye; a missing eye is (ORIGIN, False)."""
    if metrics is None:
        return ORIGIN, False
    return metrics.center, is_blinking(metrics.aspect_ratio, threshold)
