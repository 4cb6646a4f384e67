"""
Mouth Expression Extractor

Derives three values from the outer-lip contour in render space:

  - center: centroid of the lip points
  - mouth_open (0-1): how far the lips' aspect ratio rises above a closed-mouth
    baseline, scaled by a multiplier and clamped
  - smile_factor (-1..1): signed distance of the centroid from the straight line
    through the two mouth corners (leftmost and rightmost lip points). A centroid
    above the corner line (positive delta, render y grows downward) is reported
    as a smile; below it, as a frown.

Degenerate input is guarded: a zero-width contour has aspect ratio 0 and, since
the corners then share an x coordinate, smile_factor 0 (no slope is computed).
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from expression.cluster_analyzer import analyze_cluster
from expression.expression_state import RenderPoint
from expression.landmark_regions import PointsLike, as_point_array


@dataclass(frozen=True)
class MouthExpression:
    center: RenderPoint
    mouth_open: float  # 0..1
    smile_factor: float  # -1..1


def _clamp(value: float, lo: float, hi: float) -> float:
    # NaN from overflowing coordinates collapses to the neutral 0
    if np.isnan(value):
        return 0.0
    return float(np.clip(value, lo, hi))


def mouth_openness(aspect_ratio: float, baseline: float, multiplier: float) -> float:
    """Openness in [0, 1] from the lip aspect ratio."""
    adjusted = max(aspect_ratio - baseline, 0.0)
    return _clamp(adjusted * multiplier, 0.0, 1.0)


def smile_factor(points: np.ndarray, center: RenderPoint, smile_divisor: float) -> float:
    """
    Signed smile/frown factor in [-1, 1] from the corner line.

    Corners are the points with minimum and maximum x; ties resolve to the first
    such point in contour order. Returns 0 when both corners share an x.
    """
    left = points[int(np.argmin(points[:, 0]))]
    right = points[int(np.argmax(points[:, 0]))]
    dx = float(right[0] - left[0])
    if dx == 0:
        return 0.0
    slope = float(right[1] - left[1]) / dx
    intercept = float(left[1]) - slope * float(left[0])
    expected_y = slope * center.x + intercept
    delta = expected_y - center.y
    return _clamp(delta / smile_divisor, -1.0, 1.0)


def extract_mouth_expression(
    lip_points: PointsLike,
    baseline: float,
    multiplier: float,
    smile_divisor: float,
) -> Optional[MouthExpression]:
    """
    Compute center, openness and smile factor for the outer lips.

    Args:
        lip_points: (N, 2) render-space outer-lip contour
        baseline: Aspect ratio treated as a closed mouth (typically 0.10-0.15)
        multiplier: Scale from adjusted aspect ratio to openness (typically 5-8)
        smile_divisor: Pixels of corner-line deviation for a full smile/frown

    Returns:
        MouthExpression, or None when there are no lip points
    """
    pts = as_point_array(lip_points)
    metrics = analyze_cluster(pts)
    if metrics is None:
        return None
    return MouthExpression(
        center=metrics.center,
        mouth_open=mouth_openness(metrics.aspect_ratio, baseline, multiplier),
        smile_factor=smile_factor(pts, metrics.center, smile_divisor),
    )
