"""
Cluster Analyzer Module

Centroid and bounding-box aspect ratio of one landmark region in render space.
The aspect ratio (height / width) is the openness proxy used for both eyes and
lips; a zero-width cluster reports 0 rather than dividing by zero.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from expression.expression_state import RenderPoint
from expression.landmark_regions import PointsLike, as_point_array


@dataclass(frozen=True)
class ClusterMetrics:
    """Geometry summary of one point cluster."""
    center: RenderPoint  # arithmetic mean of the points
    aspect_ratio: float  # bbox height / width, 0 when width is 0
    width: float = 0.0
    height: float = 0.0


def centroid(points: np.ndarray) -> RenderPoint:
    cx, cy = points.mean(axis=0)
    return RenderPoint(float(cx), float(cy))


def analyze_cluster(points: PointsLike) -> Optional[ClusterMetrics]:
    """
    Compute centroid and bounding-box aspect ratio for a render-space cluster.

    Args:
        points: (N, 2) render-space points

    Returns:
        ClusterMetrics, or None for an empty cluster
    """
    arr = as_point_array(points)
    if len(arr) == 0:
        return None
    mins = arr.min(axis=0)
    maxs = arr.max(axis=0)
    width = float(maxs[0] - mins[0])
    height = float(maxs[1] - mins[1])
    return ClusterMetrics(
        center=centroid(arr),
        aspect_ratio=height / width if width > 0 else 0.0,
        width=width,
        height=height,
    )
