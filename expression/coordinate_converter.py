"""
Coordinate conversion from detector space to render space.

Detector points live in the unit square with the vertical origin at the bottom.
Render space has its origin at the top-left. Conversion flips y (1 - y) and then
applies a caller-supplied FrameTransform that knows the viewport geometry.
"""

from abc import ABC, abstractmethod
from typing import Callable, Sequence, Tuple

import numpy as np

from expression.expression_state import RenderPoint, RenderRect
from expression.landmark_regions import PointsLike, as_point_array


class FrameTransform(ABC):
    """Maps top-left-origin unit-square points to render space."""

    @abstractmethod
    def apply(self, points: np.ndarray) -> np.ndarray:
        """
        Transform an (N, 2) array of unit points.

        Args:
            points: Points with x, y in [0, 1], origin at the top-left

        Returns:
            (N, 2) array of render-space points
        """
        pass


class ScaleTransform(FrameTransform):
    """Stretch the unit square onto a width x height surface."""

    def __init__(self, width: float, height: float):
        self.width = float(width)
        self.height = float(height)

    def apply(self, points: np.ndarray) -> np.ndarray:
        return points * np.array([self.width, self.height], dtype=np.float64)


class AspectFillTransform(FrameTransform):
    """
    Aspect-fill a frame_w x frame_h image into a view_w x view_h surface.

    The frame is scaled by the larger of the two ratios and center-cropped, the
    way a camera preview layer fills its view. With mirrored=True the x axis is
    flipped first (selfie preview).
    """

    def __init__(
        self,
        frame_width: float,
        frame_height: float,
        view_width: float,
        view_height: float,
        mirrored: bool = False,
    ):
        if frame_width <= 0 or frame_height <= 0:
            raise ValueError("frame size must be positive")
        self.view_width = float(view_width)
        self.view_height = float(view_height)
        self.mirrored = bool(mirrored)
        scale = max(self.view_width / frame_width, self.view_height / frame_height)
        self.content_width = frame_width * scale
        self.content_height = frame_height * scale
        self.offset_x = (self.view_width - self.content_width) / 2.0
        self.offset_y = (self.view_height - self.content_height) / 2.0

    def apply(self, points: np.ndarray) -> np.ndarray:
        u = 1.0 - points[:, 0] if self.mirrored else points[:, 0]
        x = u * self.content_width + self.offset_x
        y = points[:, 1] * self.content_height + self.offset_y
        return np.stack([x, y], axis=1)


class CallableTransform(FrameTransform):
    """Wrap a per-point function (x, y) -> (x, y)."""

    def __init__(self, fn: Callable[[float, float], Tuple[float, float]]):
        self._fn = fn

    def apply(self, points: np.ndarray) -> np.ndarray:
        out = [self._fn(float(x), float(y)) for x, y in points]
        return np.asarray(out, dtype=np.float64).reshape(-1, 2)


def _flip(points: np.ndarray) -> np.ndarray:
    flipped = points.copy()
    flipped[:, 1] = 1.0 - flipped[:, 1]
    return flipped


def convert_points(points: PointsLike, transform: FrameTransform) -> np.ndarray:
    """Convert detector-space points to an (N, 2) render-space array."""
    arr = as_point_array(points)
    if len(arr) == 0:
        return arr
    return np.asarray(transform.apply(_flip(arr)), dtype=np.float64)


def convert_point(point: Sequence[float], transform: FrameTransform) -> RenderPoint:
    """Convert a single detector-space (x, y) to a RenderPoint."""
    x, y = convert_points([point], transform)[0]
    return RenderPoint(float(x), float(y))


def convert_rect(rect: Sequence[float], transform: FrameTransform) -> RenderRect:
    """
    Convert a detector-space bounding box (x, y, w, h; bottom-left origin).

    Both corners are converted and re-ordered, so the result is valid even when
    the transform mirrors an axis.
    """
    x, y, w, h = (float(v) for v in rect[:4])
    corners = convert_points([[x, y], [x + w, y + h]], transform)
    min_x, min_y = corners.min(axis=0)
    max_x, max_y = corners.max(axis=0)
    return RenderRect(float(min_x), float(min_y), float(max_x - min_x), float(max_y - min_y))
