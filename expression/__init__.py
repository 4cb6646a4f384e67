"""
Expression package for Face Expression Tracker.

Per-frame geometry that turns detector landmark regions into a render-space
FaceExpressionState: coordinate conversion, cluster metrics, blink
classification, mouth expression, and the frame pipeline that ties them
together. The frame pipeline, capture, MediaPipe and overlay modules are
imported directly by their users so this package imports without them.
"""

from .expression_state import FaceExpressionState, RenderPoint, RenderRect, ORIGIN
from .landmark_regions import DetectorResult, LEFT_EYE, RIGHT_EYE, OUTER_LIPS
from .coordinate_converter import (
    FrameTransform,
    ScaleTransform,
    AspectFillTransform,
    CallableTransform,
    convert_point,
    convert_points,
    convert_rect,
)
from .cluster_analyzer import ClusterMetrics, analyze_cluster
from .blink_classifier import is_blinking
from .mouth_expression import MouthExpression, extract_mouth_expression
from .tuning import ExpressionTuning, CosmeticOffsets

__all__ = [
    'FaceExpressionState',
    'RenderPoint',
    'RenderRect',
    'ORIGIN',
    'DetectorResult',
    'LEFT_EYE',
    'RIGHT_EYE',
    'OUTER_LIPS',
    'FrameTransform',
    'ScaleTransform',
    'AspectFillTransform',
    'CallableTransform',
    'convert_point',
    'convert_points',
    'convert_rect',
    'ClusterMetrics',
    'analyze_cluster',
    'is_blinking',
    'MouthExpression',
    'extract_mouth_expression',
    'ExpressionTuning',
    'CosmeticOffsets',
]
