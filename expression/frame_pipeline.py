"""
Frame Pipeline

Turns one frame's DetectorResult into a FaceExpressionState and publishes it.

Pipeline: detector result → (no face? publish None) → convert face box and
region points to render space → cluster metrics per eye + blink → mouth
expression from outer lips → cosmetic offsets → assemble → publish.

Each call is independent: nothing is carried over from the previous frame, and
the result depends only on the inputs and the tuning passed at construction.
Calls must not overlap (one frame in flight); the producer drops frames that
arrive while a call is running.
"""

import logging
from typing import Optional, Tuple

from expression.blink_classifier import classify_eye
from expression.cluster_analyzer import analyze_cluster
from expression.coordinate_converter import FrameTransform, convert_points, convert_rect
from expression.expression_state import ORIGIN, FaceExpressionState, RenderPoint
from expression.landmark_regions import LEFT_EYE, OUTER_LIPS, RIGHT_EYE, DetectorResult
from expression.mouth_expression import extract_mouth_expression
from expression.tuning import ExpressionTuning
from services.expression_state_store import ExpressionStateStore

logger = logging.getLogger(__name__)


def _apply_offset(center: RenderPoint, present: bool, offset: Tuple[float, float]) -> RenderPoint:
    # Missing regions stay at the origin.
    if not present:
        return center
    dx, dy = offset
    if dx == 0 and dy == 0:
        return center
    return center.offset(dx, dy)


class FramePipeline:
    """
    Per-frame expression pipeline with a single-slot publish target.

    Usage:
        pipeline = FramePipeline(ExpressionTuning.from_config(), get_expression_store())
        pipeline.on_frame(detector.detect(frame), AspectFillTransform(w, h, vw, vh))
        state = get_expression_store().latest()
    """

    def __init__(self, tuning: Optional[ExpressionTuning] = None, store: Optional[ExpressionStateStore] = None):
        self.tuning = tuning or ExpressionTuning()
        self.store = store if store is not None else ExpressionStateStore()

    def process(self, result: DetectorResult, transform: FrameTransform) -> Optional[FaceExpressionState]:
        """
        Compute the expression state for one frame without publishing.

        Args:
            result: Detector output for the selected face (or no-face / failure)
            transform: Maps top-left-origin unit points to render space

        Returns:
            FaceExpressionState, or None when no face was found
        """
        if result is None or not result.face_found:
            if result is not None and result.error:
                logger.debug("Detector failure: %s", result.error)
            return None

        tuning = self.tuning
        face_rect = None
        if result.face_bounding_box is not None:
            face_rect = convert_rect(result.face_bounding_box, transform)

        left_metrics = self._analyze_region(result, LEFT_EYE, transform)
        right_metrics = self._analyze_region(result, RIGHT_EYE, transform)
        left_center, left_blink = classify_eye(left_metrics, tuning.blink_threshold)
        right_center, right_blink = classify_eye(right_metrics, tuning.blink_threshold)

        mouth = None
        lips = result.region(OUTER_LIPS)
        if lips is not None:
            mouth = extract_mouth_expression(
                convert_points(lips, transform),
                tuning.mouth_open_baseline,
                tuning.mouth_open_multiplier,
                tuning.smile_divisor,
            )

        offsets = tuning.offsets
        return FaceExpressionState(
            left_eye_center=_apply_offset(left_center, left_metrics is not None, offsets.left_eye),
            right_eye_center=_apply_offset(right_center, right_metrics is not None, offsets.right_eye),
            mouth_center=_apply_offset(mouth.center if mouth else ORIGIN, mouth is not None, offsets.mouth),
            left_eye_blink=left_blink,
            right_eye_blink=right_blink,
            mouth_open=mouth.mouth_open if mouth else 0.0,
            smile_factor=mouth.smile_factor if mouth else 0.0,
            face_rect=face_rect,
        )

    def on_frame(self, result: DetectorResult, transform: FrameTransform) -> Optional[FaceExpressionState]:
        """Process one frame and publish the result (None included). Returns what was published."""
        state = self.process(result, transform)
        self.store.publish(state)
        return state

    @staticmethod
    def _analyze_region(result: DetectorResult, name: str, transform: FrameTransform):
        points = result.region(name)
        if points is None:
            return None
        return analyze_cluster(convert_points(points, transform))
