"""
Detection runner and overlay tests.

Uses a scripted landmark detector so no camera or MediaPipe model is needed.
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import threading
import unittest
from unittest.mock import patch

import cv2
import numpy as np

import config
from expression.expression_state import FaceExpressionState, RenderPoint
from expression.landmark_detector_interface import LandmarkDetectorInterface
from expression.landmark_regions import LEFT_EYE, DetectorResult
from expression.overlay import MOUTH_WIDTH, draw_expression_overlay, mouth_curve
from expression.tuning import ExpressionTuning
from expression.video_source_handler import VideoSourceType
from services.expression_state_store import ExpressionStateStore
from tests.fixtures.synthetic_landmarks import (
    FRAME_H,
    FRAME_W,
    ellipse_contour,
    make_face_result,
    to_detector_space,
)


class ScriptedDetector(LandmarkDetectorInterface):
    """Returns queued results in order, then no face."""

    def __init__(self, results):
        self._results = list(results)
        self.closed = False

    def detect(self, image):
        return self._results.pop(0) if self._results else DetectorResult.no_face()

    def is_available(self):
        return True

    def get_name(self):
        return "scripted"

    def close(self):
        self.closed = True


class TestExpressionStateDetector(unittest.TestCase):

    def _make(self, results, **kwargs):
        from expression_state_detector import ExpressionStateDetector
        self.store = ExpressionStateStore()
        self.states = []
        return ExpressionStateDetector(
            tuning=ExpressionTuning(),
            store=self.store,
            face_detector=ScriptedDetector(results),
            update_callback=self.states.append,
            mirrored=False,
            **kwargs,
        )

    def test_process_frame_publishes_and_keeps_frame(self):
        detector = self._make([make_face_result()], view_size=(0, 0))
        frame = np.zeros((FRAME_H, FRAME_W, 3), dtype=np.uint8)
        state = detector.process_frame(frame)
        self.assertIs(detector.get_current_state(), state)
        self.assertAlmostEqual(state.left_eye_center.x, 270.0, places=6)
        self.assertEqual(self.states, [state])
        jpeg = detector.get_last_frame_jpeg()
        self.assertTrue(jpeg.startswith(b"\xff\xd8"))

    def test_no_face_after_face_publishes_none(self):
        detector = self._make([make_face_result()], view_size=(0, 0))
        frame = np.zeros((FRAME_H, FRAME_W, 3), dtype=np.uint8)
        detector.process_frame(frame)
        self.assertIsNone(detector.process_frame(frame))
        self.assertIsNone(detector.get_current_state())
        self.assertEqual(self.store.sequence, 2)

    def test_view_size_maps_into_view(self):
        """640x480 frame aspect-filled into a 320x240 view halves coordinates."""
        detector = self._make([make_face_result()], view_size=(320, 240))
        state = detector.process_frame(np.zeros((FRAME_H, FRAME_W, 3), dtype=np.uint8))
        self.assertAlmostEqual(state.left_eye_center.x, 135.0, places=6)
        self.assertAlmostEqual(state.left_eye_center.y, 100.0, places=6)

    def test_stop_closes_detector_and_clears_state(self):
        detector = self._make([make_face_result()], view_size=(0, 0))
        scripted = detector.face_detector
        detector.process_frame(np.zeros((FRAME_H, FRAME_W, 3), dtype=np.uint8))
        detector.stop_detection()
        self.assertTrue(scripted.closed)
        self.assertIsNone(self.store.latest())

    def test_no_jpeg_before_first_frame(self):
        detector = self._make([])
        self.assertIsNone(detector.get_last_frame_jpeg())


def _eye_at(cx: float, cy: float) -> DetectorResult:
    return DetectorResult.face({LEFT_EYE: to_detector_space(ellipse_contour(cx, cy, 40, 20))})


class TestMirroredVideoFeed(unittest.TestCase):
    """The served frame must share the state's render space."""

    def _ring_columns(self, frame):
        # Red eye ring rows only; missing regions are drawn at the origin
        band = frame[170:231, :, 2]
        return np.nonzero(band)[1]

    def test_default_mirroring_draws_over_the_face(self):
        from expression_state_detector import ExpressionStateDetector
        with patch.object(config, "MIRROR_VIEW", True):
            detector = ExpressionStateDetector(
                tuning=ExpressionTuning(),
                store=ExpressionStateStore(),
                face_detector=ScriptedDetector([_eye_at(100, 200)]),
                view_size=(0, 0),
            )
        self.assertTrue(detector.mirrored)
        state = detector.process_frame(np.zeros((FRAME_H, FRAME_W, 3), dtype=np.uint8))
        self.assertAlmostEqual(state.left_eye_center.x, FRAME_W - 100.0, places=6)

        # The stored frame is mirrored, so the ring sits at the state's x...
        cols = self._ring_columns(detector._last_frame)
        self.assertGreater(cols.min(), FRAME_W - 130)
        self.assertLess(cols.max(), FRAME_W - 70)
        # ...which is the face's own position once the frame is flipped back
        cols = self._ring_columns(cv2.flip(detector._last_frame, 1))
        self.assertGreater(cols.min(), 70)
        self.assertLess(cols.max(), 130)

    def test_unmirrored_draws_on_raw_frame(self):
        from expression_state_detector import ExpressionStateDetector
        detector = ExpressionStateDetector(
            tuning=ExpressionTuning(),
            store=ExpressionStateStore(),
            face_detector=ScriptedDetector([_eye_at(100, 200)]),
            view_size=(0, 0),
            mirrored=False,
        )
        detector.process_frame(np.zeros((FRAME_H, FRAME_W, 3), dtype=np.uint8))
        cols = self._ring_columns(detector._last_frame)
        self.assertGreater(cols.min(), 70)
        self.assertLess(cols.max(), 130)

    def test_view_size_leaves_frame_unannotated(self):
        from expression_state_detector import ExpressionStateDetector
        detector = ExpressionStateDetector(
            tuning=ExpressionTuning(),
            store=ExpressionStateStore(),
            face_detector=ScriptedDetector([_eye_at(100, 200)]),
            view_size=(320, 240),
            mirrored=True,
        )
        detector.process_frame(np.zeros((FRAME_H, FRAME_W, 3), dtype=np.uint8))
        self.assertEqual(int(detector._last_frame.sum()), 0)


class BlockingDetector(ScriptedDetector):
    """Holds detect() open until released, to model a slow frame at stop time."""

    def __init__(self):
        super().__init__([])
        self.entered = threading.Event()
        self.release = threading.Event()

    def detect(self, image):
        self.entered.set()
        self.release.wait(5.0)
        return make_face_result()


class FakeVideoSource:
    source_type = VideoSourceType.WEBCAM

    def initialize_source(self, source_type, source_path=None):
        return True

    def read_frame(self):
        return True, np.zeros((FRAME_H, FRAME_W, 3), dtype=np.uint8)

    def release(self):
        pass


class TestStopDuringSlowFrame(unittest.TestCase):

    def test_slow_frame_is_not_published_and_thread_closes_detector(self):
        import expression_state_detector
        from expression_state_detector import ExpressionStateDetector

        blocking = BlockingDetector()
        states = []
        store = ExpressionStateStore()
        detector = ExpressionStateDetector(
            tuning=ExpressionTuning(),
            store=store,
            face_detector=blocking,
            update_callback=states.append,
            view_size=(0, 0),
            mirrored=False,
        )
        detector.video_handler = FakeVideoSource()
        self.assertTrue(detector.start_detection())
        self.assertTrue(blocking.entered.wait(2.0))
        thread = detector.detection_thread

        with patch.object(expression_state_detector, "STOP_TIMEOUT", 0.05):
            detector.stop_detection()
        self.assertTrue(thread.is_alive())
        self.assertFalse(blocking.closed)

        blocking.release.set()
        thread.join(2.0)
        self.assertFalse(thread.is_alive())
        self.assertTrue(blocking.closed)
        self.assertIsNone(detector.face_detector)
        self.assertIsNone(store.latest())
        self.assertEqual(states, [])


class TestOverlay(unittest.TestCase):

    def test_none_state_returns_unchanged_copy(self):
        frame = np.full((50, 50, 3), 7, dtype=np.uint8)
        out = draw_expression_overlay(frame, None)
        self.assertIsNot(out, frame)
        self.assertTrue(np.array_equal(out, frame))

    def test_draws_without_touching_input(self):
        frame = np.zeros((200, 200, 3), dtype=np.uint8)
        state = FaceExpressionState(
            left_eye_center=RenderPoint(60, 60),
            right_eye_center=RenderPoint(140, 60),
            mouth_center=RenderPoint(100, 150),
            left_eye_blink=True,
            mouth_open=0.5,
        )
        out = draw_expression_overlay(frame, state)
        self.assertEqual(int(frame.sum()), 0)
        self.assertGreater(int(out.sum()), 0)

    def test_mouth_curve_shape(self):
        """Curve spans the mouth width; the middle drops with openness, corners lift with smile."""
        curve = mouth_curve(RenderPoint(100, 100), mouth_open=1.0, smile_factor=1.0, samples=25)
        self.assertEqual(curve[0, 0], 100 - MOUTH_WIDTH // 2)
        self.assertEqual(curve[-1, 0], 100 + MOUTH_WIDTH // 2)
        self.assertEqual(curve[0, 1], 92)
        self.assertGreater(curve[12, 1], curve[0, 1])


if __name__ == "__main__":
    unittest.main()
