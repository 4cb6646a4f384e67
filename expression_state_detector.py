"""
Expression State Detector.

Runs the per-frame expression pipeline against a live video source: capture
frame → landmark detector (MediaPipe Face Mesh) → FramePipeline (render-space
eye centers, blinks, mouth openness, smile factor) → single-slot store. The
latest annotated frame is kept for the video feed.

Processing is one frame at a time on a background thread. Frames that arrive
while a frame is being processed are simply not read (the capture buffer is
kept at one frame), so the store always holds the newest result.
"""

import logging
import threading
import time
from collections import deque
from typing import Callable, Optional

import cv2
import numpy as np

import config
from expression.coordinate_converter import AspectFillTransform, FrameTransform
from expression.expression_state import FaceExpressionState
from expression.frame_pipeline import FramePipeline
from expression.landmark_detector_interface import LandmarkDetectorInterface
from expression.overlay import draw_expression_overlay
from expression.tuning import ExpressionTuning
from expression.video_source_handler import VideoSourceHandler, VideoSourceType
from services.expression_state_store import ExpressionStateStore, get_expression_store

logger = logging.getLogger(__name__)

TARGET_FPS = 30.0
STOP_TIMEOUT = 2.0  # seconds to wait for the detection thread on stop


class ExpressionStateDetector:
    """
    Real-time expression detector.

    Usage:
        detector = ExpressionStateDetector()
        detector.start_detection(source_type=VideoSourceType.WEBCAM)

        # From any thread:
        state = detector.get_current_state()
    """

    def __init__(
        self,
        tuning: Optional[ExpressionTuning] = None,
        store: Optional[ExpressionStateStore] = None,
        face_detector: Optional[LandmarkDetectorInterface] = None,
        update_callback: Optional[Callable[[Optional[FaceExpressionState]], None]] = None,
        view_size: Optional[tuple] = None,
        mirrored: Optional[bool] = None,
    ):
        """
        Initialize the expression state detector.

        Args:
            tuning: Pipeline thresholds (default: from config)
            store: Publish target (default: process-wide store)
            face_detector: Landmark detector (default: MediaPipe, created on start)
            update_callback: Called with each published state (None when no face)
            view_size: (width, height) of the render surface; None/0 = frame size
            mirrored: Mirror render space horizontally (default: config.MIRROR_VIEW)
        """
        self.store = store if store is not None else get_expression_store()
        self.pipeline = FramePipeline(tuning or ExpressionTuning.from_config(), self.store)
        self.face_detector = face_detector
        self.update_callback = update_callback
        if view_size is None:
            view_size = (config.VIEW_WIDTH, config.VIEW_HEIGHT)
        self.view_size = (int(view_size[0] or 0), int(view_size[1] or 0))
        self.mirrored = config.MIRROR_VIEW if mirrored is None else bool(mirrored)

        self.video_handler = VideoSourceHandler()
        self.detection_thread: Optional[threading.Thread] = None
        self.is_running = False

        self.fps_counter = deque(maxlen=30)
        self.last_frame_time = time.time()
        self._missed_reads = 0

        # Last annotated frame for the video feed
        self._last_frame: Optional[np.ndarray] = None
        self._last_frame_lock = threading.Lock()

        # Per-run stop signal; the publish lock orders the loop's last publish before stop's clear
        self._stop_event = threading.Event()
        self._publish_lock = threading.Lock()

    def _ensure_detector(self) -> LandmarkDetectorInterface:
        if self.face_detector is None:
            from expression.mediapipe_detector import MediaPipeFaceLandmarkDetector
            self.face_detector = MediaPipeFaceLandmarkDetector(
                min_detection_confidence=config.MIN_FACE_CONFIDENCE,
                min_tracking_confidence=config.MIN_FACE_CONFIDENCE,
            )
        return self.face_detector

    def transform_for_frame(self, frame: np.ndarray) -> FrameTransform:
        """Aspect-fill transform from the frame into the configured view."""
        h, w = frame.shape[:2]
        vw, vh = self.view_size
        return AspectFillTransform(w, h, vw or w, vh or h, mirrored=self.mirrored)

    def get_last_frame_jpeg(self) -> Optional[bytes]:
        """Most recent annotated frame as JPEG bytes (copy-on-read), or None."""
        with self._last_frame_lock:
            if self._last_frame is None:
                return None
            frame_to_encode = self._last_frame.copy()
        ok, buf = cv2.imencode(".jpg", frame_to_encode)
        return buf.tobytes() if ok else None

    def start_detection(
        self,
        source_type: VideoSourceType = VideoSourceType.WEBCAM,
        source_path: Optional[str] = None,
    ) -> bool:
        """
        Start expression detection from a video source.

        Args:
            source_type: Type of video source (WEBCAM, FILE, STREAM)
            source_path: Path to video file or stream URL (required for FILE/STREAM)

        Returns:
            bool: True if detection started successfully, False otherwise
        """
        if self.is_running:
            self.stop_detection()

        self._missed_reads = 0
        self.store.clear()
        with self._last_frame_lock:
            self._last_frame = None

        if not self.video_handler.initialize_source(source_type, source_path):
            logger.error("Failed to initialize video source %s (path=%s)", source_type, source_path)
            return False

        try:
            detector = self._ensure_detector()
        except ImportError as e:
            logger.error("Landmark detector unavailable: %s", e)
            self.video_handler.release()
            return False

        logger.info("Expression detection started: source_type=%s, source_path=%s, detector=%s",
                    source_type, source_path, detector.get_name())
        self._stop_event = threading.Event()
        self.is_running = True
        self.detection_thread = threading.Thread(
            target=self._detection_loop, args=(detector, self._stop_event), daemon=True
        )
        self.detection_thread.start()
        return True

    def stop_detection(self) -> None:
        """
        Stop detection, release the source and clear the published state.

        A running detection thread owns its detector and closes it on exit, so a
        thread that outlives the join timeout never leaks or rebuilds one.
        """
        self.is_running = False
        self._stop_event.set()
        thread = self.detection_thread
        self.detection_thread = None
        thread_owned_detector = thread is not None and thread.is_alive()
        if thread_owned_detector:
            thread.join(timeout=STOP_TIMEOUT)
            if thread.is_alive():
                logger.warning("Detection thread still busy after %.1fs; it will close its detector on exit",
                               STOP_TIMEOUT)
        elif self.face_detector:
            self.face_detector.close()
        self.face_detector = None
        self.video_handler.release()
        with self._publish_lock:
            self.store.clear()

    def get_current_state(self) -> Optional[FaceExpressionState]:
        """Latest published state (thread-safe)."""
        return self.store.latest()

    def get_fps(self) -> float:
        """Average processing FPS over the last 30 frames."""
        if not self.fps_counter:
            return 0.0
        return float(np.mean(self.fps_counter))

    def process_frame(self, frame: np.ndarray) -> Optional[FaceExpressionState]:
        """
        Run detector + pipeline on one frame and publish the result.

        Args:
            frame: BGR image frame from the video source

        Returns:
            The published FaceExpressionState, or None when no face
        """
        detector = self._ensure_detector()
        state = self._compute_state(detector, frame)
        self._publish(frame, state)
        self._notify(state)
        return state

    def annotate_frame(self, frame: np.ndarray, state: Optional[FaceExpressionState]) -> np.ndarray:
        """
        Frame as served on the video feed, in the same space as the state.

        Mirrored render space is drawn on a horizontally flipped frame. When the
        view size differs from the frame the state does not line up with any
        frame pixels, so the frame is returned un-annotated.
        """
        if any(self.view_size):
            return frame
        if self.mirrored:
            frame = cv2.flip(frame, 1)
        return draw_expression_overlay(frame, state)

    def _compute_state(self, detector: LandmarkDetectorInterface, frame: np.ndarray) -> Optional[FaceExpressionState]:
        result = detector.detect(frame)
        return self.pipeline.process(result, self.transform_for_frame(frame))

    def _publish(self, frame: np.ndarray, state: Optional[FaceExpressionState]) -> None:
        self.store.publish(state)
        annotated = self.annotate_frame(frame, state)
        with self._last_frame_lock:
            self._last_frame = annotated

    def _notify(self, state: Optional[FaceExpressionState]) -> None:
        if self.update_callback:
            try:
                self.update_callback(state)
            except Exception as e:
                logger.warning("Error in update callback: %s", e)

    def _detection_loop(self, detector: LandmarkDetectorInterface, stop_event: threading.Event) -> None:
        """Main loop on the detection thread: one frame in flight at a time."""
        frame_budget = 1.0 / TARGET_FPS
        try:
            while not stop_event.is_set():
                ret, frame = self.video_handler.read_frame()
                if not ret:
                    self._missed_reads += 1
                    if self.video_handler.source_type == VideoSourceType.FILE and self._missed_reads > TARGET_FPS:
                        logger.info("Video file ended; stopping detection loop")
                        self.is_running = False
                        break
                    time.sleep(frame_budget)
                    continue
                self._missed_reads = 0

                try:
                    state = self._compute_state(detector, frame)
                except (cv2.error, ValueError) as e:
                    logger.warning("Frame processing failed: %s", e)
                else:
                    with self._publish_lock:
                        if stop_event.is_set():
                            break
                        self._publish(frame, state)
                    self._notify(state)

                current_time = time.time()
                frame_time = current_time - self.last_frame_time
                self.last_frame_time = current_time
                if frame_time > 0:
                    self.fps_counter.append(1.0 / frame_time)
                if 0 < frame_time < frame_budget:
                    time.sleep(frame_budget - frame_time)
        finally:
            detector.close()
            if self.face_detector is detector:
                self.face_detector = None
