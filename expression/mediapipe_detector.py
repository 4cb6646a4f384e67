"""
MediaPipe Landmark Detector Implementation

MediaPipe Face Mesh backend for LandmarkDetectorInterface. Tracks one face and
reports its eye and outer-lip contours in detector-normalized space (unit
square, vertical origin at the bottom), plus a normalized face bounding box.
"""

import logging
from typing import Dict

import cv2
import numpy as np

from expression.landmark_detector_interface import LandmarkDetectorInterface
from expression.landmark_regions import MP_REGION_INDICES, DetectorResult

logger = logging.getLogger(__name__)


class MediaPipeFaceLandmarkDetector(LandmarkDetectorInterface):
    """
    MediaPipe Face Mesh landmark detector.

    Uses tracking mode (static_image_mode=False) for continuous video; the
    mediapipe import is deferred to construction so the rest of the package can
    be imported without it.
    """

    def __init__(self, min_detection_confidence: float = 0.5, min_tracking_confidence: float = 0.5):
        """
        Initialize the Face Mesh model.

        Args:
            min_detection_confidence: Minimum confidence for face detection (0-1). Lower = more permissive.
            min_tracking_confidence: Minimum confidence for face tracking (0-1)
        """
        import mediapipe as mp

        self._det_conf = max(0.01, min(0.99, float(min_detection_confidence)))
        self._track_conf = max(0.01, min(0.99, float(min_tracking_confidence)))
        self.mp_face_mesh = mp.solutions.face_mesh
        self.face_mesh = self.mp_face_mesh.FaceMesh(
            static_image_mode=False,
            max_num_faces=1,
            refine_landmarks=False,
            min_detection_confidence=self._det_conf,
            min_tracking_confidence=self._track_conf,
        )
        self._available = True

    def detect(self, image: np.ndarray) -> DetectorResult:
        if image is None or image.size == 0:
            return DetectorResult.no_face()
        try:
            rgb_image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
            results = self.face_mesh.process(rgb_image)
        except Exception as e:
            logger.warning("Face mesh processing failed: %s", e)
            return DetectorResult.failure(str(e))
        if not results.multi_face_landmarks:
            return DetectorResult.no_face()
        return self._to_result(results.multi_face_landmarks[0])

    @staticmethod
    def _to_result(face_landmarks) -> DetectorResult:
        """Convert one face's mesh landmarks to bottom-origin normalized regions."""
        mesh = np.array([[lm.x, lm.y] for lm in face_landmarks.landmark], dtype=np.float64)
        # MediaPipe's y grows downward; detector space has its origin at the bottom.
        mesh[:, 1] = 1.0 - mesh[:, 1]

        regions: Dict[str, np.ndarray] = {}
        n = mesh.shape[0]
        for name, indices in MP_REGION_INDICES.items():
            valid = [i for i in indices if i < n]
            if valid:
                regions[name] = mesh[valid]

        min_x, min_y = mesh.min(axis=0)
        max_x, max_y = mesh.max(axis=0)
        bbox = (float(min_x), float(min_y), float(max_x - min_x), float(max_y - min_y))
        return DetectorResult.face(regions, face_bounding_box=bbox)

    def is_available(self) -> bool:
        return self._available

    def get_name(self) -> str:
        return "mediapipe"

    def close(self) -> None:
        """Clean up MediaPipe resources."""
        if hasattr(self, 'face_mesh'):
            try:
                self.face_mesh.close()
            except Exception as e:
                logger.debug("Face mesh close failed: %s", e)
        self._available = False
