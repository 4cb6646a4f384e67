"""
MediaPipe adapter tests.

Exercises the mesh-to-region conversion and error handling with a fake Face
Mesh, so the mediapipe model is never loaded.
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import unittest
from types import SimpleNamespace

import numpy as np

from expression.landmark_regions import (
    LEFT_EYE,
    MP_LEFT_EYE,
    MP_OUTER_LIPS,
    MP_RIGHT_EYE,
    OUTER_LIPS,
    RIGHT_EYE,
)
from expression.mediapipe_detector import MediaPipeFaceLandmarkDetector

MESH_SIZE = 468


def fake_mesh(n: int = MESH_SIZE):
    """Face Mesh-shaped landmarks: x = 0.2 + i/1000, y = 0.1 + (i % 50)/100 (y down)."""
    landmarks = [SimpleNamespace(x=0.2 + i * 0.001, y=0.1 + (i % 50) * 0.01, z=0.0) for i in range(n)]
    return SimpleNamespace(landmark=landmarks)


class FakeFaceMesh:

    def __init__(self, faces=None, error=None):
        self.faces = faces
        self.error = error
        self.closed = False

    def process(self, rgb_image):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(multi_face_landmarks=self.faces)

    def close(self):
        self.closed = True


def detector_with(face_mesh):
    """Adapter instance wired to a fake mesh (skips the mediapipe model load)."""
    detector = MediaPipeFaceLandmarkDetector.__new__(MediaPipeFaceLandmarkDetector)
    detector.face_mesh = face_mesh
    detector._available = True
    return detector


class TestMeshConversion(unittest.TestCase):

    def setUp(self):
        self.mesh = fake_mesh()
        self.result = MediaPipeFaceLandmarkDetector._to_result(self.mesh)

    def test_regions_sliced_from_index_sets(self):
        self.assertTrue(self.result.face_found)
        self.assertEqual(self.result.region(LEFT_EYE).shape, (len(MP_LEFT_EYE), 2))
        self.assertEqual(self.result.region(RIGHT_EYE).shape, (len(MP_RIGHT_EYE), 2))
        self.assertEqual(self.result.region(OUTER_LIPS).shape, (len(MP_OUTER_LIPS), 2))

    def test_y_flipped_to_bottom_origin(self):
        for name, indices in ((LEFT_EYE, MP_LEFT_EYE), (OUTER_LIPS, MP_OUTER_LIPS)):
            pts = self.result.region(name)
            for row, i in enumerate(indices):
                lm = self.mesh.landmark[i]
                self.assertAlmostEqual(pts[row, 0], lm.x)
                self.assertAlmostEqual(pts[row, 1], 1.0 - lm.y)

    def test_bounding_box_is_normalized_bottom_origin(self):
        x, y, w, h = self.result.face_bounding_box
        self.assertAlmostEqual(x, 0.2)
        self.assertAlmostEqual(w, (MESH_SIZE - 1) * 0.001)
        # Mesh y spans 0.10-0.59 top-down, i.e. 0.41-0.90 bottom-up
        self.assertAlmostEqual(y, 0.41)
        self.assertAlmostEqual(h, 0.49)

    def test_short_mesh_keeps_only_reachable_indices(self):
        result = MediaPipeFaceLandmarkDetector._to_result(fake_mesh(200))
        self.assertEqual(len(result.region(LEFT_EYE)), len([i for i in MP_LEFT_EYE if i < 200]))
        self.assertIsNone(result.region(RIGHT_EYE))


class TestDetect(unittest.TestCase):

    def setUp(self):
        self.frame = np.zeros((48, 64, 3), dtype=np.uint8)

    def test_processing_error_becomes_failure(self):
        detector = detector_with(FakeFaceMesh(error=RuntimeError("graph failed")))
        result = detector.detect(self.frame)
        self.assertFalse(result.face_found)
        self.assertIn("graph failed", result.error)

    def test_no_landmarks_is_no_face(self):
        result = detector_with(FakeFaceMesh(faces=None)).detect(self.frame)
        self.assertFalse(result.face_found)
        self.assertIsNone(result.error)

    def test_empty_image_is_no_face(self):
        result = detector_with(FakeFaceMesh(faces=[fake_mesh()])).detect(np.zeros((0, 0, 3), dtype=np.uint8))
        self.assertFalse(result.face_found)

    def test_first_face_converted(self):
        result = detector_with(FakeFaceMesh(faces=[fake_mesh()])).detect(self.frame)
        self.assertTrue(result.face_found)
        self.assertEqual(set(result.regions), {LEFT_EYE, RIGHT_EYE, OUTER_LIPS})

    def test_close_releases_mesh(self):
        mesh = FakeFaceMesh()
        detector = detector_with(mesh)
        detector.close()
        self.assertTrue(mesh.closed)
        self.assertFalse(detector.is_available())


if __name__ == "__main__":
    unittest.main()
