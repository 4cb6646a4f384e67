"""
Landmark regions and the per-frame detector result.

A detector reports, for the single selected face, an optional bounding box and
a few named point clusters in detector-normalized space (unit square, vertical
origin at the BOTTOM). Any region may be missing.

MediaPipe Face Mesh indices for the regions we consume are kept here so the
detector adapter and the test fixtures agree on them.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple, Union

import numpy as np

LEFT_EYE = "leftEye"
RIGHT_EYE = "rightEye"
OUTER_LIPS = "outerLips"
REGION_NAMES: Tuple[str, ...] = (LEFT_EYE, RIGHT_EYE, OUTER_LIPS)

# MediaPipe Face Mesh contour indices (468-point mesh)
MP_LEFT_EYE = [33, 7, 163, 144, 145, 153, 154, 155, 133, 173, 157, 158, 159, 160, 161, 246]
MP_RIGHT_EYE = [362, 382, 381, 380, 374, 373, 390, 249, 263, 466, 388, 387, 386, 385, 384, 398]
MP_OUTER_LIPS = [61, 146, 91, 181, 84, 17, 314, 405, 321, 375, 291, 409, 270, 269, 267, 0, 37, 39, 40, 185]
MP_REGION_INDICES: Dict[str, list] = {
    LEFT_EYE: MP_LEFT_EYE,
    RIGHT_EYE: MP_RIGHT_EYE,
    OUTER_LIPS: MP_OUTER_LIPS,
}

PointsLike = Union[np.ndarray, Sequence[Sequence[float]]]


def as_point_array(points: Optional[PointsLike]) -> np.ndarray:
    """Coerce a point sequence to a float (N, 2) array; None -> empty (0, 2)."""
    if points is None:
        return np.zeros((0, 2), dtype=np.float64)
    arr = np.asarray(points, dtype=np.float64)
    if arr.size == 0:
        return np.zeros((0, 2), dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] < 2:
        raise ValueError(f"expected (N, 2) points, got shape {arr.shape}")
    return arr[:, :2]


@dataclass(frozen=True)
class DetectorResult:
    """
    Output of the landmark detector for one frame.

    Either a face (face_found=True, with optional bounding box and regions) or a
    no-face / failure signal (face_found=False, error set on failure).
    face_bounding_box is (x, y, width, height) in detector-normalized space with
    a bottom-left origin.
    """
    face_found: bool
    face_bounding_box: Optional[Tuple[float, float, float, float]] = None
    regions: Dict[str, np.ndarray] = field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def face(
        cls,
        regions: Dict[str, PointsLike],
        face_bounding_box: Optional[Tuple[float, float, float, float]] = None,
    ) -> 'DetectorResult':
        """Build a face result; empty or None regions are dropped (treated as absent)."""
        cleaned = {}
        for name, pts in (regions or {}).items():
            arr = as_point_array(pts)
            if len(arr):
                cleaned[name] = arr
        return cls(face_found=True, face_bounding_box=face_bounding_box, regions=cleaned)

    @classmethod
    def no_face(cls) -> 'DetectorResult':
        return cls(face_found=False)

    @classmethod
    def failure(cls, error: str) -> 'DetectorResult':
        return cls(face_found=False, error=error or "detector failure")

    def region(self, name: str) -> Optional[np.ndarray]:
        """Points for a region, or None when the detector returned nothing for it."""
        return self.regions.get(name)
