"""
Expression state data model.

Render-space geometry (points, rectangles) and the per-frame FaceExpressionState
handed to the rendering layer. Every value here is immutable: a state is built
once per frame and replaced, never edited.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class RenderPoint:
    """A point in consumer render space (pixels or layout points)."""
    x: float
    y: float

    def offset(self, dx: float, dy: float) -> 'RenderPoint':
        return RenderPoint(self.x + dx, self.y + dy)

    def to_dict(self) -> Dict[str, float]:
        return {"x": float(self.x), "y": float(self.y)}


ORIGIN = RenderPoint(0.0, 0.0)


@dataclass(frozen=True)
class RenderRect:
    """Axis-aligned rectangle in render space; (x, y) is the top-left corner."""
    x: float
    y: float
    width: float
    height: float

    @property
    def mid_x(self) -> float:
        return self.x + self.width / 2.0

    @property
    def mid_y(self) -> float:
        return self.y + self.height / 2.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "x": float(self.x),
            "y": float(self.y),
            "width": float(self.width),
            "height": float(self.height),
        }


@dataclass(frozen=True)
class FaceExpressionState:
    """
    Expression state for one frame.

    mouth_open is always within [0, 1] and smile_factor within [-1, 1]. A missing
    eye or mouth region leaves its center at ORIGIN with neutral values.
    """
    left_eye_center: RenderPoint = ORIGIN
    right_eye_center: RenderPoint = ORIGIN
    mouth_center: RenderPoint = ORIGIN
    left_eye_blink: bool = False
    right_eye_blink: bool = False
    mouth_open: float = 0.0  # 0 = closed, 1 = fully open
    smile_factor: float = 0.0  # -1 frown .. +1 smile
    face_rect: Optional[RenderRect] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for JSON responses (camelCase keys, like the rest of the API)."""
        return {
            "leftEyeCenter": self.left_eye_center.to_dict(),
            "rightEyeCenter": self.right_eye_center.to_dict(),
            "mouthCenter": self.mouth_center.to_dict(),
            "leftEyeBlink": bool(self.left_eye_blink),
            "rightEyeBlink": bool(self.right_eye_blink),
            "mouthOpen": float(self.mouth_open),
            "smileFactor": float(self.smile_factor),
            "faceRect": self.face_rect.to_dict() if self.face_rect is not None else None,
        }
