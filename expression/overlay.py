"""
Overlay renderer for the published expression state.

Draws on a copy of the frame: a red ring for each open eye, a horizontal red
line for a blinking eye, and a blue mouth curve whose middle drops as the mouth
opens and whose corners lift with the smile factor. Colors are BGR.
"""

from typing import Optional

import cv2
import numpy as np

from expression.expression_state import FaceExpressionState, RenderPoint

EYE_COLOR = (0, 0, 255)
MOUTH_COLOR = (255, 0, 0)
FACE_COLOR = (0, 200, 0)
LINE_WIDTH = 3
EYE_RADIUS = 20
MOUTH_WIDTH = 80
MOUTH_OPEN_DROP = 10.0  # px the curve's control point drops at mouth_open = 1
SMILE_LIFT = 8.0  # px the corners rise at smile_factor = 1


def _pt(p: RenderPoint):
    return int(round(p.x)), int(round(p.y))


def _draw_eye(frame: np.ndarray, center: RenderPoint, blinking: bool) -> None:
    cx, cy = _pt(center)
    if blinking:
        cv2.line(frame, (cx - EYE_RADIUS, cy), (cx + EYE_RADIUS, cy), EYE_COLOR, LINE_WIDTH, cv2.LINE_AA)
    else:
        cv2.circle(frame, (cx, cy), EYE_RADIUS, EYE_COLOR, LINE_WIDTH, cv2.LINE_AA)


def mouth_curve(center: RenderPoint, mouth_open: float, smile_factor: float, samples: int = 24) -> np.ndarray:
    """Sample the quadratic mouth curve as an (samples, 2) int32 polyline."""
    half = MOUTH_WIDTH / 2.0
    corner_y = center.y - SMILE_LIFT * smile_factor
    start = np.array([center.x - half, corner_y])
    end = np.array([center.x + half, corner_y])
    control = np.array([center.x, center.y + MOUTH_OPEN_DROP * mouth_open])
    t = np.linspace(0.0, 1.0, samples)[:, None]
    curve = (1 - t) ** 2 * start + 2 * (1 - t) * t * control + t ** 2 * end
    return np.round(curve).astype(np.int32)


def draw_expression_overlay(frame: np.ndarray, state: Optional[FaceExpressionState]) -> np.ndarray:
    """
    Render the expression state over a frame.

    Args:
        frame: BGR image in the same render space as the state
        state: Published state, or None (frame returned unchanged)

    Returns:
        Annotated copy of the frame
    """
    out = frame.copy()
    if state is None:
        return out
    if state.face_rect is not None:
        r = state.face_rect
        cv2.rectangle(
            out,
            (int(r.x), int(r.y)),
            (int(r.x + r.width), int(r.y + r.height)),
            FACE_COLOR,
            1,
        )
    _draw_eye(out, state.left_eye_center, state.left_eye_blink)
    _draw_eye(out, state.right_eye_center, state.right_eye_blink)
    curve = mouth_curve(state.mouth_center, state.mouth_open, state.smile_factor)
    cv2.polylines(out, [curve.reshape(-1, 1, 2)], False, MOUTH_COLOR, LINE_WIDTH, cv2.LINE_AA)
    return out
