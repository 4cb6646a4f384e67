"""
=============================================================================
CONFIGURATION FOR FACE EXPRESSION TRACKER (config.py)
=============================================================================

WHAT THIS FILE DOES (in plain language):
----------------------------------------
This file holds ALL configurable settings for the project in one place. Other
modules read from it. Values come from the environment (e.g. your .env file or
system variables), so you can tune blink sensitivity or mouth openness without
changing code.

MAIN GROUPS OF SETTINGS:
------------------------
  1. Expression tuning: Blink threshold, mouth openness baseline/multiplier, smile divisor.
  2. Cosmetic offsets: Optional fixed pixel nudges applied to eye and mouth centers.
  3. Face detection: MediaPipe confidence and the render viewport geometry.
  4. Server: Host, port, debug mode and log level.

HOW VALUES ARE CHOSEN:
---------------------
  - Environment variables (e.g. BLINK_THRESHOLD) override everything.
  - If an env var is not set, we use the default observed to work on a phone-sized
    front camera preview.
=============================================================================
"""

import os


# ============================================================================
# EXPRESSION TUNING (the policy knobs of the per-frame pipeline)
# ============================================================================
# Eye aspect ratio (bounding-box height / width) below which the eye counts as
# closed. Observed working range 0.2 - 0.3; higher = blinks detected more easily.
BLINK_THRESHOLD: float = float(os.getenv("BLINK_THRESHOLD", "0.2"))

# Lip aspect ratio subtracted before scaling into mouth openness (a closed mouth
# still has some height). Observed range 0.10 - 0.15.
MOUTH_OPEN_BASELINE: float = float(os.getenv("MOUTH_OPEN_BASELINE", "0.15"))

# Scales (aspect - baseline) into the 0-1 openness value. Observed range 5.0 - 8.0.
MOUTH_OPEN_MULTIPLIER: float = float(os.getenv("MOUTH_OPEN_MULTIPLIER", "5.0"))

# Pixels of centroid deviation from the mouth-corner line that map to a full
# smile (+1) or frown (-1).
SMILE_DIVISOR: float = float(os.getenv("SMILE_DIVISOR", "20.0"))

# ============================================================================
# COSMETIC OFFSETS (render-space pixels, added to the computed centers)
# ============================================================================
# Zero by default. Some overlays look better nudged a few pixels, e.g. eye
# circles drawn slightly lower than the eye-contour centroid.
LEFT_EYE_OFFSET_X: float = float(os.getenv("LEFT_EYE_OFFSET_X", "0"))
LEFT_EYE_OFFSET_Y: float = float(os.getenv("LEFT_EYE_OFFSET_Y", "0"))
RIGHT_EYE_OFFSET_X: float = float(os.getenv("RIGHT_EYE_OFFSET_X", "0"))
RIGHT_EYE_OFFSET_Y: float = float(os.getenv("RIGHT_EYE_OFFSET_Y", "0"))
MOUTH_OFFSET_X: float = float(os.getenv("MOUTH_OFFSET_X", "0"))
MOUTH_OFFSET_Y: float = float(os.getenv("MOUTH_OFFSET_Y", "0"))

# ============================================================================
# FACE DETECTION & RENDER VIEWPORT
# ============================================================================
# Minimum confidence for MediaPipe Face Mesh detection/tracking (0.01-0.99).
MIN_FACE_CONFIDENCE: float = float(os.getenv("MIN_FACE_CONFIDENCE", "0.5"))

# Size of the render surface the expression state is expressed in. 0 means
# "same as the captured frame" (overlay drawn directly on the frame).
VIEW_WIDTH: int = int(os.getenv("VIEW_WIDTH", "0"))
VIEW_HEIGHT: int = int(os.getenv("VIEW_HEIGHT", "0"))

# Mirror render space horizontally, like a selfie preview.
MIRROR_VIEW: bool = os.getenv("MIRROR_VIEW", "true").lower() == "true"

# ============================================================================
# Application Configuration
# ============================================================================
FLASK_PORT: int = int(os.getenv("FLASK_PORT", "5000"))
FLASK_DEBUG: bool = os.getenv("FLASK_DEBUG", "false").lower() == "true"
FLASK_HOST: str = os.getenv("FLASK_HOST", "0.0.0.0")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ============================================================================
# Helper Functions
# ============================================================================

def get_expression_tuning_config() -> dict:
    """
    Get the expression tuning configuration dictionary (used by GET /config/expression).

    Returns:
        dict: Thresholds, multipliers and cosmetic offsets currently in effect
    """
    return {
        "blinkThreshold": BLINK_THRESHOLD,
        "mouthOpenBaseline": MOUTH_OPEN_BASELINE,
        "mouthOpenMultiplier": MOUTH_OPEN_MULTIPLIER,
        "smileDivisor": SMILE_DIVISOR,
        "offsets": {
            "leftEye": [LEFT_EYE_OFFSET_X, LEFT_EYE_OFFSET_Y],
            "rightEye": [RIGHT_EYE_OFFSET_X, RIGHT_EYE_OFFSET_Y],
            "mouth": [MOUTH_OFFSET_X, MOUTH_OFFSET_Y],
        },
    }


def get_face_detection_config() -> dict:
    """
    Get face detection and viewport configuration.

    Returns:
        dict: Detector confidence and render viewport settings
    """
    return {
        "method": "mediapipe",
        "minFaceConfidence": MIN_FACE_CONFIDENCE,
        "viewWidth": VIEW_WIDTH,
        "viewHeight": VIEW_HEIGHT,
        "mirrorView": MIRROR_VIEW,
    }
