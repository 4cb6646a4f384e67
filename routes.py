"""
Flask routes for Face Expression Tracker.

Handles health, config, and expression start/stop/state/video-feed. The
rendering side polls GET /expression/state; the server never pushes.
"""

import logging
from typing import Optional

from flask import Blueprint, Flask, Response, jsonify, request

import config
from expression.video_source_handler import VideoSourceType
from services.expression_state_store import get_expression_store

logger = logging.getLogger(__name__)

# Create a blueprint for better organization
api = Blueprint('api', __name__)

# Global detector instance (created on first POST /expression/start)
expression_detector = None  # type: Optional["ExpressionStateDetector"]

SOURCE_TYPE_MAP = {
    "webcam": VideoSourceType.WEBCAM,
    "file": VideoSourceType.FILE,
    "stream": VideoSourceType.STREAM,
}


@api.route("/health", methods=["GET"])
def health():
    """Liveness check."""
    return jsonify({"status": "ok"})


@api.route("/config/expression", methods=["GET"])
def get_expression_config():
    """
    Get the active expression tuning and face detection settings.

    Returns:
        JSON: { "tuning": {...}, "faceDetection": {...} }
    """
    return jsonify({
        "tuning": config.get_expression_tuning_config(),
        "faceDetection": config.get_face_detection_config(),
    })


@api.route("/expression/state", methods=["GET"])
def get_expression_state():
    """
    Get the most recently published expression state.

    Returns:
        JSON: {
            "faceDetected": true,
            "sequence": 42,
            "detectorRunning": true,
            "state": {
                "leftEyeCenter": {"x": 120.0, "y": 200.0},
                "rightEyeCenter": {"x": 200.0, "y": 200.0},
                "mouthCenter": {"x": 160.0, "y": 300.0},
                "leftEyeBlink": false,
                "rightEyeBlink": false,
                "mouthOpen": 0.25,
                "smileFactor": 0.1,
                "faceRect": {"x": ..., "y": ..., "width": ..., "height": ...} | null
            } | null
        }
    """
    sequence, state = get_expression_store().snapshot()
    return jsonify({
        "faceDetected": state is not None,
        "sequence": sequence,
        "detectorRunning": bool(expression_detector and expression_detector.is_running),
        "state": state.to_dict() if state is not None else None,
    })


@api.route("/expression/start", methods=["POST"])
def start_expression_detection():
    """
    Start expression detection from a video source.

    Request Body:
        {
            "sourceType": "webcam" | "file" | "stream",
            "sourcePath": "path or URL for file/stream sources"
        }

    Returns:
        JSON: { "success": true, "message": "...", "detector": "mediapipe" }
    """
    global expression_detector
    # Lazy import: defer loading the detector (mediapipe, cv2) until first start
    from expression_state_detector import ExpressionStateDetector

    if not request.is_json:
        return jsonify({"error": "Request must be JSON"}), 400

    data = request.get_json(silent=True) or {}
    source_type_str = str(data.get("sourceType", "webcam")).lower()
    source_path = data.get("sourcePath")

    source_type = SOURCE_TYPE_MAP.get(source_type_str)
    if not source_type:
        return jsonify({
            "error": f"Invalid sourceType: {source_type_str}. Must be 'webcam', 'file', or 'stream'"
        }), 400
    if source_type != VideoSourceType.WEBCAM and not source_path:
        return jsonify({"error": "sourcePath is required for file and stream sources"}), 400

    try:
        if expression_detector:
            expression_detector.stop_detection()
        expression_detector = ExpressionStateDetector()
        if not expression_detector.start_detection(source_type, source_path):
            return jsonify({
                "error": "Failed to start detection. Check video source."
            }), 500
        return jsonify({
            "success": True,
            "message": f"Expression detection started from {source_type_str}",
            "detector": expression_detector.face_detector.get_name(),
        })
    except ValueError as e:
        logger.warning("Invalid expression configuration: %s", e)
        return jsonify({
            "error": "Failed to start expression detection",
            "details": str(e)
        }), 500


@api.route("/expression/stop", methods=["POST"])
def stop_expression_detection():
    """
    Stop expression detection and clear the published state.

    Returns:
        JSON: { "success": true, "message": "Expression detection stopped" }
    """
    global expression_detector
    if expression_detector:
        expression_detector.stop_detection()
        expression_detector = None
    else:
        get_expression_store().clear()
    return jsonify({
        "success": True,
        "message": "Expression detection stopped"
    })


@api.route("/expression/video-feed", methods=["GET"])
def get_expression_video_feed():
    """
    Latest annotated frame as a single JPEG.

    Returns:
        image/jpeg; 204 when no frame yet; 404 when detection is not running
    """
    if not expression_detector or not expression_detector.is_running:
        return jsonify({"error": "Expression detection not started"}), 404
    jpeg = expression_detector.get_last_frame_jpeg()
    if not jpeg:
        return "", 204
    return Response(jpeg, mimetype="image/jpeg", headers={"Cache-Control": "no-cache"})


def register_routes(app: Flask) -> None:
    """Attach all API routes to the Flask app."""
    app.register_blueprint(api)
