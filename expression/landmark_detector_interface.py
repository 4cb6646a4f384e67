"""
Landmark Detector Interface Module

Abstract interface for landmark detector backends, so the detection runner can
work with any detector that reports the leftEye / rightEye / outerLips regions
in detector-normalized space.
"""

from abc import ABC, abstractmethod

import numpy as np

from expression.landmark_regions import DetectorResult


class LandmarkDetectorInterface(ABC):
    """
    Abstract interface for landmark detectors.

    Implementations select a single face per frame and report it as a
    DetectorResult; they never raise for "no face" and report internal errors
    as DetectorResult.failure(...).
    """

    @abstractmethod
    def detect(self, image: np.ndarray) -> DetectorResult:
        """
        Detect the selected face's landmark regions in an image.

        Args:
            image: BGR image array (OpenCV format)

        Returns:
            DetectorResult for the frame
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if this detector can be used.

        Returns:
            True if the detector is ready, False otherwise
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """
        Get the name of this detector (e.g. "mediapipe").
        """
        pass

    def close(self) -> None:
        """
        Clean up resources. Override if needed.

        Default implementation does nothing.
        """
        pass
