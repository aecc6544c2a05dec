"""
Base class for rectangle detectors.

To add a new detector:
1. Create a new file in the detection/ directory
2. Inherit from BaseRectangleDetector
3. Implement detect()
4. Register in detection/registry.py DETECTORS dict

Example implementation:
    class FixedDetector(BaseRectangleDetector):
        def __init__(self, config=None):
            self.config = config

        def detect(self, frame):
            return [Rect(0.4, 0.4, 0.2, 0.2)]
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

import cv2
import numpy as np
from numpy.typing import NDArray
from loguru import logger

from clovertrack.core.contracts import AnalysisResult, Rect


class BaseRectangleDetector(ABC):
    """Abstract base class for rectangle detectors.

    Detectors are opaque to the tracker. They turn one RGB frame into
    rectangles in normalized coordinates with a bottom-left origin.
    Detectors carry no identity between frames.
    """

    @abstractmethod
    def detect(self, frame: NDArray[np.uint8]) -> List[Rect]:
        """Find rectangles in a frame.

        Args:
            frame: RGB frame as numpy array (H, W, 3)

        Returns:
            Rectangles (x, y, w, h), normalized, origin bottom-left
        """
        pass

    def analyze(self, frame: NDArray[np.uint8], timestamp: float) -> Optional[AnalysisResult]:
        """Run detection and package the result.

        Args:
            frame: RGB frame
            timestamp: Presentation time of the frame, seconds

        Returns:
            AnalysisResult, or None if the detector failed on this frame
        """
        try:
            boxes = self.detect(frame)
        except cv2.error as e:
            logger.error(f"{type(self).__name__}: detection failed: {e}")
            return None

        return AnalysisResult(
            rectangles_detected=len(boxes),
            bounding_boxes=boxes,
            timestamp=timestamp,
        )

    def warmup(self) -> None:
        """Warm up the detector (optional)."""
        pass
