"""
Contour-based rectangle detector.

Finds convex quadrilaterals with OpenCV:
grayscale -> blur -> Canny -> dilate -> external contours -> approxPolyDP.
Each quad is reported by its axis-aligned bounding box.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import cv2
import numpy as np
from numpy.typing import NDArray

from clovertrack.core.config import DetectorConfig
from clovertrack.core.contracts import Rect
from .base import BaseRectangleDetector


class ContourRectangleDetector(BaseRectangleDetector):
    """
    Rectangle detector built on contour approximation.

    Confidence is the fill ratio of the quad inside its bounding box:
    close to 1.0 for upright rectangles, lower for skewed or rotated ones.
    """

    def __init__(self, config: Optional[DetectorConfig] = None):
        self.config = config or DetectorConfig()
        self._kernel = np.ones((3, 3), np.uint8)

    def detect(self, frame: NDArray[np.uint8]) -> List[Rect]:
        h, w = frame.shape[:2]
        if h == 0 or w == 0:
            return []

        scored = self._find_quads(frame)
        scored.sort(key=lambda item: item[0], reverse=True)

        return [
            self._to_normalized(box, w, h)
            for _, box in scored[: self.config.maximum_observations]
        ]

    def _find_quads(self, frame: NDArray[np.uint8]) -> List[Tuple[float, Tuple[int, int, int, int]]]:
        h, w = frame.shape[:2]
        min_side = self.config.minimum_size * min(w, h)

        gray = cv2.cvtColor(frame, cv2.COLOR_RGB2GRAY) if frame.ndim == 3 else frame
        gray = cv2.GaussianBlur(gray, (5, 5), 0)

        edges = cv2.Canny(gray, self.config.canny_low, self.config.canny_high)
        edges = cv2.dilate(edges, self._kernel, iterations=1)

        contours, _ = cv2.findContours(edges, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

        quads = []
        for contour in contours:
            perimeter = cv2.arcLength(contour, True)
            approx = cv2.approxPolyDP(contour, 0.02 * perimeter, True)

            if len(approx) != 4 or not cv2.isContourConvex(approx):
                continue

            x, y, bw, bh = cv2.boundingRect(approx)
            if min(bw, bh) < min_side:
                continue

            confidence = cv2.contourArea(approx) / float(bw * bh)
            if confidence < self.config.minimum_confidence:
                continue

            quads.append((confidence, (x, y, bw, bh)))

        return quads

    @staticmethod
    def _to_normalized(box: Tuple[int, int, int, int], width: int, height: int) -> Rect:
        # Image rows grow downward; normalized y grows upward from the bottom
        x, y, bw, bh = box
        return Rect(
            x=x / width,
            y=(height - (y + bh)) / height,
            width=bw / width,
            height=bh / height,
        )
