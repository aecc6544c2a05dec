"""
Rectangle Detection Module.

The detector is a black box to the tracker: it turns a frame
into normalized, bottom-left-origin rectangles.
"""

from .base import BaseRectangleDetector
from .contour_detector import ContourRectangleDetector
from .registry import create_detector, list_detectors
