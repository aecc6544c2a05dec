"""
Detector registry.

Maps config names to detector classes.
"""

from typing import Optional

from clovertrack.core.config import DetectorConfig
from .base import BaseRectangleDetector
from .contour_detector import ContourRectangleDetector

# Registry of available detectors
DETECTORS = {
    "contour": ContourRectangleDetector,
}


def create_detector(name: str, config: Optional[DetectorConfig] = None) -> BaseRectangleDetector:
    """Get a detector instance by name.

    Args:
        name: Detector type name (e.g., "contour")
        config: Detector configuration

    Returns:
        Initialized detector instance

    Raises:
        ValueError: If detector name is not registered
    """
    if name not in DETECTORS:
        available = ", ".join(DETECTORS.keys())
        raise ValueError(f"Unknown detector '{name}'. Available: {available}")

    return DETECTORS[name](config)


def list_detectors() -> list:
    """List available detector names."""
    return list(DETECTORS.keys())
