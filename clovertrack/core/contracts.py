"""
Core data contracts for the box tracker.

All geometry is expressed in normalized coordinates:
- Each of x, y, width, height is a fraction of the frame size
- Origin is the bottom-left corner of the frame
- Rectangles are axis-aligned and immutable
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, List, Sequence, Tuple, Union


# ============================================================
# ENUMERATIONS
# ============================================================

class TrackState(Enum):
    """Lifecycle state of a tracked box."""
    TENTATIVE = auto()   # Seen, not yet trusted
    CONFIRMED = auto()   # Rendered and exposed
    DYING = auto()       # Missed after confirmation, awaiting eviction


# ============================================================
# GEOMETRY
# ============================================================

@dataclass(frozen=True)
class Rect:
    """Normalized axis-aligned rectangle, origin bottom-left."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_tuple(cls, values: Sequence[float]) -> Rect:
        x, y, width, height = values
        return cls(float(x), float(y), float(width), float(height))

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)

    @property
    def min_x(self) -> float:
        return self.x

    @property
    def min_y(self) -> float:
        return self.y

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def mid_x(self) -> float:
        return self.x + self.width / 2.0

    @property
    def mid_y(self) -> float:
        return self.y + self.height / 2.0

    @property
    def center(self) -> Tuple[float, float]:
        return (self.mid_x, self.mid_y)

    @property
    def area(self) -> float:
        return self.width * self.height

    def intersection(self, other: Rect) -> Optional[Rect]:
        """Overlapping region, or None when the rectangles are disjoint."""
        x_left = max(self.min_x, other.min_x)
        y_bottom = max(self.min_y, other.min_y)
        x_right = min(self.max_x, other.max_x)
        y_top = min(self.max_y, other.max_y)

        if x_right < x_left or y_top < y_bottom:
            return None

        return Rect(x_left, y_bottom, x_right - x_left, y_top - y_bottom)

    def iou(self, other: Rect) -> float:
        """Calculate Intersection over Union with another rectangle."""
        overlap = self.intersection(other)
        if overlap is None:
            return 0.0

        intersection = overlap.area
        union = self.area + other.area - intersection

        return intersection / union if union > 0 else 0.0


RectLike = Union[Rect, Sequence[float]]


def as_rect(value: RectLike) -> Rect:
    """Accept either a Rect or a plain (x, y, w, h) sequence."""
    if isinstance(value, Rect):
        return value
    return Rect.from_tuple(value)


# ============================================================
# LIFECYCLE EVENTS
# ============================================================

@dataclass(frozen=True)
class Appeared:
    """A new tentative track was created."""
    track_id: int


@dataclass(frozen=True)
class Confirmed:
    """A track moved from tentative to confirmed."""
    track_id: int
    rect: Rect


@dataclass(frozen=True)
class Lost:
    """A track was removed after missing too many frames."""
    track_id: int


# Closed set: every consumer handles exactly these three.
DetectionEvent = Union[Appeared, Confirmed, Lost]


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass(frozen=True)
class AnalysisResult:
    """Raw output of one detector pass over one frame."""
    rectangles_detected: int
    bounding_boxes: List[Rect]
    timestamp: float

    @property
    def summary(self) -> str:
        return f"Rectangles: {self.rectangles_detected}"
