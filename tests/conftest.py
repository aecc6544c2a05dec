"""
Pytest Configuration and Shared Fixtures.
"""

from typing import List, Sequence, Tuple

import cv2
import numpy as np
import pytest

from clovertrack.core.config import TrackerConfig
from clovertrack.tracking.box_tracker import TemporalBoxTracker


# =============================================================================
# Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks integration tests"
    )


# =============================================================================
# Tracker Fixtures
# =============================================================================

@pytest.fixture
def make_tracker():
    """Build a tracker with overridden config fields."""
    def _make(**overrides) -> TemporalBoxTracker:
        return TemporalBoxTracker(TrackerConfig(**overrides))
    return _make


@pytest.fixture
def tracker(make_tracker):
    """Tracker tuned for short tests: confirm after 2 frames, evict after 1 miss."""
    return make_tracker(min_frames_to_confirm=2, max_missed_frames=1)


# =============================================================================
# Frame Fixtures
# =============================================================================

@pytest.fixture
def blank_frame():
    """Black 240x320 RGB frame."""
    return np.zeros((240, 320, 3), dtype=np.uint8)


def draw_filled_rects(
    shape: Tuple[int, int],
    boxes: Sequence[Tuple[int, int, int, int]],
    color=(255, 255, 255),
) -> np.ndarray:
    """Frame with filled rectangles given as (x1, y1, x2, y2) pixel corners."""
    frame = np.zeros((shape[0], shape[1], 3), dtype=np.uint8)
    for x1, y1, x2, y2 in boxes:
        cv2.rectangle(frame, (x1, y1), (x2, y2), color, -1)
    return frame


@pytest.fixture
def draw_rects():
    return draw_filled_rects


@pytest.fixture
def rect_frame():
    """240x320 frame with one white rectangle covering the center quarter."""
    return draw_filled_rects((240, 320), [(80, 60, 239, 179)])


# =============================================================================
# Fakes
# =============================================================================

class FakeCapture:
    """Video source that replays a list of frames."""

    def __init__(self, frames: List[np.ndarray], fail_to_start: bool = False):
        self._frames = list(frames)
        self._index = 0
        self._fail = fail_to_start
        self.started = False
        self.stopped = False

    def start(self) -> bool:
        self.started = not self._fail
        return self.started

    def stop(self):
        self.stopped = True

    def read_frame(self):
        if self._index >= len(self._frames):
            return (None, 0.0, self._index)
        frame = self._frames[self._index]
        self._index += 1
        return (frame, self._index * 33.0, self._index)


@pytest.fixture
def fake_capture_factory():
    return FakeCapture
