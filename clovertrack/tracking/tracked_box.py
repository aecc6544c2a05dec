"""
Tracked Box.

A single tracked rectangle with temporal smoothing state.
Owned by the tracker; never shared outside of it.
"""

from __future__ import annotations

from dataclasses import dataclass

from clovertrack.core.contracts import Rect, TrackState


@dataclass
class TrackedBox:
    """Internal representation of a tracked rectangle."""
    track_id: int
    smoothed_rect: Rect

    # Current matched streak; 0 after a miss
    consecutive_frames: int = 1
    # Current miss streak; 0 after a match
    missed_frames: int = 0

    state: TrackState = TrackState.TENTATIVE

    def update_with_ema(self, new_rect: Rect, alpha: float):
        """
        Blend a new detection into the smoothed rectangle.

        Args:
            new_rect: Raw detection for this frame
            alpha: Smoothing factor (0-1), higher = more responsive
        """
        beta = 1.0 - alpha
        self.smoothed_rect = Rect(
            x=alpha * new_rect.x + beta * self.smoothed_rect.x,
            y=alpha * new_rect.y + beta * self.smoothed_rect.y,
            width=alpha * new_rect.width + beta * self.smoothed_rect.width,
            height=alpha * new_rect.height + beta * self.smoothed_rect.height,
        )
        self.consecutive_frames += 1
        self.missed_frames = 0

    def reset(self, new_rect: Rect):
        """Restart smoothing from a raw detection (used after a large jump)."""
        self.smoothed_rect = new_rect
        self.consecutive_frames = 1
        self.missed_frames = 0

    def mark_missed(self):
        """Record a frame without a matching detection."""
        self.missed_frames += 1
        self.consecutive_frames = 0

    @property
    def is_matchable(self) -> bool:
        return self.state != TrackState.DYING
