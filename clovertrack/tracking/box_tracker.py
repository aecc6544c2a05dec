"""
Temporal Box Tracker.

Turns noisy per-frame rectangles into stable, identity-persistent tracks.

Hybrid API:
- update() returns discrete lifecycle events (appeared, confirmed, lost),
  each emitted exactly once per track
- get_confirmed_track_rects() is the snapshot of current geometry;
  geometry changes never generate events

Not thread-safe. Drive update() and the snapshot query from one
serialized context.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from clovertrack.core.config import TrackerConfig
from clovertrack.core.contracts import (
    Appeared,
    Confirmed,
    DetectionEvent,
    Lost,
    Rect,
    RectLike,
    TrackState,
    as_rect,
)
from .matcher import calculate_jump_distance, match_detections
from .tracked_box import TrackedBox


class TemporalBoxTracker:
    """
    Multi-object tracker with EMA smoothing and a tentative/confirmed/dying lifecycle.

    Guarantees:
    - Track ids are never reused (until reset())
    - Appeared and Lost exactly once per track, Confirmed at most once
    - Dying tracks are never matched again; reappearing objects get a new id
    """

    def __init__(self, config: Optional[TrackerConfig] = None):
        """
        Initialize tracker.

        Args:
            config: Tracker tuning; defaults when omitted
        """
        self.config = config or TrackerConfig()

        # Owned tracks, addressed by list index
        self._tracks: List[TrackedBox] = []
        self._next_track_id: int = 0

        self._frames_processed: int = 0

        logger.info(
            f"TemporalBoxTracker initialized: iou={self.config.iou_threshold}, "
            f"alpha={self.config.smoothing_alpha}, confirm={self.config.min_frames_to_confirm}, "
            f"max_missed={self.config.max_missed_frames}, max_jump={self.config.max_jump_distance}"
        )

    def update(self, detections: Iterable[RectLike]) -> List[DetectionEvent]:
        """
        Update tracks with the detections of one frame.

        Args:
            detections: Rectangles (x, y, w, h) in normalized coordinates

        Returns:
            Lifecycle events for this frame: confirmations in matching order,
            then appearances, then losses
        """
        rects = [as_rect(d) for d in detections]
        self._frames_processed += 1

        confirmed_events: List[DetectionEvent] = []
        appeared_events: List[DetectionEvent] = []
        lost_events: List[DetectionEvent] = []

        result = match_detections(rects, self._tracks, self.config.iou_threshold)

        # Smooth or reset matched tracks, then check confirmation
        for match in result.matches:
            track = self._tracks[match.track_index]
            detection = rects[match.detection_index]

            if calculate_jump_distance(track.smoothed_rect, detection) > self.config.max_jump_distance:
                track.reset(detection)
            else:
                track.update_with_ema(detection, self.config.smoothing_alpha)

            if (
                track.state == TrackState.TENTATIVE
                and track.consecutive_frames >= self.config.min_frames_to_confirm
            ):
                track.state = TrackState.CONFIRMED
                confirmed_events.append(Confirmed(track.track_id, track.smoothed_rect))
                logger.debug(f"Track confirmed: {track.track_id}")

        # New tentative tracks for unmatched detections; appended after
        # existing ones so the matcher's track indices stay valid
        for d_idx in result.unmatched_detections:
            track = TrackedBox(track_id=self._generate_id(), smoothed_rect=rects[d_idx])
            self._tracks.append(track)
            appeared_events.append(Appeared(track.track_id))
            logger.debug(f"New track created: {track.track_id}")

        # Miss accounting covers only tracks that existed before this frame
        for t_idx in result.unmatched_tracks:
            track = self._tracks[t_idx]
            track.mark_missed()
            if track.state == TrackState.CONFIRMED:
                track.state = TrackState.DYING
                logger.debug(f"Track dying: {track.track_id}")

        # Evict tracks missing for too long
        survivors = []
        for track in self._tracks:
            if track.missed_frames > self.config.max_missed_frames:
                lost_events.append(Lost(track.track_id))
                logger.debug(
                    f"Track lost: {track.track_id} "
                    f"({track.state.name.lower()}, missed {track.missed_frames} frames)"
                )
            else:
                survivors.append(track)
        self._tracks = survivors

        return confirmed_events + appeared_events + lost_events

    def get_confirmed_track_rects(self) -> Dict[int, Rect]:
        """
        Current smoothed geometry of every confirmed track.

        Pure query: no events, safe to call any number of times between frames.
        """
        return {
            track.track_id: track.smoothed_rect
            for track in self._tracks
            if track.state == TrackState.CONFIRMED
        }

    def reset(self):
        """Drop all tracks and restart ids (camera restart, scene cut)."""
        self._tracks.clear()
        self._next_track_id = 0
        self._frames_processed = 0
        logger.info("Box tracker reset")

    def _generate_id(self) -> int:
        track_id = self._next_track_id
        self._next_track_id += 1
        return track_id

    @property
    def tracks(self) -> Tuple[TrackedBox, ...]:
        """Copies of owned tracks, for diagnostics."""
        return tuple(replace(track) for track in self._tracks)

    @property
    def active_track_count(self) -> int:
        """Number of live tracks in any state."""
        return len(self._tracks)

    def get_statistics(self) -> Dict[str, Any]:
        """Get tracking statistics."""
        states = [track.state for track in self._tracks]
        return {
            "total_tracks_created": self._next_track_id,
            "active_tracks": len(states),
            "tentative_tracks": states.count(TrackState.TENTATIVE),
            "confirmed_tracks": states.count(TrackState.CONFIRMED),
            "dying_tracks": states.count(TrackState.DYING),
            "frames_processed": self._frames_processed,
        }
