"""
Unit tests for detection-to-track matching.
"""

import pytest

from clovertrack.core.contracts import Rect, TrackState
from clovertrack.tracking.matcher import (
    NEAREST_NEIGHBOR_QUALITY,
    calculate_center_distance,
    calculate_jump_distance,
    match_detections,
)
from clovertrack.tracking.tracked_box import TrackedBox


def make_track(track_id, rect, missed=0, state=TrackState.TENTATIVE):
    return TrackedBox(
        track_id=track_id,
        smoothed_rect=Rect.from_tuple(rect),
        missed_frames=missed,
        state=state,
    )


def pairs(result):
    return [(m.detection_index, m.track_index) for m in result.matches]


class TestDistances:
    def test_center_distance(self):
        a = Rect(0.0, 0.0, 0.2, 0.2)
        b = Rect(0.3, 0.4, 0.2, 0.2)
        assert calculate_center_distance(a, b) == pytest.approx(0.5)

    def test_jump_distance_is_max_component(self):
        a = Rect(0.1, 0.1, 0.2, 0.2)
        b = Rect(0.15, 0.05, 0.6, 0.25)
        assert calculate_jump_distance(a, b) == pytest.approx(0.4)


class TestIoUTier:
    def test_empty_inputs(self):
        result = match_detections([], [make_track(0, (0, 0, 0.1, 0.1))], 0.3)
        assert result.matches == []
        assert result.unmatched_tracks == [0]

        result = match_detections([Rect(0, 0, 0.1, 0.1)], [], 0.3)
        assert result.unmatched_detections == [0]

    def test_best_iou_wins(self):
        tracks = [
            make_track(0, (0.0, 0.0, 0.4, 0.4)),
            make_track(1, (0.05, 0.0, 0.4, 0.4)),
        ]
        result = match_detections([Rect(0.05, 0.0, 0.4, 0.4)], tracks, 0.3)
        assert pairs(result) == [(0, 1)]
        assert result.matches[0].quality == pytest.approx(1.0)
        assert result.unmatched_tracks == [0]

    def test_ties_go_to_lowest_track_index(self):
        tracks = [
            make_track(0, (0.0, 0.0, 0.5, 0.5)),
            make_track(1, (0.25, 0.0, 0.5, 0.5)),
        ]
        result = match_detections([Rect(0.125, 0.0, 0.5, 0.5)], tracks, 0.3)
        assert pairs(result) == [(0, 0)]
        assert result.unmatched_tracks == [1]

    def test_threshold_is_inclusive(self):
        tracks = [make_track(0, (0.0, 0.0, 0.5, 0.5))]
        result = match_detections([Rect(0.0, 0.0, 0.5, 0.25)], tracks, 0.5)
        assert pairs(result) == [(0, 0)]

    def test_below_threshold_is_unmatched(self):
        tracks = [make_track(0, (0.0, 0.0, 0.5, 0.5))]
        result = match_detections([Rect(0.0, 0.0, 0.5, 0.25)], tracks, 0.6)
        assert result.matches == []
        assert result.unmatched_detections == [0]

    def test_dying_tracks_are_never_candidates(self):
        tracks = [make_track(0, (0.1, 0.1, 0.2, 0.2), missed=1, state=TrackState.DYING)]
        result = match_detections([Rect(0.1, 0.1, 0.2, 0.2)], tracks, 0.3)
        assert result.matches == []
        assert result.unmatched_detections == [0]
        assert result.unmatched_tracks == [0]

    def test_each_track_matched_at_most_once(self):
        tracks = [make_track(0, (0.1, 0.1, 0.2, 0.2))]
        detections = [Rect(0.1, 0.1, 0.2, 0.2), Rect(0.1, 0.1, 0.2, 0.2)]
        result = match_detections(detections, tracks, 0.3)
        assert pairs(result) == [(0, 0)]
        assert result.unmatched_detections == [1]

    def test_matching_depends_on_detection_order(self):
        tracks = [
            make_track(0, (0.0, 0.0, 0.4, 0.4)),
            make_track(1, (0.2, 0.0, 0.4, 0.4)),
        ]
        exact = Rect(0.0, 0.0, 0.4, 0.4)      # IoU 1.0 with track 0
        shifted = Rect(0.05, 0.0, 0.4, 0.4)   # prefers track 0 as well

        def owner_of_track_zero(detections):
            result = match_detections(detections, tracks, 0.3)
            (match,) = [m for m in result.matches if m.track_index == 0]
            return detections[match.detection_index]

        # Whoever comes first takes track 0, even the worse fit
        assert owner_of_track_zero([shifted, exact]) == shifted
        assert owner_of_track_zero([exact, shifted]) == exact


class TestNearestNeighborTier:
    def test_fallback_matches_track_missed_once(self):
        tracks = [make_track(0, (0.1, 0.1, 0.1, 0.1), missed=1)]
        result = match_detections([Rect(0.25, 0.1, 0.1, 0.1)], tracks, 0.3)
        assert pairs(result) == [(0, 0)]
        assert result.matches[0].quality == NEAREST_NEIGHBOR_QUALITY

    def test_fallback_ignores_tracks_seen_last_frame(self):
        tracks = [make_track(0, (0.1, 0.1, 0.1, 0.1), missed=0)]
        result = match_detections([Rect(0.25, 0.1, 0.1, 0.1)], tracks, 0.3)
        assert result.matches == []

    def test_fallback_ignores_tracks_missed_twice(self):
        tracks = [make_track(0, (0.1, 0.1, 0.1, 0.1), missed=2)]
        result = match_detections([Rect(0.25, 0.1, 0.1, 0.1)], tracks, 0.3)
        assert result.matches == []

    def test_fallback_respects_distance_cap(self):
        tracks = [make_track(0, (0.1, 0.1, 0.1, 0.1), missed=1)]
        result = match_detections([Rect(0.4, 0.1, 0.1, 0.1)], tracks, 0.3)
        assert result.matches == []
        assert result.unmatched_detections == [0]

    def test_fallback_picks_nearest(self):
        tracks = [
            make_track(0, (0.1, 0.5, 0.1, 0.1), missed=1),
            make_track(1, (0.1, 0.1, 0.1, 0.1), missed=1),
        ]
        result = match_detections([Rect(0.25, 0.12, 0.1, 0.1)], tracks, 0.3)
        assert pairs(result) == [(0, 1)]

    def test_fallback_skips_dying_tracks(self):
        tracks = [make_track(0, (0.1, 0.1, 0.1, 0.1), missed=1, state=TrackState.DYING)]
        result = match_detections([Rect(0.2, 0.1, 0.1, 0.1)], tracks, 0.3)
        assert result.matches == []

    def test_iou_tier_takes_precedence(self):
        tracks = [
            make_track(0, (0.3, 0.1, 0.1, 0.1), missed=1),
            make_track(1, (0.1, 0.1, 0.1, 0.1), missed=0),
        ]
        result = match_detections([Rect(0.1, 0.1, 0.1, 0.1)], tracks, 0.3)
        assert pairs(result) == [(0, 1)]
