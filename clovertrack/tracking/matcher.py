"""
Detection-to-track association.

Greedy, single pass over detections in input order:
1. IoU tier - best overlap at or above the threshold
2. Nearest-center tier - only for tracks missed exactly once,
   within NEAREST_NEIGHBOR_MAX_DISTANCE

The first detection in the list gets first pick. This is not an optimal
assignment; two detections overlapping two tracks can pair sub-optimally
depending on list order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np
from numpy.typing import NDArray

from clovertrack.core.contracts import Rect
from .tracked_box import TrackedBox


# ~20% of the frame, in normalized units
NEAREST_NEIGHBOR_MAX_DISTANCE = 0.2

# Quality reported for fallback matches (no IoU confidence)
NEAREST_NEIGHBOR_QUALITY = 0.0


@dataclass(frozen=True)
class Match:
    """One committed detection/track pair."""
    detection_index: int
    track_index: int
    quality: float  # IoU, or NEAREST_NEIGHBOR_QUALITY for fallback matches


@dataclass
class MatchResult:
    """Partial injective correspondence for one frame."""
    matches: List[Match] = field(default_factory=list)
    unmatched_detections: List[int] = field(default_factory=list)
    unmatched_tracks: List[int] = field(default_factory=list)


def calculate_iou(rect1: Rect, rect2: Rect) -> float:
    """IoU between two rectangles; 0 when disjoint or degenerate."""
    return rect1.iou(rect2)


def calculate_center_distance(rect1: Rect, rect2: Rect) -> float:
    """Euclidean distance between rectangle centers."""
    return math.hypot(rect1.mid_x - rect2.mid_x, rect1.mid_y - rect2.mid_y)


def calculate_jump_distance(from_rect: Rect, to_rect: Rect) -> float:
    """Largest absolute change across x, y, width and height."""
    return max(
        abs(to_rect.x - from_rect.x),
        abs(to_rect.y - from_rect.y),
        abs(to_rect.width - from_rect.width),
        abs(to_rect.height - from_rect.height),
    )


def _iou_matrix(
    detections: Sequence[Rect],
    tracks: Sequence[TrackedBox],
) -> NDArray[np.float64]:
    matrix = np.zeros((len(detections), len(tracks)), dtype=np.float64)
    for d_idx, detection in enumerate(detections):
        for t_idx, track in enumerate(tracks):
            matrix[d_idx, t_idx] = calculate_iou(detection, track.smoothed_rect)
    return matrix


def match_detections(
    detections: Sequence[Rect],
    tracks: Sequence[TrackedBox],
    iou_threshold: float,
) -> MatchResult:
    """
    Associate detections with tracks for one frame.

    Args:
        detections: Raw rectangles for this frame, in detector order
        tracks: Tracks addressed by list index
        iou_threshold: Minimum IoU for a primary-tier match

    Returns:
        MatchResult with committed pairs and leftover indices
    """
    result = MatchResult()

    if not detections or not tracks:
        result.unmatched_detections = list(range(len(detections)))
        result.unmatched_tracks = list(range(len(tracks)))
        return result

    iou_matrix = _iou_matrix(detections, tracks)

    # Tracks still available this frame; dying tracks never are
    available = np.array([track.is_matchable for track in tracks], dtype=bool)
    # Fallback pool: missed exactly once
    recently_missed = np.array([track.missed_frames == 1 for track in tracks], dtype=bool)

    for d_idx, detection in enumerate(detections):
        # IoU tier; argmax keeps the lowest index on ties
        scores = np.where(available, iou_matrix[d_idx], -1.0)
        t_idx = int(np.argmax(scores))

        if available[t_idx] and scores[t_idx] >= iou_threshold:
            result.matches.append(Match(d_idx, t_idx, float(scores[t_idx])))
            available[t_idx] = False
            continue

        # Nearest-center tier
        candidates = available & recently_missed
        if not candidates.any():
            result.unmatched_detections.append(d_idx)
            continue

        distances = np.full(len(tracks), np.inf)
        for c_idx in np.flatnonzero(candidates):
            distances[c_idx] = calculate_center_distance(detection, tracks[c_idx].smoothed_rect)

        t_idx = int(np.argmin(distances))
        if distances[t_idx] < NEAREST_NEIGHBOR_MAX_DISTANCE:
            result.matches.append(Match(d_idx, t_idx, NEAREST_NEIGHBOR_QUALITY))
            available[t_idx] = False
        else:
            result.unmatched_detections.append(d_idx)

    matched_tracks = {match.track_index for match in result.matches}
    result.unmatched_tracks = [i for i in range(len(tracks)) if i not in matched_tracks]

    return result
