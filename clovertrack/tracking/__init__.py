"""
Box Tracking Module.

Responsibilities:
- Persistent track id assignment
- Greedy IoU matching with nearest-center fallback
- EMA smoothing with jump reset
- Tentative / confirmed / dying lifecycle and events
"""

from .box_tracker import TemporalBoxTracker
from .tracked_box import TrackedBox
from .matcher import match_detections, MatchResult, Match
