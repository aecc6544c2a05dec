"""
Configuration for the tracker and its collaborators.

Every section maps to one dataclass. Defaults are tunable knobs,
not protocol constants; load_config() overlays a YAML file on top.

Example settings.yaml:
    tracker:
      smoothing_alpha: 0.5
      min_frames_to_confirm: 2
    pipeline:
      analyze_every_nth_frame: 2
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml
from loguru import logger


def _require(condition: bool, message: str):
    if not condition:
        raise ValueError(message)


@dataclass
class TrackerConfig:
    """Tracker tuning."""
    iou_threshold: float = 0.3
    smoothing_alpha: float = 0.7          # Higher = more responsive, less filtering
    min_frames_to_confirm: int = 5        # Consecutive matched frames before confirmation
    max_missed_frames: int = 5            # Consecutive misses tolerated before eviction
    max_jump_distance: float = 0.3        # Per-dimension delta that resets smoothing

    def __post_init__(self):
        _require(0.0 <= self.iou_threshold <= 1.0, f"iou_threshold must be in [0, 1], got {self.iou_threshold}")
        _require(0.0 < self.smoothing_alpha <= 1.0, f"smoothing_alpha must be in (0, 1], got {self.smoothing_alpha}")
        _require(self.min_frames_to_confirm >= 1, f"min_frames_to_confirm must be >= 1, got {self.min_frames_to_confirm}")
        _require(self.max_missed_frames >= 0, f"max_missed_frames must be >= 0, got {self.max_missed_frames}")
        _require(self.max_jump_distance >= 0.0, f"max_jump_distance must be >= 0, got {self.max_jump_distance}")


@dataclass
class DetectorConfig:
    """Rectangle detector settings."""
    name: str = "contour"
    maximum_observations: int = 20
    minimum_confidence: float = 0.6
    minimum_size: float = 0.05            # Fraction of the shorter frame side
    canny_low: int = 50
    canny_high: int = 150

    def __post_init__(self):
        _require(self.maximum_observations >= 1, f"maximum_observations must be >= 1, got {self.maximum_observations}")
        _require(0.0 <= self.minimum_confidence <= 1.0, f"minimum_confidence must be in [0, 1], got {self.minimum_confidence}")
        _require(0.0 <= self.minimum_size <= 1.0, f"minimum_size must be in [0, 1], got {self.minimum_size}")


@dataclass
class ROIConfig:
    """Region-of-interest thumbnail settings."""
    enabled: bool = True
    throttle_frames: int = 5              # Refresh thumbnails every Nth frame
    thumbnail_size: int = 80              # Longest side, pixels

    def __post_init__(self):
        _require(self.throttle_frames >= 1, f"throttle_frames must be >= 1, got {self.throttle_frames}")
        _require(self.thumbnail_size >= 1, f"thumbnail_size must be >= 1, got {self.thumbnail_size}")


@dataclass
class OverlayConfig:
    """On-screen overlay settings."""
    box_color: Tuple[int, int, int] = (255, 0, 0)   # RGB, frames are RGB throughout
    line_width: int = 2
    show_ids: bool = True
    show_status: bool = True


@dataclass
class VideoConfig:
    """Capture settings."""
    device_index: int = 0
    source_path: Optional[str] = None     # Video file instead of a camera
    width: int = 1920
    height: int = 1080
    fps: int = 30


@dataclass
class PipelineConfig:
    """Configuration for the whole pipeline."""
    analyze_every_nth_frame: int = 2      # 1 analyzes every frame
    video: VideoConfig = field(default_factory=VideoConfig)
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    roi: ROIConfig = field(default_factory=ROIConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)


def _build_section(cls, section: str, values: Optional[Dict[str, Any]]):
    if not values:
        return cls()

    known = {f.name for f in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        logger.warning(f"Ignoring unknown {section} settings: {', '.join(unknown)}")

    kwargs = {k: v for k, v in values.items() if k in known}
    if "box_color" in kwargs:
        kwargs["box_color"] = tuple(kwargs["box_color"])
    return cls(**kwargs)


def config_from_dict(data: Optional[Dict[str, Any]]) -> PipelineConfig:
    """Build a PipelineConfig from a parsed settings mapping."""
    data = data or {}
    pipeline = data.get("pipeline", {}) or {}

    return PipelineConfig(
        analyze_every_nth_frame=pipeline.get("analyze_every_nth_frame", 2),
        video=_build_section(VideoConfig, "video", data.get("video")),
        tracker=_build_section(TrackerConfig, "tracker", data.get("tracker")),
        detector=_build_section(DetectorConfig, "detector", data.get("detector")),
        roi=_build_section(ROIConfig, "roi", data.get("roi")),
        overlay=_build_section(OverlayConfig, "overlay", data.get("overlay")),
    )


def load_config(config_path: Optional[Union[str, Path]] = None) -> PipelineConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Settings file; None or a missing file gives defaults

    Returns:
        PipelineConfig
    """
    if config_path is None or not Path(config_path).exists():
        if config_path is not None:
            logger.warning(f"Config file not found: {config_path}, using defaults")
        return PipelineConfig()

    with open(config_path) as f:
        data = yaml.safe_load(f)

    logger.info(f"Loaded config from {config_path}")
    return config_from_dict(data)
