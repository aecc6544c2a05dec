"""
Core contracts and configuration shared by every module.
"""

from .contracts import (
    Rect,
    TrackState,
    Appeared,
    Confirmed,
    Lost,
    DetectionEvent,
    AnalysisResult,
)
from .config import (
    TrackerConfig,
    DetectorConfig,
    ROIConfig,
    OverlayConfig,
    VideoConfig,
    PipelineConfig,
    load_config,
)
