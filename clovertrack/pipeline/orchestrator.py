"""
Pipeline Orchestrator.

Executes the tracking pipeline in strict order:

1. Capture a frame
2. Select every Nth frame for analysis
3. Detect rectangles on the detector worker
4. Hand each detection result to the tracker, one at a time
5. Read the confirmed-track snapshot
6. Refresh ROI thumbnails (throttled, ROI worker)
7. Return output for rendering

Threading:
- The detector runs on its own worker and only ever sees frames
- The tracker is owned by the thread calling process_frame(); results
  cross over through a FIFO queue and are applied in arrival order
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from queue import Queue, Empty, Full
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np
from numpy.typing import NDArray
from loguru import logger

from clovertrack.core.config import PipelineConfig
from clovertrack.core.contracts import AnalysisResult, DetectionEvent, Rect
from clovertrack.capture.frame_pipeline import FramePipeline
from clovertrack.capture.video_capture import VideoCapture
from clovertrack.detection.base import BaseRectangleDetector
from clovertrack.detection.registry import create_detector
from clovertrack.roi.roi_service import ROIService
from clovertrack.tracking.box_tracker import TemporalBoxTracker


@dataclass
class PipelineOutput:
    """Output from a single pipeline iteration."""
    frame_id: int
    timestamp_ms: float
    frame: NDArray[np.uint8]

    # Tracker output
    events: List[DetectionEvent] = field(default_factory=list)
    confirmed_rects: Dict[int, Rect] = field(default_factory=dict)

    # Latest detector output applied this iteration, if any
    analysis: Optional[AnalysisResult] = None
    status_text: str = "No data yet"

    # Frame was handed to the detector
    analyzed: bool = False


class PipelineOrchestrator:
    """
    Main pipeline orchestrator.

    Guarantees:
    - Stage order is never reordered
    - Tracker updates never run concurrently
    - Late frames are dropped, never queued behind the detector
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        capture: Optional[VideoCapture] = None,
        detector: Optional[BaseRectangleDetector] = None,
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            config: Pipeline configuration
            capture: Video source; built from config.video when omitted
            detector: Rectangle detector; built from config.detector when omitted
        """
        self.config = config or PipelineConfig()

        video = self.config.video
        self._capture = capture or VideoCapture(
            source=video.source_path if video.source_path else video.device_index,
            width=video.width,
            height=video.height,
            fps=video.fps,
        )
        self._detector = detector or create_detector(self.config.detector.name, self.config.detector)
        self._tracker = TemporalBoxTracker(self.config.tracker)
        self._frame_pipeline = FramePipeline(
            self.config.analyze_every_nth_frame,
            on_frame_selected=self._submit_for_analysis,
        )
        self._roi_service = ROIService(self.config.roi)

        # Detector worker
        self._analysis_queue: Queue = Queue(maxsize=1)
        self._result_queue: Queue = Queue()
        self._worker_running = False
        self._worker: Optional[threading.Thread] = None

        # Frame timestamp handed to the detector with the next selected frame
        self._pending_timestamp_ms: float = 0.0
        # Bumped by reset(); results stamped with an older value are dropped
        self._generation: int = 0

        self._last_result: Optional[AnalysisResult] = None
        self._frames_dropped: int = 0

    def start(self) -> bool:
        """
        Start capture and workers.

        Returns:
            True if the video source opened
        """
        if not self._capture.start():
            logger.error("Failed to start video capture")
            return False

        self._detector.warmup()

        self._worker_running = True
        self._worker = threading.Thread(target=self._detector_worker, name="detector-worker", daemon=True)
        self._worker.start()

        if self.config.roi.enabled:
            self._roi_service.start()

        logger.info(
            f"Pipeline started: analyzing every {self._frame_pipeline.analyze_every_nth_frame} frame(s)"
        )
        return True

    def stop(self):
        """Stop workers and release the video source."""
        self._worker_running = False
        if self._worker:
            self._worker.join(timeout=2)
            self._worker = None

        self._roi_service.stop()
        self._capture.stop()
        logger.info(f"Pipeline stopped ({self._frames_dropped} frames dropped)")

    def process_frame(self) -> Optional[PipelineOutput]:
        """
        Run one iteration on the next captured frame.

        Returns:
            PipelineOutput, or None when no frame is available
        """
        frame, timestamp_ms, frame_id = self._capture.read_frame()
        if frame is None:
            return None
        return self.process(frame, timestamp_ms, frame_id)

    def process(
        self,
        frame: NDArray[np.uint8],
        timestamp_ms: float,
        frame_id: int = 0,
    ) -> PipelineOutput:
        """
        Run one iteration on a given frame.

        Without a running detector worker, detection happens inline.
        """
        self._pending_timestamp_ms = timestamp_ms
        analyzed = self._frame_pipeline.ingest(frame)

        events, applied = self._apply_results()

        confirmed = self._tracker.get_confirmed_track_rects()

        if self.config.roi.enabled:
            self._roi_service.process_frame(frame, confirmed)

        return PipelineOutput(
            frame_id=frame_id,
            timestamp_ms=timestamp_ms,
            frame=frame,
            events=events,
            confirmed_rects=confirmed,
            analysis=applied,
            status_text=self.status_text,
            analyzed=analyzed,
        )

    def _submit_for_analysis(self, frame: NDArray[np.uint8]):
        request = (frame, self._pending_timestamp_ms / 1000.0, self._generation)

        if not self._worker_running:
            self._run_detector(*request)
            return

        # Drop the stale frame, keep the newest
        try:
            self._analysis_queue.get_nowait()
            self._frames_dropped += 1
        except Empty:
            pass
        try:
            self._analysis_queue.put_nowait(request)
        except Full:
            self._frames_dropped += 1
            logger.warning("Detector busy, dropping frame")

    def _detector_worker(self):
        while self._worker_running:
            try:
                frame, timestamp, generation = self._analysis_queue.get(timeout=0.1)
            except Empty:
                continue
            self._run_detector(frame, timestamp, generation)

    def _run_detector(self, frame: NDArray[np.uint8], timestamp: float, generation: int):
        result = self._detector.analyze(frame, timestamp)
        if result is not None:
            self._result_queue.put((generation, result))

    def _apply_results(self) -> Tuple[List[DetectionEvent], Optional[AnalysisResult]]:
        """Feed queued detector results to the tracker in arrival order."""
        events: List[DetectionEvent] = []
        applied: Optional[AnalysisResult] = None

        while True:
            try:
                generation, result = self._result_queue.get_nowait()
            except Empty:
                break

            if generation != self._generation:
                logger.debug("Dropping detector result from before reset")
                continue

            events.extend(self._tracker.update(result.bounding_boxes))
            applied = result
            self._last_result = result

        return events, applied

    def reset(self):
        """Forget all identities (camera restart, scene change)."""
        for pending in (self._analysis_queue, self._result_queue):
            while True:
                try:
                    pending.get_nowait()
                except Empty:
                    break

        self._generation += 1
        self._tracker.reset()
        self._frame_pipeline.reset()
        self._last_result = None
        logger.info("Pipeline reset")

    def select_track(self, track_id: Optional[int]):
        """Toggle ROI verification logging for a track."""
        self._roi_service.select_track(track_id)

    @property
    def status_text(self) -> str:
        if self._last_result is None:
            return "No data yet"
        return self._last_result.summary

    @property
    def tracker(self) -> TemporalBoxTracker:
        return self._tracker

    @property
    def thumbnails(self) -> Mapping[int, NDArray[np.uint8]]:
        return self._roi_service.thumbnails

    @property
    def frames_dropped(self) -> int:
        return self._frames_dropped
