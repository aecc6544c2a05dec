"""
ROI extraction and thumbnail cache.

Coordinate handling:
- Tracks are normalized with a bottom-left origin
- Frames are numpy arrays indexed [row, col] from the top-left
- Conversion flips y once, here, and clamps to the frame

The thumbnail cache has a single owner. While the worker thread runs it
is the only writer; readers get an immutable snapshot that is swapped in
whole after each refresh.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from queue import Queue, Empty, Full
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

import cv2
import numpy as np
from numpy.typing import NDArray
from loguru import logger

from clovertrack.core.config import ROIConfig
from clovertrack.core.contracts import Rect


@dataclass(frozen=True)
class PixelRect:
    """Pixel rectangle, origin top-left (numpy row/col space)."""
    x: int
    y: int
    width: int
    height: int

    @property
    def slices(self) -> Tuple[slice, slice]:
        return (slice(self.y, self.y + self.height), slice(self.x, self.x + self.width))


def normalized_to_pixel_rect(rect: Rect, width: int, height: int) -> Optional[PixelRect]:
    """
    Convert a normalized rect to a pixel rect inside a width x height frame.

    Returns:
        PixelRect clamped to the frame, or None if nothing is left
    """
    x0 = min(max(int(round(rect.min_x * width)), 0), width)
    x1 = min(max(int(round(rect.max_x * width)), 0), width)
    # Bottom-left origin -> top-left rows
    y0 = min(max(int(round((1.0 - rect.max_y) * height)), 0), height)
    y1 = min(max(int(round((1.0 - rect.min_y) * height)), 0), height)

    if x1 <= x0 or y1 <= y0:
        return None

    return PixelRect(x0, y0, x1 - x0, y1 - y0)


def extract_roi(frame: NDArray[np.uint8], rect: Rect) -> Optional[NDArray[np.uint8]]:
    """Crop a copy of the region under a normalized rect, or None if empty."""
    h, w = frame.shape[:2]
    pixel_rect = normalized_to_pixel_rect(rect, w, h)
    if pixel_rect is None:
        return None

    rows, cols = pixel_rect.slices
    return frame[rows, cols].copy()


class ROIService:
    """
    Throttled thumbnails for confirmed tracks.

    Usage:
        service = ROIService(config)
        service.start()

        # Once per frame, after the tracker update:
        service.process_frame(frame, tracker.get_confirmed_track_rects())
        thumbs = service.thumbnails

        service.stop()
    """

    def __init__(self, config: Optional[ROIConfig] = None):
        self.config = config or ROIConfig()

        # Selected track for verification logging
        self.selected_track_id: Optional[int] = None

        self._frame_counter: int = 0
        self._thumbnails: Mapping[int, NDArray[np.uint8]] = MappingProxyType({})

        # Threading
        self._input_queue: Queue = Queue(maxsize=1)
        self._running = False
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the thumbnail worker."""
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(target=self._worker, name="roi-worker", daemon=True)
        self._thread.start()
        logger.info("ROI service started")

    def stop(self) -> None:
        """Stop the thumbnail worker."""
        self._running = False
        if self._thread:
            self._thread.join(timeout=2)
            self._thread = None
        logger.info("ROI service stopped")

    def process_frame(
        self,
        frame: NDArray[np.uint8],
        confirmed_tracks: Mapping[int, Rect],
    ) -> bool:
        """
        Offer a frame and its confirmed tracks.

        Only every throttle_frames-th call is processed. With the worker
        running the work is queued (dropping any stale request); otherwise
        it runs inline.

        Returns:
            True if this frame will refresh the thumbnails
        """
        self._frame_counter += 1
        if self._frame_counter % self.config.throttle_frames != 0:
            return False

        # Snapshot the mapping so later tracker updates cannot leak in
        request = (frame, dict(confirmed_tracks))

        if not self._running:
            self.refresh(*request)
            return True

        try:
            self._input_queue.get_nowait()
        except Empty:
            pass
        try:
            self._input_queue.put_nowait(request)
        except Full:
            logger.warning("ROI queue full, skipping frame")
            return False
        return True

    def refresh(
        self,
        frame: NDArray[np.uint8],
        confirmed_tracks: Mapping[int, Rect],
    ) -> Mapping[int, NDArray[np.uint8]]:
        """Rebuild every thumbnail and publish the new snapshot."""
        h, w = frame.shape[:2]
        selected = self.selected_track_id
        thumbnails: Dict[int, NDArray[np.uint8]] = {}

        for track_id, rect in confirmed_tracks.items():
            if track_id == selected:
                logger.info(
                    f"[ROI Verification] Track {track_id}: normalized={rect.as_tuple()} "
                    f"pixel={normalized_to_pixel_rect(rect, w, h)} frame={w}x{h}"
                )

            roi = extract_roi(frame, rect)
            if roi is None:
                continue
            thumbnails[track_id] = self._make_thumbnail(roi)

        self._thumbnails = MappingProxyType(thumbnails)
        return self._thumbnails

    def _make_thumbnail(self, roi: NDArray[np.uint8]) -> NDArray[np.uint8]:
        h, w = roi.shape[:2]
        scale = self.config.thumbnail_size / max(h, w)
        size = (max(1, int(round(w * scale))), max(1, int(round(h * scale))))
        return cv2.resize(roi, size, interpolation=cv2.INTER_AREA)

    def _worker(self) -> None:
        while self._running:
            try:
                frame, confirmed_tracks = self._input_queue.get(timeout=0.1)
            except Empty:
                continue
            self.refresh(frame, confirmed_tracks)

    def select_track(self, track_id: Optional[int]) -> None:
        """Toggle verification logging for a track."""
        self.selected_track_id = None if track_id == self.selected_track_id else track_id

    @property
    def thumbnails(self) -> Mapping[int, NDArray[np.uint8]]:
        """Latest immutable thumbnail snapshot, keyed by track id."""
        return self._thumbnails

    @property
    def is_running(self) -> bool:
        return self._running
