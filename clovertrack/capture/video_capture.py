"""
Video Capture.

One OpenCV source, either a camera index or a video file.
Frames come out RGB with sequential ids.

Timestamps:
- Files report their own playback position (CAP_PROP_POS_MSEC)
- Cameras are stamped with the wall clock at read time
"""

from __future__ import annotations

import time
from typing import Optional, Tuple, Union

import cv2
import numpy as np
from numpy.typing import NDArray
from loguru import logger


Frame = Tuple[Optional[NDArray[np.uint8]], float, int]


class VideoCapture:
    """Reads RGB frames from a camera or a video file."""

    def __init__(
        self,
        source: Union[int, str] = 0,
        width: int = 1920,
        height: int = 1080,
        fps: int = 30,
    ):
        """
        Args:
            source: Camera device index or path to a video file
            width: Requested capture width (cameras only)
            height: Requested capture height (cameras only)
            fps: Requested frames per second (cameras only)
        """
        self.source = source
        self.width = width
        self.height = height
        self.fps = fps

        self._capture: Optional[cv2.VideoCapture] = None
        self._frame_count: int = 0

    @property
    def is_file(self) -> bool:
        return isinstance(self.source, str)

    def start(self) -> bool:
        """
        Open the source.

        Returns:
            True if the source is open and readable
        """
        if self._capture is not None:
            return True

        try:
            capture = cv2.VideoCapture(self.source)
        except cv2.error as e:
            logger.error(f"Failed to start video capture: {e}")
            return False

        if not capture.isOpened():
            logger.error(f"Failed to open video source {self.source}")
            capture.release()
            return False

        if not self.is_file:
            capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
            capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
            capture.set(cv2.CAP_PROP_FPS, self.fps)

        self._capture = capture
        self._frame_count = 0

        width, height = self.frame_size
        kind = "file" if self.is_file else "camera"
        logger.info(
            f"Video capture started ({kind} {self.source}): {width}x{height} "
            f"@ {capture.get(cv2.CAP_PROP_FPS):.1f}fps"
        )
        return True

    def stop(self):
        """Release the source."""
        if self._capture is not None:
            self._capture.release()
            self._capture = None
        logger.info(f"Video capture stopped after {self._frame_count} frames")

    def read_frame(self) -> Frame:
        """
        Read the next frame.

        Returns:
            (frame, timestamp_ms, frame_id); frame is None when the source
            is closed, exhausted, or the read failed
        """
        if self._capture is None:
            return (None, 0.0, self._frame_count)

        ok, bgr = self._capture.read()
        if not ok or bgr is None:
            return (None, 0.0, self._frame_count)

        self._frame_count += 1
        if self.is_file:
            timestamp_ms = float(self._capture.get(cv2.CAP_PROP_POS_MSEC))
        else:
            timestamp_ms = time.time() * 1000.0

        return (cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB), timestamp_ms, self._frame_count)

    @property
    def is_running(self) -> bool:
        return self._capture is not None

    @property
    def frame_size(self) -> Tuple[int, int]:
        """(width, height) reported by the open source, else the requested size."""
        if self._capture is None:
            return (self.width, self.height)
        return (
            int(self._capture.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(self._capture.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )
