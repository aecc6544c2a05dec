"""
Frame selection.

Analyzing every frame is expensive; the pipeline forwards only every
Nth ingested frame to the detector.
"""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np
from numpy.typing import NDArray


class FramePipeline:
    """Counts frames and selects every Nth one for analysis."""

    def __init__(
        self,
        analyze_every_nth_frame: int = 2,
        on_frame_selected: Optional[Callable[[NDArray[np.uint8]], None]] = None,
    ):
        """
        Args:
            analyze_every_nth_frame: Selection period; values below 1 mean every frame
            on_frame_selected: Called with each selected frame
        """
        self.analyze_every_nth_frame = max(1, analyze_every_nth_frame)
        self.on_frame_selected = on_frame_selected
        self._frame_counter: int = 0

    def should_analyze(self) -> bool:
        """Advance the counter and report whether this frame is selected."""
        self._frame_counter += 1
        return self._frame_counter % self.analyze_every_nth_frame == 0

    def ingest(self, frame: NDArray[np.uint8]) -> bool:
        """
        Feed one captured frame.

        Returns:
            True if the frame was selected (and forwarded)
        """
        if not self.should_analyze():
            return False

        if self.on_frame_selected is not None:
            self.on_frame_selected(frame)
        return True

    def reset(self):
        self._frame_counter = 0

    @property
    def frames_ingested(self) -> int:
        return self._frame_counter
