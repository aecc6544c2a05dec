"""
Overlay renderer.

Draws confirmed track boxes and a status line onto a frame.
"""

from __future__ import annotations

from typing import Mapping, Optional, Tuple

import cv2
import numpy as np
from numpy.typing import NDArray

from clovertrack.core.config import OverlayConfig
from clovertrack.core.contracts import Rect
from .projection import aspect_fill_frame, aspect_fill_transform, to_view_rect


class OverlayRenderer:
    """Renders track boxes over video frames."""

    def __init__(self, config: Optional[OverlayConfig] = None):
        self.config = config or OverlayConfig()

    def draw(
        self,
        frame: NDArray[np.uint8],
        tracks: Mapping[int, Rect],
        status_text: str = "",
        view_size: Optional[Tuple[int, int]] = None,
    ) -> NDArray[np.uint8]:
        """
        Draw tracks onto a copy of the frame.

        Args:
            frame: RGB frame (H, W, 3)
            tracks: Confirmed track rects keyed by id
            status_text: Optional line drawn in the top-left corner
            view_size: (width, height) to aspect-fill into; frame size if None

        Returns:
            Annotated frame
        """
        if view_size is None:
            h, w = frame.shape[:2]
            canvas = frame.copy()
            transform = aspect_fill_transform(w, h, w / h)
        else:
            canvas, transform = aspect_fill_frame(frame, *view_size)
            canvas = np.ascontiguousarray(canvas)

        color = self.config.box_color
        for track_id, rect in sorted(tracks.items()):
            x, y, bw, bh = to_view_rect(rect, transform)
            top_left = (int(round(x)), int(round(y)))
            bottom_right = (int(round(x + bw)), int(round(y + bh)))

            cv2.rectangle(canvas, top_left, bottom_right, color, self.config.line_width)

            if self.config.show_ids:
                cv2.putText(
                    canvas, f"#{track_id}", (top_left[0], max(12, top_left[1] - 4)),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1
                )

        if self.config.show_status and status_text:
            cv2.putText(
                canvas, status_text, (10, 20),
                cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 255, 0), 1
            )

        return canvas
