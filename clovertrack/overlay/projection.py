"""
Normalized -> view coordinate mapping.

The view shows the image in aspect-fill mode: the image is scaled until
it covers the whole view and the overflow is cropped equally on both
sides. Normalized rects have a bottom-left origin; views are top-left.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np
from numpy.typing import NDArray

from clovertrack.core.contracts import Rect


@dataclass(frozen=True)
class ViewTransform:
    """Scaled image size and the crop offsets inside the view."""
    scale_x: float      # Scaled image width, view pixels
    scale_y: float      # Scaled image height, view pixels
    x_offset: float
    y_offset: float


def aspect_fill_transform(
    view_width: float,
    view_height: float,
    image_aspect_ratio: float,
) -> ViewTransform:
    """
    Mapping parameters for an image shown aspect-fill in a view.

    Args:
        view_width: View width, pixels
        view_height: View height, pixels
        image_aspect_ratio: Image width / height

    Returns:
        ViewTransform
    """
    view_aspect_ratio = view_width / view_height

    if image_aspect_ratio > view_aspect_ratio:
        # Image wider than view: fill height, crop the sides
        scaled_width = view_height * image_aspect_ratio
        return ViewTransform(
            scale_x=scaled_width,
            scale_y=view_height,
            x_offset=(scaled_width - view_width) / 2.0,
            y_offset=0.0,
        )

    # Image taller than view: fill width, crop top and bottom
    scaled_height = view_width / image_aspect_ratio
    return ViewTransform(
        scale_x=view_width,
        scale_y=scaled_height,
        x_offset=0.0,
        y_offset=(scaled_height - view_height) / 2.0,
    )


def to_view_rect(rect: Rect, transform: ViewTransform) -> Tuple[float, float, float, float]:
    """Normalized rect -> (x, y, w, h) in view pixels, origin top-left."""
    return (
        rect.min_x * transform.scale_x - transform.x_offset,
        (1.0 - rect.max_y) * transform.scale_y - transform.y_offset,
        rect.width * transform.scale_x,
        rect.height * transform.scale_y,
    )


def aspect_fill_frame(
    frame: NDArray[np.uint8],
    view_width: int,
    view_height: int,
) -> Tuple[NDArray[np.uint8], ViewTransform]:
    """Resize and center-crop a frame to fill a view."""
    h, w = frame.shape[:2]
    transform = aspect_fill_transform(view_width, view_height, w / h)

    scaled_w = max(view_width, int(round(transform.scale_x)))
    scaled_h = max(view_height, int(round(transform.scale_y)))
    scaled = cv2.resize(frame, (scaled_w, scaled_h), interpolation=cv2.INTER_LINEAR)

    x0 = int(round(transform.x_offset))
    y0 = int(round(transform.y_offset))
    return scaled[y0:y0 + view_height, x0:x0 + view_width], transform
