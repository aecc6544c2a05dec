"""
Region-of-Interest Module.

Responsibilities:
- Normalized rect to pixel rect conversion
- Cropping frames to confirmed tracks
- Throttled thumbnail cache with a single owner
"""

from .roi_service import ROIService, PixelRect, normalized_to_pixel_rect, extract_roi
