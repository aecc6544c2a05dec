"""
Overlay Module.

Maps normalized track geometry onto a view and draws it.
"""

from .projection import ViewTransform, aspect_fill_transform, to_view_rect
from .renderer import OverlayRenderer
