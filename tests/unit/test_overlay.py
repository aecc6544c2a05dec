"""
Unit tests for overlay projection and rendering.
"""

import numpy as np
import pytest

from clovertrack.core.config import OverlayConfig
from clovertrack.core.contracts import Rect
from clovertrack.overlay import OverlayRenderer, ViewTransform, aspect_fill_transform, to_view_rect
from clovertrack.overlay.projection import aspect_fill_frame


class TestAspectFillTransform:
    def test_wide_image_crops_sides(self):
        transform = aspect_fill_transform(100, 100, 2.0)
        assert transform == ViewTransform(scale_x=200.0, scale_y=100.0, x_offset=50.0, y_offset=0.0)

    def test_tall_image_crops_top_and_bottom(self):
        transform = aspect_fill_transform(200, 100, 1.0)
        assert transform == ViewTransform(scale_x=200.0, scale_y=200.0, x_offset=0.0, y_offset=50.0)

    def test_matching_aspect_is_identity_scale(self):
        transform = aspect_fill_transform(640, 480, 640 / 480)
        assert transform.scale_x == pytest.approx(640)
        assert transform.scale_y == pytest.approx(480)
        assert transform.x_offset == pytest.approx(0)
        assert transform.y_offset == pytest.approx(0)


class TestToViewRect:
    def test_flips_y_and_applies_offsets(self):
        transform = aspect_fill_transform(100, 100, 2.0)
        view = to_view_rect(Rect(0.25, 0.5, 0.5, 0.5), transform)
        assert view == pytest.approx((0.0, 0.0, 100.0, 50.0))

    def test_scales_axes_independently(self):
        transform = ViewTransform(scale_x=400.0, scale_y=100.0, x_offset=0.0, y_offset=0.0)
        view = to_view_rect(Rect(0.5, 0.0, 0.25, 0.5), transform)
        assert view == pytest.approx((200.0, 50.0, 100.0, 50.0))

    def test_full_frame_in_cropped_view(self):
        transform = aspect_fill_transform(200, 100, 1.0)
        view = to_view_rect(Rect(0.0, 0.0, 1.0, 1.0), transform)
        assert view == pytest.approx((0.0, -50.0, 200.0, 200.0))


class TestAspectFillFrame:
    def test_output_matches_view_size(self):
        frame = np.zeros((100, 200, 3), dtype=np.uint8)
        canvas, transform = aspect_fill_frame(frame, 100, 100)
        assert canvas.shape == (100, 100, 3)
        assert transform.x_offset == pytest.approx(50.0)


class TestOverlayRenderer:
    @pytest.fixture
    def frame(self):
        return np.zeros((100, 200, 3), dtype=np.uint8)

    def test_draws_box_edges(self, frame):
        renderer = OverlayRenderer(OverlayConfig(box_color=(255, 0, 0), show_ids=False))
        canvas = renderer.draw(frame, {0: Rect(0.25, 0.25, 0.5, 0.5)})

        # Box spans columns 50..150, rows 25..75
        assert tuple(canvas[25, 100]) == (255, 0, 0)
        assert tuple(canvas[75, 100]) == (255, 0, 0)
        assert tuple(canvas[50, 50]) == (255, 0, 0)
        assert tuple(canvas[50, 100]) == (0, 0, 0)

    def test_does_not_modify_input(self, frame):
        renderer = OverlayRenderer()
        renderer.draw(frame, {0: Rect(0.25, 0.25, 0.5, 0.5)}, status_text="Rectangles: 1")
        assert frame.max() == 0

    def test_empty_tracks_leave_frame_blank(self, frame):
        renderer = OverlayRenderer()
        canvas = renderer.draw(frame, {})
        assert canvas.max() == 0

    def test_status_text_drawn(self, frame):
        renderer = OverlayRenderer(OverlayConfig(show_status=True))
        canvas = renderer.draw(frame, {}, status_text="Rectangles: 0")
        assert canvas[:30, :].any()

    def test_renders_into_view_size(self, frame):
        renderer = OverlayRenderer()
        canvas = renderer.draw(frame, {1: Rect(0.25, 0.25, 0.5, 0.5)}, view_size=(100, 100))
        assert canvas.shape == (100, 100, 3)
