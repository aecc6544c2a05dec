"""
Unit tests for FramePipeline frame selection.
"""

import numpy as np
import pytest

from clovertrack.capture.frame_pipeline import FramePipeline


class TestFramePipeline:
    def test_every_second_frame(self):
        pipeline = FramePipeline(analyze_every_nth_frame=2)
        selected = [pipeline.should_analyze() for _ in range(6)]
        assert selected == [False, True, False, True, False, True]

    def test_every_frame(self):
        pipeline = FramePipeline(analyze_every_nth_frame=1)
        assert all(pipeline.should_analyze() for _ in range(5))

    @pytest.mark.parametrize("n", [0, -3])
    def test_non_positive_period_means_every_frame(self, n):
        pipeline = FramePipeline(analyze_every_nth_frame=n)
        assert pipeline.analyze_every_nth_frame == 1
        assert pipeline.should_analyze()

    def test_ingest_forwards_selected_frames(self, blank_frame):
        received = []
        pipeline = FramePipeline(analyze_every_nth_frame=3, on_frame_selected=received.append)

        frames = [np.full_like(blank_frame, i) for i in range(7)]
        results = [pipeline.ingest(f) for f in frames]

        assert results == [False, False, True, False, False, True, False]
        assert [int(f[0, 0, 0]) for f in received] == [2, 5]
        assert pipeline.frames_ingested == 7

    def test_ingest_without_callback(self, blank_frame):
        pipeline = FramePipeline(analyze_every_nth_frame=1)
        assert pipeline.ingest(blank_frame)

    def test_reset_restarts_counting(self):
        pipeline = FramePipeline(analyze_every_nth_frame=2)
        pipeline.should_analyze()
        pipeline.reset()
        assert pipeline.frames_ingested == 0
        assert not pipeline.should_analyze()
        assert pipeline.should_analyze()
