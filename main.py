#!/usr/bin/env python3
"""
clovertrack

Main entry point for live rectangle tracking.

Usage:
    python main.py [--config CONFIG_PATH] [--device DEVICE_INDEX] [--video PATH]

Keyboard Controls (window mode):
    R     - Reset tracking (forget all identities)
    0-9   - Toggle ROI verification logging for a track id
    Q     - Quit
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Optional

import cv2
from loguru import logger

from clovertrack.core.config import PipelineConfig, load_config
from clovertrack.core.contracts import Appeared, Confirmed, Lost, DetectionEvent
from clovertrack.overlay.renderer import OverlayRenderer
from clovertrack.pipeline.orchestrator import PipelineOrchestrator, PipelineOutput


DEFAULT_CONFIG_PATH = Path(__file__).parent / "config" / "settings.yaml"


# ============================================================
# LOGGING CONFIGURATION
# ============================================================

def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """Configure logging."""
    logger.remove()  # Remove default handler

    # Console output with colors
    logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>",
        colorize=True,
    )

    # File output
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {module}:{line} | {message}",
            rotation="10 MB",
            retention="7 days",
        )


# ============================================================
# EVENT LOGGING
# ============================================================

def log_event(event: DetectionEvent):
    """Log one lifecycle event."""
    if isinstance(event, Appeared):
        logger.debug(f"Appeared: track {event.track_id}")
    elif isinstance(event, Confirmed):
        x, y, w, h = event.rect.as_tuple()
        logger.info(f"Confirmed: track {event.track_id} at ({x:.3f}, {y:.3f}, {w:.3f}, {h:.3f})")
    elif isinstance(event, Lost):
        logger.info(f"Lost: track {event.track_id}")


# ============================================================
# MAIN APPLICATION
# ============================================================

class TrackingApp:
    """Main application class."""

    def __init__(self, config: PipelineConfig, headless: bool = False, max_frames: int = 0):
        self.config = config
        self.headless = headless
        self.max_frames = max_frames

        self.pipeline = PipelineOrchestrator(config)
        self.renderer = OverlayRenderer(config.overlay)
        self.window_name = "clovertrack"

    def run(self) -> int:
        """Run the main application loop."""
        logger.info("Starting clovertrack")

        if not self.pipeline.start():
            logger.error("Failed to start pipeline")
            return 1

        if not self.headless:
            cv2.namedWindow(self.window_name, cv2.WINDOW_NORMAL)
            logger.info("Press Q to quit, R to reset tracking")

        frame_count = 0
        start_time = time.time()

        try:
            while True:
                output = self.pipeline.process_frame()
                if output is None:
                    logger.info("Video source exhausted")
                    break

                frame_count += 1
                for event in output.events:
                    log_event(event)

                if not self.headless and not self._show(output):
                    break

                if self.max_frames and frame_count >= self.max_frames:
                    break

        except KeyboardInterrupt:
            logger.info("Interrupted")

        finally:
            self.pipeline.stop()
            if not self.headless:
                cv2.destroyAllWindows()

        elapsed = time.time() - start_time
        if elapsed > 0:
            logger.info(f"Processed {frame_count} frames in {elapsed:.1f}s ({frame_count / elapsed:.1f} fps)")
        logger.info(f"Tracker statistics: {self.pipeline.tracker.get_statistics()}")
        return 0

    def _show(self, output: PipelineOutput) -> bool:
        """Render one frame; False when the user asked to quit."""
        annotated = self.renderer.draw(output.frame, output.confirmed_rects, output.status_text)
        cv2.imshow(self.window_name, cv2.cvtColor(annotated, cv2.COLOR_RGB2BGR))

        key = cv2.waitKey(1) & 0xFF
        if key == ord('q'):
            return False
        if key == ord('r'):
            self.pipeline.reset()
        elif ord('0') <= key <= ord('9'):
            self.pipeline.select_track(key - ord('0'))
        return True


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track rectangles in live video")
    parser.add_argument("--config", type=str, default=None, help="Path to settings YAML")
    parser.add_argument("--device", type=int, default=None, help="Camera device index")
    parser.add_argument("--video", type=str, default=None, help="Video file instead of a camera")
    parser.add_argument("--every-nth", type=int, default=None, help="Analyze every Nth frame")
    parser.add_argument("--headless", action="store_true", help="Run without a window")
    parser.add_argument("--max-frames", type=int, default=0, help="Stop after N frames (0 = no limit)")
    parser.add_argument("--log-level", type=str, default="INFO", help="Console log level")
    parser.add_argument("--log-file", type=str, default=None, help="Optional log file")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    config = load_config(args.config or DEFAULT_CONFIG_PATH)
    if args.device is not None:
        config.video.device_index = args.device
    if args.video is not None:
        config.video.source_path = args.video
    if args.every_nth is not None:
        config.analyze_every_nth_frame = args.every_nth

    app = TrackingApp(config, headless=args.headless, max_frames=args.max_frames)
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
