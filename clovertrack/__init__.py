"""
clovertrack: temporally stable rectangle tracking for live video.

Turns noisy per-frame rectangle detections into identity-persistent,
smoothed tracks for on-screen overlay and region-of-interest cropping.

Per-frame order (NEVER REORDER):
1. Capture a frame
2. Select every Nth frame for analysis
3. Detect rectangles (background worker)
4. Update the tracker (serialized, one result at a time)
5. Read the confirmed-track snapshot
6. Refresh ROI thumbnails (throttled)
7. Render the overlay
"""

__version__ = "0.1.0"
__author__ = "clovertrack contributors"
