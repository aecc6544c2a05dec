"""
Video Capture Module.

Responsibilities:
- Video stream acquisition (camera or file)
- Selecting which frames get analyzed
"""

from .video_capture import VideoCapture
from .frame_pipeline import FramePipeline
