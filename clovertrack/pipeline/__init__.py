"""
Pipeline Module.

Wires capture, detection, tracking, ROI and overlay together.
"""

from .orchestrator import PipelineOrchestrator, PipelineOutput
