"""Slide Pipeline - resumable per-slide asset generation for short videos."""

from .centroid import CenterResult, find_center
from .image_pipeline import ImagePipeline, SlideProgress
from .layout import WorkspaceLayout
from .speech_pipeline import SpeechPipeline
from .stage_gate import should_skip, should_skip_slide
from .status import StatusReport, build_status
from .timeline import build_timeline

__all__ = [
    "CenterResult",
    "find_center",
    "ImagePipeline",
    "SlideProgress",
    "WorkspaceLayout",
    "SpeechPipeline",
    "should_skip",
    "should_skip_slide",
    "StatusReport",
    "build_status",
    "build_timeline",
]
