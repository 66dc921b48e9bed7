# Data models for slidecast
from .slide import (
    Dimensions,
    GenerationState,
    Pivot,
    Scenario,
    SlideMetadata,
    SlideSpec,
    SlideStage,
    TimelineDocument,
)

__all__ = [
    # Scenario input
    "SlideSpec",
    "Scenario",
    # Per-slide output
    "SlideStage",
    "Pivot",
    "Dimensions",
    "SlideMetadata",
    # Checkpoint and renderer documents
    "GenerationState",
    "TimelineDocument",
]
