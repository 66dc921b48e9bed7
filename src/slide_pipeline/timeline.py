"""Timeline aggregation for the renderer."""

import math
from typing import Iterable, Optional

from models.slide import SlideMetadata, TimelineDocument


def build_timeline(
    slides: Iterable[SlideMetadata],
    fps: int,
    fixed_slide_seconds: Optional[float] = None,
) -> TimelineDocument:
    """Fold the slide list into a timeline document.

    With ``fixed_slide_seconds`` the durations are a planning estimate
    (count x fixed). Without it every slide must carry a probed ``duration``;
    the total is their sum and the per-slide duration their mean.

    Raises:
        ValueError: In measured mode, if the list is empty or a slide has no duration
    """
    ordered = sorted(slides, key=lambda s: s.index)

    if fixed_slide_seconds is not None:
        return TimelineDocument(
            slides=ordered,
            total_duration=len(ordered) * fixed_slide_seconds,
            slide_duration=fixed_slide_seconds,
            fps=fps,
        )

    if not ordered:
        raise ValueError("Cannot build a measured timeline without slides")

    missing = [s.index for s in ordered if s.duration is None]
    if missing:
        raise ValueError(f"Slides without probed duration: {missing}")

    total = math.fsum(s.duration for s in ordered)
    return TimelineDocument(
        slides=ordered,
        total_duration=total,
        slide_duration=total / len(ordered),
        fps=fps,
    )
