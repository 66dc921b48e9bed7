"""Progress summary of a checkpoint, for the status command."""

from dataclasses import dataclass, field
from typing import Optional

from models.slide import GenerationState

PREVIEW_CHARS = 40


@dataclass
class SlideStatus:
    index: int
    slide_type: str
    done: bool
    preview: str
    pivot: Optional[tuple[float, float]] = None
    dimensions: Optional[tuple[int, int]] = None


@dataclass
class StatusReport:
    phase: str  # not_started, in_progress, completed
    has_scenario: bool = False
    slide_count: int = 0
    completed_count: int = 0
    slides: list[SlideStatus] = field(default_factory=list)


def build_status(state: GenerationState, checkpoint_exists: bool = True) -> StatusReport:
    """Summarize scenario and per-slide progress."""
    if not checkpoint_exists:
        return StatusReport(phase="not_started")

    if state.completed:
        phase = "completed"
    else:
        phase = "in_progress"

    report = StatusReport(phase=phase, has_scenario=state.scenario is not None)
    if state.scenario is None:
        return report

    report.slide_count = len(state.scenario.slides)
    for index, spec in enumerate(state.scenario.slides):
        metadata = state.get_slide(index)
        done = metadata is not None and metadata.completed
        row = SlideStatus(
            index=index,
            slide_type=spec.slide_type,
            done=done,
            preview=spec.narration_text[:PREVIEW_CHARS],
        )
        if done:
            row.pivot = (metadata.pivot.x, metadata.pivot.y)
            row.dimensions = (metadata.dimensions.width, metadata.dimensions.height)
            report.completed_count += 1
        report.slides.append(row)

    return report
