"""Narration pass: synthesize audio per slide and rebuild the timeline.

The augmented slide records live only in memory and in the timeline file;
the checkpoint stays owned by the image pass and is never written here.
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional

from models.slide import GenerationState, SlideMetadata, TimelineDocument
from services.audio_probe import probe_duration
from services.tts_service import TTSService
from slide_pipeline.layout import WorkspaceLayout
from slide_pipeline.stage_gate import should_skip
from slide_pipeline.timeline import build_timeline
from utils.errors import MissingPreconditionError

logger = logging.getLogger(__name__)


class SpeechPipeline:
    """Adds narration audio and measured durations to produced slides."""

    def __init__(
        self,
        layout: WorkspaceLayout,
        tts_service: TTSService,
        probe: Callable[[Path], float] = probe_duration,
        fps: int = 30,
    ):
        self.layout = layout
        self.tts_service = tts_service
        self.probe = probe
        self.fps = fps

    async def run(
        self,
        state: GenerationState,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> TimelineDocument:
        """Generate narration for every slide with image metadata.

        Slides without metadata are logged and skipped. Duration is probed for
        every slide, including ones whose audio already existed.

        Raises:
            MissingPreconditionError: If there is no scenario or no slide could be voiced
            ExternalToolError: If synthesis or probing fails
            ProbeError: If a duration cannot be parsed
        """
        if state.scenario is None:
            raise MissingPreconditionError(
                "No scenario in checkpoint. Run: slidecast scenario && slidecast images"
            )

        self.layout.audio_dir.mkdir(parents=True, exist_ok=True)
        slides = state.scenario.slides
        updated: list[SlideMetadata] = []

        for index, spec in enumerate(slides):
            metadata = state.get_slide(index)
            if metadata is None:
                logger.error(f"Slide {index} has no image metadata, skipping narration")
                if on_progress:
                    on_progress(index + 1, len(slides))
                continue

            logger.info(f"Narrating slide {index + 1}/{len(slides)}")
            audio_path = self.layout.audio_path(index)

            if should_skip(audio_path):
                logger.info("Audio already exists")
            else:
                await self.tts_service.synthesize(spec.narration_text, audio_path)

            duration = await asyncio.to_thread(self.probe, audio_path)
            logger.info(f"Duration: {duration:.2f}s")

            updated.append(metadata.with_audio(self.layout.relative(audio_path), duration))
            if on_progress:
                on_progress(index + 1, len(slides))

        if not updated:
            raise MissingPreconditionError(
                "No slide has image metadata yet. Run: slidecast images"
            )

        timeline = build_timeline(updated, self.fps)
        timeline.save(self.layout.timeline_file)

        logger.info(
            f"Narration complete: {len(updated)} slides, total {timeline.total_duration:.2f}s. "
            f"Timeline: {self.layout.timeline_file}"
        )
        return timeline
