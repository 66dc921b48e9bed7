"""Resumable per-slide image pass.

Each slide goes through image synthesis, foreground/background segmentation
and pivot extraction. The checkpoint is saved after every completed slide, so
a crash on slide N leaves slides 0..N-1 durably done and a re-run picks up
from the first missing artifact.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from models.slide import (
    Dimensions,
    GenerationState,
    Pivot,
    SlideMetadata,
    SlideSpec,
    SlideStage,
    TimelineDocument,
)
from services.image_generation_service import ImageGenerationService
from services.segmentation_service import SegmentationService
from slide_pipeline.centroid import CenterResult, find_center
from slide_pipeline.layout import WorkspaceLayout
from slide_pipeline.stage_gate import should_skip, should_skip_slide
from slide_pipeline.timeline import build_timeline
from utils.checkpoint import CheckpointStore
from utils.errors import ExternalToolError, MissingPreconditionError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class SlideProgress:
    """In-flight state of one slide; becomes SlideMetadata on completion."""

    index: int
    spec: SlideSpec
    stage: SlideStage = SlideStage.NOT_STARTED
    original_image: Optional[Path] = None
    object_image: Optional[Path] = None
    background_image: Optional[Path] = None
    center: Optional[CenterResult] = None

    def advance(self, stage: SlideStage) -> None:
        logger.debug(f"Slide {self.index}: {self.stage.value} -> {stage.value}")
        self.stage = stage


class ImagePipeline:
    """Runs the image pass over every slide of the scenario."""

    def __init__(
        self,
        layout: WorkspaceLayout,
        image_service: ImageGenerationService,
        segmentation_service: SegmentationService,
        store: CheckpointStore,
        fps: int = 30,
        slide_duration: float = 5.0,
        center_finder: Callable[[Path], CenterResult] = find_center,
    ):
        self.layout = layout
        self.image_service = image_service
        self.segmentation_service = segmentation_service
        self.store = store
        self.fps = fps
        self.slide_duration = slide_duration
        self.center_finder = center_finder

    def run(
        self,
        state: GenerationState,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Optional[TimelineDocument]:
        """Process all slides, write the planning timeline and mark the run complete.

        Returns:
            The written timeline, or None if the run was already complete

        Raises:
            MissingPreconditionError: If the state holds no scenario
            ExternalToolError: If an external tool fails (progress so far is kept)
        """
        if state.scenario is None:
            raise MissingPreconditionError(
                "No scenario found. Run the scenario stage first: slidecast scenario"
            )

        if state.completed:
            logger.info(f"Images already generated. Timeline: {self.layout.timeline_file}")
            return None

        self.layout.ensure_dirs()
        slides = state.scenario.slides
        metadata: list[SlideMetadata] = []

        for index, spec in enumerate(slides):
            self.layout.slide_dir(index).mkdir(parents=True, exist_ok=True)
            metadata.append(self.process_slide(spec, index, state))
            if on_progress:
                on_progress(index + 1, len(slides))

        timeline = build_timeline(metadata, self.fps, fixed_slide_seconds=self.slide_duration)
        timeline.save(self.layout.timeline_file)

        state.completed = True
        self.store.save(state)

        logger.info(f"Images generated for {len(metadata)} slides. Timeline: {self.layout.timeline_file}")
        return timeline

    def process_slide(self, spec: SlideSpec, index: int, state: GenerationState) -> SlideMetadata:
        """Bring one slide to the completed stage and persist it.

        Steps whose outputs already exist are skipped without invoking the tool.
        """
        if should_skip_slide(state, index):
            logger.info(f"Slide {index + 1} already processed, skipping")
            return state.get_slide(index)

        logger.info(f"Processing slide {index + 1}: {spec.narration_text[:50]}...")
        progress = SlideProgress(index=index, spec=spec)
        slide_dir = self.layout.slide_dir(index)

        # NotStarted -> ImageGenerated
        original = self.layout.original_image(index)
        if should_skip(original):
            logger.info("Image already exists")
        else:
            self.image_service.generate(spec.image_prompt, original)
        progress.original_image = original
        progress.advance(SlideStage.IMAGE_GENERATED)

        # ImageGenerated -> Segmented
        expected = self.segmentation_service.expected_outputs(original, slide_dir)
        if should_skip(expected.foreground, expected.background):
            logger.info("Foreground/background already separated")
            result = expected
        else:
            result = self.segmentation_service.separate(original, slide_dir)
        for path in (result.foreground, result.background):
            if not path.exists():
                raise ExternalToolError(f"Segmentation output not found: {path}")
        progress.object_image = result.foreground
        progress.background_image = result.background
        progress.advance(SlideStage.SEGMENTED)

        # Segmented -> CentroidComputed
        progress.center = self.center_finder(result.foreground)
        progress.advance(SlideStage.CENTROID_COMPUTED)

        # CentroidComputed -> Completed
        metadata = self._to_metadata(progress)
        state.upsert_slide(metadata)
        self.store.save(state)
        progress.advance(SlideStage.COMPLETED)

        logger.info(f"Slide {index + 1} ready")
        return metadata

    def _to_metadata(self, progress: SlideProgress) -> SlideMetadata:
        center = progress.center
        return SlideMetadata(
            index=progress.index,
            slide_type=progress.spec.slide_type,
            narration_text=progress.spec.narration_text,
            image_prompt=progress.spec.image_prompt,
            original_image=self.layout.relative(progress.original_image),
            object_image=self.layout.relative(progress.object_image),
            background_image=self.layout.relative(progress.background_image),
            pivot=Pivot(x=center.x, y=center.y),
            dimensions=Dimensions(width=center.width, height=center.height),
            completed=True,
        )
