"""Slide, checkpoint and timeline models.

JSON field names are shared with the downstream renderer and with checkpoint
files written by earlier runs, so ``to_dict`` / ``from_dict`` keep them fixed.
"""

import json
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class SlideStage(str, Enum):
    """Progress of one slide through the image pass."""

    NOT_STARTED = "not_started"
    IMAGE_GENERATED = "image_generated"
    SEGMENTED = "segmented"
    CENTROID_COMPUTED = "centroid_computed"
    COMPLETED = "completed"


def _require_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"Field '{key}' must be a string, got {type(value).__name__}")
    return value


def _require_number(data: dict, key: str) -> float:
    value = data.get(key)
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Field '{key}' must be a number, got {type(value).__name__}")
    return float(value)


def _require_int(data: dict, key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Field '{key}' must be an integer, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class SlideSpec:
    """One slide as authored in the scenario."""

    slide_type: str
    narration_text: str
    image_prompt: str

    def to_dict(self) -> dict:
        return {
            "type": self.slide_type,
            "text_to_tts": self.narration_text,
            "z_image_prompt": self.image_prompt,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SlideSpec":
        if not isinstance(data, dict):
            raise ValueError("Slide must be an object")
        return cls(
            slide_type=_require_str(data, "type"),
            narration_text=_require_str(data, "text_to_tts"),
            image_prompt=_require_str(data, "z_image_prompt"),
        )


@dataclass(frozen=True)
class Scenario:
    """Ordered slide list produced once by the scenario author."""

    slides: tuple[SlideSpec, ...]

    def __post_init__(self):
        # Accept any sequence but store an immutable tuple
        object.__setattr__(self, "slides", tuple(self.slides))
        if not self.slides:
            raise ValueError("Scenario must contain at least one slide")

    def to_dict(self) -> dict:
        return {"slides": [s.to_dict() for s in self.slides]}

    @classmethod
    def from_dict(cls, data: dict) -> "Scenario":
        if not isinstance(data, dict) or not isinstance(data.get("slides"), list):
            raise ValueError("Scenario must be an object with a 'slides' list")
        return cls(slides=tuple(SlideSpec.from_dict(s) for s in data["slides"]))


@dataclass(frozen=True)
class Pivot:
    """Anchor point of the foreground cut-out, in source pixel space."""

    x: float
    y: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> "Pivot":
        if not isinstance(data, dict):
            raise ValueError("Field 'pivot' must be an object")
        return cls(x=_require_number(data, "x"), y=_require_number(data, "y"))


@dataclass(frozen=True)
class Dimensions:
    """Full size of the source image."""

    width: int
    height: int

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict) -> "Dimensions":
        if not isinstance(data, dict):
            raise ValueError("Field 'dimensions' must be an object")
        return cls(width=_require_int(data, "width"), height=_require_int(data, "height"))


@dataclass
class SlideMetadata:
    """Produced assets and layout data for one slide.

    ``index`` is the only correlation key between scenario slides, metadata
    entries and ``slide_<index>`` directories. Audio fields are added by the
    speech pass and never affect ``completed``.
    """

    index: int
    slide_type: str
    narration_text: str
    image_prompt: str
    original_image: str
    object_image: str
    background_image: str
    pivot: Pivot
    dimensions: Dimensions
    audio_path: Optional[str] = None
    duration: Optional[float] = None
    completed: bool = True

    def __post_init__(self):
        if self.index < 0:
            raise ValueError(f"Slide index must be non-negative, got {self.index}")
        if self.completed:
            missing = [
                name
                for name in ("original_image", "object_image", "background_image")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(
                    f"Completed slide {self.index} is missing: {', '.join(missing)}"
                )
            if self.dimensions.width <= 0 or self.dimensions.height <= 0:
                raise ValueError(f"Completed slide {self.index} has invalid dimensions")

    def with_audio(self, audio_path: str, duration: float) -> "SlideMetadata":
        """Return a copy carrying narration audio fields."""
        return replace(self, audio_path=audio_path, duration=duration)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            "index": self.index,
            "type": self.slide_type,
            "text_to_tts": self.narration_text,
            "z_image_prompt": self.image_prompt,
            "original_image": self.original_image,
            "object_image": self.object_image,
            "background_image": self.background_image,
            "pivot": self.pivot.to_dict(),
            "dimensions": self.dimensions.to_dict(),
        }
        if self.audio_path is not None:
            data["audio_path"] = self.audio_path
        if self.duration is not None:
            data["duration"] = self.duration
        data["completed"] = self.completed
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SlideMetadata":
        """Create slide metadata from a checkpoint entry.

        Raises:
            ValueError: If a field is missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError("Slide metadata must be an object")

        completed = data.get("completed", False)
        if not isinstance(completed, bool):
            raise ValueError("Field 'completed' must be a boolean")

        audio_path = data.get("audio_path")
        if audio_path is not None and not isinstance(audio_path, str):
            raise ValueError("Field 'audio_path' must be a string")

        return cls(
            index=_require_int(data, "index"),
            slide_type=_require_str(data, "type"),
            narration_text=_require_str(data, "text_to_tts"),
            image_prompt=_require_str(data, "z_image_prompt"),
            original_image=_require_str(data, "original_image"),
            object_image=_require_str(data, "object_image"),
            background_image=_require_str(data, "background_image"),
            pivot=Pivot.from_dict(data.get("pivot")),
            dimensions=Dimensions.from_dict(data.get("dimensions")),
            audio_path=audio_path,
            duration=_require_number(data, "duration") if data.get("duration") is not None else None,
            completed=completed,
        )


@dataclass
class GenerationState:
    """The checkpoint document shared by all stages."""

    scenario: Optional[Scenario] = None
    slides: list[SlideMetadata] = field(default_factory=list)
    completed: bool = False

    def get_slide(self, index: int) -> Optional[SlideMetadata]:
        """Find slide metadata by index (not by list position)."""
        for slide in self.slides:
            if slide.index == index:
                return slide
        return None

    def is_slide_completed(self, index: int) -> bool:
        slide = self.get_slide(index)
        return slide is not None and slide.completed

    def upsert_slide(self, metadata: SlideMetadata) -> bool:
        """Insert or replace slide metadata by index.

        Returns:
            True if an existing entry was replaced
        """
        for position, slide in enumerate(self.slides):
            if slide.index == metadata.index:
                self.slides[position] = metadata
                return True
        self.slides.append(metadata)
        return False

    def completed_count(self) -> int:
        return sum(1 for s in self.slides if s.completed)

    def to_dict(self) -> dict:
        data = {}
        if self.scenario is not None:
            data["scenario"] = self.scenario.to_dict()
        data["slides"] = [s.to_dict() for s in self.slides]
        data["completed"] = self.completed
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "GenerationState":
        """Create state from a parsed checkpoint.

        Raises:
            ValueError: If the document does not match the checkpoint schema
        """
        if not isinstance(data, dict):
            raise ValueError("Checkpoint must be a JSON object")

        slides = data.get("slides", [])
        if not isinstance(slides, list):
            raise ValueError("Field 'slides' must be a list")

        completed = data.get("completed", False)
        if not isinstance(completed, bool):
            raise ValueError("Field 'completed' must be a boolean")

        scenario_data = data.get("scenario")
        scenario = Scenario.from_dict(scenario_data) if scenario_data is not None else None

        parsed = [SlideMetadata.from_dict(s) for s in slides]
        indices = [s.index for s in parsed]
        if len(indices) != len(set(indices)):
            raise ValueError("Duplicate slide indices in checkpoint")

        return cls(scenario=scenario, slides=parsed, completed=completed)


@dataclass
class TimelineDocument:
    """Renderer-facing slide order and timing.

    Derived from the current slide list on every write; never read back.
    """

    slides: list[SlideMetadata]
    total_duration: float
    slide_duration: float
    fps: int

    def to_dict(self) -> dict:
        return {
            "slides": [s.to_dict() for s in sorted(self.slides, key=lambda s: s.index)],
            "totalDuration": self.total_duration,
            "slideDuration": self.slide_duration,
            "fps": self.fps,
        }

    def save(self, path: Path) -> None:
        """Write the timeline JSON for the renderer."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

        logger.debug(f"Timeline saved: {path} ({len(self.slides)} slides)")
