"""On-disk layout shared by every stage and the downstream renderer.

Other stages and the renderer rely on these exact names, so they are kept in
this one place.
"""

import os
from dataclasses import dataclass
from pathlib import Path

STATE_FILENAME = "state.json"
TIMELINE_FILENAME = "remotion-data.json"
SCENARIO_FILENAME = "scenario.json"
AUDIO_DIRNAME = "audio"
ORIGINAL_IMAGE_NAME = "original.png"
AUDIO_EXTENSION = ".mp3"


@dataclass(frozen=True)
class WorkspaceLayout:
    """Paths of the checkpoint, timeline and per-slide artifacts."""

    output_dir: Path
    temp_dir: Path

    @classmethod
    def from_config(cls, config: dict) -> "WorkspaceLayout":
        return cls(output_dir=Path(config["output_dir"]), temp_dir=Path(config["temp_dir"]))

    @property
    def state_file(self) -> Path:
        return self.output_dir / STATE_FILENAME

    @property
    def timeline_file(self) -> Path:
        return self.output_dir / TIMELINE_FILENAME

    @property
    def scenario_file(self) -> Path:
        return self.output_dir / SCENARIO_FILENAME

    @property
    def audio_dir(self) -> Path:
        return self.output_dir / AUDIO_DIRNAME

    def slide_dir(self, index: int) -> Path:
        return self.temp_dir / f"slide_{index}"

    def original_image(self, index: int) -> Path:
        return self.slide_dir(index) / ORIGINAL_IMAGE_NAME

    def audio_path(self, index: int) -> Path:
        return self.audio_dir / f"slide_{index}{AUDIO_EXTENSION}"

    def relative(self, path: Path) -> str:
        """Path as stored in metadata: relative to the output directory."""
        return Path(os.path.relpath(path, self.output_dir)).as_posix()

    def ensure_dirs(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.temp_dir.mkdir(parents=True, exist_ok=True)
