"""Shared pytest fixtures for slidecast tests."""

import sys
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from PIL import Image  # noqa: E402

from models.slide import (  # noqa: E402
    Dimensions,
    GenerationState,
    Pivot,
    Scenario,
    SlideMetadata,
    SlideSpec,
)
from services.segmentation_service import SegmentationService  # noqa: E402
from services.tts_service import SpeechProvider  # noqa: E402
from slide_pipeline.layout import WorkspaceLayout  # noqa: E402
from utils.checkpoint import CheckpointStore  # noqa: E402
from utils.errors import ExternalToolError  # noqa: E402

CANVAS_SIZE = (400, 300)
BLOCK_BOX = (50, 50, 150, 110)  # 100x60 opaque block, top-left (50, 50)


def write_cutout(path: Path, size=CANVAS_SIZE, box=BLOCK_BOX) -> None:
    """Write an RGBA image, transparent except for an opaque rectangle."""
    path.parent.mkdir(parents=True, exist_ok=True)
    image = Image.new("RGBA", size, (0, 0, 0, 0))
    if box is not None:
        image.paste((200, 40, 40, 255), box)
    image.save(path)


def make_metadata(index: int, **overrides) -> SlideMetadata:
    """Completed slide metadata with plausible paths."""
    fields = dict(
        index=index,
        slide_type="hook" if index == 0 else "body",
        narration_text=f"Narration {index}",
        image_prompt=f"prompt {index}",
        original_image=f"../temp/slide_{index}/original.png",
        object_image=f"../temp/slide_{index}/object_output/original_rgba.png",
        background_image=f"../temp/slide_{index}/background_output/original_rgba_reverse.png",
        pivot=Pivot(x=99.5, y=79.5),
        dimensions=Dimensions(width=400, height=300),
    )
    fields.update(overrides)
    return SlideMetadata(**fields)


class FakeImageService:
    """Stands in for the sd-z process: writes a plain RGB PNG."""

    def __init__(self, fail_on_prompts: set[str] | None = None):
        self.calls: list[tuple[str, Path]] = []
        self.fail_on_prompts = fail_on_prompts or set()

    def generate(self, prompt: str, output_path: Path) -> None:
        self.calls.append((prompt, Path(output_path)))
        if prompt in self.fail_on_prompts:
            raise ExternalToolError(f"image synthesis failed for {prompt!r}")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", CANVAS_SIZE, (10, 20, 30)).save(output_path)


class FakeSegmentationService(SegmentationService):
    """Stands in for transparent-background, honoring its output naming."""

    def __init__(self, write_outputs: bool = True):
        super().__init__("transparent-background", threshold=0.1)
        self.calls: list[Path] = []
        self.write_outputs = write_outputs

    def separate(self, source_path: Path, work_dir: Path):
        self.calls.append(Path(source_path))
        result = self.expected_outputs(source_path, work_dir)
        if self.write_outputs:
            write_cutout(result.foreground)
            result.background.parent.mkdir(parents=True, exist_ok=True)
            Image.new("RGBA", CANVAS_SIZE, (10, 20, 30, 255)).save(result.background)
        return result


class FakeSpeechProvider(SpeechProvider):
    """Returns a tiny MP3-looking payload."""

    def __init__(self):
        self.texts: list[str] = []
        self.closed = False

    def get_provider_name(self) -> str:
        return "fake"

    async def synthesize(self, text: str) -> bytes:
        self.texts.append(text)
        return b"ID3" + text.encode("utf-8")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def layout(temp_dir) -> WorkspaceLayout:
    layout = WorkspaceLayout(output_dir=temp_dir / "output", temp_dir=temp_dir / "temp")
    layout.ensure_dirs()
    return layout


@pytest.fixture
def store(layout) -> CheckpointStore:
    return CheckpointStore(layout.state_file)


@pytest.fixture
def sample_scenario() -> Scenario:
    """Three-slide scenario."""
    return Scenario(
        slides=[
            SlideSpec("hook", "Что это за объект?", "suspicious object, caption 'WHAT IS IT?'"),
            SlideSpec("body", "Его нашли в подвале.", "abandoned basement, single lamp"),
            SlideSpec("body", "Никто не вернулся.", "empty corridor, flickering light"),
        ]
    )


@pytest.fixture
def state_with_scenario(sample_scenario) -> GenerationState:
    return GenerationState(scenario=sample_scenario)


@pytest.fixture
def fake_image_service() -> FakeImageService:
    return FakeImageService()


@pytest.fixture
def fake_segmentation_service() -> FakeSegmentationService:
    return FakeSegmentationService()


@pytest.fixture
def sample_config(temp_dir) -> dict:
    """Configuration as returned by load_config, pointed at a temp workspace."""
    return {
        "gemini_api_key": "test_gemini_key",
        "gemini_model": "gemini-2.5-flash",
        "scenario_theme": "test theme",
        "narration_language": "Russian",
        "slide_count": 3,
        "slide_duration": 5.0,
        "fps": 30,
        "output_dir": str(temp_dir / "output"),
        "temp_dir": str(temp_dir / "temp"),
        "sd_command": "sd-z --steps 8",
        "image_width": 480,
        "image_height": 640,
        "segmentation_command": "transparent-background",
        "background_threshold": 0.1,
        "ffprobe_command": "ffprobe",
        "command_timeout": 60.0,
        "tts_engine": "edge",
        "tts_voice": "ru-RU-DmitryNeural",
        "elevenlabs_api_key": None,
        "elevenlabs_voice_id": "JBFqnCBsd6RMkjVDRZzb",
        "elevenlabs_model": "eleven_turbo_v2_5",
        "log_file": None,
    }
