"""Unit tests for the narration pass."""

import json

import pytest
from conftest import FakeSpeechProvider, make_metadata

from models.slide import GenerationState
from services.tts_service import TTSService
from slide_pipeline.speech_pipeline import SpeechPipeline
from utils.checkpoint import CheckpointStore
from utils.errors import MissingPreconditionError, ProbeError


class FakeProbe:
    """Returns a fixed duration per audio file name."""

    def __init__(self, durations: dict[str, float]):
        self.durations = durations
        self.calls = []

    def __call__(self, path):
        self.calls.append(path.name)
        return self.durations[path.name]


DURATIONS = {"slide_0.mp3": 4.2, "slide_1.mp3": 5.8, "slide_2.mp3": 3.0}


@pytest.fixture
def provider():
    return FakeSpeechProvider()


@pytest.fixture
def voiced_state(sample_scenario):
    return GenerationState(
        scenario=sample_scenario,
        slides=[make_metadata(i) for i in range(3)],
        completed=True,
    )


def _pipeline(layout, provider, probe):
    return SpeechPipeline(layout=layout, tts_service=TTSService(provider), probe=probe, fps=30)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_measured_timeline(layout, provider, voiced_state):
    probe = FakeProbe(DURATIONS)

    timeline = await _pipeline(layout, provider, probe).run(voiced_state)

    assert timeline.total_duration == pytest.approx(13.0)
    assert timeline.slide_duration == pytest.approx(13.0 / 3)
    assert [s.audio_path for s in timeline.slides] == [
        "audio/slide_0.mp3",
        "audio/slide_1.mp3",
        "audio/slide_2.mp3",
    ]
    assert provider.texts == [s.narration_text for s in voiced_state.scenario.slides]

    data = json.loads(layout.timeline_file.read_text(encoding="utf-8"))
    assert data["totalDuration"] == pytest.approx(13.0)
    assert data["slides"][1]["duration"] == 5.8
    assert data["fps"] == 30


@pytest.mark.unit
@pytest.mark.asyncio
async def test_existing_audio_is_reprobed_not_resynthesized(layout, provider, voiced_state):
    layout.audio_dir.mkdir(parents=True, exist_ok=True)
    layout.audio_path(1).write_bytes(b"ID3existing")
    probe = FakeProbe(DURATIONS)

    await _pipeline(layout, provider, probe).run(voiced_state)

    assert voiced_state.scenario.slides[1].narration_text not in provider.texts
    assert len(provider.texts) == 2
    assert probe.calls == ["slide_0.mp3", "slide_1.mp3", "slide_2.mp3"]
    assert layout.audio_path(1).read_bytes() == b"ID3existing"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_checkpoint_is_not_rewritten(layout, provider, voiced_state):
    store = CheckpointStore(layout.state_file)
    store.save(voiced_state)
    before = layout.state_file.read_bytes()

    await _pipeline(layout, provider, FakeProbe(DURATIONS)).run(voiced_state)

    assert layout.state_file.read_bytes() == before
    assert all(s.audio_path is None for s in voiced_state.slides)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_slides_without_metadata_are_skipped(layout, provider, sample_scenario):
    state = GenerationState(scenario=sample_scenario, slides=[make_metadata(2), make_metadata(0)])
    progress = []

    timeline = await _pipeline(layout, provider, FakeProbe(DURATIONS)).run(
        state, on_progress=lambda d, t: progress.append(d)
    )

    assert [s.index for s in timeline.slides] == [0, 2]
    assert timeline.total_duration == pytest.approx(7.2)
    assert timeline.slide_duration == pytest.approx(3.6)
    assert progress == [1, 2, 3]
    assert not layout.audio_path(1).exists()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_lookup_is_by_index_not_position(layout, provider, sample_scenario):
    """Metadata stored out of order still pairs with the matching scenario slide."""
    state = GenerationState(
        scenario=sample_scenario,
        slides=[make_metadata(1, narration_text="stored second"), make_metadata(0)],
    )

    timeline = await _pipeline(layout, provider, FakeProbe(DURATIONS)).run(state)

    by_index = {s.index: s for s in timeline.slides}
    assert by_index[1].narration_text == "stored second"
    assert by_index[1].duration == 5.8
    assert by_index[0].duration == 4.2


@pytest.mark.unit
@pytest.mark.asyncio
async def test_no_metadata_at_all(layout, provider, sample_scenario):
    state = GenerationState(scenario=sample_scenario)

    with pytest.raises(MissingPreconditionError, match="slidecast images"):
        await _pipeline(layout, provider, FakeProbe(DURATIONS)).run(state)

    assert not layout.timeline_file.exists()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_missing_scenario(layout, provider):
    with pytest.raises(MissingPreconditionError, match="scenario"):
        await _pipeline(layout, provider, FakeProbe(DURATIONS)).run(GenerationState())


@pytest.mark.unit
@pytest.mark.asyncio
async def test_probe_failure_propagates(layout, provider, voiced_state):
    def broken_probe(path):
        raise ProbeError("ffprobe returned no duration")

    with pytest.raises(ProbeError):
        await _pipeline(layout, provider, broken_probe).run(voiced_state)

    assert not layout.timeline_file.exists()
