"""Unit tests for the checkpoint progress summary."""

import pytest
from conftest import make_metadata

from models.slide import GenerationState, Scenario, SlideSpec
from slide_pipeline.status import PREVIEW_CHARS, build_status


@pytest.mark.unit
def test_no_checkpoint_is_not_started():
    report = build_status(GenerationState(), checkpoint_exists=False)

    assert report.phase == "not_started"
    assert report.slides == []


@pytest.mark.unit
def test_in_progress_rows(sample_scenario):
    state = GenerationState(scenario=sample_scenario, slides=[make_metadata(0)])

    report = build_status(state)

    assert report.phase == "in_progress"
    assert report.has_scenario
    assert (report.completed_count, report.slide_count) == (1, 3)
    assert [row.done for row in report.slides] == [True, False, False]
    assert report.slides[0].pivot == (99.5, 79.5)
    assert report.slides[0].dimensions == (400, 300)
    assert report.slides[1].pivot is None


@pytest.mark.unit
def test_preview_is_truncated():
    scenario = Scenario(slides=[SlideSpec("hook", "x" * 100, "prompt")])

    report = build_status(GenerationState(scenario=scenario))

    assert report.slides[0].preview == "x" * PREVIEW_CHARS


@pytest.mark.unit
def test_checkpoint_without_scenario():
    report = build_status(GenerationState())

    assert report.phase == "in_progress"
    assert not report.has_scenario
    assert report.slides == []


@pytest.mark.unit
def test_completed(sample_scenario):
    state = GenerationState(
        scenario=sample_scenario,
        slides=[make_metadata(i) for i in range(3)],
        completed=True,
    )

    report = build_status(state)

    assert report.phase == "completed"
    assert report.completed_count == 3
