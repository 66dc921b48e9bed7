"""Idempotence checks run before every expensive step.

The checks look only at paths and flags. A half-written artifact from an
interrupted run counts as present and is not regenerated.
"""

import logging
from pathlib import Path

from models.slide import GenerationState

logger = logging.getLogger(__name__)


def should_skip(*expected_paths: Path) -> bool:
    """Return True if every expected output already exists."""
    if not expected_paths:
        return False

    missing = [p for p in expected_paths if not Path(p).exists()]
    if missing:
        return False

    logger.debug(f"Outputs already present, skipping: {', '.join(str(p) for p in expected_paths)}")
    return True


def should_skip_slide(state: GenerationState, index: int) -> bool:
    """Return True if the slide is already marked completed in the checkpoint."""
    if state.is_slide_completed(index):
        logger.debug(f"Slide {index} already completed, skipping")
        return True
    return False
