"""Audio duration probing with ffprobe."""

import logging
import math
from pathlib import Path

from utils.errors import ProbeError
from utils.process import run_command

logger = logging.getLogger(__name__)


def parse_duration(output: str) -> float:
    """Parse ffprobe's bare duration output.

    Raises:
        ProbeError: If the output is empty or not a finite, non-negative number
    """
    text = (output or "").strip()
    if not text:
        raise ProbeError("ffprobe returned no duration")

    try:
        duration = float(text.splitlines()[0])
    except ValueError as e:
        raise ProbeError(f"ffprobe returned a non-numeric duration: {text[:80]!r}") from e

    if not math.isfinite(duration) or duration < 0:
        raise ProbeError(f"ffprobe returned an invalid duration: {text[:80]!r}")

    return duration


def probe_duration(audio_path: Path, ffprobe: str = "ffprobe", timeout: float = 60) -> float:
    """Get the duration of an audio file in seconds.

    Raises:
        ExternalToolError: If ffprobe cannot be run or exits non-zero
        ProbeError: If the output is not a usable number
    """
    cmd = [
        ffprobe,
        "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(audio_path),
    ]
    result = run_command(cmd, description="ffprobe", timeout=timeout)
    duration = parse_duration(result.stdout)

    logger.debug(f"Duration of {audio_path}: {duration:.2f}s")
    return duration
