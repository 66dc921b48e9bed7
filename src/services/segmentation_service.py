"""Foreground/background separation via the transparent-background CLI.

The tool writes ``<stem>_rgba.png`` into its destination directory, and
``<stem>_rgba_reverse.png`` when run with ``--reverse``. The pipeline depends on
those names; a tool upgrade that changes them only needs changes here.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from utils.process import DEFAULT_TIMEOUT, run_command, split_command

logger = logging.getLogger(__name__)

OBJECT_OUTPUT_DIR = "object_output"
BACKGROUND_OUTPUT_DIR = "background_output"
OBJECT_SUFFIX = "_rgba.png"
BACKGROUND_SUFFIX = "_rgba_reverse.png"


@dataclass(frozen=True)
class SegmentationResult:
    """Paths of the foreground cut-out and the background plate."""

    foreground: Path
    background: Path


class SegmentationService:
    """Splits a source image into foreground and background plates."""

    def __init__(
        self,
        command: str = "transparent-background",
        threshold: float = 0.1,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_cmd = split_command(command)
        self.threshold = threshold
        self.timeout = timeout

    @staticmethod
    def expected_outputs(source_path: Path, work_dir: Path) -> SegmentationResult:
        """Where the tool writes its results for ``source_path``."""
        stem = Path(source_path).stem
        work_dir = Path(work_dir)
        return SegmentationResult(
            foreground=work_dir / OBJECT_OUTPUT_DIR / f"{stem}{OBJECT_SUFFIX}",
            background=work_dir / BACKGROUND_OUTPUT_DIR / f"{stem}{BACKGROUND_SUFFIX}",
        )

    def separate(self, source_path: Path, work_dir: Path) -> SegmentationResult:
        """Run subject extraction and inverted extraction over the same source.

        Args:
            source_path: Generated slide image
            work_dir: Slide directory receiving ``object_output/`` and ``background_output/``

        Returns:
            SegmentationResult with the conventional output paths

        Raises:
            ExternalToolError: If either invocation fails
        """
        work_dir = Path(work_dir)
        object_dir = work_dir / OBJECT_OUTPUT_DIR
        background_dir = work_dir / BACKGROUND_OUTPUT_DIR

        logger.info(f"Separating foreground and background: {source_path}")

        run_command(
            [*self.base_cmd, "--source", str(source_path), "--dest", str(object_dir)],
            description="foreground extraction",
            timeout=self.timeout,
        )
        run_command(
            [
                *self.base_cmd,
                "--source", str(source_path),
                "--reverse",
                f"--threshold={self.threshold}",
                "--dest", str(background_dir),
            ],
            description="background extraction",
            timeout=self.timeout,
        )

        logger.info("Separation complete")
        return self.expected_outputs(source_path, work_dir)
