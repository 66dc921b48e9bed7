"""Checkpoint store for resuming slide generation after failures."""

import json
import logging
import os
import stat
import tempfile
from pathlib import Path

from models.slide import GenerationState
from utils.errors import CorruptStateError

logger = logging.getLogger(__name__)


class CheckpointStore:
    """Owns the on-disk generation state file.

    Every stage reads the state through ``load`` and flushes it through
    ``save``. No locking is done: one run at a time per checkpoint.
    """

    def __init__(self, checkpoint_path: Path):
        self.checkpoint_path = Path(checkpoint_path)

    def exists(self) -> bool:
        return self.checkpoint_path.exists()

    def load(self) -> GenerationState:
        """Load state from file.

        Returns:
            The stored state, or a fresh empty state if no checkpoint exists

        Raises:
            CorruptStateError: If the file exists but cannot be parsed
        """
        if not self.checkpoint_path.exists():
            logger.debug(f"No checkpoint at {self.checkpoint_path}, starting fresh")
            return GenerationState()

        try:
            with self.checkpoint_path.open(encoding="utf-8") as f:
                data = json.load(f)
            state = GenerationState.from_dict(data)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValueError, TypeError) as e:
            raise CorruptStateError(
                f"Checkpoint {self.checkpoint_path} is unreadable: {e}"
            ) from e

        logger.info(
            f"Loaded checkpoint: {self.checkpoint_path} "
            f"({state.completed_count()} slides done, completed={state.completed})"
        )
        return state

    def save(self, state: GenerationState) -> None:
        """Write the full state document.

        The document goes to a temporary sibling first and replaces the
        checkpoint in one rename, so readers see either the old or the new
        state in full.
        """
        self.checkpoint_path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.checkpoint_path.parent,
            prefix=f".{self.checkpoint_path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(state.to_dict(), f, indent=2, ensure_ascii=False)
            os.chmod(tmp_name, self._file_mode())
            os.replace(tmp_name, self.checkpoint_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(
            f"Checkpoint saved: {self.checkpoint_path} ({len(state.slides)} slides)"
        )

    def _file_mode(self) -> int:
        """Mode for the new checkpoint: the current file's, else what the umask allows."""
        try:
            return stat.S_IMODE(self.checkpoint_path.stat().st_mode)
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask

    def delete(self) -> bool:
        """Remove the checkpoint file.

        Returns:
            True if a file was removed
        """
        if self.checkpoint_path.exists():
            self.checkpoint_path.unlink()
            logger.debug(f"Checkpoint removed: {self.checkpoint_path}")
            return True
        return False
