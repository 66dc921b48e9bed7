"""Subprocess helper for the external CLI tools used by the pipeline."""

import logging
import shlex
import subprocess

from utils.errors import ExternalToolError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 1800


def split_command(command: str) -> list[str]:
    """Split a configured command string into argv form.

    Raises:
        ExternalToolError: If the command string is empty
    """
    argv = shlex.split(command)
    if not argv:
        raise ExternalToolError("Empty command configured")
    return argv


def run_command(
    cmd: list[str],
    description: str = "",
    timeout: float = DEFAULT_TIMEOUT,
) -> subprocess.CompletedProcess:
    """Run an external command and fail loudly on any problem.

    Args:
        cmd: Command as list of arguments
        description: Human-readable description for logging
        timeout: Seconds before the process is killed

    Returns:
        The completed process (stdout/stderr captured as text)

    Raises:
        ExternalToolError: If the executable is missing, times out or exits non-zero
    """
    logger.debug(f"Running {description or cmd[0]}: {shlex.join(cmd)}")

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError as e:
        raise ExternalToolError(f"Executable not found for {description or cmd[0]}: {cmd[0]}") from e
    except subprocess.TimeoutExpired as e:
        raise ExternalToolError(
            f"{description or cmd[0]} timed out after {timeout:.0f}s"
        ) from e

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        logger.error(f"{description or cmd[0]} stderr: {stderr[-1000:]}")
        raise ExternalToolError(
            f"{description or cmd[0]} failed with exit code {result.returncode}: {stderr[:500]}"
        )

    return result
