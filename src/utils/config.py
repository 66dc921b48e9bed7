"""Configuration loading and validation for slidecast."""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from rich.logging import RichHandler

from utils.errors import ConfigError

# Stages resolve relative paths against the directory they are started from
WORK_ROOT = Path.cwd()

# Load environment variables from .env file in the working directory
load_dotenv(WORK_ROOT / ".env")

DEFAULT_SD_COMMAND = "sd-z --cfg-scale 1 --clip-on-cpu --diffusion-fa --steps 8"
DEFAULT_SCENARIO_THEME = "SCP foundation in a post-Soviet setting with analog horror"

TTS_ENGINES = ("edge", "elevenlabs")


def _env_number(name: str, default: str, kind: type):
    """Read a numeric setting, naming the variable when its value does not parse."""
    raw = os.getenv(name, default)
    try:
        return kind(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{name} must be {kind.__name__}, got '{raw}'") from e


def load_config() -> dict:
    """Load configuration from environment variables.

    Raises:
        ConfigError: If a numeric setting cannot be parsed
    """

    # Helper function to resolve paths relative to the working directory
    def resolve_path(path: str | None, default_relative: str) -> str:
        if not path:
            return str(WORK_ROOT / default_relative)
        if Path(path).is_absolute():
            return path
        return str(WORK_ROOT / path)

    config = {
        # Scenario author (Gemini)
        "gemini_api_key": os.getenv("GEMINI_API_KEY"),
        "gemini_model": os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        "scenario_theme": os.getenv("SCENARIO_THEME", DEFAULT_SCENARIO_THEME),
        "narration_language": os.getenv("NARRATION_LANGUAGE", "Russian"),
        "slide_count": _env_number("SLIDE_COUNT", "5", int),
        # Timeline planning
        "slide_duration": _env_number("SLIDE_DURATION", "5", float),
        "fps": _env_number("FPS", "30", int),
        # Working directories
        "output_dir": resolve_path(os.getenv("OUTPUT_DIR"), "output"),
        "temp_dir": resolve_path(os.getenv("TEMP_DIR"), "temp"),
        # Image synthesis CLI (prompt, size and output are appended per call)
        "sd_command": os.getenv("SD_Z_COMMAND", DEFAULT_SD_COMMAND),
        "image_width": _env_number("IMAGE_WIDTH", "480", int),
        "image_height": _env_number("IMAGE_HEIGHT", "640", int),
        # Foreground/background segmentation CLI
        "segmentation_command": os.getenv("SEGMENTATION_COMMAND", "transparent-background"),
        "background_threshold": _env_number("BACKGROUND_THRESHOLD", "0.1", float),
        # Duration probe
        "ffprobe_command": os.getenv("FFPROBE_COMMAND", "ffprobe"),
        "command_timeout": _env_number("COMMAND_TIMEOUT", "1800", float),
        # Speech synthesis
        "tts_engine": os.getenv("TTS_ENGINE", "edge").strip().lower(),
        "tts_voice": os.getenv("TTS_VOICE", "ru-RU-DmitryNeural"),
        "elevenlabs_api_key": os.getenv("ELEVENLABS_API_KEY"),
        "elevenlabs_voice_id": os.getenv("ELEVENLABS_VOICE_ID", "JBFqnCBsd6RMkjVDRZzb"),
        "elevenlabs_model": os.getenv("ELEVENLABS_MODEL", "eleven_turbo_v2_5"),
        # Optional plain-text log file
        "log_file": os.getenv("LOG_FILE"),
    }

    return config


def validate_config(config: dict, stage: str) -> list[str]:
    """Validate configuration for one stage and return list of errors."""
    errors = []

    if stage == "scenario":
        if not config.get("gemini_api_key"):
            errors.append("GEMINI_API_KEY is required for scenario generation")
        if config.get("slide_count", 0) < 1:
            errors.append("SLIDE_COUNT must be at least 1")

    if stage in ("scenario", "images"):
        if config.get("slide_duration", 0) <= 0:
            errors.append("SLIDE_DURATION must be positive")

    if stage == "images":
        if config.get("image_width", 0) <= 0 or config.get("image_height", 0) <= 0:
            errors.append("IMAGE_WIDTH and IMAGE_HEIGHT must be positive")
        if not 0 <= config.get("background_threshold", 0) <= 1:
            errors.append("BACKGROUND_THRESHOLD must be between 0 and 1")

    if stage in ("images", "speech"):
        if config.get("fps", 0) <= 0:
            errors.append("FPS must be positive")

    if stage == "speech":
        engine = config.get("tts_engine")
        if engine not in TTS_ENGINES:
            errors.append(f"TTS_ENGINE must be one of {', '.join(TTS_ENGINES)}, got '{engine}'")
        elif engine == "elevenlabs" and not config.get("elevenlabs_api_key"):
            errors.append(
                "ELEVENLABS_API_KEY is required for TTS_ENGINE=elevenlabs "
                "(or use TTS_ENGINE=edge)"
            )

    return errors


def setup_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """Set up logging configuration with Rich for terminal output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_output: Emit structured JSON events via structlog instead of Rich
        log_file: Optional path for an additional plain-text log
    """
    if json_output:
        from utils.logging import setup_logging as setup_structured_logging

        setup_structured_logging(log_level, json_output=True)
    else:
        # Clear any existing handlers
        logging.root.handlers.clear()

        rich_handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            markup=False,  # Disable markup to avoid conflicts
        )

        logging.basicConfig(
            level=getattr(logging, log_level.upper()),
            handlers=[rich_handler],
            format="%(message)s",
        )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logging.getLogger().addHandler(file_handler)

    # Suppress noisy third-party loggers
    noisy_loggers = [
        "httpx",
        "httpcore",
        "google_genai",
        "google_genai.models",
        "PIL",
        "urllib3.connectionpool",
    ]

    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
