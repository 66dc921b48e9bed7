"""Structured (JSON) logging for slidecast runs.

Every event carries the stage that emitted it, so logs from ``images`` and
``speech`` runs appended to the same collector can be told apart.
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

import structlog

current_stage: ContextVar[Optional[str]] = ContextVar("current_stage", default=None)


def add_stage(_logger, _method_name, event_dict):
    stage = current_stage.get()
    if stage:
        event_dict.setdefault("stage", stage)
    return event_dict


def _pre_chain() -> list:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_stage,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]


def setup_logging(log_level: str = "INFO", json_output: bool = True) -> logging.Handler:
    """Route stdlib logging through structlog renderers.

    Modules keep using ``logging.getLogger(__name__)``; only the root handler
    changes.

    Args:
        log_level: Logging level name
        json_output: One JSON object per line when True, key=value console lines otherwise

    Returns:
        The installed root handler
    """
    renderer = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper()))
    return handler


@contextmanager
def stage_context(stage: str) -> Iterator[None]:
    """Tag every log event emitted inside the block with ``stage``."""
    token = current_stage.set(stage)
    try:
        yield
    finally:
        current_stage.reset(token)
