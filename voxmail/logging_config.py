"""
Structured logging configuration using structlog wrapping stdlib.

JSON output in production (VOXMAIL_LOG_FORMAT=json), console output
otherwise. Modules keep logging through ``logging.getLogger(__name__)``;
the ProcessorFormatter renders both stdlib and structlog records.

Usage:
    from voxmail.logging_config import setup_logging
    setup_logging()
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

# Third-party loggers that are noisy at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "multipart", "uvicorn.access")


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    if level is None:
        level = os.environ.get("VOXMAIL_LOG_LEVEL", "INFO")

    if json_output is None:
        json_output = os.environ.get("VOXMAIL_LOG_FORMAT", "").lower() == "json"

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(**values: object) -> None:
    """Attach values (request id, user id) to every log line of this task."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = ["bind_request_context", "clear_request_context", "get_logger", "setup_logging"]
