"""Structured logging utility with per-build correlation IDs."""

from __future__ import annotations

import logging
import os
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

import structlog

# Context variable tying together all log lines of one build
build_id_var: ContextVar[str] = ContextVar("build_id", default="")

LOG_LEVEL_ENV = "BINTEST_LOG_LEVEL"
LOG_FORMAT_ENV = "BINTEST_LOG_FORMAT"


def new_build_id() -> str:
    """Generate a fresh build ID and make it current."""
    bid = str(uuid.uuid4())[:8]
    build_id_var.set(bid)
    return bid


def add_context_info(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add the build ID to log events."""
    bid = build_id_var.get()
    if bid:
        event_dict["build_id"] = bid
    return event_dict


def add_timestamp(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add ISO format timestamp to log events."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


class _CurrentStderr:
    """Writes to whatever sys.stderr is at the time of writing."""

    def write(self, text: str) -> int:
        return sys.stderr.write(text)

    def flush(self) -> None:
        sys.stderr.flush()

    def isatty(self) -> bool:
        return sys.stderr.isatty()


def configure_logging(
    level: str = "info",
    format_type: str = "text",
    stream: Any = None,
) -> None:
    """
    Configure structured logging.

    Args:
        level: Log level (debug, info, warn, error)
        format_type: Output format ('json' or 'text')
        stream: Output stream (default: the current sys.stderr)
    """
    if stream is None:
        stream = _CurrentStderr()

    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warn": logging.WARNING,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }
    log_level = level_map.get(level.lower(), logging.INFO)

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        add_timestamp,
        add_context_info,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if format_type == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        isatty = getattr(stream, "isatty", None)
        colors = bool(isatty and isatty())
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(stream),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a logger instance.

    The returned logger stays lazy until first use, so a later
    configure_logging() call (for example from the CLI) still applies.

    Args:
        name: Optional logger name for context

    Returns:
        structlog logger
    """
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()


# Initialize from the environment on import
configure_logging(
    level=os.environ.get(LOG_LEVEL_ENV, "info"),
    format_type=os.environ.get(LOG_FORMAT_ENV, "text"),
)
