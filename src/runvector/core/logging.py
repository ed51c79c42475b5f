"""
Structured logging for runvector.

Library modules only call :func:`get_logger`; whoever owns the process (the
CLI, or an embedding application) picks the output format once with
:func:`configure_logging`. Output always goes to stderr so stdout stays
reserved for argument vectors.

Usage:
    from runvector.core.logging import get_logger

    logger = get_logger(__name__)
    logger.info("translation.completed", image="library/app:1.0", tokens=7)

JSON output (ECS field names)::

    {"@timestamp": "2026-10-19T10:00:00Z", "log.level": "info",
     "service.name": "runvector", "event": "translation.completed", ...}

Tags:
    logging, structlog, ecs, runvector
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_ECS_RENAMES = {"timestamp": "@timestamp", "level": "log.level"}


def _service_tagger(service: str) -> Processor:
    def tag(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", service)
        return event_dict

    return tag


def _ecs_field_names(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    for old, new in _ECS_RENAMES.items():
        if old in event_dict:
            event_dict[new] = event_dict.pop(old)
    return event_dict


def configure_logging(
    level: str = "WARNING",
    json_format: bool | None = None,
    service: str = "runvector",
    add_timestamp: bool = True,
) -> None:
    """Configure structlog for the whole process.

    Args:
        level: minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON lines when True, console rendering when False,
            JSON whenever stderr is not a terminal when None
        service: value of the ``service.name`` field
        add_timestamp: prepend an ISO timestamp
    """
    if json_format is None:
        json_format = not sys.stderr.isatty()

    processors: list[Processor] = []
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors += [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _service_tagger(service),
    ]
    if json_format:
        processors += [_ecs_field_names, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        # CliRunner and pytest swap sys.stderr between invocations
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every log line emitted in the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


class LogContext:
    """Bind fields for the duration of a ``with`` block.

    Example:
        with LogContext(run_id="abc123"):
            result = translate(spec)
    """

    def __init__(self, **fields: Any):
        self._fields = fields

    def __enter__(self) -> LogContext:
        bind_context(**self._fields)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        unbind_context(*self._fields)


__all__ = [
    "LogContext",
    "bind_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
]
