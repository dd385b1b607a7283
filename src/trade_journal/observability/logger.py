"""Structured logging with session_id support.

Uses structlog for structured logging with console or JSON output.
Every log entry includes the session_id of the running journal session,
so lines from one CLI invocation can be grouped together.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

# Context var for session_id propagation
_session_id: ContextVar[str] = ContextVar("session_id", default="")


def get_session_id() -> str:
    """Get current session ID from context."""
    sid = _session_id.get()
    if not sid:
        sid = uuid.uuid4().hex[:12]
        _session_id.set(sid)
    return sid


def new_session_id() -> str:
    """Generate and set a new session ID."""
    sid = uuid.uuid4().hex[:12]
    _session_id.set(sid)
    return sid


def _add_session_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: add session_id to every log entry."""
    event_dict["session_id"] = get_session_id()
    return event_dict


def setup_logging(
    level: str = "WARNING",
    format: str = "console",
) -> None:
    """Configure structured logging for the application.

    Standard-library loggers used by the journal modules are routed through
    structlog's ``ProcessorFormatter`` so their records get the same
    rendering as structlog loggers.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format: "json" for machine-readable output, "console" for humans.
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _add_session_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)
