"""Structured logging utilities using structlog for verification-stage context."""

import sys
import uuid
from typing import Any, Optional

import structlog
from structlog.contextvars import merge_contextvars
from structlog.processors import JSONRenderer

from event_trust.config.settings import settings

IS_TTY = sys.stderr.isatty()
LOG_FORMAT = settings.log_format.lower()
LOG_LEVEL = settings.log_level.upper()


def configure_structured_logging() -> None:
    """
    Configure structured logging with appropriate processors and renderers.

    Uses:
    - Console renderer for development (colorized, human-readable)
    - JSON renderer for production (structured, machine-readable)
    - Context binding for batch correlation ids
    """
    processors = [
        merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if IS_TTY and LOG_FORMAT == "console":
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    else:
        processors.append(JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_structured_logger(
    name: str,
    **additional_context: Any,
) -> structlog.BoundLogger:
    """
    Get a structured logger bound to a component name.

    Args:
        name: Component name
        **additional_context: Additional context to bind

    Returns:
        Configured BoundLogger instance with context

    Example:
        >>> logger = get_structured_logger("CorroborationAgent")
        >>> logger.info("event_verified", title="Jazz Night", verified=True)
    """
    logger = structlog.get_logger().bind(component=name)
    if additional_context:
        logger = logger.bind(**additional_context)
    return logger


def get_correlation_id() -> str:
    """Generate a correlation ID for tracing one verification batch."""
    return str(uuid.uuid4())


def bind_batch_context(correlation_id: Optional[str] = None) -> str:
    """
    Bind a correlation id to every structlog record emitted in this context.

    Args:
        correlation_id: Existing id to reuse, or None to generate one

    Returns:
        The bound correlation id
    """
    correlation_id = correlation_id or get_correlation_id()
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)
    return correlation_id


def clear_batch_context() -> None:
    """Drop batch-scoped context bound by bind_batch_context."""
    structlog.contextvars.unbind_contextvars("correlation_id")


configure_structured_logging()

__all__ = [
    "get_structured_logger",
    "get_correlation_id",
    "bind_batch_context",
    "clear_batch_context",
    "configure_structured_logging",
]
