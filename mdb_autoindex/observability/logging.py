"""
Enhanced logging utilities for MDB_AUTOINDEX.

Provides structured logging with correlation IDs and per-watcher context.
"""

import contextvars
import logging
import uuid
from datetime import datetime
from typing import Any

# Context variable for correlation ID
_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)


def get_correlation_id() -> str | None:
    """Get the current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """
    Set a correlation ID in the current context.

    Args:
        correlation_id: Optional correlation ID (generates new one if None)

    Returns:
        The correlation ID that was set
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
    _correlation_id.set(correlation_id)
    return correlation_id


def clear_correlation_id() -> None:
    """Clear the correlation ID from context."""
    _correlation_id.set(None)


def get_logging_context() -> dict[str, Any]:
    """
    Get current logging context (timestamp and correlation ID).

    Returns:
        Dictionary with context information
    """
    context: dict[str, Any] = {
        "timestamp": datetime.now().isoformat(),
    }

    correlation_id = get_correlation_id()
    if correlation_id:
        context["correlation_id"] = correlation_id

    return context


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that automatically adds context to log records.

    The adapter's own ``extra`` (e.g. the collection a watcher owns) is
    merged with the ambient context and any per-call ``extra``.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Add context to log records."""
        context = get_logging_context()
        if self.extra:
            context.update(self.extra)

        extra = kwargs.get("extra", {})
        if extra:
            context.update(extra)

        kwargs["extra"] = context
        return msg, kwargs


def get_logger(name: str, **context: Any) -> ContextualLoggerAdapter:
    """
    Get a contextual logger that automatically adds correlation ID and context.

    Args:
        name: Logger name (typically __name__)
        **context: Fixed context attached to every record (collection_name, ...)

    Returns:
        ContextualLoggerAdapter instance
    """
    base_logger = logging.getLogger(name)
    return ContextualLoggerAdapter(base_logger, context)
