"""
Logging configuration and request-scoped log context.
"""
import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    """Get the request ID bound to the current context, or ''."""
    return request_id_var.get("")


def set_request_id(request_id: str) -> None:
    """Bind a request ID to the current context."""
    request_id_var.set(request_id)


@contextmanager
def request_scope(request_id: Optional[str] = None) -> Iterator[str]:
    """
    Bind a request ID for the duration of a block.

    Adapters wrap each incoming call in this so every log line and every
    ServiceError raised inside carries the same ID.
    """
    if not request_id:
        request_id = str(uuid.uuid4())[:8]
    token = request_id_var.set(request_id)
    try:
        yield request_id
    finally:
        request_id_var.reset(token)


class RequestIDFilter(logging.Filter):
    """Logging filter to add request ID to log records."""

    def filter(self, record):
        """Add request_id to log record if available."""
        if not getattr(record, "request_id", None):
            record.request_id = get_request_id() or "-"
        return True


class SafeFormatter(logging.Formatter):
    """Formatter that tolerates records without a request_id."""

    def format(self, record):
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return super().format(record)


def configure_logging(level: str = "INFO") -> logging.Handler:
    """
    Install a stream handler on the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)

    Returns:
        The installed handler
    """
    handler = logging.StreamHandler()
    handler.addFilter(RequestIDFilter())
    handler.setFormatter(SafeFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )
    return handler
