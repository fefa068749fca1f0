"""
Structured logging configuration for the queue producer.

Uses structlog for structured, context-aware logging with:
- JSON output for production
- Pretty console output for development
- Request ID and queue propagation through context variables
- Credential redaction for broker URLs
"""

import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Generator
from urllib.parse import urlsplit, urlunsplit

import structlog
from structlog.types import Processor

# Context variables for request-scoped data
_request_id: ContextVar[str | None] = ContextVar('request_id', default=None)
_queue: ContextVar[str | None] = ContextVar('queue', default=None)


def get_request_id() -> str | None:
    """Get the current request ID from context."""
    return _request_id.get()


def get_queue() -> str | None:
    """Get the current target queue from context."""
    return _queue.get()


def add_context_info(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Processor that adds context variables to log entries."""
    request_id = get_request_id()
    queue = get_queue()

    if request_id:
        event_dict['request_id'] = request_id
    if queue:
        event_dict['queue'] = queue

    return event_dict


def configure_logging(
    json_output: bool = False,
    log_level: str | None = None,
) -> None:
    """
    Configure structlog for the application.

    Args:
        json_output: If True, output JSON logs (for production).
                    If False, output pretty console logs (for development).
        log_level: Override log level (defaults to the LOG_LEVEL env var)
    """
    level = log_level or os.getenv('LOG_LEVEL', 'INFO')
    level_num = getattr(logging, level.upper(), logging.INFO)

    # Standard library logging config
    logging.basicConfig(
        format='%(message)s',
        stream=sys.stdout,
        level=level_num,
    )

    # Shared processors
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_context_info,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='iso'),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        # Production: JSON output
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        # Development: Pretty console output
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def logging_context(
    request_id: str | None = None,
    queue: str | None = None,
) -> Generator[None, None, None]:
    """
    Context manager for setting logging context variables.

    Usage:
        with logging_context(request_id="abc123", queue="orders"):
            logger.info("publish.start")  # Includes request_id and queue
    """
    old_request = _request_id.get()
    old_queue = _queue.get()

    try:
        if request_id is not None:
            _request_id.set(request_id)
        if queue is not None:
            _queue.set(queue)
        yield
    finally:
        _request_id.set(old_request)
        _queue.set(old_queue)


def redact_url(url: str | None) -> str | None:
    """Mask the password embedded in a URL's user-info component."""
    if not url:
        return url
    parts = urlsplit(url)
    userinfo, sep, hostport = parts.netloc.rpartition('@')
    if not sep:
        return url
    username = userinfo.split(':', 1)[0]
    return urlunsplit(parts._replace(netloc=f"{username}:***@{hostport}"))


# Initialize logging on module import (development mode by default)
# Production deployments should call configure_logging(json_output=True)
configure_logging(json_output=False)
