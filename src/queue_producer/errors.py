"""
Custom exceptions for the queue producer.

Provides:
- Typed exception hierarchy for configuration, resolution and transport failures
- Error context preservation for debugging
- Wrapping of httpx transport exceptions
"""

from typing import Any


class ProducerError(Exception):
    """Base exception for all queue producer errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


# =============================================================================
# Usage Errors
# =============================================================================


class ConfigurationError(ProducerError, ValueError):
    """Producer was constructed with unusable settings."""

    pass


class InvalidTemplateError(ConfigurationError):
    """Broker URL template is missing a required substitution field."""

    pass


class ProducerNotInitializedError(ProducerError):
    """publish() was called before initialize() succeeded."""

    pass


class InvalidQueueNameError(ProducerError):
    """Queue name is empty."""

    pass


# =============================================================================
# Broker Errors
# =============================================================================


class BrokerError(ProducerError):
    """Base class for broker-related errors."""

    pass


class BrokerResolutionError(BrokerError):
    """None of the candidate brokers answered as the active master."""

    pass


class BrokerTransportError(BrokerError):
    """Connection or I/O failure while talking to a broker."""

    pass


# =============================================================================
# Error Handling Utilities
# =============================================================================


def wrap_transport_error(
    exc: Exception, context: dict[str, Any] | None = None
) -> BrokerTransportError:
    """
    Wrap an httpx transport exception in our typed error hierarchy.

    Args:
        exc: The original exception
        context: Additional context for debugging

    Returns:
        BrokerTransportError carrying the original error type and text
    """
    ctx = context or {}
    ctx['original_error'] = str(exc)
    ctx['error_type'] = type(exc).__name__

    return BrokerTransportError(
        f"Broker transport failed: {type(exc).__name__}: {exc}",
        context=ctx,
    )
