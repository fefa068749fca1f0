"""
Tests for the errors module.
"""

import httpx

from queue_producer.errors import (
    BrokerError,
    BrokerResolutionError,
    BrokerTransportError,
    ConfigurationError,
    InvalidQueueNameError,
    InvalidTemplateError,
    ProducerError,
    ProducerNotInitializedError,
    wrap_transport_error,
)


class TestErrorHierarchy:
    """Test error class hierarchy."""

    def test_base_error_with_context(self):
        """Test that base error captures context."""
        error = ProducerError(
            "Something went wrong",
            context={"broker": "a:8161", "attempt": 2},
        )

        assert error.message == "Something went wrong"
        assert error.context == {"broker": "a:8161", "attempt": 2}
        assert "broker" in str(error)

    def test_base_error_without_context(self):
        """Test error without context."""
        error = ProducerError("Simple error")

        assert error.message == "Simple error"
        assert error.context == {}
        assert str(error) == "Simple error"

    def test_usage_error_inheritance(self):
        assert isinstance(InvalidTemplateError("bad"), ConfigurationError)
        assert isinstance(ConfigurationError("bad"), ProducerError)
        assert isinstance(ConfigurationError("bad"), ValueError)
        assert isinstance(InvalidTemplateError("bad"), ValueError)
        assert isinstance(ProducerNotInitializedError("early"), ProducerError)
        assert isinstance(InvalidQueueNameError("empty"), ProducerError)

    def test_broker_error_inheritance(self):
        assert isinstance(BrokerResolutionError("no master"), BrokerError)
        assert isinstance(BrokerTransportError("refused"), BrokerError)
        assert isinstance(BrokerError("broker"), ProducerError)


class TestErrorWrapping:
    """Test error wrapping utilities."""

    def test_wrap_connect_error(self):
        request = httpx.Request("POST", "http://a:8161/api/message")
        original = httpx.ConnectError("Connection refused", request=request)

        wrapped = wrap_transport_error(original, context={"attempt": 1})

        assert isinstance(wrapped, BrokerTransportError)
        assert wrapped.context["error_type"] == "ConnectError"
        assert wrapped.context["original_error"] == "Connection refused"
        assert wrapped.context["attempt"] == 1
        assert "ConnectError" in wrapped.message

    def test_wrap_timeout(self):
        original = httpx.ReadTimeout("timed out")

        wrapped = wrap_transport_error(original)

        assert wrapped.context["error_type"] == "ReadTimeout"
