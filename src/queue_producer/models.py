"""
Data model for the queue producer.

BrokerEndpoint and Credentials are immutable once loaded from configuration.
PublishResult is the tagged outcome of a single publish call; its
``status_code`` is the legacy projection returned by QueueProducer.publish().
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

HTTP_OK = 200
HTTP_INTERNAL_SERVER_ERROR = 500


@dataclass(frozen=True)
class BrokerEndpoint:
    """One member of the broker cluster."""

    host: str
    port: int

    @classmethod
    def parse(cls, value: str) -> 'BrokerEndpoint':
        """Parse a ``host:port`` string."""
        host, sep, port = value.strip().rpartition(':')
        if not sep or not host or not port.isdigit():
            raise ValueError(f"Broker endpoint must be 'host:port', got {value!r}")
        return cls(host=host, port=int(port))

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def parse_endpoints(value: str) -> tuple[BrokerEndpoint, ...]:
    """Parse a comma separated list of ``host:port`` pairs, e.g. ``broker1:8161, broker2:8161``."""
    return tuple(BrokerEndpoint.parse(part) for part in value.split(',') if part.strip())


@dataclass(frozen=True)
class Credentials:
    """Broker user and plaintext password."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


class PublishOutcome(str, Enum):
    """How a publish call ended."""

    DELIVERED = 'delivered'
    REJECTED = 'rejected'
    TRANSPORT_ERROR = 'transport_error'
    RESOLUTION_ERROR = 'resolution_error'


@dataclass
class PublishResult:
    """Result of publishing one message to one queue."""

    outcome: PublishOutcome
    status_code: int
    attempts: int
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.outcome is PublishOutcome.DELIVERED

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging / API responses."""
        return {
            'outcome': self.outcome.value,
            'status_code': self.status_code,
            'attempts': self.attempts,
            'error': self.error,
        }
