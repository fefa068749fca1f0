"""
Pytest configuration and shared fixtures.

Key fixtures:
- credentials: admin/admin broker credentials
- template: default broker URL template
- single_endpoint / cluster_endpoints: candidate broker lists
- StubResolver: resolver double that records every call

Brokers are simulated with httpx.MockTransport; no ActiveMQ is required.
"""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from queue_producer.config import DEFAULT_BROKER_URL_FORMAT
from queue_producer.errors import BrokerResolutionError
from queue_producer.failover import build_broker_url
from queue_producer.models import BrokerEndpoint, Credentials


class StubResolver:
    """
    Resolver double returning the URL of each host in ``hosts`` in turn.

    A ``None`` entry makes that call raise BrokerResolutionError. The last
    entry is repeated once the list is exhausted.
    """

    def __init__(self, *hosts: str | None):
        self.hosts = list(hosts)
        self.calls: list[tuple] = []

    def __call__(self, template, username, password, endpoints):
        self.calls.append((template, username, password, tuple(endpoints)))
        index = min(len(self.calls), len(self.hosts)) - 1
        host = self.hosts[index]
        if host is None:
            raise BrokerResolutionError("No active message queue broker found")
        return build_broker_url(template, username, password, host)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(username='admin', password='admin')


@pytest.fixture
def template() -> str:
    return DEFAULT_BROKER_URL_FORMAT


@pytest.fixture
def single_endpoint() -> tuple[BrokerEndpoint, ...]:
    return (BrokerEndpoint('a', 8161),)


@pytest.fixture
def cluster_endpoints() -> tuple[BrokerEndpoint, ...]:
    return (BrokerEndpoint('a', 8161), BrokerEndpoint('b', 8161))
