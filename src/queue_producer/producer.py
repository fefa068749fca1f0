"""
Publishes messages to ActiveMQ queues through the broker REST API.

QueueProducer keeps the URL of the broker it believes is the active master.
Every publish reuses that URL; when the broker stops answering, the producer
asks the resolver for the current master and, attempts permitting, delivers
again to the new one.

Per publish call:

    ATTEMPTING -> DELIVERED
    ATTEMPTING -> RESOLVING -> ATTEMPTING   (transport error, >1 candidate)
    ATTEMPTING -> RESOLVING -> FAILED       (no master found)
    ATTEMPTING -> FAILED                    (attempts exhausted)
"""

import threading
from typing import Iterable
from urllib.parse import quote

import httpx
import structlog

from .config import ProducerSettings
from .errors import (
    BrokerResolutionError,
    ConfigurationError,
    InvalidQueueNameError,
    InvalidTemplateError,
    ProducerNotInitializedError,
    wrap_transport_error,
)
from .failover import (
    QUEUE_FIELD,
    FailoverResolver,
    Resolver,
    validate_broker_url,
    validate_template,
)
from .logging import redact_url
from .models import (
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_OK,
    BrokerEndpoint,
    Credentials,
    PublishOutcome,
    PublishResult,
)

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 2
CONTENT_TYPE = 'application/json'


class QueueProducer:
    """
    Message producer with master failover.

    The cached broker URL is the only mutable state. It is read under
    ``_url_lock``; refreshes are serialized by ``_refresh_lock`` so that
    concurrent callers failing against the same broker trigger a single
    resolution.
    """

    def __init__(
        self,
        url_template: str,
        credentials: Credentials,
        endpoints: Iterable[BrokerEndpoint],
        *,
        resolver: Resolver | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Args:
            url_template: Broker URL template with username, password, host and queue fields
            credentials: Broker user and password
            endpoints: Candidate brokers of the cluster
            resolver: Master discovery callable (defaults to FailoverResolver)
            max_attempts: Delivery attempts per publish call; 1 disables retry
            timeout_seconds: HTTP timeout for each delivery attempt
            transport: Optional httpx transport shared by every delivery attempt
        """
        validate_template(url_template)
        self.endpoints = tuple(endpoints)
        if not self.endpoints:
            raise ConfigurationError("At least one broker endpoint is required")
        if max_attempts < 1:
            raise ConfigurationError(
                "max_attempts must be at least 1", context={'max_attempts': max_attempts}
            )

        self.url_template = url_template
        self.credentials = credentials
        self.max_attempts = max_attempts
        self.timeout_seconds = timeout_seconds
        self._resolver: Resolver = resolver or FailoverResolver()
        self._transport = transport

        self._broker_url: str | None = None
        self._url_lock = threading.Lock()
        self._refresh_lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: ProducerSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> 'QueueProducer':
        """Build a producer and its resolver from environment settings."""
        resolver = FailoverResolver(
            broker_name=settings.BROKER_NAME,
            timeout_seconds=settings.PROBE_TIMEOUT_SECONDS,
            transport=transport,
        )
        return cls(
            settings.BROKER_URL_FORMAT,
            settings.credentials,
            settings.endpoints,
            resolver=resolver,
            max_attempts=settings.MAX_ATTEMPTS,
            timeout_seconds=settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )

    @property
    def active_broker_url(self) -> str | None:
        """URL of the broker currently believed to be the master, with the queue slot unfilled."""
        with self._url_lock:
            return self._broker_url

    @property
    def is_initialized(self) -> bool:
        return self.active_broker_url is not None

    @property
    def has_failover(self) -> bool:
        """Failover only makes sense with more than one candidate."""
        return len(self.endpoints) > 1

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def initialize(self) -> str:
        """
        Find the master broker before the producer starts accepting messages.

        Returns:
            The resolved broker URL

        Raises:
            BrokerResolutionError: If an active broker is not found for any reason.
                The producer stays unusable.
        """
        url = self._resolve()
        with self._url_lock:
            self._broker_url = url
        logger.info(
            'producer.initialized',
            broker=redact_url(url),
            candidates=len(self.endpoints),
            max_attempts=self.max_attempts,
        )
        return url

    def _resolve(self) -> str:
        try:
            url = self._resolver(
                self.url_template,
                self.credentials.username,
                self.credentials.password,
                self.endpoints,
            )
        except BrokerResolutionError:
            raise
        except Exception as e:
            raise BrokerResolutionError(
                f"Failed to get an active message queue broker: {e}",
                context={'error_type': type(e).__name__},
            ) from e

        try:
            validate_broker_url(url)
        except InvalidTemplateError as e:
            raise BrokerResolutionError(
                e.message, context={'broker': redact_url(url), **e.context}
            ) from e
        return url

    def _refresh(self, failed_url: str) -> str:
        """
        Replace ``failed_url`` with the current master.

        If another caller already replaced it while we waited for the
        refresh lock, its result is reused instead of resolving again.
        """
        with self._refresh_lock:
            current = self.active_broker_url
            if current != failed_url:
                logger.debug('failover.already_refreshed', broker=redact_url(current))
                return current

            url = self._resolve()
            with self._url_lock:
                self._broker_url = url
            logger.info(
                'failover.refreshed',
                previous=redact_url(failed_url),
                broker=redact_url(url),
            )
            return url

    # =========================================================================
    # Publishing
    # =========================================================================

    def send(self, message: bytes | str, queue_name: str) -> PublishResult:
        """
        Publish one message to one queue and report how it went.

        Transport failures trigger re-resolution of the master when more than
        one candidate exists. A non-200 answer is returned as REJECTED and is
        retried against the same broker while attempts remain.

        Raises:
            InvalidQueueNameError: If queue_name is empty
            ProducerNotInitializedError: If initialize() has not succeeded
        """
        if not queue_name or not queue_name.strip():
            raise InvalidQueueNameError("Queue name must not be empty")

        broker_url = self.active_broker_url
        if broker_url is None:
            raise ProducerNotInitializedError(
                "Producer has no active broker; initialize() must succeed first"
            )

        body = message.encode('utf-8') if isinstance(message, str) else bytes(message)
        log = logger.bind(queue=queue_name, size=len(body))

        result = PublishResult(
            outcome=PublishOutcome.TRANSPORT_ERROR,
            status_code=HTTP_INTERNAL_SERVER_ERROR,
            attempts=0,
        )
        for attempt in range(1, self.max_attempts + 1):
            url = broker_url.format(**{QUEUE_FIELD: quote(queue_name, safe='')})
            try:
                with httpx.Client(timeout=self.timeout_seconds, transport=self._transport) as client:
                    response = client.post(
                        url, content=body, headers={'Content-Type': CONTENT_TYPE}
                    )
            except httpx.RequestError as e:
                error = wrap_transport_error(
                    e, context={'broker': redact_url(broker_url), 'attempt': attempt}
                )
                log.error('publish.transport_error', attempt=attempt, error=str(error))
                result = PublishResult(
                    outcome=PublishOutcome.TRANSPORT_ERROR,
                    status_code=HTTP_INTERNAL_SERVER_ERROR,
                    attempts=attempt,
                    error=str(error),
                )

                # If there's only one broker host, there's no failover
                if self.has_failover:
                    try:
                        broker_url = self._refresh(broker_url)
                    except BrokerResolutionError as e:
                        log.error('publish.resolution_failed', attempt=attempt, error=str(e))
                        return PublishResult(
                            outcome=PublishOutcome.RESOLUTION_ERROR,
                            status_code=HTTP_INTERNAL_SERVER_ERROR,
                            attempts=attempt,
                            error=str(e),
                        )
                continue

            if response.status_code == HTTP_OK:
                log.debug('publish.delivered', attempt=attempt)
                return PublishResult(
                    outcome=PublishOutcome.DELIVERED,
                    status_code=response.status_code,
                    attempts=attempt,
                )

            log.warning('publish.rejected', attempt=attempt, status_code=response.status_code)
            result = PublishResult(
                outcome=PublishOutcome.REJECTED,
                status_code=response.status_code,
                attempts=attempt,
                error=f"HTTP {response.status_code}",
            )

        return result

    def publish(self, message: bytes | str, queue_name: str) -> int:
        """
        Publish one message and return the broker's HTTP status code.

        Both transport and resolution failures collapse into 500.
        """
        return self.send(message, queue_name).status_code
