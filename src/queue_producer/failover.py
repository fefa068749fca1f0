"""
ActiveMQ master discovery.

In a master/slave cluster every broker runs its web console, but only the
master accepts messages. Each candidate is asked through Jolokia whether it
is a slave; the first one answering ``false`` is the active master.

The producer only depends on the resolver contract:

    resolver(template, username, password, endpoints) -> broker URL

raising BrokerResolutionError when no candidate answers as master.
"""

from string import Formatter
from typing import Callable, Sequence
from urllib.parse import quote

import httpx
import structlog

from .errors import BrokerResolutionError, InvalidTemplateError
from .models import BrokerEndpoint

logger = structlog.get_logger(__name__)

QUEUE_FIELD = 'queue'
RESOLUTION_FIELDS = ('username', 'password', 'host')

SLAVE_ATTRIBUTE_PATH = (
    '/api/jolokia/read/org.apache.activemq:type=Broker,brokerName={broker_name}/Slave'
)

Resolver = Callable[[str, str, str, Sequence[BrokerEndpoint]], str]


def _template_fields(template: str) -> list[str]:
    """Field names of a format template; literal braces are rejected."""
    try:
        parsed = list(Formatter().parse(template))
    except ValueError as e:
        raise InvalidTemplateError(
            f"Malformed broker URL template: {e}", context={'template': template}
        ) from e

    fields: list[str] = []
    for literal, field_name, _spec, _conv in parsed:
        if '{' in literal or '}' in literal:
            raise InvalidTemplateError(
                "Broker URL template must not contain literal braces",
                context={'template': template},
            )
        if field_name is not None:
            fields.append(field_name)
    return fields


def validate_template(template: str) -> None:
    """
    Check that a broker URL template can be resolved and then published to.

    The template must name ``{username}``, ``{password}`` and ``{host}``, and
    contain exactly one ``{queue}`` slot. Literal braces are not allowed
    because the template is formatted twice.
    """
    fields = _template_fields(template)

    missing = [name for name in RESOLUTION_FIELDS if name not in fields]
    unknown = sorted(set(fields) - set(RESOLUTION_FIELDS) - {QUEUE_FIELD})
    queue_slots = fields.count(QUEUE_FIELD)

    if missing or unknown or queue_slots != 1:
        raise InvalidTemplateError(
            "Broker URL template needs username, password and host fields "
            "and exactly one queue slot",
            context={
                'template': template,
                'missing': missing,
                'unknown': unknown,
                'queue_slots': queue_slots,
            },
        )


def build_broker_url(template: str, username: str, password: str, host: str) -> str:
    """Substitute credentials and host, keeping the ``{queue}`` slot for publish time."""
    return template.format(
        username=quote(username, safe=''),
        password=quote(password, safe=''),
        host=host,
        queue='{' + QUEUE_FIELD + '}',
    )


def validate_broker_url(url: str) -> None:
    """Check that a resolved broker URL has exactly one ``{queue}`` slot and no other field."""
    fields = _template_fields(url)
    if fields != [QUEUE_FIELD]:
        raise InvalidTemplateError(
            "Resolved broker URL must contain exactly one queue slot and no other field",
            context={'fields': fields},
        )


class FailoverResolver:
    """
    Finds the active master among a fixed set of ActiveMQ brokers.

    Instances are callable with the resolver contract signature, so a
    FailoverResolver can be handed straight to QueueProducer.
    """

    def __init__(
        self,
        broker_name: str = 'localhost',
        timeout_seconds: float = 3.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Args:
            broker_name: ActiveMQ brokerName used in the Jolokia MBean path
            timeout_seconds: Per-probe HTTP timeout
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.broker_name = broker_name
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def __call__(
        self,
        template: str,
        username: str,
        password: str,
        endpoints: Sequence[BrokerEndpoint],
    ) -> str:
        return self.resolve(template, username, password, endpoints)

    def resolve(
        self,
        template: str,
        username: str,
        password: str,
        endpoints: Sequence[BrokerEndpoint],
    ) -> str:
        """
        Probe every candidate in order and build the URL of the first master.

        Raises:
            InvalidTemplateError: If the template cannot be resolved
            BrokerResolutionError: If no candidate answers as master
        """
        validate_template(template)
        if not endpoints:
            raise BrokerResolutionError("No broker endpoints configured")

        failures: dict[str, str] = {}
        with httpx.Client(
            timeout=self.timeout_seconds,
            auth=(username, password),
            transport=self._transport,
        ) as client:
            for endpoint in endpoints:
                reason = self._probe(client, endpoint)
                if reason is None:
                    logger.info('failover.resolved', broker=str(endpoint))
                    return build_broker_url(template, username, password, str(endpoint))
                failures[str(endpoint)] = reason
                logger.debug('failover.candidate_rejected', broker=str(endpoint), reason=reason)

        logger.error('failover.no_master', candidates=list(failures))
        raise BrokerResolutionError(
            "No active message queue broker found",
            context={'candidates': failures},
        )

    def _probe(self, client: httpx.Client, endpoint: BrokerEndpoint) -> str | None:
        """Return None when the endpoint is the master, otherwise why it is not."""
        base = f"http://{endpoint}"
        url = base + SLAVE_ATTRIBUTE_PATH.format(broker_name=self.broker_name)
        try:
            # Jolokia strict checking rejects requests without an Origin header
            response = client.get(url, headers={'Origin': base})
        except httpx.RequestError as e:
            return f"{type(e).__name__}: {e}"

        if response.status_code != 200:
            return f"HTTP {response.status_code}"

        try:
            body = response.json()
        except ValueError:
            return "unparsable Jolokia response"

        if not isinstance(body, dict):
            return "unparsable Jolokia response"
        if body.get('status', 200) != 200:
            return f"Jolokia status {body.get('status')}"
        if body.get('value') is not False:
            return "broker is a slave"
        return None


def resolve_active_broker(
    template: str,
    username: str,
    password: str,
    endpoints: Sequence[BrokerEndpoint],
) -> str:
    """Resolve with a default FailoverResolver."""
    return FailoverResolver()(template, username, password, endpoints)
