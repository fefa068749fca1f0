"""
Queue Failover Producer

Publishes messages to ActiveMQ queues over the broker REST API and
rediscovers the active master when the known broker stops answering.
"""

__version__ = '0.1.0'

# Re-export key classes for convenience
from .producer import QueueProducer
from .failover import FailoverResolver, resolve_active_broker
from .models import (
    BrokerEndpoint,
    Credentials,
    PublishOutcome,
    PublishResult,
)
from .config import ProducerSettings, get_settings
from .logging import (
    configure_logging,
    logging_context,
)
from .errors import (
    ProducerError,
    ConfigurationError,
    InvalidTemplateError,
    ProducerNotInitializedError,
    InvalidQueueNameError,
    BrokerError,
    BrokerResolutionError,
    BrokerTransportError,
)

__all__ = [
    # Version
    '__version__',
    # Producer
    'QueueProducer',
    'FailoverResolver',
    'resolve_active_broker',
    # Models
    'BrokerEndpoint',
    'Credentials',
    'PublishOutcome',
    'PublishResult',
    # Config
    'ProducerSettings',
    'get_settings',
    # Logging
    'configure_logging',
    'logging_context',
    # Errors
    'ProducerError',
    'ConfigurationError',
    'InvalidTemplateError',
    'ProducerNotInitializedError',
    'InvalidQueueNameError',
    'BrokerError',
    'BrokerResolutionError',
    'BrokerTransportError',
]
