"""FastAPI application exposing the queue producer over HTTP."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from queue_producer.config import get_settings
from queue_producer.logging import configure_logging
from queue_producer.producer import QueueProducer

from .routes.health import router as health_router
from .routes.messages import router as messages_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Resolve the master broker before accepting requests."""
    settings = get_settings()
    configure_logging(json_output=settings.LOG_JSON, log_level=settings.LOG_LEVEL)

    logger.info('lifespan.startup', brokers=settings.BROKER_HOSTS)

    producer = QueueProducer.from_settings(settings)
    # BrokerResolutionError propagates: no master means the service must not start
    producer.initialize()

    # Store on app.state for request handlers
    app.state.producer = producer

    logger.info('lifespan.ready')
    yield

    logger.info('lifespan.shutdown')


app = FastAPI(
    title="queue-failover-producer",
    description="Publishes messages to ActiveMQ queues with master failover",
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(messages_router)
