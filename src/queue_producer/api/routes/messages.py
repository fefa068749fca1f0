"""POST /queues/{queue_name}/messages — publish the raw request body."""

import uuid

import structlog
from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from queue_producer.errors import InvalidQueueNameError, ProducerNotInitializedError
from queue_producer.logging import logging_context
from queue_producer.models import PublishOutcome

logger = structlog.get_logger(__name__)

router = APIRouter()

_OUTCOME_STATUS = {
    PublishOutcome.TRANSPORT_ERROR: 502,
    PublishOutcome.RESOLUTION_ERROR: 503,
}


@router.post("/queues/{queue_name}/messages")
async def publish_message(queue_name: str, request: Request):
    """Publish the request body to ``queue_name`` and relay the broker's answer."""
    producer = request.app.state.producer
    body = await request.body()
    request_id = request.headers.get('x-request-id') or str(uuid.uuid4())

    with logging_context(request_id=request_id, queue=queue_name):
        try:
            # publish blocks on the broker round trip
            result = await run_in_threadpool(producer.send, body, queue_name)
        except InvalidQueueNameError as e:
            raise HTTPException(status_code=422, detail=e.message)
        except ProducerNotInitializedError as e:
            raise HTTPException(status_code=503, detail=e.message)

        logger.info(
            'messages.published',
            outcome=result.outcome.value,
            status_code=result.status_code,
            attempts=result.attempts,
        )

    status_code = _OUTCOME_STATUS.get(result.outcome, result.status_code)
    return JSONResponse(
        status_code=status_code,
        content={"queue": queue_name, **result.to_dict()},
    )
