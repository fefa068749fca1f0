"""Health check endpoint."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from queue_producer.logging import redact_url

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    """Report the broker the producer currently publishes to."""
    producer = getattr(request.app.state, 'producer', None)
    if producer is None or not producer.is_initialized:
        return JSONResponse(status_code=503, content={"status": "unhealthy"})
    return {"status": "ok", "active_broker": redact_url(producer.active_broker_url)}
