"""Tests for the /health endpoint."""

from unittest.mock import MagicMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from queue_producer.api.routes.health import router


def _make_app(producer=None) -> FastAPI:
    app = FastAPI()
    app.include_router(router)
    if producer is not None:
        app.state.producer = producer
    return app


class TestHealthRoute:
    def test_health_ok(self):
        producer = MagicMock()
        producer.is_initialized = True
        producer.active_broker_url = 'http://admin:admin@a:8161/api/message?destination=queue://{queue}'
        client = TestClient(_make_app(producer))

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "active_broker": 'http://admin:***@a:8161/api/message?destination=queue://{queue}',
        }

    def test_health_not_initialized(self):
        producer = MagicMock()
        producer.is_initialized = False
        client = TestClient(_make_app(producer))

        response = client.get("/health")

        assert response.status_code == 503

    def test_health_without_producer(self):
        client = TestClient(_make_app())

        response = client.get("/health")

        assert response.status_code == 503
