"""Tests for the FastAPI app startup/shutdown and route wiring."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from queue_producer.errors import BrokerResolutionError


def _settings() -> MagicMock:
    return MagicMock(BROKER_HOSTS="a:8161,b:8161", LOG_LEVEL="INFO", LOG_JSON=False)


class TestAppLifespan:
    @patch("queue_producer.api.main.get_settings")
    @patch("queue_producer.api.main.QueueProducer")
    def test_startup_initializes_producer(self, mock_producer_cls, mock_settings):
        mock_settings.return_value = _settings()
        producer = MagicMock()
        producer.is_initialized = True
        producer.active_broker_url = "http://admin:admin@a:8161/api/message?destination=queue://{queue}"
        mock_producer_cls.from_settings.return_value = producer

        from queue_producer.api.main import app

        with TestClient(app) as client:
            resp = client.get("/health")

        assert resp.status_code == 200
        producer.initialize.assert_called_once_with()
        mock_producer_cls.from_settings.assert_called_once_with(mock_settings.return_value)

    @patch("queue_producer.api.main.get_settings")
    @patch("queue_producer.api.main.QueueProducer")
    def test_startup_aborts_without_master(self, mock_producer_cls, mock_settings):
        mock_settings.return_value = _settings()
        producer = MagicMock()
        producer.initialize.side_effect = BrokerResolutionError("No active message queue broker found")
        mock_producer_cls.from_settings.return_value = producer

        from queue_producer.api.main import app

        with pytest.raises(BrokerResolutionError):
            with TestClient(app):
                pass

    def test_routes_registered(self):
        from queue_producer.api.main import app

        paths = app.openapi()['paths']
        assert "/queues/{queue_name}/messages" in paths
        assert "/health" in paths
