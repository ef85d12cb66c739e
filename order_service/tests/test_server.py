"""Tests for the order service endpoints."""

import pytest
from fastapi.testclient import TestClient

from order_service.config import Settings
from order_service.server import app, state


@pytest.fixture
def test_client(make_processor, data_api):
    """Create a test client with a processor over mock transports."""
    state.settings = Settings()
    state.processor = make_processor(data_api)
    with TestClient(app) as client:
        yield client
    state.settings = None
    state.processor = None


def test_webhook_success(test_client, order_payload):
    payload = order_payload().model_dump(by_alias=True)

    response = test_client.post("/api/shopify/webhooks/orders", json=payload)

    assert response.status_code == 200
    assert response.json() == {"status": "success", "message": "Order received and processed", "orderId": "1001"}


def test_webhook_validation_error(test_client, order_payload):
    payload = order_payload(financialStatus="refunded").model_dump(by_alias=True)

    response = test_client.post("/api/shopify/webhooks/orders", json=payload)

    assert response.status_code == 400
    assert response.json()["message"] == "Order cannot be processed"


def test_health_reports_kafka(test_client, mocker):
    admin = mocker.patch("order_service.server.AdminClient")
    admin.return_value.list_topics.return_value = object()

    assert test_client.get("/health").json() == {"kafka": True}
    assert test_client.get("/health/ready").json() == {"status": "ready", "kafka": True}


def test_readiness_without_kafka(test_client, mocker):
    admin = mocker.patch("order_service.server.AdminClient")
    admin.return_value.list_topics.side_effect = Exception("no brokers")

    assert test_client.get("/health/ready").json() == {"status": "not_ready", "kafka": False}
