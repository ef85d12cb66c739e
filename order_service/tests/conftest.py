"""Test fixtures for the order service tests."""

import json
from urllib.parse import parse_qs

import httpx
import pytest

from order_service.clients import OrderDataClient
from order_service.fulfillment import FulfillmentDispatcher
from order_service.processing import OrderProcessor
from order_service.producer import InventoryEventPublisher
from order_service.schemas import ShopifyOrderPayload


class FakeOrderDataApi:
    """In-memory stand-in for the order data API behind an ``httpx.MockTransport``.

    Attributes:
        inventory: Available quantity per product id.
        orders: Status per recorded order number.
        update_calls: Bodies of every ledger write received.
    """

    def __init__(self, inventory: dict[int, int]):
        self.inventory = dict(inventory)
        self.orders: dict[str, str] = {}
        self.update_calls: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/order/check":
            return self._check(parse_qs(request.url.query.decode()))
        if request.url.path == "/api/order/update":
            return self._update(json.loads(request.content))
        return httpx.Response(404)

    def _check(self, query: dict) -> httpx.Response:
        order_id = query["orderId"][0]
        if self.orders.get(order_id) == "FULFILLED":
            return httpx.Response(
                200,
                json={"isContinue": False, "description": "order already exists and completed", "orderId": order_id},
            )
        ids = [int(v) for v in query["productIds"][0].split(",")]
        quantities = [int(v) for v in query["quantity"][0].split(",")]
        ok = all(self.inventory.get(pid, 0) >= qty for pid, qty in zip(ids, quantities))
        return httpx.Response(
            200,
            json={
                "isContinue": ok,
                "description": "success" if ok else "not enough inventory",
                "orderId": order_id,
                "products": [],
            },
        )

    def _update(self, body: dict) -> httpx.Response:
        self.update_calls.append(body)
        for item in body["lineItems"]:
            if self.inventory.get(item["productId"], 0) < item["quantity"]:
                return httpx.Response(
                    400,
                    json={
                        "isSuccess": False,
                        "message": f"insufficient stock for product {item['productId']}",
                        "errorType": "allocation",
                    },
                )
        levels = []
        for item in body["lineItems"]:
            self.inventory[item["productId"]] -= item["quantity"]
            levels.append({"productId": item["productId"], "availableQuantity": self.inventory[item["productId"]]})
        self.orders[body["orderNumber"]] = "PROCESSING"
        return httpx.Response(
            200, json={"isSuccess": True, "message": "Order updated successfully", "inventory": levels}
        )


class FakeWms:
    """Warehouse API stand-in recording fulfillment requests."""

    def __init__(self, status: str = "pending"):
        self.status = status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/inventory"):
            return httpx.Response(
                200, json={"sku": "SKU-1", "availableQuantity": 7, "totalQuantity": 10, "reservedQuantity": 3}
            )
        return httpx.Response(201, json={"status": self.status, "fulfillmentOrderId": "F-1"})


@pytest.fixture
def order_payload():
    """Create a paid order payload factory.

    Returns:
        Callable: ``order_payload(**overrides)`` building a ShopifyOrderPayload
    """

    def _make(**overrides) -> ShopifyOrderPayload:
        body = {
            "id": 820982911946154508,
            "orderNumber": 1001,
            "email": "jon@example.com",
            "createdAt": "2024-05-01T10:00:00Z",
            "customer": {"id": 115310627314723954, "email": "jon@example.com", "firstName": "Jon", "lastName": "Snow"},
            "lineItems": [
                {"id": 1, "productId": 1, "quantity": 2, "sku": "SKU-1", "price": "10.00", "title": "Widget"},
                {"id": 2, "productId": 2, "quantity": 1, "sku": "SKU-2", "price": "5.50", "title": "Gadget"},
            ],
            "shippingAddress": {"firstName": "Jon", "address1": "1 Wall St", "city": "Winterfell", "zip": "00001"},
            "billingAddress": {"firstName": "Jon", "address1": "1 Wall St", "city": "Winterfell", "zip": "00001"},
            "totalPrice": "25.50",
            "subtotalPrice": "25.50",
            "totalTax": "0.00",
            "currency": "usd",
            "financialStatus": "paid",
        }
        body.update(overrides)
        return ShopifyOrderPayload.model_validate(body)

    return _make


@pytest.fixture
def data_api():
    return FakeOrderDataApi({1: 10, 2: 5})


@pytest.fixture
def wms():
    return FakeWms()


@pytest.fixture
def mock_kafka_producer(mocker):
    """Mock the confluent Kafka producer."""
    producer_mock = mocker.MagicMock()
    producer_mock.flush.return_value = 0
    mocker.patch("order_service.producer.Producer", return_value=producer_mock)
    return producer_mock


@pytest.fixture
def publisher(mock_kafka_producer):
    return InventoryEventPublisher("localhost:9092", topic="inventory.changes", location_id=123456789)


@pytest.fixture
def make_processor(publisher, wms):
    """Build an OrderProcessor over mock transports.

    Returns:
        Callable: ``make_processor(data_handler, timeout=5.0)``
    """

    def _make(data_handler, timeout: float = 5.0) -> OrderProcessor:
        data_client = OrderDataClient(
            "http://order-data",
            timeout=1.0,
            client=httpx.AsyncClient(base_url="http://order-data", transport=httpx.MockTransport(data_handler)),
        )
        fulfillment = FulfillmentDispatcher(
            "http://wms",
            "secret",
            timeout=1.0,
            client=httpx.AsyncClient(
                base_url="http://wms",
                headers={"Authorization": "Bearer secret"},
                transport=httpx.MockTransport(wms),
            ),
        )
        return OrderProcessor(data_client, publisher, fulfillment, order_timeout=timeout)

    return _make
