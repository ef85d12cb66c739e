"""Tests for the end-to-end order flow."""

import asyncio
import json

import httpx
import pytest


@pytest.mark.asyncio
async def test_order_with_two_in_stock_items(make_processor, data_api, wms, mock_kafka_producer, order_payload):
    """Two in-stock items are recorded, publish two events and return success."""
    processor = make_processor(data_api)

    result = await processor.process(order_payload())
    await processor.drain()

    assert result.response.model_dump(by_alias=True) == {
        "status": "success",
        "message": "Order received and processed",
        "orderId": "1001",
    }
    assert data_api.orders == {"1001": "PROCESSING"}
    assert data_api.inventory == {1: 8, 2: 4}
    events = [json.loads(c.kwargs["value"]) for c in mock_kafka_producer.produce.call_args_list]
    assert events == [
        {"productId": 1, "quantity": 8, "locationId": 123456789},
        {"productId": 2, "quantity": 4, "locationId": 123456789},
    ]
    assert [o.name for o in result.side_effects] == ["publish"]
    assert len(wms.requests) == 1


@pytest.mark.asyncio
async def test_insufficient_stock_at_allocation(make_processor, data_api, mock_kafka_producer, order_payload):
    """Stock that vanishes between check and allocation fails the order with nothing written."""
    data_api.inventory[2] = 1

    def check_passes_then_allocate(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/order/check":
            return httpx.Response(200, json={"isContinue": True, "description": "success", "orderId": "1001"})
        return data_api(request)

    processor = make_processor(check_passes_then_allocate)
    payload = order_payload(
        lineItems=[{"id": 1, "productId": 2, "quantity": 2, "sku": "SKU-2", "price": "5.50"}],
    )

    result = await processor.process(payload)

    assert result.response.status == "error"
    assert result.response.message == "insufficient stock for product 2"
    assert data_api.orders == {}
    assert data_api.inventory[2] == 1
    mock_kafka_producer.produce.assert_not_called()
    assert processor.pending_fulfillments == 0


@pytest.mark.asyncio
async def test_insufficient_stock_at_check(make_processor, data_api, mock_kafka_producer, order_payload):
    data_api.inventory[1] = 1
    processor = make_processor(data_api)

    result = await processor.process(order_payload())

    assert result.response.status == "error"
    assert result.response.message == "not enough inventory"
    assert data_api.update_calls == []
    mock_kafka_producer.produce.assert_not_called()


@pytest.mark.asyncio
async def test_duplicate_completed_order(make_processor, data_api, mock_kafka_producer, order_payload):
    data_api.orders["1001"] = "FULFILLED"
    processor = make_processor(data_api)

    result = await processor.process(order_payload())

    assert result.response.status == "error"
    assert result.response.message == "order already exists and completed"
    assert data_api.update_calls == []


@pytest.mark.asyncio
async def test_validation_failure_makes_no_calls(make_processor, data_api, order_payload):
    processor = make_processor(data_api)

    result = await processor.process(order_payload(financialStatus="pending"))

    assert result.response.message == "Order cannot be processed"
    assert data_api.update_calls == []


@pytest.mark.asyncio
async def test_persistence_failure(make_processor, order_payload, mock_kafka_producer):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/order/check":
            return httpx.Response(200, json={"isContinue": True, "description": "success", "orderId": "1001"})
        return httpx.Response(
            400, json={"isSuccess": False, "message": "Failed to create order: disk full", "errorType": "persistence"}
        )

    result = await make_processor(handler).process(order_payload())

    assert result.response.status == "error"
    assert result.response.message == "Failed to create order: disk full"
    mock_kafka_producer.produce.assert_not_called()


@pytest.mark.asyncio
async def test_unreachable_data_api(make_processor, order_payload):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = await make_processor(handler).process(order_payload())

    assert result.response.status == "error"
    assert result.response.message.startswith("Inventory check failed")


@pytest.mark.asyncio
async def test_order_timeout(make_processor, order_payload):
    async def slow(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1)
        return httpx.Response(200, json={"isContinue": True, "description": "success", "orderId": "1001"})

    result = await make_processor(slow, timeout=0.05).process(order_payload())

    assert result.response.status == "error"
    assert result.response.message == "Order processing timed out"


@pytest.mark.asyncio
async def test_publish_failure_does_not_fail_order(make_processor, data_api, mock_kafka_producer, order_payload):
    mock_kafka_producer.produce.side_effect = BufferError("queue full")
    processor = make_processor(data_api)

    result = await processor.process(order_payload())
    await processor.drain()

    assert result.response.status == "success"
    assert result.side_effects[0].is_success is False


@pytest.mark.asyncio
async def test_fulfillment_rejection_does_not_fail_order(make_processor, data_api, wms, order_payload):
    wms.status = "rejected"
    processor = make_processor(data_api)

    result = await processor.process(order_payload())
    outcomes = await processor.drain()

    assert result.response.status == "success"
    assert [(o.name, o.is_success) for o in outcomes] == [("fulfillment", False)]


@pytest.mark.asyncio
async def test_fulfillment_finished_before_drain_is_reported(make_processor, data_api, wms, order_payload):
    processor = make_processor(data_api)

    result = await processor.process(order_payload())
    for _ in range(20):
        if processor.pending_fulfillments == 0:
            break
        await asyncio.sleep(0.01)
    outcomes = await processor.drain()

    assert result.response.status == "success"
    assert processor.pending_fulfillments == 0
    assert [(o.name, o.is_success) for o in outcomes] == [("fulfillment", True)]
    assert await processor.drain() == []


@pytest.mark.asyncio
async def test_fulfillment_task_exception_is_logged(make_processor, data_api, order_payload, mocker):
    processor = make_processor(data_api)
    mocker.patch.object(processor.fulfillment, "create_fulfillment_order", side_effect=RuntimeError("wms exploded"))
    mock_logger = mocker.patch("order_service.processing.logger")

    result = await processor.process(order_payload())
    for _ in range(20):
        if processor.pending_fulfillments == 0:
            break
        await asyncio.sleep(0.01)
    outcomes = await processor.drain()

    assert result.response.status == "success"
    assert [(o.name, o.is_success, o.message) for o in outcomes] == [("fulfillment", False, "wms exploded")]
    mock_logger.opt.assert_called_once()
    assert "wms exploded" in mock_logger.opt.return_value.warning.call_args.args[0]
