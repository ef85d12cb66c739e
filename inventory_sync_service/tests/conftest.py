"""Test fixtures for the inventory sync service tests."""

import json
import threading
from unittest.mock import MagicMock

import pytest

from inventory_sync_service.dispatcher import PartitionedDispatcher
from inventory_sync_service.errors import SyncError
from inventory_sync_service.processor import InventorySyncProcessor


class FakeStorefront:
    """Storefront stand-in holding the last level set per (location, item)."""

    def __init__(self):
        self.levels: dict[tuple[int, int], int] = {}
        self.calls: list[tuple[int, int, int]] = []
        self.fail_with: SyncError | None = None
        self._lock = threading.Lock()

    def set_inventory_level(self, location_id: int, inventory_item_id: int, available: int) -> dict:
        if self.fail_with is not None:
            raise self.fail_with
        with self._lock:
            self.calls.append((location_id, inventory_item_id, available))
            self.levels[(location_id, inventory_item_id)] = available
        return {"inventory_level": {"inventory_item_id": inventory_item_id, "available": available}}


def make_message(value, partition: int = 0, offset: int = 0, topic: str = "inventory.changes"):
    """Build a mock Kafka message.

    Args:
        value: Event dict (JSON encoded) or raw bytes
        partition: Partition of the message
        offset: Offset of the message
        topic: Topic of the message
    """
    msg = MagicMock()
    raw = value if isinstance(value, bytes) or value is None else json.dumps(value).encode("utf-8")
    msg.value.return_value = raw
    msg.partition.return_value = partition
    msg.offset.return_value = offset
    msg.topic.return_value = topic
    msg.key.return_value = str(value.get("productId")).encode() if isinstance(value, dict) else None
    msg.error.return_value = None
    return msg


@pytest.fixture
def storefront():
    return FakeStorefront()


@pytest.fixture
def processor(storefront):
    return InventorySyncProcessor(storefront)


@pytest.fixture
def mock_kafka_consumer(mocker):
    """Mock the confluent Kafka consumer."""
    consumer_mock = mocker.MagicMock()
    mocker.patch("inventory_sync_service.consumer.Consumer", return_value=consumer_mock)
    return consumer_mock


@pytest.fixture
def dispatcher():
    dispatcher = PartitionedDispatcher(worker_count=3, queue_size=50)
    yield dispatcher
    dispatcher.shutdown()


@pytest.fixture
def message_factory():
    """Expose ``make_message`` to tests."""
    return make_message
