"""Tests for the Kafka consumer and the partitioned dispatcher."""

import threading
import time
from unittest.mock import MagicMock

from confluent_kafka import KafkaError

from inventory_sync_service.consumer import InventorySyncConsumer, decode_event
from inventory_sync_service.dispatcher import PartitionedDispatcher
from inventory_sync_service.schemas import SyncState


def _consumer(processor, dispatcher) -> InventorySyncConsumer:
    return InventorySyncConsumer("localhost:9092", "inventory-sync", "inventory.changes", processor, dispatcher)


def test_consumer_configuration(mocker, processor, dispatcher):
    consumer_class = mocker.patch("inventory_sync_service.consumer.Consumer")

    _consumer(processor, dispatcher)

    config = consumer_class.call_args.args[0]
    assert config["bootstrap.servers"] == "localhost:9092"
    assert config["group.id"] == "inventory-sync"
    assert config["enable.auto.offset.store"] is False


def test_decode_event():
    event = decode_event(b'{"productId": 5, "quantity": 0, "locationId": 10}')

    assert (event.product_id, event.quantity, event.location_id) == (5, 0, 10)
    assert decode_event(b"not json") is None
    assert decode_event(b'{"productId": 5}') is None
    assert decode_event(b"\xff\xfe") is None
    assert decode_event(None) is None


def test_handle_message_stores_offset_after_processing(
    mock_kafka_consumer, processor, storefront, dispatcher, message_factory
):
    consumer = _consumer(processor, dispatcher)
    msg = message_factory({"productId": 5, "quantity": 0, "locationId": 10}, offset=41)

    result = consumer.handle_message(msg)

    assert result.state == SyncState.ACKED
    assert storefront.calls == [(10, 5, 0)]
    mock_kafka_consumer.store_offsets.assert_called_once_with(message=msg)


def test_undecodable_message_is_dropped(mock_kafka_consumer, processor, storefront, dispatcher, message_factory):
    consumer = _consumer(processor, dispatcher)
    msg = message_factory(b"{broken")

    assert consumer.handle_message(msg) is None
    assert storefront.calls == []
    assert consumer.stats["dropped"] == 1
    mock_kafka_consumer.store_offsets.assert_called_once_with(message=msg)


def test_run_dispatches_until_stopped(mock_kafka_consumer, processor, storefront, message_factory):
    """The poll loop routes messages to workers and skips broker errors."""
    dispatcher = PartitionedDispatcher(worker_count=2)
    consumer = _consumer(processor, dispatcher)

    eof = message_factory(None)
    eof_error = MagicMock()
    eof_error.code.return_value = KafkaError._PARTITION_EOF
    eof.error.return_value = eof_error
    queued = [
        message_factory({"productId": 1, "quantity": 5, "locationId": 10}, partition=0, offset=0),
        None,
        eof,
        message_factory({"productId": 2, "quantity": 3, "locationId": 10}, partition=1, offset=0),
        message_factory({"productId": 1, "quantity": 4, "locationId": 10}, partition=0, offset=1),
    ]

    def poll(timeout):
        if queued:
            return queued.pop(0)
        consumer.stop()
        return None

    mock_kafka_consumer.poll.side_effect = poll

    consumer.run()

    mock_kafka_consumer.subscribe.assert_called_once_with(["inventory.changes"])
    assert storefront.levels == {(10, 1): 4, (10, 2): 3}
    assert mock_kafka_consumer.store_offsets.call_count == 3
    assert consumer.stats["messages_processed"] == 3


def test_same_partition_runs_in_submission_order(dispatcher):
    """Tasks of one partition run strictly in order even when earlier ones are slower."""
    seen: dict[int, list[int]] = {0: [], 1: [], 2: []}
    lock = threading.Lock()

    def task(partition: int, seq: int):
        def _run():
            time.sleep(0.005 * ((seq * 7) % 3))
            with lock:
                seen[partition].append(seq)

        return _run

    dispatcher.start()
    for seq in range(20):
        for partition in seen:
            dispatcher.submit(partition, task(partition, seq))
    dispatcher.join()

    assert all(order == list(range(20)) for order in seen.values())


def test_distinct_partitions_run_in_parallel(dispatcher):
    release = threading.Event()
    started = threading.Event()

    dispatcher.start()
    dispatcher.submit(0, release.wait)
    dispatcher.submit(1, started.set)

    assert started.wait(timeout=2)
    release.set()
    dispatcher.join()


def test_failing_task_does_not_stop_worker(dispatcher):
    done = []

    def boom():
        raise RuntimeError("boom")

    dispatcher.start()
    dispatcher.submit(0, boom)
    dispatcher.submit(0, lambda: done.append(True))
    dispatcher.join()

    assert done == [True]
