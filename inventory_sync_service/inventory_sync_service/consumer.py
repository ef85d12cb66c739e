"""Kafka consumer for inventory change events."""

import json
import threading
import time
from typing import Optional

from confluent_kafka import Consumer, KafkaError
from pydantic import ValidationError

from .dispatcher import PartitionedDispatcher
from .logger import kafka_logger as logger
from .processor import InventorySyncProcessor
from .schemas import InventoryChangeEvent, SyncResult

# Configuration constants
DEFAULT_CONSUMER_CONFIG = {
    "auto.offset.reset": "earliest",
    "enable.auto.commit": True,
    "enable.auto.offset.store": False,
    "session.timeout.ms": 30000,
    "max.poll.interval.ms": 300000,
}


def decode_event(raw: Optional[bytes]) -> Optional[InventoryChangeEvent]:
    """Decode a message value, returning None for anything that is not an event.

    Args:
        raw: Message value

    Returns:
        InventoryChangeEvent | None: Decoded event
    """
    if raw is None:
        return None
    try:
        return InventoryChangeEvent.model_validate(json.loads(raw.decode("utf-8")))
    except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Failed to decode message: {e}")
        return None


class InventorySyncConsumer:
    """Polls inventory change events and hands them to partition workers.

    Offsets are stored only after a message has been processed, and are
    committed in the background by the client, so a crash or rebalance
    redelivers whatever had not been processed yet.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        group_id: str,
        topic: str,
        processor: InventorySyncProcessor,
        dispatcher: PartitionedDispatcher,
    ):
        """Initialize the inventory sync consumer.

        Args:
            bootstrap_servers: Kafka bootstrap servers
            group_id: Consumer group ID
            topic: Topic carrying inventory change events
            processor: Applies one event to the storefront
            dispatcher: Worker pool keyed by partition
        """
        self.topic = topic
        self.processor = processor
        self.dispatcher = dispatcher
        self.stats = {"messages_processed": 0, "dropped": 0, "errors": 0, "start_time": time.time()}
        self._stats_lock = threading.Lock()
        self._running = threading.Event()

        logger.info(f"Initializing consumer with bootstrap_servers={bootstrap_servers}, group_id={group_id}")

        config = DEFAULT_CONSUMER_CONFIG.copy()
        config.update({"bootstrap.servers": bootstrap_servers, "group.id": group_id})
        self.consumer = Consumer(config)

    def _count(self, key: str) -> None:
        with self._stats_lock:
            self.stats[key] += 1

    def handle_message(self, msg) -> Optional[SyncResult]:
        """Decode, process and store the offset of one message.

        Runs on the worker that owns the message's partition.

        Args:
            msg: Kafka message

        Returns:
            SyncResult | None: None if the message could not be decoded
        """
        event = decode_event(msg.value())
        result = None
        if event is None:
            self._count("dropped")
        else:
            result = self.processor.process(event)
            self._count("messages_processed")
        self.consumer.store_offsets(message=msg)
        return result

    def run(self) -> None:
        """Process incoming messages until ``stop`` is called."""
        self._running.set()
        self.consumer.subscribe([self.topic])
        self.dispatcher.start()
        logger.info(f"Starting message processing loop | topic={self.topic}")

        try:
            while self._running.is_set():
                msg = self.consumer.poll(timeout=1.0)
                if msg is None:
                    continue

                if msg.error():
                    if msg.error().code() == KafkaError._PARTITION_EOF:
                        logger.debug("Reached end of partition")
                        continue
                    logger.error(f"Kafka error: {msg.error()}")
                    self._count("errors")
                    continue

                logger.debug(
                    f"Received message | topic={msg.topic()} | partition={msg.partition()} | offset={msg.offset()} | "
                    f"key={msg.key()}"
                )
                self.dispatcher.submit(msg.partition(), lambda m=msg: self.handle_message(m))
        finally:
            self.dispatcher.shutdown()
            self._log_status()

    def stop(self) -> None:
        """Ask the poll loop to exit after the current poll."""
        self._running.clear()

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    def _log_status(self) -> None:
        """Log consumer status and statistics."""
        runtime = time.time() - self.stats["start_time"]
        logger.info(
            f"Consumer status | messages_processed={self.stats['messages_processed']} | "
            f"dropped={self.stats['dropped']} | errors={self.stats['errors']} | runtime_seconds={runtime:.2f}"
        )

    def close(self) -> None:
        """Close the consumer connection, committing stored offsets."""
        self.consumer.close()
        logger.info("Consumer closed")
