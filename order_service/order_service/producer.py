"""Kafka producer for publishing inventory change events."""

from collections.abc import Sequence

from confluent_kafka import KafkaException, Producer

from .domain import Order, SideEffectOutcome
from .errors import PublishError
from .logger import kafka_logger, logger
from .schemas import InventoryChangeEvent, InventoryLevel

# Seconds to wait for queued deliveries when the local buffer is full
FLUSH_ON_FULL_TIMEOUT = 1.0


class InventoryEventPublisher:
    """Kafka producer for inventory change events.

    Every event is keyed by its product id, so all events of one product land
    on the same partition and are consumed in the order they were produced.

    Attributes:
        _producer: The underlying Kafka producer instance.
        topic: Topic the events are written to.
        location_id: Storefront location stamped on every event.
    """

    def __init__(self, bootstrap_servers: str, topic: str = "inventory.changes", location_id: int = 123456789):
        """Initialize the Kafka producer with the given bootstrap servers.

        Args:
            bootstrap_servers (str): Comma-separated list of Kafka broker addresses.
            topic (str): Topic for inventory change events.
            location_id (int): Storefront location of the warehouse stock.
        """
        self.topic = topic
        self.location_id = location_id
        self._producer = Producer(
            {
                "bootstrap.servers": bootstrap_servers,
                "message.timeout.ms": 5000,
                "acks": "all",
                "enable.idempotence": True,
                "partitioner": "consistent_random",  # Same key → same partition
            }
        )

    @property
    def producer(self):
        """Get the underlying Kafka producer instance.

        Returns:
            Producer: The Kafka producer instance.
        """
        return self._producer

    def _delivery_callback(self, err, msg):
        """Callback function for message delivery reports.

        Args:
            err: Error that occurred during message delivery, if any.
            msg: Message that was delivered or failed.
        """
        if err:
            kafka_logger.error(f"Message failed delivery: {err} | topic={msg.topic()} | key={msg.key()}")
        else:
            kafka_logger.debug(
                f"Message delivered to {msg.topic()} [p:{msg.partition()}] | offset={msg.offset()} | "
                f"key={msg.key()}"
            )

    def build_events(self, order: Order, levels: Sequence[InventoryLevel]) -> list[InventoryChangeEvent]:
        """Build one absolute-level event per line item.

        Args:
            order: The accepted order.
            levels: Post-allocation available quantities from the ledger write.

        Raises:
            PublishError: If a line item has no reported level.
        """
        by_product = {level.product_id: level.available_quantity for level in levels}
        events = []
        for item in order.line_items:
            if item.product_id not in by_product:
                raise PublishError(f"no inventory level reported for product {item.product_id}")
            events.append(
                InventoryChangeEvent(
                    product_id=item.product_id,
                    quantity=by_product[item.product_id],
                    location_id=self.location_id,
                )
            )
        return events

    def publish_event(self, event: InventoryChangeEvent):
        """Publish a single inventory change event.

        Args:
            event (InventoryChangeEvent): The event to publish.

        Raises:
            BufferError: If the producer's internal buffer is full.
        """
        try:
            self._producer.produce(
                topic=self.topic,
                key=str(event.product_id).encode("utf-8"),
                value=event.model_dump_json(by_alias=True),
                on_delivery=self._delivery_callback,
            )
            self.producer.poll(0)  # Trigger delivery callbacks
        except BufferError:
            logger.warning("Producer buffer full, flushing...")
            self.producer.flush(FLUSH_ON_FULL_TIMEOUT)
            raise

    def publish_inventory_changes(self, order: Order, levels: Sequence[InventoryLevel]) -> SideEffectOutcome:
        """Publish the inventory changes of an accepted order.

        Failures are logged and reported in the outcome; they never fail the order.

        Args:
            order: The accepted order.
            levels: Post-allocation available quantities from the ledger write.

        Returns:
            SideEffectOutcome: Whether every event was handed to the producer.
        """
        try:
            events = self.build_events(order, levels)
            for event in events:
                self.publish_event(event)
        except (PublishError, BufferError, KafkaException) as e:
            logger.error(f"Failed to publish inventory changes | order_number={order.order_number} | error={e}")
            return SideEffectOutcome(name="publish", is_success=False, message=str(e))

        logger.info(f"Inventory changes published | order_number={order.order_number} | events={len(events)}")
        return SideEffectOutcome(name="publish", is_success=True, message=f"{len(events)} events published")

    def close(self, timeout: float = 10.0) -> None:
        """Flush outstanding messages."""
        remaining = self._producer.flush(timeout)
        if remaining:
            logger.warning(f"Producer closed with undelivered messages | remaining={remaining}")
