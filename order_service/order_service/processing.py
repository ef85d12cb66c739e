"""End-to-end processing of one inbound order.

The flow is intake -> availability check -> allocation and ledger write ->
inventory event publish, with the warehouse fulfillment request running in
the background afterwards. Terminal failures are raised at each step and
collapsed into a single error response here.
"""

import asyncio
from collections import deque

from pydantic import BaseModel, Field

from .clients import OrderDataClient
from .domain import Order, SideEffectOutcome
from .errors import (
    AllocationError,
    AvailabilityError,
    OrderProcessingError,
    OrderValidationError,
    PersistenceError,
)
from .fulfillment import FulfillmentDispatcher
from .intake import Invalid, to_order, validate_order
from .logger import logger
from .producer import InventoryEventPublisher
from .schemas import OrderResponse, OrderUpdateResult, ShopifyOrderPayload

# Finished fulfillment outcomes kept until the next drain
MAX_FINISHED_OUTCOMES = 1000
SUCCESS_MESSAGE = "Order received and processed"
TIMEOUT_MESSAGE = "Order processing timed out"


class OrderProcessingResult(BaseModel):
    """Outward response plus the recorded outcome of non-fatal side effects."""

    response: OrderResponse
    side_effects: list[SideEffectOutcome] = Field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return self.response.status == "success"


def _error(order_id: str, message: str) -> OrderProcessingResult:
    return OrderProcessingResult(response=OrderResponse(status="error", message=message, order_id=order_id))


def _raise_for_update(result: OrderUpdateResult) -> None:
    if result.is_success:
        return
    if result.error_type == "allocation":
        raise AllocationError(result.message)
    if result.error_type == "duplicate":
        raise AvailabilityError(result.message)
    raise PersistenceError(result.message)


class OrderProcessor:
    """Runs the order flow against its collaborators.

    Attributes:
        data_client: Order data API client.
        publisher: Inventory change event publisher.
        fulfillment: Warehouse fulfillment dispatcher.
        order_timeout: Upper bound on one order, in seconds.
    """

    def __init__(
        self,
        data_client: OrderDataClient,
        publisher: InventoryEventPublisher,
        fulfillment: FulfillmentDispatcher,
        order_timeout: float,
    ):
        self.data_client = data_client
        self.publisher = publisher
        self.fulfillment = fulfillment
        self.order_timeout = order_timeout
        self._background: set[asyncio.Task] = set()
        self._finished: deque[SideEffectOutcome] = deque(maxlen=MAX_FINISHED_OUTCOMES)

    async def process(self, payload: ShopifyOrderPayload) -> OrderProcessingResult:
        """Process one order within the configured timeout.

        Args:
            payload: Webhook body

        Returns:
            OrderProcessingResult: Success or the first terminal failure
        """
        order_id = str(payload.order_number)
        try:
            return await asyncio.wait_for(self._process(payload), timeout=self.order_timeout)
        except asyncio.TimeoutError:
            # The ledger write may or may not have committed server side.
            logger.critical(f"{TIMEOUT_MESSAGE} | order_number={order_id} | timeout={self.order_timeout}s")
            return _error(order_id, TIMEOUT_MESSAGE)

    async def _process(self, payload: ShopifyOrderPayload) -> OrderProcessingResult:
        order_id = str(payload.order_number)
        logger.info(f"Processing order | order_number={order_id} | line_items={len(payload.line_items)}")
        try:
            order = to_order(payload)
            validation = validate_order(order)
            if isinstance(validation, Invalid):
                raise OrderValidationError(validation.message)

            check = await self.data_client.check_order(order)
            if not check.is_continue:
                raise AvailabilityError(check.description)

            order = order.mark_as_processing()
            update = await self.data_client.update_order(order)
            _raise_for_update(update)

            published = self.publisher.publish_inventory_changes(order, update.inventory)
            self._schedule_fulfillment(order)
        except OrderValidationError as e:
            logger.warning(f"Order rejected | order_number={order_id} | reason={e.message}")
            return _error(order_id, e.message)
        except (AvailabilityError, AllocationError) as e:
            logger.warning(f"Order not accepted | order_number={order_id} | stage={type(e).__name__} | reason={e.message}")
            return _error(order_id, e.message)
        except PersistenceError as e:
            logger.critical(f"Ledger write failed | order_number={order_id} | reason={e.message}")
            return _error(order_id, e.message)
        except OrderProcessingError as e:
            logger.error(f"Order processing failed | order_number={order_id} | reason={e.message}")
            return _error(order_id, e.message)
        except Exception as e:
            logger.exception(f"Unexpected error processing order | order_number={order_id}")
            return _error(order_id, f"Internal server error: {e}")

        logger.info(f"Order accepted | order_number={order_id} | status={order.status.value}")
        return OrderProcessingResult(
            response=OrderResponse(status="success", message=SUCCESS_MESSAGE, order_id=order_id),
            side_effects=[published],
        )

    def _schedule_fulfillment(self, order: Order) -> None:
        task = asyncio.create_task(self._fulfill(order))
        self._background.add(task)
        task.add_done_callback(self._on_fulfillment_done)

    def _on_fulfillment_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            logger.warning("Fulfillment task cancelled")
            outcome = SideEffectOutcome(name="fulfillment", is_success=False, message="cancelled")
        elif task.exception() is not None:
            error = task.exception()
            logger.opt(exception=error).warning(f"Fulfillment task failed | error={error!r}")
            outcome = SideEffectOutcome(name="fulfillment", is_success=False, message=str(error))
        else:
            outcome = task.result()
        self._finished.append(outcome)

    async def _fulfill(self, order: Order) -> SideEffectOutcome:
        result = await self.fulfillment.create_fulfillment_order(order)
        return SideEffectOutcome(name="fulfillment", is_success=result.is_success, message=result.message)

    @property
    def pending_fulfillments(self) -> int:
        return len(self._background)

    async def drain(self) -> list[SideEffectOutcome]:
        """Wait for in-flight fulfillment requests.

        Returns:
            list[SideEffectOutcome]: Outcome of every request finished since the last drain
        """
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
        outcomes = list(self._finished)
        self._finished.clear()
        return outcomes

    async def aclose(self) -> None:
        """Drain background work and release clients."""
        await self.drain()
        await self.data_client.aclose()
        await self.fulfillment.aclose()
        self.publisher.close()
