"""Validation and dispatch of a single inventory change event."""

from .errors import SyncError
from .logger import logger
from .schemas import InventoryChangeEvent, SyncResult, SyncState
from .storefront import StorefrontClient

INVALID_EVENT_MESSAGE = "Invalid inventory update data"
SUCCESS_MESSAGE = "Inventory update processed successfully"


def is_valid_event(event: InventoryChangeEvent) -> bool:
    return event.product_id > 0 and event.quantity >= 0 and event.location_id > 0


class InventorySyncProcessor:
    """Applies inventory change events to the storefront.

    Events are absolute levels, so processing the same event twice produces
    the same storefront state. A failed call is reported and not retried here.
    """

    def __init__(self, storefront: StorefrontClient):
        self.storefront = storefront

    def process(self, event: InventoryChangeEvent) -> SyncResult:
        """Validate an event and push its level to the storefront.

        Args:
            event: Decoded inventory change event

        Returns:
            SyncResult: ``DROPPED`` for invalid data, ``ACKED`` or ``FAILED`` otherwise
        """
        history = [SyncState.RECEIVED]

        if not is_valid_event(event):
            history += [SyncState.INVALID, SyncState.DROPPED]
            logger.warning(
                f"{INVALID_EVENT_MESSAGE} | product_id={event.product_id} | quantity={event.quantity} | "
                f"location_id={event.location_id}"
            )
            return SyncResult(state=SyncState.DROPPED, message=INVALID_EVENT_MESSAGE, history=history)

        history += [SyncState.VALIDATED, SyncState.DISPATCHED]
        try:
            self.storefront.set_inventory_level(
                location_id=event.location_id, inventory_item_id=event.product_id, available=event.quantity
            )
        except SyncError as e:
            history.append(SyncState.FAILED)
            logger.error(
                f"Inventory sync failed | product_id={event.product_id} | quantity={event.quantity} | "
                f"status_code={e.status_code} | error={e.message}"
            )
            return SyncResult(state=SyncState.FAILED, message=e.message, history=history)

        history.append(SyncState.ACKED)
        logger.info(f"Inventory synced | product_id={event.product_id} | available={event.quantity}")
        return SyncResult(state=SyncState.ACKED, message=SUCCESS_MESSAGE, history=history)
