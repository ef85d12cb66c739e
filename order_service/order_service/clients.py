"""Async client for the order data API."""

from typing import Optional

import httpx
from pydantic import ValidationError

from .domain import Order
from .errors import AvailabilityError, PersistenceError
from .logger import logger
from .schemas import OrderCheckResult, OrderUpdateResult


def _update_body(order: Order) -> dict:
    return {
        "id": order.id,
        "orderNumber": order.order_number,
        "customerId": order.customer.id,
        "createdAt": order.created_at.isoformat() if order.created_at else None,
        "updatedAt": order.updated_at.isoformat() if order.updated_at else None,
        "processedAt": order.processed_at.isoformat() if order.processed_at else None,
        "lineItems": [
            {
                "id": item.id,
                "productId": item.product_id,
                "quantity": item.quantity,
                "title": item.title,
                "sku": item.sku,
                "price": str(item.price.amount),
                "totalDiscount": str(item.total_discount.amount),
            }
            for item in order.line_items
        ],
        "totalPrice": str(order.total_price.amount),
        "currency": order.currency.value,
    }


class OrderDataClient:
    """Calls the order data API for the availability check and the ledger write.

    Attributes:
        base_url: Base URL of the order data API.
        timeout: Per-call timeout in seconds.
    """

    def __init__(self, base_url: str, timeout: float, client: Optional[httpx.AsyncClient] = None):
        """Initialize the client.

        Args:
            base_url: Base URL of the order data API
            timeout: Per-call timeout in seconds
            client: Pre-built client, used by tests to inject a mock transport
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def check_order(self, order: Order) -> OrderCheckResult:
        """Ask whether the order can proceed.

        Raises:
            AvailabilityError: If the API cannot be reached or answers with an error
        """
        params = {
            "orderId": order.order_number,
            "productIds": ",".join(str(pid) for pid in order.product_ids),
            "quantity": ",".join(str(qty) for qty in order.quantities),
        }
        try:
            response = await self._client.get("/api/order/check", params=params, timeout=self.timeout)
            response.raise_for_status()
            return OrderCheckResult.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Availability check rejected | order_number={order.order_number} | "
                f"status={e.response.status_code} | body={e.response.text}"
            )
            raise AvailabilityError(f"Inventory check failed: HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.error(f"Availability check failed | order_number={order.order_number} | error={e!r}")
            raise AvailabilityError(f"Inventory check failed: {e}")
        except (ValueError, ValidationError) as e:
            logger.error(f"Malformed availability response | order_number={order.order_number} | error={e}")
            raise AvailabilityError(f"Inventory check failed: {e}")

    async def update_order(self, order: Order) -> OrderUpdateResult:
        """Allocate stock and write the ledger entry.

        A 400 answer still carries an ``OrderUpdateResult`` describing the
        rejection. A transport failure or timeout leaves the outcome unknown
        to this side.

        Raises:
            PersistenceError: If no well-formed answer was received
        """
        try:
            response = await self._client.post("/api/order/update", json=_update_body(order), timeout=self.timeout)
            if response.status_code not in (200, 400):
                response.raise_for_status()
            return OrderUpdateResult.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            raise PersistenceError(f"Failed to update order: HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            raise PersistenceError(f"Failed to update order: {e!r}")
        except (ValueError, ValidationError) as e:
            raise PersistenceError(f"Failed to update order: malformed response ({e})")

    async def aclose(self) -> None:
        await self._client.aclose()
