"""Warehouse management system client for fulfillment orders."""

from typing import Optional

import httpx

from .domain import Order
from .errors import FulfillmentError
from .logger import logger
from .schemas import FulfillmentResult, WmsInventory

ACCEPTED_STATUSES = frozenset({"pending", "success"})
SHIPPING_METHOD = "standard"


class FulfillmentDispatcher:
    """Sends accepted orders to the warehouse for picking and shipping."""

    def __init__(self, base_url: str, api_key: str, timeout: float, client: Optional[httpx.AsyncClient] = None):
        """Initialize the dispatcher.

        Args:
            base_url: Base URL of the warehouse management system
            api_key: Bearer key for the warehouse API
            timeout: Per-call timeout in seconds
            client: Pre-built client, used by tests to inject a mock transport
        """
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={"Authorization": f"Bearer {api_key}"},
        )

    @staticmethod
    def _request_body(order: Order) -> dict:
        address = order.shipping_address
        return {
            "referenceId": order.order_number,
            "items": [
                {"productId": item.product_id, "quantity": item.quantity, "sku": item.sku}
                for item in order.line_items
            ],
            "shippingAddress": {
                "firstName": address.first_name,
                "lastName": address.last_name,
                "address1": address.address1,
                "city": address.city,
                "state": address.province,
                "zipCode": address.zip,
                "country": address.country,
            },
            "shippingMethod": SHIPPING_METHOD,
            "customerEmail": order.customer.email,
        }

    async def _create(self, order: Order) -> str:
        try:
            response = await self._client.post(
                "/api/v1/fulfillment-orders", json=self._request_body(order), timeout=self.timeout
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise FulfillmentError(f"Fulfillment request failed: {e!r}")
        except ValueError as e:
            raise FulfillmentError(f"Fulfillment response is not JSON: {e}")

        if not isinstance(body, dict):
            raise FulfillmentError(f"Fulfillment response is not an object: {type(body).__name__}")
        status = str(body.get("status", "")).lower()
        if status not in ACCEPTED_STATUSES:
            raise FulfillmentError(f"Fulfillment rejected with status {status or 'unknown'}")
        return str(body.get("fulfillmentOrderId", ""))

    async def create_fulfillment_order(self, order: Order) -> FulfillmentResult:
        """Create a fulfillment order in the warehouse.

        Failures are logged as warnings and returned, never raised.

        Args:
            order: The accepted order

        Returns:
            FulfillmentResult: Success flag, warehouse fulfillment id and message
        """
        try:
            fulfillment_id = await self._create(order)
        except FulfillmentError as e:
            logger.warning(f"Fulfillment not created | order_number={order.order_number} | reason={e.message}")
            return FulfillmentResult(is_success=False, message=e.message)

        logger.info(f"Fulfillment created | order_number={order.order_number} | fulfillment_id={fulfillment_id}")
        return FulfillmentResult(
            is_success=True, fulfillment_id=fulfillment_id, message="Fulfillment order created successfully"
        )

    async def get_product_inventory(self, product_id: int) -> WmsInventory:
        """Read the warehouse view of a product's stock.

        Returns:
            WmsInventory: Zeroed record if the warehouse cannot be read
        """
        try:
            response = await self._client.get(f"/api/v1/products/{product_id}/inventory", timeout=self.timeout)
            response.raise_for_status()
            return WmsInventory.model_validate({"productId": product_id, **response.json()})
        except (httpx.HTTPError, ValueError, TypeError) as e:
            logger.error(f"Failed to read warehouse inventory | product_id={product_id} | error={e!r}")
            return WmsInventory(product_id=product_id)

    async def aclose(self) -> None:
        await self._client.aclose()
