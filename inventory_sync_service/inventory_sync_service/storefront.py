"""Storefront admin API client for inventory levels."""

import requests

from .errors import SyncError
from .logger import logger


class StorefrontClient:
    """Sets absolute inventory levels in the storefront.

    Attributes:
        base_url: Store base URL.
        api_version: Admin API version segment.
        timeout: Per-call timeout in seconds.
    """

    def __init__(self, base_url: str, access_token: str, api_version: str = "2024-01", timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout
        self._access_token = access_token

    @property
    def inventory_levels_url(self) -> str:
        return f"{self.base_url}/admin/api/{self.api_version}/inventory_levels/set.json"

    def set_inventory_level(self, location_id: int, inventory_item_id: int, available: int) -> dict:
        """Set the available quantity of an item at a location.

        Setting the same value twice leaves the storefront unchanged, so a
        redelivered event is harmless.

        Args:
            location_id: Storefront location id
            inventory_item_id: Storefront inventory item id
            available: Quantity to set

        Returns:
            dict: Decoded storefront response

        Raises:
            SyncError: If the request fails or is rejected
        """
        try:
            response = requests.post(
                self.inventory_levels_url,
                headers={"X-Shopify-Access-Token": self._access_token, "Content-Type": "application/json"},
                json={"location_id": location_id, "inventory_item_id": inventory_item_id, "available": available},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise SyncError(f"Storefront rejected inventory update: HTTP {status}", status_code=status)
        except requests.RequestException as e:
            raise SyncError(f"Storefront request failed: {e}")

        logger.debug(
            f"Storefront inventory set | inventory_item_id={inventory_item_id} | location_id={location_id} | "
            f"available={available}"
        )
        try:
            return response.json()
        except ValueError:
            return {}
