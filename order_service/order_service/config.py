"""Environment-driven settings for the order service."""

import os

from pydantic import BaseModel, Field

DEFAULT_LOCATION_ID = 123456789


class Settings(BaseModel):
    """Runtime configuration.

    Attributes:
        kafka_bootstrap_servers: Comma-separated list of Kafka broker addresses.
        inventory_topic: Topic that carries inventory change events.
        location_id: Storefront location stamped on every inventory event.
        order_data_url: Base URL of the order data API.
        wms_url: Base URL of the warehouse management system.
        wms_api_key: Bearer key for the warehouse management system.
        http_timeout_seconds: Per-call timeout for the order data API.
        wms_timeout_seconds: Per-call timeout for the warehouse management system.
        order_timeout_seconds: Upper bound on processing one order end to end.
    """

    kafka_bootstrap_servers: str = "kafka:9092"
    inventory_topic: str = "inventory.changes"
    location_id: int = Field(DEFAULT_LOCATION_ID, gt=0)
    order_data_url: str = "http://order-data-service:8001"
    wms_url: str = "http://wms:8080"
    wms_api_key: str = ""
    http_timeout_seconds: float = Field(5.0, gt=0)
    wms_timeout_seconds: float = Field(10.0, gt=0)
    order_timeout_seconds: float = Field(30.0, gt=0)


def load_settings() -> Settings:
    """Build settings from the process environment."""
    return Settings(
        kafka_bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "kafka:9092"),
        inventory_topic=os.getenv("INVENTORY_TOPIC", "inventory.changes"),
        location_id=int(os.getenv("SHOPIFY_LOCATION_ID", str(DEFAULT_LOCATION_ID))),
        order_data_url=os.getenv("ORDER_DATA_URL", "http://order-data-service:8001"),
        wms_url=os.getenv("WMS_URL", "http://wms:8080"),
        wms_api_key=os.getenv("WMS_API_KEY", ""),
        http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "5")),
        wms_timeout_seconds=float(os.getenv("WMS_TIMEOUT_SECONDS", "10")),
        order_timeout_seconds=float(os.getenv("ORDER_PROCESSING_TIMEOUT", "30")),
    )
