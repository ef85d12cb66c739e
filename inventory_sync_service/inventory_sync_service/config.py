"""Environment-driven settings for the inventory sync service."""

import os

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Runtime configuration.

    Attributes:
        kafka_bootstrap_servers: Comma-separated list of Kafka broker addresses.
        inventory_topic: Topic carrying inventory change events.
        consumer_group: Kafka consumer group id.
        storefront_url: Base URL of the storefront admin API.
        storefront_token: Admin API access token.
        storefront_api_version: Admin API version segment of the URL.
        storefront_timeout_seconds: Per-call timeout for the storefront.
        worker_count: Number of partition workers.
        worker_queue_size: Buffered messages per worker before polling blocks.
    """

    kafka_bootstrap_servers: str = "kafka:9092"
    inventory_topic: str = "inventory.changes"
    consumer_group: str = "inventory-sync"
    storefront_url: str = "https://example.myshopify.com"
    storefront_token: str = ""
    storefront_api_version: str = "2024-01"
    storefront_timeout_seconds: float = Field(10.0, gt=0)
    worker_count: int = Field(4, ge=1)
    worker_queue_size: int = Field(100, ge=1)


def load_settings() -> Settings:
    """Build settings from the process environment."""
    return Settings(
        kafka_bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "kafka:9092"),
        inventory_topic=os.getenv("INVENTORY_TOPIC", "inventory.changes"),
        consumer_group=os.getenv("KAFKA_CONSUMER_GROUP", "inventory-sync"),
        storefront_url=os.getenv("SHOPIFY_STORE_URL", "https://example.myshopify.com"),
        storefront_token=os.getenv("SHOPIFY_ACCESS_TOKEN", ""),
        storefront_api_version=os.getenv("SHOPIFY_API_VERSION", "2024-01"),
        storefront_timeout_seconds=float(os.getenv("SHOPIFY_TIMEOUT_SECONDS", "10")),
        worker_count=int(os.getenv("SYNC_WORKERS", "4")),
        worker_queue_size=int(os.getenv("SYNC_WORKER_QUEUE_SIZE", "100")),
    )
