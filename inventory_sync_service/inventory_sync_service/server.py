"""FastAPI entry point for the Inventory Sync Service."""

import threading
from contextlib import asynccontextmanager

from confluent_kafka.admin import AdminClient
from fastapi import FastAPI

from .config import Settings, load_settings
from .consumer import InventorySyncConsumer
from .dispatcher import PartitionedDispatcher
from .logger import logger
from .processor import InventorySyncProcessor
from .storefront import StorefrontClient


class SyncServiceState:
    """Holds the running consumer and its poll thread."""

    def __init__(self):
        self.settings: Settings | None = None
        self.consumer: InventorySyncConsumer | None = None
        self.thread: threading.Thread | None = None


def build_consumer(settings: Settings) -> InventorySyncConsumer:
    """Wire the consumer, processor and storefront client from settings."""
    storefront = StorefrontClient(
        settings.storefront_url,
        settings.storefront_token,
        api_version=settings.storefront_api_version,
        timeout=settings.storefront_timeout_seconds,
    )
    return InventorySyncConsumer(
        bootstrap_servers=settings.kafka_bootstrap_servers,
        group_id=settings.consumer_group,
        topic=settings.inventory_topic,
        processor=InventorySyncProcessor(storefront),
        dispatcher=PartitionedDispatcher(settings.worker_count, settings.worker_queue_size),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the poll loop in a background thread and stop it on shutdown."""
    state.settings = state.settings or load_settings()
    state.consumer = state.consumer or build_consumer(state.settings)

    state.thread = threading.Thread(target=state.consumer.run, name="inventory-sync-poll", daemon=True)
    state.thread.start()
    logger.info(f"Consumer thread started | topic={state.settings.inventory_topic}")

    yield

    logger.info("Shutting down inventory sync service...")
    state.consumer.stop()
    state.thread.join(timeout=15)
    state.consumer.close()
    logger.info("Shutdown complete")


app = FastAPI(title="Inventory Sync Service", lifespan=lifespan)
state = SyncServiceState()


@app.get("/health")
async def health_check():
    """Basic health check endpoint."""
    running = state.consumer is not None and state.consumer.is_running
    return {"status": "healthy", "consumer": "running" if running else "stopped"}


@app.get("/health/ready")
def readiness_check():
    """Readiness check that verifies Kafka connection."""
    settings = state.settings or load_settings()
    try:
        admin = AdminClient({"bootstrap.servers": settings.kafka_bootstrap_servers})
        cluster_metadata = admin.list_topics(timeout=10)
        if cluster_metadata is not None:
            return {"status": "ready", "kafka": "connected"}
    except Exception as e:
        logger.error(f"Kafka connection failed: {e}")
    return {"status": "not ready", "kafka": "disconnected"}
