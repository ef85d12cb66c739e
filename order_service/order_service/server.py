"""Order Service Server."""

from contextlib import asynccontextmanager

from confluent_kafka.admin import AdminClient
from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse

from .clients import OrderDataClient
from .config import Settings, load_settings
from .fulfillment import FulfillmentDispatcher
from .logger import logger
from .processing import OrderProcessor
from .producer import InventoryEventPublisher
from .schemas import ShopifyOrderPayload


class OrderServiceState:
    """Holds the settings and the order processor of the running service."""

    def __init__(self):
        self.settings: Settings | None = None
        self.processor: OrderProcessor | None = None


def build_processor(settings: Settings) -> OrderProcessor:
    """Wire the order processor from settings.

    Args:
        settings: Service configuration

    Returns:
        OrderProcessor: Processor with live clients
    """
    return OrderProcessor(
        data_client=OrderDataClient(settings.order_data_url, settings.http_timeout_seconds),
        publisher=InventoryEventPublisher(
            settings.kafka_bootstrap_servers, topic=settings.inventory_topic, location_id=settings.location_id
        ),
        fulfillment=FulfillmentDispatcher(settings.wms_url, settings.wms_api_key, settings.wms_timeout_seconds),
        order_timeout=settings.order_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the processor on startup unless one was injected, drain it on shutdown."""
    if state.settings is None:
        state.settings = load_settings()
    if state.processor is None:
        state.processor = build_processor(state.settings)
    logger.info(
        f"Order service started | topic={state.settings.inventory_topic} | "
        f"order_data_url={state.settings.order_data_url}"
    )
    yield
    logger.info("Shutting down order service...")
    await state.processor.aclose()
    logger.info("Shutdown complete")


app = FastAPI(title="Order Service", lifespan=lifespan)
router = APIRouter()
state = OrderServiceState()


@router.get("/health")
def health_check():
    """Check the health status of the service.

    Returns:
        dict: Contains Kafka connection status.
    """
    return {"kafka": _check_kafka_connection()}


@router.get("/health/ready")
def readiness_check():
    """Check if the service is ready to accept traffic.

    Returns:
        dict: Service readiness status and Kafka connection status.
    """
    kafka_ok = _check_kafka_connection()
    return {"status": "ready" if kafka_ok else "not_ready", "kafka": kafka_ok}


@router.post("/api/shopify/webhooks/orders")
async def receive_order(payload: ShopifyOrderPayload):
    """Process an order webhook.

    Args:
        payload (ShopifyOrderPayload): The order as sent by the storefront.

    Returns:
        dict: ``{status, message, orderId}``; 200 on success, 400 otherwise.
    """
    logger.info(f"Received order webhook | order_number={payload.order_number}")
    result = await state.processor.process(payload)
    body = result.response.model_dump(by_alias=True)
    return JSONResponse(status_code=200 if result.is_success else 400, content=body)


def _check_kafka_connection() -> bool:
    """Check if Kafka connection is available.

    Returns:
        bool: True if Kafka is accessible, False otherwise.
    """
    bootstrap_servers = state.settings.kafka_bootstrap_servers if state.settings else load_settings().kafka_bootstrap_servers
    try:
        admin = AdminClient({"bootstrap.servers": bootstrap_servers})
        return bool(admin.list_topics(timeout=5))
    except Exception as e:
        logger.error(f"Kafka connection failed: {e}")
        return False


app.include_router(router)
