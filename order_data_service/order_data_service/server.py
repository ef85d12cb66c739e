"""FastAPI server for the order data API."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .allocation import transition_order_status, update_order
from .availability import check_order_and_inventory
from .config import load_settings
from .db import create_db_engine, create_session_factory, init_db
from .errors import InvalidStatusTransition, OrderNotFoundError
from .logger import logger
from .schemas import (
    OrderCheckResponse,
    OrderUpdateRequest,
    OrderUpdateResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
)


class LedgerState:
    """Holds the database engine and session factory of the running service."""

    def __init__(self):
        self.engine: Engine | None = None
        self.session_factory: sessionmaker[Session] | None = None

    def configure(self, engine: Engine) -> None:
        """Bind the state to an engine and create missing tables.

        Args:
            engine: Engine of the ledger database
        """
        self.engine = engine
        self.session_factory = create_session_factory(engine)
        init_db(engine)

    def sessions(self) -> sessionmaker[Session]:
        if self.session_factory is None:
            raise HTTPException(status_code=503, detail="Database not initialised")
        return self.session_factory


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to the ledger database unless a test already bound one."""
    if state.engine is None:
        settings = load_settings()
        state.configure(create_db_engine(settings))
        logger.info(f"Ledger database ready | url={state.engine.url.render_as_string(hide_password=True)}")
    yield
    logger.info("Shutting down order data service...")


app = FastAPI(title="Order Data Service", lifespan=lifespan)
state = LedgerState()


def _parse_id_list(raw: str, name: str) -> list[int]:
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{name} must be a comma separated list of integers")


@app.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy"}


@app.get("/health/ready")
def readiness_check():
    """Readiness check that verifies the database connection."""
    if state.engine is None:
        return {"status": "not ready", "database": "disconnected"}
    try:
        with state.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "ready", "database": "connected"}
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        return {"status": "not ready", "database": "disconnected"}


@app.get("/api/order/check", response_model=OrderCheckResponse, response_model_by_alias=True)
def check_order(
    order_id: str = Query(..., alias="orderId", min_length=1),
    product_ids: str = Query(..., alias="productIds"),
    quantity: str = Query(...),
):
    """Check whether an order can proceed.

    Args:
        order_id: Order number used for the duplicate-delivery guard
        product_ids: Comma separated product ids
        quantity: Comma separated quantities, paired with ``product_ids`` by position

    Returns:
        OrderCheckResponse: Continue flag, description and per-product availability

    Raises:
        HTTPException: If the lists are malformed or differ in length
    """
    ids = _parse_id_list(product_ids, "productIds")
    quantities = _parse_id_list(quantity, "quantity")
    logger.info(f"Order check | order_number={order_id} | product_ids={ids} | quantities={quantities}")

    session_factory = state.sessions()
    with session_factory() as session:
        try:
            return check_order_and_inventory(session, order_id, ids, quantities)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/order/update", response_model=OrderUpdateResponse, response_model_by_alias=True)
def record_order(request: OrderUpdateRequest):
    """Allocate inventory and record the order in the ledger.

    Args:
        request: Canonical order

    Returns:
        OrderUpdateResponse: 200 with post-allocation levels on success, 400 with the reason otherwise
    """
    logger.info(f"Order update | order_number={request.order_number} | line_items={len(request.line_items)}")
    result = update_order(state.sessions(), request)
    if not result.is_success:
        return JSONResponse(status_code=400, content=result.model_dump(by_alias=True))
    return result


@app.post(
    "/api/order/{order_number}/status", response_model=StatusUpdateResponse, response_model_by_alias=True
)
def change_order_status(order_number: str, request: StatusUpdateRequest):
    """Move a recorded order to a new status.

    Raises:
        HTTPException: 404 for an unknown order, 409 for a disallowed transition
    """
    try:
        return transition_order_status(state.sessions(), order_number, request.status)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=e.message)
