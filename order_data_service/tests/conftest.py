"""Test fixtures for the order data service tests."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from order_data_service.db import create_session_factory, init_db
from order_data_service.models import Inventory, Order, OrderStatus
from order_data_service.schemas import OrderLineItemPayload, OrderUpdateRequest
from order_data_service.server import app, state


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine shared by every session of a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def add_inventory(session_factory):
    """Insert an inventory record.

    Returns:
        Callable: ``add_inventory(product_id, available, sku=None)``
    """

    def _add(product_id: int, available: int, sku: str | None = None) -> None:
        with session_factory.begin() as session:
            session.add(
                Inventory(
                    product_id=product_id,
                    sku=sku or f"SKU-{product_id}",
                    product_title=f"Product {product_id}",
                    product_price="10.00",
                    available_quantity=available,
                    total_quantity=available,
                    reserved_quantity=0,
                )
            )

    return _add


@pytest.fixture
def add_order(session_factory):
    """Insert a ledger order with the given status."""

    def _add(order_number: str, status: str = OrderStatus.PROCESSING.value) -> None:
        with session_factory.begin() as session:
            session.add(
                Order(
                    order_number=order_number,
                    customer_id="cust-1",
                    product_type_count=1,
                    total_price="10.00",
                    currency="USD",
                    order_status=status,
                )
            )

    return _add


@pytest.fixture
def make_request():
    """Build an OrderUpdateRequest from ``(product_id, quantity)`` pairs."""

    def _make(order_number: str, *items: tuple[int, int]) -> OrderUpdateRequest:
        return OrderUpdateRequest(
            id=f"id-{order_number}",
            order_number=order_number,
            customer_id="cust-1",
            line_items=[
                OrderLineItemPayload(id=i, product_id=pid, quantity=qty, sku=f"SKU-{pid}", price="10.00")
                for i, (pid, qty) in enumerate(items, start=1)
            ],
            total_price="20.00",
        )

    return _make


@pytest.fixture
def test_client(engine):
    """Create a test client bound to the in-memory ledger."""
    state.configure(engine)
    with TestClient(app) as client:
        yield client
    state.engine = None
    state.session_factory = None
