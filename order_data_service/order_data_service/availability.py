"""Read-only order deduplication and inventory feasibility check.

The check is advisory: it reserves nothing, and a concurrent order may take the
stock between this check and the allocation. The allocator's conditional
update is the only authority on whether stock was actually reserved.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from .logger import logger
from .models import Inventory, Order
from .schemas import OrderCheckResponse, ProductAvailability

ORDER_ALREADY_COMPLETED_MESSAGE = "order already exists and completed"
INVENTORY_CHECK_SUCCESS_MESSAGE = "success"
INVENTORY_CHECK_FAILURE_MESSAGE = "not enough inventory"

PRODUCT_NOT_AVAILABLE_SKU = "N/A"
PRODUCT_NOT_FOUND_TITLE = "Product not found"

STATUS_AVAILABLE = "available"
STATUS_INSUFFICIENT = "insufficient"
STATUS_NOT_FOUND = "not_found"


def find_order(session: Session, order_number: str) -> Order | None:
    return session.execute(select(Order).where(Order.order_number == order_number)).scalar_one_or_none()


def find_inventory(session: Session, product_id: int) -> Inventory | None:
    return session.get(Inventory, product_id)


def check_product(session: Session, product_id: int, requested_quantity: int) -> ProductAvailability:
    """Classify one product as available, insufficient or not found."""
    inventory = find_inventory(session, product_id)
    if inventory is None:
        return ProductAvailability(
            product_id=product_id,
            sku=PRODUCT_NOT_AVAILABLE_SKU,
            title=PRODUCT_NOT_FOUND_TITLE,
            requested_quantity=requested_quantity,
            available_quantity=0,
            remain_quantity=0,
            status=STATUS_NOT_FOUND,
        )

    is_available = inventory.has_available_stock(requested_quantity)
    remain = inventory.available_quantity - requested_quantity if is_available else inventory.available_quantity
    return ProductAvailability(
        product_id=inventory.product_id,
        sku=inventory.sku,
        title=inventory.product_title,
        requested_quantity=requested_quantity,
        available_quantity=inventory.available_quantity,
        remain_quantity=remain,
        status=STATUS_AVAILABLE if is_available else STATUS_INSUFFICIENT,
    )


def check_order_and_inventory(
    session: Session,
    order_id: str,
    product_ids: list[int],
    quantities: list[int],
) -> OrderCheckResponse:
    """Check whether an inbound order can proceed.

    Args:
        session: Open session; nothing is written through it.
        order_id: Order number used for the duplicate-delivery guard.
        product_ids: Requested products, positionally paired with ``quantities``.
        quantities: Requested quantity per product.

    Returns:
        OrderCheckResponse: ``is_continue`` is true only when every product is available.

    Raises:
        ValueError: If the two lists differ in length.
    """
    if len(product_ids) != len(quantities):
        raise ValueError(
            f"productIds and quantity must have the same length ({len(product_ids)} != {len(quantities)})"
        )

    existing = find_order(session, order_id)
    if existing is not None and existing.is_completed():
        logger.info(f"Duplicate delivery of completed order | order_number={order_id} | status={existing.order_status}")
        return OrderCheckResponse(
            is_continue=False,
            description=ORDER_ALREADY_COMPLETED_MESSAGE,
            order_id=order_id,
            products=[],
        )

    products = [check_product(session, pid, qty) for pid, qty in zip(product_ids, quantities)]
    all_available = all(p.status == STATUS_AVAILABLE for p in products)

    if not all_available:
        short = [f"{p.product_id}:{p.status}" for p in products if p.status != STATUS_AVAILABLE]
        logger.info(f"Inventory check failed | order_number={order_id} | products={short}")

    return OrderCheckResponse(
        is_continue=all_available,
        description=INVENTORY_CHECK_SUCCESS_MESSAGE if all_available else INVENTORY_CHECK_FAILURE_MESSAGE,
        order_id=order_id,
        products=products,
    )
