"""Transactional inventory allocation and order ledger write.

Allocation and the ledger insert share one database transaction: a failure
on any line item, or in the ledger insert itself, rolls back every decrement
made for the order. Each decrement is a conditional UPDATE guarded by
``available_quantity >= requested``, so two concurrent orders can never both
take the same units.
"""

from collections.abc import Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .availability import find_order
from .errors import (
    DuplicateOrderError,
    InvalidStatusTransition,
    InventoryAllocationError,
    LedgerPersistenceError,
    OrderNotFoundError,
)
from .logger import logger
from .models import SYSTEM_USER, Inventory, Order, OrderDetail, OrderStatus, utcnow
from .schemas import (
    InventoryLevel,
    OrderLineItemPayload,
    OrderUpdateRequest,
    OrderUpdateResponse,
    StatusUpdateResponse,
)

ORDER_UPDATE_SUCCESS_MESSAGE = "Order updated successfully"


def allocate(session: Session, line_items: Sequence[OrderLineItemPayload]) -> list[InventoryLevel]:
    """Decrement available stock for every line item, in input order.

    Must run inside an open transaction; the caller decides whether to commit.

    Args:
        session: Session with an active transaction.
        line_items: Items to allocate.

    Returns:
        list[InventoryLevel]: Post-allocation available quantity per product,
        in first-seen order.

    Raises:
        InventoryAllocationError: On the first product that is missing or short.
    """
    levels: dict[int, int] = {}
    for item in line_items:
        result = session.execute(
            update(Inventory)
            .where(Inventory.product_id == item.product_id)
            .where(Inventory.available_quantity >= item.quantity)
            .values(
                available_quantity=Inventory.available_quantity - item.quantity,
                reserved_quantity=Inventory.reserved_quantity + item.quantity,
                update_date=utcnow(),
                update_by=SYSTEM_USER,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            exists = session.execute(
                select(Inventory.product_id).where(Inventory.product_id == item.product_id)
            ).first()
            if exists is None:
                raise InventoryAllocationError(f"product not found: {item.product_id}")
            raise InventoryAllocationError(f"insufficient stock for product {item.product_id}")

        levels[item.product_id] = session.execute(
            select(Inventory.available_quantity).where(Inventory.product_id == item.product_id)
        ).scalar_one()
        logger.debug(
            f"Allocated | product_id={item.product_id} | quantity={item.quantity} | "
            f"available={levels[item.product_id]}"
        )

    return [InventoryLevel(product_id=pid, available_quantity=qty) for pid, qty in levels.items()]


def build_order(request: OrderUpdateRequest) -> Order:
    """Map the update request to a PROCESSING ledger order with its detail rows."""
    now = utcnow()
    order = Order(
        order_number=request.order_number,
        customer_id=request.customer_id,
        product_type_count=len(request.line_items),
        total_price=request.total_price,
        currency=request.currency,
        order_status=OrderStatus.PROCESSING.value,
        create_date=now,
        update_date=now,
    )
    for item in request.line_items:
        order.details.append(
            OrderDetail(
                product_id=item.product_id,
                sku=item.sku,
                price=item.price,
                quantity=item.quantity,
                create_date=now,
                update_date=now,
            )
        )
    return order


def update_order(session_factory: sessionmaker[Session], request: OrderUpdateRequest) -> OrderUpdateResponse:
    """Allocate inventory and write the ledger entry as one atomic unit."""
    try:
        with session_factory.begin() as session:
            if find_order(session, request.order_number) is not None:
                raise DuplicateOrderError(f"order already recorded: {request.order_number}")
            levels = allocate(session, request.line_items)
            session.add(build_order(request))
            session.flush()
    except InventoryAllocationError as e:
        logger.warning(f"Allocation rejected | order_number={request.order_number} | reason={e.message}")
        return OrderUpdateResponse(is_success=False, message=e.message, error_type=e.error_type)
    except DuplicateOrderError as e:
        logger.warning(f"Ledger write rejected | order_number={request.order_number} | reason={e.message}")
        return OrderUpdateResponse(is_success=False, message=e.message, error_type=e.error_type)
    except SQLAlchemyError as e:
        logger.critical(
            f"Ledger write failed, allocation rolled back | order_number={request.order_number} | error={e}"
        )
        return OrderUpdateResponse(
            is_success=False,
            message=f"Failed to create order: {e}",
            error_type=LedgerPersistenceError.error_type,
        )

    logger.info(
        f"Order recorded | order_number={request.order_number} | status={OrderStatus.PROCESSING.value} | "
        f"line_items={len(request.line_items)}"
    )
    return OrderUpdateResponse(is_success=True, message=ORDER_UPDATE_SUCCESS_MESSAGE, inventory=levels)


def transition_order_status(
    session_factory: sessionmaker[Session], order_number: str, status: OrderStatus
) -> StatusUpdateResponse:
    """Move a ledger order along PENDING -> PROCESSING -> {FULFILLED, ERROR}.

    Raises:
        OrderNotFoundError: If no order has this number.
        InvalidStatusTransition: If the move is not allowed from the current status.
    """
    with session_factory.begin() as session:
        order = session.execute(
            select(Order).where(Order.order_number == order_number).with_for_update()
        ).scalar_one_or_none()
        if order is None:
            raise OrderNotFoundError(f"order not found: {order_number}")
        if not order.can_transition_to(status.value):
            raise InvalidStatusTransition(f"cannot move order {order_number} from {order.order_status} to {status.value}")

        previous = order.order_status
        order.order_status = status.value
        order.update_date = utcnow()

    logger.info(f"Order status changed | order_number={order_number} | from={previous} | to={status.value}")
    return StatusUpdateResponse(order_number=order_number, order_status=status.value)
