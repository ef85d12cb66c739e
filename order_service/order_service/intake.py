"""Canonicalisation and business validation of inbound orders."""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from pydantic import BaseModel

from .domain import (
    Address,
    Currency,
    Customer,
    FinancialStatus,
    FulfillmentStatus,
    Money,
    Order,
    OrderLineItem,
)
from .errors import OrderValidationError
from .schemas import ShopifyAddress, ShopifyOrderPayload

NOT_PROCESSABLE_MESSAGE = "Order cannot be processed"
CUSTOMER_INCOMPLETE_MESSAGE = "Customer information is incomplete"
NO_LINE_ITEMS_MESSAGE = "Order must have at least one line item"
QUANTITY_NOT_POSITIVE_MESSAGE = "Line item quantity must be positive"
SKU_REQUIRED_MESSAGE = "Line item SKU is required"
SHIPPING_INCOMPLETE_MESSAGE = "Shipping address is incomplete"
BILLING_INCOMPLETE_MESSAGE = "Billing address is incomplete"

# Storefront shorthand for a partially shipped order
_FULFILLMENT_ALIASES = {"PARTIAL": FulfillmentStatus.PARTIALLY_FULFILLED}


class Valid(BaseModel):
    is_valid: bool = True


class Invalid(BaseModel):
    message: str
    is_valid: bool = False


ValidationResult = Union[Valid, Invalid]


def _invalid_payload(detail: str) -> OrderValidationError:
    return OrderValidationError(f"Invalid order payload: {detail}")


def _money(raw: str, currency: Currency, field: str) -> Money:
    try:
        return Money(amount=Decimal(raw.strip()), currency=currency)
    except (InvalidOperation, ValueError, AttributeError):
        raise _invalid_payload(f"{field} is not a decimal amount ({raw!r})")


def _timestamp(raw: Optional[str], field: str) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise _invalid_payload(f"{field} is not an ISO-8601 timestamp ({raw!r})")


def _address(raw: Optional[ShopifyAddress]) -> Address:
    if raw is None:
        return Address()
    return Address(**{name: value or "" for name, value in raw.model_dump().items()})


def _parse_currency(raw: str) -> Currency:
    try:
        return Currency(raw.strip().upper())
    except ValueError:
        raise _invalid_payload(f"unsupported currency {raw!r}")


def _parse_financial_status(raw: str) -> FinancialStatus:
    try:
        return FinancialStatus(raw.strip().upper())
    except ValueError:
        raise _invalid_payload(f"unknown financial status {raw!r}")


def _parse_fulfillment_status(raw: Optional[str]) -> Optional[FulfillmentStatus]:
    if not raw:
        return None
    key = raw.strip().upper()
    if key in _FULFILLMENT_ALIASES:
        return _FULFILLMENT_ALIASES[key]
    try:
        return FulfillmentStatus(key)
    except ValueError:
        raise _invalid_payload(f"unknown fulfillment status {raw!r}")


def to_order(payload: ShopifyOrderPayload) -> Order:
    """Canonicalise a webhook payload into an ``Order``.

    Money strings become Decimal amounts, enum values are matched
    case-insensitively and timestamps are parsed as ISO-8601.

    Args:
        payload: Parsed webhook body

    Returns:
        Order: PENDING order

    Raises:
        OrderValidationError: If a value cannot be converted
    """
    currency = _parse_currency(payload.currency)

    customer_raw = payload.customer
    customer = Customer(
        id=str(customer_raw.id) if customer_raw else "",
        email=(customer_raw.email if customer_raw else None) or payload.email or "",
        first_name=(customer_raw.first_name if customer_raw else None) or "",
        last_name=(customer_raw.last_name if customer_raw else None) or "",
        phone=(customer_raw.phone if customer_raw else None) or payload.phone,
    )

    line_items = tuple(
        OrderLineItem(
            id=item.id,
            product_id=item.product_id,
            variant_id=item.variant_id,
            quantity=item.quantity,
            title=item.title,
            sku=item.sku or "",
            price=_money(item.price, currency, "lineItems.price"),
            total_discount=_money(item.total_discount, currency, "lineItems.totalDiscount"),
            variant_title=item.variant_title,
        )
        for item in payload.line_items
    )

    return Order(
        id=str(payload.id),
        order_number=str(payload.order_number),
        name=payload.name,
        customer=customer,
        line_items=line_items,
        shipping_address=_address(payload.shipping_address),
        billing_address=_address(payload.billing_address),
        total_price=_money(payload.total_price, currency, "totalPrice"),
        subtotal_price=_money(payload.subtotal_price, currency, "subtotalPrice"),
        total_tax=_money(payload.total_tax, currency, "totalTax"),
        currency=currency,
        financial_status=_parse_financial_status(payload.financial_status),
        fulfillment_status=_parse_fulfillment_status(payload.fulfillment_status),
        tags=[tag.strip() for tag in (payload.tags or "").split(",") if tag.strip()],
        note=payload.note,
        source_name=payload.source_name,
        created_at=_timestamp(payload.created_at, "createdAt"),
        updated_at=_timestamp(payload.updated_at, "updatedAt"),
        processed_at=_timestamp(payload.processed_at, "processedAt"),
    )


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def validate_order(order: Order) -> ValidationResult:
    """Apply the business rules in fixed order; the first violation wins.

    Args:
        order: Canonical order

    Returns:
        ValidationResult: ``Valid()`` or ``Invalid(message)``
    """
    if order.financial_status != FinancialStatus.PAID:
        return Invalid(message=NOT_PROCESSABLE_MESSAGE)

    if _blank(order.customer.email) or _blank(order.customer.first_name):
        return Invalid(message=CUSTOMER_INCOMPLETE_MESSAGE)

    if not order.line_items:
        return Invalid(message=NO_LINE_ITEMS_MESSAGE)

    for item in order.line_items:
        if item.quantity <= 0:
            return Invalid(message=QUANTITY_NOT_POSITIVE_MESSAGE)
        if _blank(item.sku):
            return Invalid(message=SKU_REQUIRED_MESSAGE)

    if _blank(order.shipping_address.address1) or _blank(order.shipping_address.city):
        return Invalid(message=SHIPPING_INCOMPLETE_MESSAGE)

    if _blank(order.billing_address.address1) or _blank(order.billing_address.city):
        return Invalid(message=BILLING_INCOMPLETE_MESSAGE)

    return Valid()
