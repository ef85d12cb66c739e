"""Canonical order model used inside the order service."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"


class FinancialStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    REFUNDED = "REFUNDED"
    PARTIALLY_REFUNDED = "PARTIALLY_REFUNDED"


class FulfillmentStatus(str, Enum):
    UNFULFILLED = "UNFULFILLED"
    PARTIALLY_FULFILLED = "PARTIALLY_FULFILLED"
    FULFILLED = "FULFILLED"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    FULFILLED = "FULFILLED"
    CANCELLED = "CANCELLED"
    ERROR = "ERROR"


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.FULFILLED, OrderStatus.ERROR}),
}


class Money(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: Decimal
    currency: Currency

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.value}"


class Customer(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    phone: Optional[str] = None


class Address(BaseModel):
    model_config = ConfigDict(frozen=True)

    first_name: str = ""
    last_name: str = ""
    address1: str = ""
    city: str = ""
    province: str = ""
    country: str = ""
    zip: str = ""


class OrderLineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    product_id: int
    variant_id: Optional[int] = None
    quantity: int
    title: str = ""
    sku: str = ""
    price: Money
    total_discount: Money
    variant_title: Optional[str] = None


class Order(BaseModel):
    """A canonicalised order.

    Instances are immutable; the ``mark_as_*`` methods return updated copies
    and refuse transitions outside PENDING -> PROCESSING -> {FULFILLED, ERROR}.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    order_number: str
    name: Optional[str] = None
    customer: Customer
    line_items: tuple[OrderLineItem, ...] = ()
    shipping_address: Address
    billing_address: Address
    total_price: Money
    subtotal_price: Money
    total_tax: Money
    currency: Currency
    financial_status: FinancialStatus
    fulfillment_status: Optional[FulfillmentStatus] = None
    tags: list[str] = Field(default_factory=list)
    note: Optional[str] = None
    source_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    status: OrderStatus = OrderStatus.PENDING

    @property
    def product_ids(self) -> list[int]:
        return [item.product_id for item in self.line_items]

    @property
    def quantities(self) -> list[int]:
        return [item.quantity for item in self.line_items]

    def _transition(self, status: OrderStatus) -> "Order":
        if status not in ALLOWED_TRANSITIONS.get(self.status, frozenset()):
            raise ValueError(f"Cannot move order {self.order_number} from {self.status.value} to {status.value}")
        return self.model_copy(update={"status": status})

    def mark_as_processing(self) -> "Order":
        return self._transition(OrderStatus.PROCESSING)

    def mark_as_fulfilled(self) -> "Order":
        return self._transition(OrderStatus.FULFILLED)

    def mark_as_error(self) -> "Order":
        return self._transition(OrderStatus.ERROR)


class SideEffectOutcome(BaseModel):
    """Result of a non-fatal step that runs after the order is accepted."""

    name: str
    is_success: bool
    message: str = ""
