"""SQLAlchemy models for the order ledger and the inventory table."""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

SYSTEM_USER = "system"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class OrderStatus(str, Enum):
    """Lifecycle of a ledger order."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    FULFILLED = "FULFILLED"
    CANCELLED = "CANCELLED"
    ERROR = "ERROR"


# Legacy rows written by earlier order tooling use COMPLETED / SUCCESS.
COMPLETED_STATUSES = frozenset({OrderStatus.FULFILLED.value, "COMPLETED", "SUCCESS"})

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    OrderStatus.PENDING.value: frozenset({OrderStatus.PROCESSING.value}),
    OrderStatus.PROCESSING.value: frozenset({OrderStatus.FULFILLED.value, OrderStatus.ERROR.value}),
}


class AuditMixin:
    create_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    create_by: Mapped[str] = mapped_column(String(50), default=SYSTEM_USER)
    update_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    update_by: Mapped[str] = mapped_column(String(50), default=SYSTEM_USER)


class Inventory(AuditMixin, Base):
    """Stock record of one product. ``update_date`` doubles as lastUpdated."""

    __tablename__ = "inventory"
    __table_args__ = (
        CheckConstraint("available_quantity >= 0", name="ck_inventory_available_nonneg"),
        CheckConstraint("reserved_quantity >= 0", name="ck_inventory_reserved_nonneg"),
    )

    product_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    sku: Mapped[str] = mapped_column(String(50), unique=True)
    product_title: Mapped[str] = mapped_column(String(255))
    product_price: Mapped[str] = mapped_column(String(20), default="0")
    currency: Mapped[str] = mapped_column(String(10), default="USD")
    available_quantity: Mapped[int] = mapped_column(Integer, default=0)
    total_quantity: Mapped[int] = mapped_column(Integer, default=0)
    reserved_quantity: Mapped[int] = mapped_column(Integer, default=0)

    def has_available_stock(self, requested_quantity: int) -> bool:
        return self.available_quantity >= requested_quantity


class Order(AuditMixin, Base):
    """Ledger header. Rows are never deleted; terminal states keep the audit trail."""

    __tablename__ = "orders"

    order_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_number: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    customer_id: Mapped[str] = mapped_column(String(32))
    product_type_count: Mapped[int] = mapped_column(Integer)
    total_price: Mapped[str] = mapped_column(String(20))
    currency: Mapped[str] = mapped_column(String(10), default="USD")
    order_status: Mapped[str] = mapped_column(String(16), default=OrderStatus.PENDING.value)

    details: Mapped[list["OrderDetail"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", order_by="OrderDetail.id"
    )

    def is_completed(self) -> bool:
        return self.order_status in COMPLETED_STATUSES

    def can_transition_to(self, status: str) -> bool:
        return status in ALLOWED_TRANSITIONS.get(self.order_status, frozenset())


class OrderDetail(AuditMixin, Base):
    __tablename__ = "order_detail"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.order_id"))
    product_id: Mapped[int] = mapped_column(BigInteger)
    sku: Mapped[str] = mapped_column(String(50))
    price: Mapped[str] = mapped_column(String(20))
    quantity: Mapped[int] = mapped_column(Integer)

    order: Mapped[Order] = relationship(back_populates="details")
