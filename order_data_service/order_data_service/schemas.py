"""Wire models of the order data API (camelCase on the wire)."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import OrderStatus

ProductStatus = Literal["available", "insufficient", "not_found"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProductAvailability(CamelModel):
    """Availability of one requested product at check time."""

    product_id: int
    sku: str
    title: str
    requested_quantity: int
    available_quantity: int
    remain_quantity: int
    status: ProductStatus


class OrderCheckResponse(CamelModel):
    is_continue: bool
    description: str
    order_id: str
    products: list[ProductAvailability] = Field(default_factory=list)


class OrderLineItemPayload(CamelModel):
    id: int = 0
    product_id: int
    quantity: int = Field(..., gt=0)
    title: str = ""
    sku: str = Field(..., min_length=1)
    price: str = "0"
    total_discount: str = "0"


class OrderUpdateRequest(CamelModel):
    """Canonical order as sent by the order API for the ledger write."""

    id: str
    order_number: str = Field(..., min_length=1)
    customer_id: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    processed_at: Optional[str] = None
    line_items: list[OrderLineItemPayload] = Field(..., min_length=1)
    total_price: str
    currency: str = "USD"

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "820982911946154508",
                "orderNumber": "1001",
                "customerId": "115310627314723954",
                "lineItems": [
                    {"id": 1, "productId": 632910392, "quantity": 2, "sku": "IPOD2008PINK", "price": "199.00"}
                ],
                "totalPrice": "398.00",
                "currency": "USD",
            }
        }
    )


class InventoryLevel(CamelModel):
    """Post-allocation available quantity of a product."""

    product_id: int
    available_quantity: int


class OrderUpdateResponse(CamelModel):
    is_success: bool
    message: str
    error_type: Optional[str] = None
    inventory: list[InventoryLevel] = Field(default_factory=list)


class StatusUpdateRequest(CamelModel):
    status: OrderStatus


class StatusUpdateResponse(CamelModel):
    order_number: str
    order_status: str
