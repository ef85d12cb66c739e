"""Wire models for the webhook, the order data API, Kafka and the WMS."""

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShopifyCustomer(CamelModel):
    id: Union[int, str] = 0
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None


class ShopifyLineItem(CamelModel):
    """A line item as the storefront sends it; business rules are checked later."""

    id: int = 0
    product_id: int
    variant_id: Optional[int] = None
    quantity: int
    title: str = ""
    sku: Optional[str] = None
    price: str = "0"
    total_discount: str = "0"
    variant_title: Optional[str] = None


class ShopifyAddress(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address1: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    country: Optional[str] = None
    zip: Optional[str] = None


class ShopifyOrderPayload(CamelModel):
    """Raw order webhook payload.

    Only the shape is enforced here. Whether the order can be processed is
    decided by ``intake.validate_order`` after canonicalisation.
    """

    id: Union[int, str]
    order_number: Union[int, str]
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    processed_at: Optional[str] = None
    customer: Optional[ShopifyCustomer] = None
    line_items: list[ShopifyLineItem] = Field(default_factory=list)
    shipping_address: Optional[ShopifyAddress] = None
    billing_address: Optional[ShopifyAddress] = None
    total_price: str = "0"
    subtotal_price: str = "0"
    total_tax: str = "0"
    currency: str = "USD"
    financial_status: str = "pending"
    fulfillment_status: Optional[str] = None
    tags: Optional[str] = None
    note: Optional[str] = None
    source_name: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 820982911946154508,
                "orderNumber": 1001,
                "email": "jon@example.com",
                "customer": {"id": 115310627314723954, "email": "jon@example.com", "firstName": "Jon"},
                "lineItems": [
                    {"id": 1, "productId": 632910392, "quantity": 2, "sku": "IPOD2008PINK", "price": "199.00"}
                ],
                "shippingAddress": {"address1": "123 Amoebobacterieae St", "city": "Ottawa"},
                "billingAddress": {"address1": "123 Amoebobacterieae St", "city": "Ottawa"},
                "totalPrice": "398.00",
                "currency": "USD",
                "financialStatus": "paid",
            }
        }
    )


class OrderResponse(CamelModel):
    """Webhook response."""

    status: Literal["success", "error"]
    message: str
    order_id: str


class ProductAvailability(CamelModel):
    product_id: int
    sku: str
    title: str
    requested_quantity: int
    available_quantity: int
    remain_quantity: int
    status: str


class OrderCheckResult(CamelModel):
    """Response of the order data API availability check."""

    is_continue: bool
    description: str
    order_id: str
    products: list[ProductAvailability] = Field(default_factory=list)


class InventoryLevel(CamelModel):
    product_id: int
    available_quantity: int


class OrderUpdateResult(CamelModel):
    """Response of the order data API ledger write."""

    is_success: bool
    message: str
    error_type: Optional[str] = None
    inventory: list[InventoryLevel] = Field(default_factory=list)


class InventoryChangeEvent(CamelModel):
    """Absolute "set available to this value" instruction for one product."""

    product_id: int
    quantity: int
    location_id: int


class FulfillmentResult(CamelModel):
    is_success: bool
    fulfillment_id: Optional[str] = None
    message: str


class WmsInventory(CamelModel):
    """Warehouse view of one product's stock."""

    product_id: int
    sku: str = ""
    available_quantity: int = 0
    total_quantity: int = 0
    reserved_quantity: int = 0
    location_id: Optional[str] = None
    last_updated: Optional[str] = None
