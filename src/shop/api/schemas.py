"""Pydantic request/response schemas for the Shop API.

These are external contracts, separate from the internal protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class CategoryResponse(BaseModel):
    category_id: str
    name: str
    description: str | None = None


class ProductResponse(BaseModel):
    product_id: str
    name: str
    category_id: str
    price: float
    description: str | None = None
    image: str | None = None
    stock: int


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str

    model_config = {"json_schema_extra": {"examples": [{"product_id": "prod_001"}]}}


class CartQuantityResponse(BaseModel):
    product_id: str
    quantity: int


class RemovedResponse(BaseModel):
    removed: bool


class CartLineSchema(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    subtotal: float


class CartResponse(BaseModel):
    lines: list[CartLineSchema]
    total: float
    item_count: int


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderLineSchema(BaseModel):
    product_id: str
    title: str
    unit_price: float
    quantity: int


class OrderResponse(BaseModel):
    order_id: str
    customer_id: str
    status: str
    total: float
    created_at: datetime
    items: list[OrderLineSchema]


class ReceiptLineSchema(BaseModel):
    title: str
    quantity: int
    line_total: float


class ReceiptResponse(BaseModel):
    order_id: str
    customer_id: str
    total: float
    paid_at: datetime
    lines: list[ReceiptLineSchema]
    newly_paid: bool


class OrderHistoryEntrySchema(BaseModel):
    order_id: str
    created_at: datetime
    total: float
    status: str


class AccountResponse(BaseModel):
    customer_id: str
    member_since: datetime
    order_count: int
    total_spent: float
    cart_item_count: int


# ---------------------------------------------------------------------------
# Support, actions
# ---------------------------------------------------------------------------
class SupportMessageRequest(BaseModel):
    text: str = Field(min_length=1)
    display_name: str | None = None


class ActionRequest(BaseModel):
    data: str = Field(min_length=1)

    model_config = {"json_schema_extra": {"examples": [{"data": "add_prod_001"}]}}


class ActionResponse(BaseModel):
    action: str


class DeliveryResponse(BaseModel):
    delivered: bool


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------
class ProductRankingSchema(BaseModel):
    product_id: str
    name: str
    quantity_sold: int


class AdminStatsResponse(BaseModel):
    total_users: int
    total_orders: int
    total_revenue: float
    top_products: list[ProductRankingSchema]


class AdminReplyRequest(BaseModel):
    customer_id: str
    text: str = Field(min_length=1)


class BroadcastRequest(BaseModel):
    text: str = Field(min_length=1)


class BroadcastResponse(BaseModel):
    sent: int
