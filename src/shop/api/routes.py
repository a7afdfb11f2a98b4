"""FastAPI routes for the Shop — catalogue, carts, checkout, account and administration.

Routes talk to the ``Storefront`` stored on ``app.state.storefront``, which
serializes concurrent requests and persists after every change. The storefront
blocks on locks and file writes, so the endpoints are plain functions that
FastAPI runs in its threadpool.
"""

from fastapi import APIRouter, Header, HTTPException, Request

from shop.actions import decode_action
from shop.api.schemas import (
    AccountResponse,
    ActionRequest,
    ActionResponse,
    AddToCartRequest,
    AdminReplyRequest,
    AdminStatsResponse,
    BroadcastRequest,
    BroadcastResponse,
    CartLineSchema,
    CartQuantityResponse,
    CartResponse,
    CategoryResponse,
    DeliveryResponse,
    OrderHistoryEntrySchema,
    OrderLineSchema,
    OrderResponse,
    ProductRankingSchema,
    ProductResponse,
    ReceiptLineSchema,
    ReceiptResponse,
    RemovedResponse,
    SupportMessageRequest,
)
from shop.catalogue.browsing import get_product, list_active_by_category, list_categories
from shop.errors import NotAuthorizedError, NotFoundError, UnknownActionError


def _storefront(request: Request):
    return request.app.state.storefront


def _product_response(product) -> ProductResponse:
    return ProductResponse(
        product_id=str(product.id),
        name=product.name,
        category_id=str(product.category_id),
        price=product.price,
        description=product.description,
        image=product.image,
        stock=product.stock,
    )


def _cart_response(summary) -> CartResponse:
    return CartResponse(
        lines=[
            CartLineSchema(
                product_id=line.product_id,
                name=line.name,
                unit_price=line.unit_price,
                quantity=line.quantity,
                subtotal=line.subtotal,
            )
            for line in summary.lines
        ],
        total=summary.total,
        item_count=summary.item_count,
    )


def _order_response(order) -> OrderResponse:
    return OrderResponse(
        order_id=str(order.id),
        customer_id=str(order.customer_id),
        status=order.status,
        total=order.total,
        created_at=order.created_at,
        items=[
            OrderLineSchema(
                product_id=str(item.product_id),
                title=item.title,
                unit_price=item.unit_price,
                quantity=item.quantity,
            )
            for item in order.line_items()
        ],
    )


# ---------------------------------------------------------------------------
# Catalogue Router
# ---------------------------------------------------------------------------
catalogue_router = APIRouter(tags=["catalogue"])


@catalogue_router.get("/categories", response_model=list[CategoryResponse])
def categories() -> list[CategoryResponse]:
    return [
        CategoryResponse(category_id=str(c.id), name=c.name, description=c.description) for c in list_categories()
    ]


@catalogue_router.get("/categories/{category_id}/products", response_model=list[ProductResponse])
def category_products(category_id: str) -> list[ProductResponse]:
    return [_product_response(p) for p in list_active_by_category(category_id)]


@catalogue_router.get("/products/{product_id}", response_model=ProductResponse)
def product(product_id: str) -> ProductResponse:
    found = get_product(product_id)
    if found is None or not found.active:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return _product_response(found)


# ---------------------------------------------------------------------------
# Customer Router
# ---------------------------------------------------------------------------
customer_router = APIRouter(prefix="/customers/{customer_id}", tags=["customers"])


@customer_router.get("/cart", response_model=CartResponse)
def cart(customer_id: str, request: Request) -> CartResponse:
    return _cart_response(_storefront(request).cart_summary(customer_id))


@customer_router.post("/cart/items", response_model=CartQuantityResponse)
def add_cart_item(customer_id: str, body: AddToCartRequest, request: Request) -> CartQuantityResponse:
    """Add one unit of a product to the cart."""
    try:
        quantity = _storefront(request).add_to_cart(customer_id, body.product_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return CartQuantityResponse(product_id=body.product_id, quantity=quantity)


@customer_router.delete("/cart/items/{product_id}", response_model=RemovedResponse)
def remove_cart_item(customer_id: str, product_id: str, request: Request) -> RemovedResponse:
    """Take one unit of a product out of the cart."""
    return RemovedResponse(removed=_storefront(request).remove_from_cart(customer_id, product_id))


@customer_router.delete("/cart", response_model=CartResponse)
def clear_cart(customer_id: str, request: Request) -> CartResponse:
    storefront = _storefront(request)
    storefront.clear_cart(customer_id)
    return _cart_response(storefront.cart_summary(customer_id))


@customer_router.post("/checkout", status_code=201, response_model=OrderResponse)
def checkout(customer_id: str, request: Request) -> OrderResponse:
    """Turn the cart into a pending order."""
    return _order_response(_storefront(request).checkout(customer_id))


@customer_router.post("/orders/{order_id}/confirm-payment", response_model=ReceiptResponse)
def confirm_payment(customer_id: str, order_id: str, request: Request) -> ReceiptResponse:
    """Confirm the simulated payment of a pending order. Repeats return the same receipt."""
    try:
        receipt = _storefront(request).confirm_payment(customer_id, order_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return ReceiptResponse(
        order_id=receipt.order_id,
        customer_id=receipt.customer_id,
        total=receipt.total,
        paid_at=receipt.paid_at,
        lines=[
            ReceiptLineSchema(title=line.title, quantity=line.quantity, line_total=line.line_total)
            for line in receipt.lines
        ],
        newly_paid=receipt.newly_paid,
    )


@customer_router.get("/account", response_model=AccountResponse)
def account(customer_id: str, request: Request) -> AccountResponse:
    summary = _storefront(request).account(customer_id)
    return AccountResponse(
        customer_id=summary.customer_id,
        member_since=summary.member_since,
        order_count=summary.order_count,
        total_spent=summary.total_spent,
        cart_item_count=summary.cart_item_count,
    )


@customer_router.get("/orders", response_model=list[OrderHistoryEntrySchema])
def recent_orders(customer_id: str, request: Request) -> list[OrderHistoryEntrySchema]:
    return [
        OrderHistoryEntrySchema(
            order_id=entry.order_id,
            created_at=entry.created_at,
            total=entry.total,
            status=entry.status,
        )
        for entry in _storefront(request).recent_orders(customer_id)
    ]


@customer_router.post("/support", response_model=DeliveryResponse)
def support_message(customer_id: str, body: SupportMessageRequest, request: Request) -> DeliveryResponse:
    """Relay a free-text message to the administrator."""
    delivered = _storefront(request).forward_support_message(customer_id, body.text, body.display_name)
    return DeliveryResponse(delivered=delivered)


@customer_router.post("/actions", response_model=ActionResponse)
def perform_action(customer_id: str, body: ActionRequest, request: Request) -> ActionResponse:
    """Perform a button action sent by the conversational front end."""
    try:
        action = decode_action(body.data)
    except UnknownActionError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        _storefront(request).perform(customer_id, action)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return ActionResponse(action=type(action).__name__)


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.get("/stats", response_model=AdminStatsResponse)
def admin_stats(request: Request, x_caller_id: str = Header(default="")) -> AdminStatsResponse:
    try:
        stats = _storefront(request).admin_stats(x_caller_id)
    except NotAuthorizedError:
        raise HTTPException(status_code=403, detail="Administrator access required")
    return AdminStatsResponse(
        total_users=stats.total_users,
        total_orders=stats.total_orders,
        total_revenue=stats.total_revenue,
        top_products=[
            ProductRankingSchema(product_id=r.product_id, name=r.name, quantity_sold=r.quantity_sold)
            for r in stats.top_products
        ],
    )


@admin_router.post("/reply", response_model=DeliveryResponse)
def admin_reply(
    body: AdminReplyRequest,
    request: Request,
    x_caller_id: str = Header(default=""),
) -> DeliveryResponse:
    try:
        delivered = _storefront(request).admin_reply(x_caller_id, body.customer_id, body.text)
    except NotAuthorizedError:
        raise HTTPException(status_code=403, detail="Administrator access required")
    return DeliveryResponse(delivered=delivered)


@admin_router.post("/broadcast", response_model=BroadcastResponse)
def admin_broadcast(
    body: BroadcastRequest,
    request: Request,
    x_caller_id: str = Header(default=""),
) -> BroadcastResponse:
    try:
        sent = _storefront(request).admin_broadcast(x_caller_id, body.text)
    except NotAuthorizedError:
        raise HTTPException(status_code=403, detail="Administrator access required")
    return BroadcastResponse(sent=sent)
