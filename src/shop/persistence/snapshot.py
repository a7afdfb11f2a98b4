"""Snapshot codec — converts domain state to and from store documents.

The documents keep the layout of the shop's data files:

- ``products``: ``{id: {name, category, price, description, image, stock, active}}``
- ``categories``: ``{id: {name, description}}``
- ``users``: ``{id: {id, cart: {product_id: quantity}, orders: [...], createdAt, language}}``
- ``orders``: ``{id: {id, userId, items: {product_id: {name, price, quantity}},
  total, status, createdAt, paidAt}}``
- ``stats``: ``{totalUsers, totalOrders, totalRevenue, topProducts: {product_id: sold}}``

Catalogue order is the key order of the ``products``/``categories`` documents.
"""

import json
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from shop.catalogue.category import Category
from shop.catalogue.product import Product
from shop.customer.customer import Customer
from shop.order.order import Order, OrderStatus
from shop.persistence.port import CATEGORIES, ORDERS, PRODUCTS, STATS, USERS
from shop.stats.stats import STATS_ID, ShopStats, load_stats
from shop.utils.logging import get_logger

logger = get_logger(__name__)

_STATUSES = {status.value for status in OrderStatus}


def _format_datetime(value):
    return value.isoformat() if value else None


def _parse_datetime(value):
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


# ---------------------------------------------------------------------------
# Dump
# ---------------------------------------------------------------------------
def dump_products():
    return {
        str(product.id): {
            "name": product.name,
            "category": str(product.category_id),
            "price": product.price,
            "description": product.description,
            "image": product.image,
            "stock": product.stock,
            "active": product.active,
        }
        for product in current_domain.repository_for(Product).in_catalogue_order()
    }


def dump_categories():
    return {
        str(category.id): {"name": category.name, "description": category.description}
        for category in current_domain.repository_for(Category).in_catalogue_order()
    }


def dump_users():
    return {
        str(customer.id): {
            "id": str(customer.id),
            "cart": customer.cart_lines(),
            "orders": customer.order_ids,
            "createdAt": _format_datetime(customer.created_at),
            "language": customer.language,
        }
        for customer in current_domain.repository_for(Customer).all_customers()
    }


def dump_orders():
    return {
        str(order.id): {
            "id": str(order.id),
            "userId": str(order.customer_id),
            "items": {
                str(item.product_id): {
                    "name": item.title,
                    "price": item.unit_price,
                    "quantity": item.quantity,
                }
                for item in order.line_items()
            },
            "total": order.total,
            "status": order.status,
            "createdAt": _format_datetime(order.created_at),
            "paidAt": _format_datetime(order.paid_at),
        }
        for order in current_domain.repository_for(Order).all_orders()
    }


def dump_stats():
    stats = load_stats()
    return {
        "totalUsers": stats.total_users or 0,
        "totalOrders": stats.total_orders or 0,
        "totalRevenue": round(stats.total_revenue or 0.0, 2),
        "topProducts": stats.sales_by_product(),
    }


# ---------------------------------------------------------------------------
# Restore
# ---------------------------------------------------------------------------
UNREADABLE = (AttributeError, KeyError, TypeError, ValueError, ValidationError)


def _records(document, kind):
    """Yield ``(key, record)`` pairs, skipping records that are not objects."""
    for key, data in document.items():
        if not isinstance(data, dict):
            logger.warning(f"Skipping unreadable {kind} record", key=key, error="not an object")
            continue
        yield key, data


def restore_products(document):
    repo = current_domain.repository_for(Product)
    restored = 0
    for position, (product_id, data) in enumerate(_records(document, "product")):
        try:
            product = Product(
                id=str(product_id),
                name=data["name"],
                category_id=str(data.get("category") or data.get("category_id")),
                price=float(data.get("price", 0)),
                description=data.get("description"),
                image=data.get("image"),
                stock=int(data.get("stock", 0)),
                active=bool(data.get("active", True)),
                position=position,
            )
        except UNREADABLE as exc:
            logger.warning("Skipping unreadable product record", key=product_id, error=str(exc))
            continue
        repo.add(product)
        restored += 1
    return restored


def restore_categories(document):
    repo = current_domain.repository_for(Category)
    restored = 0
    for position, (category_id, data) in enumerate(_records(document, "category")):
        try:
            category = Category(
                id=str(category_id),
                name=data["name"],
                description=data.get("description"),
                position=position,
            )
        except UNREADABLE as exc:
            logger.warning("Skipping unreadable category record", key=category_id, error=str(exc))
            continue
        repo.add(category)
        restored += 1
    return restored


def restore_users(document):
    repo = current_domain.repository_for(Customer)
    restored = 0
    for customer_id, data in _records(document, "user"):
        try:
            customer = Customer(
                id=str(customer_id),
                order_history=json.dumps([str(order_id) for order_id in data.get("orders") or []]),
                language=data.get("language") or "fr",
                created_at=_parse_datetime(data.get("createdAt")) or datetime.now(UTC),
            )
            customer.replace_cart(data.get("cart") or {})
        except UNREADABLE as exc:
            logger.warning("Skipping unreadable user record", key=customer_id, error=str(exc))
            continue
        repo.add(customer)
        restored += 1
    return restored


def restore_orders(document):
    repo = current_domain.repository_for(Order)
    restored = 0
    for order_id, data in _records(document, "order"):
        try:
            lines = [
                {
                    "product_id": product_id,
                    "title": item["name"],
                    "unit_price": float(item["price"]),
                    "quantity": int(item["quantity"]),
                }
                for product_id, item in (data.get("items") or {}).items()
            ]
            total = round(sum(round(line["unit_price"] * line["quantity"], 2) for line in lines), 2)
            stored_total = float(data.get("total", total))
            if abs(stored_total - total) >= 0.01:
                logger.warning(
                    "Stored order total differs from its lines, using the line sum",
                    order_id=order_id,
                    stored_total=stored_total,
                    total=total,
                )

            status = str(data.get("status") or OrderStatus.PENDING.value).lower()
            if status not in _STATUSES:
                status = OrderStatus.PENDING.value
            paid_at = _parse_datetime(data.get("paidAt"))
            if status == OrderStatus.PAID.value and paid_at is None:
                paid_at = _parse_datetime(data.get("createdAt"))

            order = Order.restore(
                order_id=order_id,
                customer_id=data.get("userId"),
                lines=lines,
                total=total,
                status=status,
                created_at=_parse_datetime(data.get("createdAt")) or datetime.now(UTC),
                paid_at=paid_at if status == OrderStatus.PAID.value else None,
            )
        except UNREADABLE as exc:
            logger.warning("Skipping unreadable order record", key=order_id, error=str(exc))
            continue
        repo.add(order)
        restored += 1
    return restored


def _parse_stats(document):
    stats = ShopStats(
        id=STATS_ID,
        total_users=int(document.get("totalUsers") or 0),
        total_orders=int(document.get("totalOrders") or 0),
        total_revenue=round(float(document.get("totalRevenue") or 0.0), 2),
    )
    for product_id, quantity in (document.get("topProducts") or {}).items():
        stats.add_units_sold(product_id, int(quantity))
    return stats


def restore_stats(document):
    """Restore the counters, starting from zero when the document is unreadable."""
    try:
        stats = _parse_stats(document)
    except UNREADABLE as exc:
        logger.warning("Unreadable stats document, counters start from zero", error=str(exc))
        stats = ShopStats.empty()
    current_domain.repository_for(ShopStats).add(stats)
    return 1


DUMPERS = {
    PRODUCTS: dump_products,
    CATEGORIES: dump_categories,
    USERS: dump_users,
    ORDERS: dump_orders,
    STATS: dump_stats,
}

# Catalogue first so that carts and orders can be checked against it
RESTORERS = {
    CATEGORIES: restore_categories,
    PRODUCTS: restore_products,
    USERS: restore_users,
    ORDERS: restore_orders,
    STATS: restore_stats,
}


def dump_store(store):
    return DUMPERS[store]()


def restore_store(store, document):
    return RESTORERS[store](document)
