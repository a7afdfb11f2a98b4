"""Read-only views over the shop statistics."""

from dataclasses import dataclass

from shop.catalogue.browsing import list_products
from shop.stats.stats import load_stats

TOP_PRODUCTS_LIMIT = 5


@dataclass(frozen=True)
class StatsSnapshot:
    total_users: int
    total_orders: int
    total_revenue: float
    product_sales: dict[str, int]


@dataclass(frozen=True)
class ProductRanking:
    product_id: str
    name: str
    quantity_sold: int


def stats_snapshot():
    stats = load_stats()
    return StatsSnapshot(
        total_users=stats.total_users or 0,
        total_orders=stats.total_orders or 0,
        total_revenue=round(stats.total_revenue or 0.0, 2),
        product_sales=stats.sales_by_product(),
    )


def top_products(n=TOP_PRODUCTS_LIMIT):
    """Best sellers by quantity sold; ties keep catalogue order.

    Products that were sold but are no longer in the catalogue rank after
    catalogue products with the same count and are named by their id.
    """
    sales = load_stats().sales_by_product()
    names = {}
    order = {}
    for position, product in enumerate(list_products()):
        names[str(product.id)] = product.name
        order[str(product.id)] = position

    ranked = sorted(
        sales.items(),
        key=lambda entry: (-entry[1], order.get(entry[0], len(order)), entry[0]),
    )
    return [
        ProductRanking(product_id=product_id, name=names.get(product_id, product_id), quantity_sold=quantity)
        for product_id, quantity in ranked[:n]
    ]
