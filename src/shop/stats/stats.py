"""ShopStats aggregate — derived sales counters for the whole shop.

A single record (id ``"shop"``) holds the counters. They are written only
by customer registration (user count) and by payment confirmation (order
count, revenue, per-product units sold), never by order creation.
"""

from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, HasMany, Identifier, Integer
from protean.utils.globals import current_domain

from shop.domain import shop

STATS_ID = "shop"


@shop.entity(part_of="ShopStats")
class ProductSales:
    product_id = Identifier(required=True)
    quantity_sold = Integer(default=0, min_value=0)


@shop.aggregate
class ShopStats:
    total_users = Integer(default=0, min_value=0)
    total_orders = Integer(default=0, min_value=0)
    total_revenue = Float(default=0.0)
    product_sales = HasMany(ProductSales)

    @classmethod
    def empty(cls):
        return cls(id=STATS_ID, total_users=0, total_orders=0, total_revenue=0.0)

    def sold(self, product_id):
        entry = self._sales_for(product_id)
        return entry.quantity_sold if entry else 0

    def sales_by_product(self):
        return {str(entry.product_id): entry.quantity_sold for entry in self.product_sales}

    def _sales_for(self, product_id):
        return next((s for s in self.product_sales if str(s.product_id) == str(product_id)), None)

    def record_customer(self):
        self.total_users = (self.total_users or 0) + 1

    def record_paid_order(self, total, quantities):
        """Count one paid order: its total and ``{product_id: quantity}`` sold."""
        self.total_orders = (self.total_orders or 0) + 1
        self.total_revenue = round((self.total_revenue or 0.0) + total, 2)

        for product_id, quantity in quantities.items():
            self.add_units_sold(product_id, quantity)

    def add_units_sold(self, product_id, quantity):
        entry = self._sales_for(product_id)
        if entry:
            entry.quantity_sold += quantity
        else:
            self.add_product_sales(ProductSales(product_id=str(product_id), quantity_sold=quantity))


def load_stats():
    """Return the stats record, or a fresh unsaved one when none exists yet."""
    try:
        return current_domain.repository_for(ShopStats).get(STATS_ID)
    except ObjectNotFoundError:
        return ShopStats.empty()
