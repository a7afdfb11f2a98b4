"""Repository for the Order aggregate."""

from shop.domain import shop
from shop.order.order import Order
from shop.utils.queries import fetch_all


@shop.repository(part_of=Order)
class OrderRepository:
    def all_orders(self):
        return fetch_all(self._dao.query.order_by("created_at"))
