"""Repositories for catalogue aggregates — ordered listings."""

from shop.catalogue.category import Category
from shop.catalogue.product import Product
from shop.domain import shop
from shop.utils.queries import fetch_all


@shop.repository(part_of=Category)
class CategoryRepository:
    def in_catalogue_order(self):
        return fetch_all(self._dao.query.order_by("position"))


@shop.repository(part_of=Product)
class ProductRepository:
    def in_catalogue_order(self):
        return fetch_all(self._dao.query.order_by("position"))

    def active_in_category(self, category_id):
        return fetch_all(
            self._dao.query.filter(category_id=str(category_id), active=True).order_by("position")
        )
