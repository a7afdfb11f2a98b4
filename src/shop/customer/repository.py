"""Repository for the Customer aggregate."""

from shop.customer.customer import Customer
from shop.domain import shop
from shop.utils.queries import fetch_all


@shop.repository(part_of=Customer)
class CustomerRepository:
    def all_customers(self):
        return fetch_all(self._dao.query.order_by("created_at"))

    def all_ids(self):
        return [str(customer.id) for customer in self.all_customers()]
