"""Account views — the customer's own profile and recent orders."""

from dataclasses import dataclass
from datetime import datetime

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from shop.customer.customer import Customer
from shop.order.order import Order

RECENT_ORDERS_LIMIT = 5


@dataclass(frozen=True)
class AccountSummary:
    customer_id: str
    member_since: datetime
    order_count: int
    total_spent: float
    cart_item_count: int


@dataclass(frozen=True)
class OrderHistoryEntry:
    order_id: str
    created_at: datetime
    total: float
    status: str


def account_summary(customer_id):
    customer = current_domain.repository_for(Customer).get(str(customer_id))
    orders = _orders(customer.order_ids)
    return AccountSummary(
        customer_id=str(customer.id),
        member_since=customer.created_at,
        order_count=len(customer.order_ids),
        total_spent=round(sum(order.total for order in orders if order.is_paid), 2),
        cart_item_count=sum(customer.cart_lines().values()),
    )


def order_history(customer_id, limit=RECENT_ORDERS_LIMIT):
    """The customer's last ``limit`` orders, oldest first. Unknown ids are skipped."""
    customer = current_domain.repository_for(Customer).get(str(customer_id))
    return [
        OrderHistoryEntry(
            order_id=str(order.id),
            created_at=order.created_at,
            total=order.total,
            status=order.status,
        )
        for order in _orders(customer.order_ids[-limit:])
    ]


def _orders(order_ids):
    repo = current_domain.repository_for(Order)
    orders = []
    for order_id in order_ids:
        try:
            orders.append(repo.get(order_id))
        except ObjectNotFoundError:
            continue
    return orders
