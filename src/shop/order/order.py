"""Order aggregate — a priced snapshot of a cart moving from Pending to Paid.

Line items copy the product name, price and quantity at checkout, so the
order total never follows later catalogue edits. The only transition is
Pending → Paid; asking to pay a paid order changes nothing.
"""

import json
import secrets
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from shop.domain import shop
from shop.order.events import OrderPaid, OrderPlaced


class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"


def generate_order_id(customer_id, now=None):
    """Time-ordered order id that stays unique within one clock tick.

    ``ORD-<epoch ms>-<customer id>-<8 random hex digits>``
    """
    now = now or datetime.now(UTC)
    millis = int(now.timestamp() * 1000)
    return f"ORD-{millis}-{customer_id}-{secrets.token_hex(4)}"


@shop.entity(part_of="Order")
class OrderItem:
    """A line of the order, frozen at checkout time."""

    product_id = Identifier(required=True)
    title = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    position = Integer(default=0)

    @property
    def line_total(self):
        return round(self.unit_price * self.quantity, 2)


@shop.aggregate
class Order:
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    total = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    created_at = DateTime(required=True)
    paid_at = DateTime()

    @invariant.post
    def paid_at_is_set_only_for_paid_orders(self):
        if (self.status == OrderStatus.PAID.value) != (self.paid_at is not None):
            raise ValidationError({"paid_at": ["Paid timestamp must be present exactly when the order is paid"]})

    @invariant.post
    def total_matches_line_items(self):
        if self.items and round(sum(item.line_total for item in self.items), 2) != round(self.total, 2):
            raise ValidationError({"total": ["Order total must equal the sum of its line items"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_id, lines, order_id=None):
        """Create a pending order from ``lines``.

        Args:
            customer_id: Owner of the order.
            lines: List of dicts with product_id, title, unit_price, quantity.
            order_id: Explicit id, used when restoring; generated otherwise.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one line item"]})

        now = datetime.now(UTC)
        items = [
            OrderItem(
                product_id=str(line["product_id"]),
                title=line["title"],
                unit_price=float(line["unit_price"]),
                quantity=int(line["quantity"]),
                position=position,
            )
            for position, line in enumerate(lines)
        ]
        total = round(sum(item.line_total for item in items), 2)

        order = cls(
            id=order_id or generate_order_id(customer_id, now),
            customer_id=str(customer_id),
            total=total,
            status=OrderStatus.PENDING.value,
            created_at=now,
        )
        with atomic_change(order):
            for item in items:
                order.add_items(item)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                items=json.dumps([order._line_dict(item) for item in items]),
                total=total,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_paid(self):
        return self.status == OrderStatus.PAID.value

    def line_items(self):
        return sorted(self.items, key=lambda item: item.position or 0)

    def quantities(self):
        """``{product_id: quantity}`` over every line."""
        quantities = {}
        for item in self.line_items():
            quantities[str(item.product_id)] = quantities.get(str(item.product_id), 0) + item.quantity
        return quantities

    @staticmethod
    def _line_dict(item):
        return {
            "product_id": str(item.product_id),
            "title": item.title,
            "unit_price": item.unit_price,
            "quantity": item.quantity,
        }

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def mark_paid(self):
        """Move Pending → Paid. Returns False, changing nothing, when already paid."""
        if self.is_paid:
            return False

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.PAID.value
            self.paid_at = now

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                total=self.total,
                paid_at=now,
            )
        )
        return True

    @classmethod
    def restore(cls, order_id, customer_id, lines, total, status, created_at, paid_at=None):
        """Rebuild a stored order as-is, without raising events."""
        order = cls(
            id=str(order_id),
            customer_id=str(customer_id),
            total=round(float(total), 2),
            status=status,
            created_at=created_at,
            paid_at=paid_at,
        )
        with atomic_change(order):
            for position, line in enumerate(lines):
                order.add_items(
                    OrderItem(
                        product_id=str(line["product_id"]),
                        title=line["title"],
                        unit_price=float(line["unit_price"]),
                        quantity=int(line["quantity"]),
                        position=position,
                    )
                )
        return order
