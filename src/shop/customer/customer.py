"""Customer aggregate — the caller behind the conversation, with a cart.

A customer is created the first time a caller id is seen and is never
deleted. The cart maps products to requested quantities: a line exists
only while its quantity is at least one, and a quantity never exceeds the
product's stock at the time it was added.
"""

import json
from datetime import UTC, datetime, timedelta

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from shop.customer.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CustomerRegistered,
    OrderRecorded,
)
from shop.domain import shop
from shop.errors import OutOfStockError, ProductNotFoundError, QuantityLimitError


@shop.entity(part_of="Customer")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@shop.aggregate
class Customer:
    cart_items = HasMany(CartItem)
    order_history = Text()  # JSON array of order ids, oldest first
    language = String(max_length=10, default="fr")
    created_at = DateTime()

    @invariant.post
    def cart_lines_must_be_unique_per_product(self):
        product_ids = [str(item.product_id) for item in self.cart_items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"cart": ["A product can appear only once in the cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def register(cls, customer_id, language="fr"):
        now = datetime.now(UTC)
        customer = cls(
            id=str(customer_id),
            order_history=json.dumps([]),
            language=language,
            created_at=now,
        )
        customer.raise_(
            CustomerRegistered(
                customer_id=str(customer_id),
                language=language,
                registered_at=now,
            )
        )
        return customer

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def order_ids(self):
        return json.loads(self.order_history) if self.order_history else []

    def cart_lines(self):
        """Cart contents as ``{product_id: quantity}``, in the order items were first added."""
        items = sorted(self.cart_items, key=lambda i: i.added_at or datetime.min.replace(tzinfo=UTC))
        return {str(item.product_id): item.quantity for item in items}

    def quantity_of(self, product_id):
        item = self._cart_item(product_id)
        return item.quantity if item else 0

    def _cart_item(self, product_id):
        return next((i for i in self.cart_items if str(i.product_id) == str(product_id)), None)

    # -------------------------------------------------------------------
    # Cart management
    # -------------------------------------------------------------------
    def add_to_cart(self, product):
        """Put one more unit of ``product`` in the cart, capped at its stock."""
        if product is None or not product.active:
            raise ProductNotFoundError({"product_id": ["Product not found"]})
        if (product.stock or 0) <= 0:
            raise OutOfStockError({"product_id": [f"{product.name} is out of stock"]})

        existing = self._cart_item(product.id)
        current = existing.quantity if existing else 0
        if current >= product.stock:
            raise QuantityLimitError({"quantity": [f"Stock limited to {product.stock} unit(s)"]})

        if existing:
            existing.quantity += 1
        else:
            self.add_cart_items(
                CartItem(
                    product_id=str(product.id),
                    quantity=1,
                    added_at=datetime.now(UTC),
                )
            )

        self.raise_(
            CartItemAdded(
                customer_id=str(self.id),
                product_id=str(product.id),
                quantity=current + 1,
            )
        )

    def remove_from_cart(self, product_id):
        """Take one unit out of the cart. Returns False when there was nothing to remove."""
        item = self._cart_item(product_id)
        if item is None or item.quantity <= 0:
            return False

        remaining = item.quantity - 1
        if remaining == 0:
            self.remove_cart_items(item)
        else:
            item.quantity = remaining

        self.raise_(
            CartItemRemoved(
                customer_id=str(self.id),
                product_id=str(product_id),
                quantity=remaining,
            )
        )
        return True

    def clear_cart(self):
        if not self.cart_items:
            return

        for item in list(self.cart_items):
            self.remove_cart_items(item)

        self.raise_(
            CartCleared(
                customer_id=str(self.id),
                cleared_at=datetime.now(UTC),
            )
        )

    def replace_cart(self, lines):
        """Overwrite the cart with ``{product_id: quantity}``; zero quantities are dropped."""
        for item in list(self.cart_items):
            self.remove_cart_items(item)

        now = datetime.now(UTC)
        for position, (product_id, quantity) in enumerate(lines.items()):
            if quantity and int(quantity) > 0:
                self.add_cart_items(
                    CartItem(
                        product_id=str(product_id),
                        quantity=int(quantity),
                        added_at=now + timedelta(microseconds=position),
                    )
                )

    # -------------------------------------------------------------------
    # Order history
    # -------------------------------------------------------------------
    def record_order(self, order_id):
        history = self.order_ids
        history.append(str(order_id))
        self.order_history = json.dumps(history)

        self.raise_(
            OrderRecorded(
                customer_id=str(self.id),
                order_id=str(order_id),
            )
        )
