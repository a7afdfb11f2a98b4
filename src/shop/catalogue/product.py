"""Product aggregate — a sellable item and its stock count.

Stock only goes down through ``decrement_stock``, which the payment
confirmation drives once per order line. A decrement that would leave
the shelf negative is refused without touching the count.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text

from shop.catalogue.events import LowStockDetected, StockDecremented
from shop.domain import shop
from shop.errors import InsufficientStockError

LOW_STOCK_THRESHOLD = 5


@shop.aggregate
class Product:
    name = String(required=True, max_length=255)
    category_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)
    description = Text()
    image = String(max_length=20)  # Display glyph
    stock = Integer(default=0, min_value=0)
    active = Boolean(default=True)
    position = Integer(default=0)  # Catalogue insertion order

    @invariant.post
    def stock_cannot_be_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

    @property
    def in_stock(self):
        return self.active and (self.stock or 0) > 0

    @property
    def is_low_on_stock(self):
        return (self.stock or 0) <= LOW_STOCK_THRESHOLD

    def decrement_stock(self, quantity):
        """Remove ``quantity`` units from the shelf.

        Raises ``InsufficientStockError`` and leaves stock unchanged when the
        request exceeds what is available. Every decrement that ends at or
        below ``LOW_STOCK_THRESHOLD`` raises a ``LowStockDetected`` event.
        """
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if quantity > self.stock:
            raise InsufficientStockError(
                {"stock": [f"Only {self.stock} unit(s) of {self.name} available, {quantity} requested"]}
            )

        self.stock -= quantity
        now = datetime.now(UTC)

        self.raise_(
            StockDecremented(
                product_id=str(self.id),
                quantity=quantity,
                remaining_stock=self.stock,
                decremented_at=now,
            )
        )

        if self.stock <= LOW_STOCK_THRESHOLD:
            self.raise_(
                LowStockDetected(
                    product_id=str(self.id),
                    name=self.name,
                    remaining_stock=self.stock,
                    threshold=LOW_STOCK_THRESHOLD,
                    detected_at=now,
                )
            )
