"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Text

from shop.domain import shop


@shop.event(part_of="Order")
class OrderPlaced:
    """A cart was snapshotted into a pending order at checkout."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, title, unit_price, quantity}
    total = Float(required=True)
    created_at = DateTime(required=True)


@shop.event(part_of="Order")
class OrderPaid:
    """Payment for a pending order was confirmed."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    total = Float(required=True)
    paid_at = DateTime(required=True)
