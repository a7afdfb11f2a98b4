"""Domain events for the Customer aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from shop.domain import shop


@shop.event(part_of="Customer")
class CustomerRegistered:
    """A caller was seen for the first time."""

    __version__ = 1

    customer_id = Identifier(required=True)
    language = String()
    registered_at = DateTime(required=True)


@shop.event(part_of="Customer")
class CartItemAdded:
    """One unit of a product went into the cart."""

    __version__ = 1

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)  # Quantity after the change


@shop.event(part_of="Customer")
class CartItemRemoved:
    """One unit of a product came out of the cart."""

    __version__ = 1

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)  # Quantity after the change, 0 when the line is gone


@shop.event(part_of="Customer")
class CartCleared:
    """The cart was emptied, by the customer or by a paid order."""

    __version__ = 1

    customer_id = Identifier(required=True)
    cleared_at = DateTime(required=True)


@shop.event(part_of="Customer")
class OrderRecorded:
    """A paid order was appended to the customer's order history."""

    __version__ = 1

    customer_id = Identifier(required=True)
    order_id = Identifier(required=True)
