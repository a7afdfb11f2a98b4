"""Domain events for the catalogue aggregates."""

from protean.fields import DateTime, Identifier, Integer, String

from shop.domain import shop


@shop.event(part_of="Product")
class StockDecremented:
    """Units of a product left the shelf because an order was paid."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    remaining_stock = Integer(required=True)
    decremented_at = DateTime(required=True)


@shop.event(part_of="Product")
class LowStockDetected:
    """Remaining stock fell to or below the low-stock threshold."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    remaining_stock = Integer(required=True)
    threshold = Integer(required=True)
    detected_at = DateTime(required=True)
