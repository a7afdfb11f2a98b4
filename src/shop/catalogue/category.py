"""Category aggregate — a named shelf of products, immutable once loaded."""

from protean.fields import Integer, String, Text

from shop.domain import shop


@shop.aggregate
class Category:
    name = String(required=True, max_length=100)
    description = Text()
    position = Integer(default=0)  # Catalogue insertion order
