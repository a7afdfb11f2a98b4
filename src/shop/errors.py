"""Error taxonomy of the shop.

Not-found conditions extend protean's ``ObjectNotFoundError``; stock and
cart rule violations extend ``ValidationError`` so they carry the usual
``{field: [messages]}`` payload and map to 400 responses at the API edge.
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError


class NotFoundError(ObjectNotFoundError):
    """A product, category, order or customer does not exist."""


class ProductNotFoundError(NotFoundError):
    pass


class OrderNotFoundError(NotFoundError):
    pass


class OutOfStockError(ValidationError):
    """The product has no stock left."""


class QuantityLimitError(ValidationError):
    """The cart already holds every available unit of the product."""


class InsufficientStockError(ValidationError):
    """A stock decrement asks for more units than are available."""


class EmptyCartError(ValidationError):
    """Checkout was attempted with nothing in the cart."""


class NotAuthorizedError(InvalidOperationError):
    """An administrative operation was requested by a non-administrator."""


class UnknownActionError(InvalidOperationError):
    """Inbound action data could not be decoded."""
