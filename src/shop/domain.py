"""Shop bounded context — catalogue, customers, carts, orders and sales statistics.

A single-tenant order-taking engine for a conversational storefront. Carts
turn into pending orders at checkout; a manual payment confirmation marks
the order paid, decrements stock and updates the sales counters.
"""

from protean.domain import Domain

from shop.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
shop = Domain(name="shop")
