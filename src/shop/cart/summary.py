"""Cart summary — read-only view of a cart at live catalogue prices.

Until checkout snapshots them, cart lines follow the current price of
each product. Lines whose product vanished from the catalogue are left out.
"""

from dataclasses import dataclass

from protean.utils.globals import current_domain

from shop.catalogue.browsing import get_product
from shop.customer.customer import Customer


@dataclass(frozen=True)
class CartLine:
    product_id: str
    name: str
    image: str | None
    unit_price: float
    quantity: int

    @property
    def subtotal(self):
        return round(self.unit_price * self.quantity, 2)


@dataclass(frozen=True)
class CartSummary:
    lines: tuple[CartLine, ...]
    total: float

    @property
    def is_empty(self):
        return not self.lines

    @property
    def item_count(self):
        return sum(line.quantity for line in self.lines)


def summarize_cart(customer_id):
    customer = current_domain.repository_for(Customer).get(str(customer_id))
    return summarize_lines(customer.cart_lines())


def summarize_lines(cart_lines):
    """Price ``{product_id: quantity}`` against the current catalogue."""
    lines = []
    for product_id, quantity in cart_lines.items():
        product = get_product(product_id)
        if product is None:
            continue
        lines.append(
            CartLine(
                product_id=product_id,
                name=product.name,
                image=product.image,
                unit_price=product.price,
                quantity=quantity,
            )
        )
    total = round(sum(line.unit_price * line.quantity for line in lines), 2)
    return CartSummary(lines=tuple(lines), total=total)
