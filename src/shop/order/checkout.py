"""Checkout — turn the customer's cart into a pending order."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from shop.catalogue.browsing import get_product
from shop.customer.customer import Customer
from shop.domain import shop
from shop.errors import EmptyCartError
from shop.order.order import Order
from shop.utils.logging import get_logger

logger = get_logger(__name__)


@shop.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)


@shop.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        """Snapshot every cart line at current prices. The cart itself stays as it is."""
        customer = current_domain.repository_for(Customer).get(str(command.customer_id))

        lines = []
        for product_id, quantity in customer.cart_lines().items():
            product = get_product(product_id)
            if product is None:
                logger.warning("Skipping cart line for unknown product", product_id=product_id)
                continue
            lines.append(
                {
                    "product_id": product_id,
                    "title": product.name,
                    "unit_price": product.price,
                    "quantity": quantity,
                }
            )

        if not lines:
            raise EmptyCartError({"cart": ["Cart is empty"]})

        order = Order.place(customer_id=customer.id, lines=lines)
        current_domain.repository_for(Order).add(order)

        logger.info("Order placed", order_id=str(order.id), customer_id=str(customer.id), total=order.total)
        return str(order.id)
