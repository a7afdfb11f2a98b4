"""Payment confirmation — the Pending → Paid step of checkout.

Payment is simulated: the customer presses "confirm" and this handler
applies the order's effects as one unit of work:

    (a) decrement stock for every line (low-stock alerts at <= 5 left)
    (b) mark the order Paid with its paid timestamp
    (c) clear the owner's cart and append the order to their history
    (d) count the order, its revenue and units sold in the shop stats

Every line is checked against current stock before anything changes, so a
confirmation either applies all four effects or none. Confirming an order
that is already paid is a silent no-op that returns the same receipt, which
absorbs duplicate callbacks from the conversational front end.
"""

from dataclasses import dataclass, field
from datetime import datetime

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from shop.catalogue.browsing import get_product
from shop.catalogue.product import Product
from shop.customer.customer import Customer
from shop.domain import shop
from shop.errors import InsufficientStockError, OrderNotFoundError
from shop.order.order import Order
from shop.stats.stats import ShopStats, load_stats
from shop.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LowStockAlert:
    product_id: str
    name: str
    remaining_stock: int


@dataclass(frozen=True)
class ReceiptLine:
    title: str
    quantity: int
    line_total: float


@dataclass(frozen=True)
class PaymentReceipt:
    """Outcome of a confirmation. Equal for the first call and any repeat."""

    order_id: str
    customer_id: str
    total: float
    paid_at: datetime
    lines: tuple[ReceiptLine, ...]
    newly_paid: bool = field(default=False, compare=False)
    low_stock: tuple[LowStockAlert, ...] = field(default=(), compare=False)

    @classmethod
    def for_order(cls, order, newly_paid=False, low_stock=()):
        return cls(
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            total=order.total,
            paid_at=order.paid_at,
            lines=tuple(
                ReceiptLine(title=item.title, quantity=item.quantity, line_total=item.line_total)
                for item in order.line_items()
            ),
            newly_paid=newly_paid,
            low_stock=tuple(low_stock),
        )


@shop.command(part_of="Order")
class ConfirmPayment:
    order_id = Identifier(required=True)
    customer_id = Identifier()  # When given, the order must belong to this customer


@shop.command_handler(part_of=Order)
class ConfirmPaymentHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        order_repo = current_domain.repository_for(Order)
        try:
            order = order_repo.get(str(command.order_id))
        except ObjectNotFoundError:
            raise OrderNotFoundError({"order_id": [f"Order {command.order_id} not found"]})

        if command.customer_id and str(order.customer_id) != str(command.customer_id):
            raise OrderNotFoundError({"order_id": [f"Order {command.order_id} not found"]})

        if order.is_paid:
            logger.info("Duplicate payment confirmation ignored", order_id=str(order.id))
            return PaymentReceipt.for_order(order)

        quantities = order.quantities()
        products = self._reserve(quantities)

        # (a) stock
        product_repo = current_domain.repository_for(Product)
        low_stock = []
        for product_id, quantity in quantities.items():
            product = products[product_id]
            product.decrement_stock(quantity)
            if product.is_low_on_stock:
                low_stock.append(
                    LowStockAlert(product_id=product_id, name=product.name, remaining_stock=product.stock)
                )
            product_repo.add(product)

        # (b) order status
        order.mark_paid()
        order_repo.add(order)

        # (c) cart and order history
        customer_repo = current_domain.repository_for(Customer)
        customer = customer_repo.get(str(order.customer_id))
        customer.clear_cart()
        customer.record_order(order.id)
        customer_repo.add(customer)

        # (d) stats
        stats = load_stats()
        stats.record_paid_order(order.total, quantities)
        current_domain.repository_for(ShopStats).add(stats)

        logger.info(
            "Payment confirmed",
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            total=order.total,
            low_stock=[alert.product_id for alert in low_stock],
        )
        return PaymentReceipt.for_order(order, newly_paid=True, low_stock=low_stock)

    @staticmethod
    def _reserve(quantities):
        """Load every product of the order, refusing if any line cannot be covered."""
        products = {}
        for product_id, quantity in quantities.items():
            product = get_product(product_id)
            if product is None:
                raise InsufficientStockError({"stock": [f"Product {product_id} is no longer available"]})
            if quantity > product.stock:
                raise InsufficientStockError(
                    {"stock": [f"Only {product.stock} unit(s) of {product.name} available, {quantity} ordered"]}
                )
            products[product_id] = product
        return products
