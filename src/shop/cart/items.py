"""Cart item management — commands and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from shop.catalogue.browsing import get_product
from shop.customer.customer import Customer
from shop.domain import shop


@shop.command(part_of="Customer")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@shop.command(part_of="Customer")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@shop.command(part_of="Customer")
class ClearCart:
    customer_id = Identifier(required=True)


@shop.command_handler(part_of=Customer)
class ManageCartHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        """Returns the new quantity of the product in the cart."""
        repo = current_domain.repository_for(Customer)
        customer = repo.get(str(command.customer_id))
        customer.add_to_cart(get_product(command.product_id))
        repo.add(customer)
        return customer.quantity_of(command.product_id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        """Returns True when a unit was removed, False when the product was not in the cart."""
        repo = current_domain.repository_for(Customer)
        customer = repo.get(str(command.customer_id))
        removed = customer.remove_from_cart(command.product_id)
        if removed:
            repo.add(customer)
        return removed

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(str(command.customer_id))
        customer.clear_cart()
        repo.add(customer)
