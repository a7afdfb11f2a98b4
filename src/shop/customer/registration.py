"""Customer registration — get-or-create on first contact."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from shop.customer.customer import Customer
from shop.domain import shop
from shop.stats.stats import ShopStats, load_stats


@shop.command(part_of="Customer")
class RegisterCustomer:
    """Make sure a customer exists for the caller id."""

    customer_id = Identifier(required=True)
    language = String(max_length=10, default="fr")


@shop.command_handler(part_of=Customer)
class RegisterCustomerHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        """Returns True when the customer was created by this call."""
        repo = current_domain.repository_for(Customer)
        try:
            repo.get(str(command.customer_id))
            return False
        except ObjectNotFoundError:
            pass

        customer = Customer.register(
            customer_id=command.customer_id,
            language=command.language or "fr",
        )
        stats = load_stats()
        stats.record_customer()

        repo.add(customer)
        current_domain.repository_for(ShopStats).add(stats)
        return True
