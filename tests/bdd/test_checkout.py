"""BDD tests for checkout and payment confirmation."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when
from shop.catalogue.product import Product
from shop.errors import EmptyCartError, InsufficientStockError
from shop.order.order import Order
from shop.stats.stats import load_stats

scenarios("features/checkout.feature")


@pytest.fixture
def orders():
    """Last order id per customer."""
    return {}


@pytest.fixture
def outcome():
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("the default catalogue")
def _(storefront):
    return storefront


@given(parsers.cfparse('customer "{customer_id}" has added "{product_id}" {times:d} time'))
@given(parsers.cfparse('customer "{customer_id}" has added "{product_id}" {times:d} times'))
def _(storefront, customer_id, product_id, times):
    for _ in range(times):
        storefront.add_to_cart(customer_id, product_id)


@given(parsers.cfparse('the stock of "{product_id}" is set to {stock:d}'))
def _(storefront, product_id, stock):
    repo = current_domain.repository_for(Product)
    product = repo.get(product_id)
    product.stock = stock
    repo.add(product)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('customer "{customer_id}" checks out'))
def _(storefront, orders, customer_id):
    orders[customer_id] = storefront.checkout(customer_id).id


@when(parsers.cfparse('customer "{customer_id}" tries to check out'))
def _(storefront, outcome, customer_id):
    try:
        storefront.checkout(customer_id)
    except EmptyCartError as exc:
        outcome["error"] = exc


@when(parsers.cfparse('customer "{customer_id}" confirms the payment'))
def _(storefront, orders, outcome, customer_id):
    outcome["receipt"] = storefront.confirm_payment(customer_id, orders[customer_id])
    outcome["order_id"] = orders[customer_id]


@when(parsers.cfparse('customer "{customer_id}" tries to confirm the payment'))
def _(storefront, orders, outcome, customer_id):
    try:
        storefront.confirm_payment(customer_id, orders[customer_id])
    except InsufficientStockError as exc:
        outcome["error"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order is "{status}" with a total of {total:f}'))
def _(orders, status, total):
    order_id = list(orders.values())[-1]
    order = current_domain.repository_for(Order).get(order_id)
    assert order.status == status
    assert order.total == pytest.approx(total)


@then(parsers.cfparse('the cart of customer "{customer_id}" still holds {count:d} items'))
def _(storefront, customer_id, count):
    assert storefront.cart_summary(customer_id).item_count == count


@then(parsers.cfparse('the cart of customer "{customer_id}" is empty'))
def _(storefront, customer_id):
    assert storefront.cart_summary(customer_id).is_empty


@then(parsers.cfparse('the stock of "{product_id}" is {stock:d}'))
def _(product_id, stock):
    assert current_domain.repository_for(Product).get(product_id).stock == stock


@then(parsers.cfparse("the shop has {count:d} order for {revenue:f}"))
def _(count, revenue):
    stats = load_stats()
    assert stats.total_orders == count
    assert stats.total_revenue == pytest.approx(revenue)


@then(parsers.cfparse('customer "{customer_id}" received a payment receipt'))
def _(notifier, customer_id):
    receipts = [m for m in notifier.messages_to(customer_id) if "Paiement confirmé" in m]
    assert len(receipts) == 1


@then(parsers.cfparse('the administrator was alerted that "{name}" has {remaining:d} left'))
def _(notifier, name, remaining):
    assert f"⚠️ ALERTE STOCK: {name} - Stock restant: {remaining}" in notifier.messages_to("admin-1")


@then("the confirmation is refused for insufficient stock")
def _(outcome):
    assert isinstance(outcome.get("error"), InsufficientStockError)


@then("the checkout is refused because the cart is empty")
def _(outcome):
    assert isinstance(outcome.get("error"), EmptyCartError)
