"""Integration tests for the Storefront facade: persistence, notifications, admin surface."""

import threading

import pytest
from protean import current_domain
from shop.actions import AddItem, Checkout, ConfirmPaymentAction, EmptyCart, MainMenu, ShowCategory, ShowFaq
from shop.catalogue.product import Product
from shop.domain import shop
from shop.errors import EmptyCartError, NotAuthorizedError, OrderNotFoundError, ProductNotFoundError
from shop.order.order import Order, OrderStatus
from shop.persistence.port import CATEGORIES, ORDERS, PRODUCTS, STATS, USERS
from shop.stats.stats import load_stats
from shop.storefront import FAQ


def _buy(storefront, customer_id, *product_ids):
    for product_id in product_ids:
        storefront.add_to_cart(customer_id, product_id)
    order = storefront.checkout(customer_id)
    return storefront.confirm_payment(customer_id, order.id)


class TestLoad:
    def test_seeds_default_catalogue_when_empty(self, storefront, persistence):
        assert len(persistence.documents[PRODUCTS]) == 5
        assert list(persistence.documents[CATEGORIES]) == ["electronics", "clothing", "accessories", "home"]
        assert current_domain.repository_for(Product).get("prod_001").name == "iPhone 15 Pro"

    def test_existing_catalogue_is_not_reseeded(self, persistence, notifier, settings):
        from shop.storefront import Storefront

        persistence.save(PRODUCTS, {"p1": {"name": "Tasse", "category": "home", "price": 9.5, "stock": 3}})
        counts = Storefront(persistence, notifier, settings).load()
        assert counts[PRODUCTS] == 1
        assert current_domain.repository_for(Product).get("p1").name == "Tasse"


class TestCustomerOperations:
    def test_first_contact_creates_and_persists(self, storefront, persistence):
        assert storefront.ensure_customer("42") is True
        assert storefront.ensure_customer("42") is False
        assert "42" in persistence.documents[USERS]
        assert persistence.documents[STATS]["totalUsers"] == 1

    def test_cart_changes_persist_users(self, storefront, persistence):
        storefront.add_to_cart("42", "prod_003")
        storefront.add_to_cart("42", "prod_003")
        assert persistence.documents[USERS]["42"]["cart"] == {"prod_003": 2}

        storefront.remove_from_cart("42", "prod_003")
        assert persistence.documents[USERS]["42"]["cart"] == {"prod_003": 1}

        storefront.clear_cart("42")
        assert persistence.documents[USERS]["42"]["cart"] == {}

    def test_checkout_persists_pending_order(self, storefront, persistence):
        storefront.add_to_cart("42", "prod_003")
        order = storefront.checkout("42")
        assert persistence.documents[ORDERS][order.id]["status"] == "pending"
        assert persistence.documents[ORDERS][order.id]["userId"] == "42"

    def test_checkout_of_empty_cart(self, storefront):
        with pytest.raises(EmptyCartError):
            storefront.checkout("42")


class TestConfirmPayment:
    def test_persists_all_four_stores(self, storefront, persistence):
        receipt = _buy(storefront, "42", "prod_003")

        assert persistence.documents[ORDERS][receipt.order_id]["status"] == "paid"
        assert persistence.documents[USERS]["42"]["orders"] == [receipt.order_id]
        assert persistence.documents[USERS]["42"]["cart"] == {}
        assert persistence.documents[PRODUCTS]["prod_003"]["stock"] == 49
        assert persistence.documents[STATS]["totalOrders"] == 1
        assert persistence.documents[STATS]["topProducts"] == {"prod_003": 1}

    def test_notifies_customer_and_admin(self, storefront, notifier):
        receipt = _buy(storefront, "42", "prod_003", "prod_004")

        customer_messages = notifier.messages_to("42")
        assert len(customer_messages) == 1
        assert receipt.order_id in customer_messages[0]

        admin_messages = notifier.messages_to("admin-1")
        assert len(admin_messages) == 1
        assert "T-shirt Premium × 1" in admin_messages[0]
        assert "Montre Connectée × 1" in admin_messages[0]

    def test_low_stock_alert_per_product(self, storefront, notifier):
        for _ in range(3):
            storefront.add_to_cart("42", "prod_002")
        order = storefront.checkout("42")
        storefront.confirm_payment("42", order.id)

        alerts = [m for m in notifier.messages_to("admin-1") if "ALERTE STOCK" in m]
        assert alerts == ["⚠️ ALERTE STOCK: MacBook Air M2 - Stock restant: 5"]

    def test_duplicate_confirmation_sends_nothing(self, storefront, notifier, persistence):
        receipt = _buy(storefront, "42", "prod_003")
        notifier.reset()
        saves = len(persistence.save_calls)

        again = storefront.confirm_payment("42", receipt.order_id)
        assert again == receipt
        assert notifier.sent_messages == []
        assert len(persistence.save_calls) == saves

    def test_unknown_order(self, storefront):
        with pytest.raises(OrderNotFoundError):
            storefront.confirm_payment("42", "ORD-404")

    def test_notification_failure_does_not_undo_payment(self, storefront, notifier):
        notifier.configure(should_succeed=False)
        receipt = _buy(storefront, "42", "prod_003")
        assert receipt.newly_paid is True
        assert load_stats().total_orders == 1


class TestPersistenceFailures:
    def test_failed_save_keeps_memory_and_is_retried(self, storefront, persistence):
        persistence.configure(failing_stores=[USERS])
        storefront.add_to_cart("42", "prod_003")

        assert storefront.unsaved_stores == {USERS}
        assert storefront.cart_summary("42").item_count == 1
        assert "42" not in persistence.documents.get(USERS, {})

        persistence.configure()
        storefront.add_to_cart("77", "prod_004")
        assert storefront.unsaved_stores == set()
        assert persistence.documents[USERS]["42"]["cart"] == {"prod_003": 1}

    def test_checkpoint_retries_failed_stores(self, storefront, persistence):
        persistence.configure(should_succeed=False)
        receipt = _buy(storefront, "42", "prod_003")
        assert storefront.unsaved_stores >= {ORDERS, USERS, PRODUCTS, STATS}

        persistence.configure()
        assert storefront.checkpoint() is True
        assert persistence.documents[ORDERS][receipt.order_id]["status"] == "paid"

    def test_shutdown_saves_everything(self, storefront, persistence):
        storefront.add_to_cart("42", "prod_003")
        persistence.documents.clear()
        assert storefront.shutdown() is True
        assert set(persistence.documents) == {PRODUCTS, CATEGORIES, USERS, ORDERS, STATS}


class TestRestart:
    def test_state_survives_reload(self, storefront, persistence, notifier, settings):
        from shop.storefront import Storefront

        receipt = _buy(storefront, "42", "prod_003", "prod_003")
        storefront.add_to_cart("42", "prod_004")
        pending = storefront.checkout("42")

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        reloaded = Storefront(persistence, notifier, settings)
        reloaded.load()

        assert current_domain.repository_for(Product).get("prod_003").stock == 48
        assert reloaded.cart_summary("42").item_count == 1
        assert [entry.status for entry in reloaded.recent_orders("42")] == [OrderStatus.PAID.value]
        assert reloaded.account("42").total_spent == receipt.total
        assert load_stats().sold("prod_003") == 2

        again = reloaded.confirm_payment("42", receipt.order_id)
        assert again.newly_paid is False
        assert reloaded.confirm_payment("42", pending.id).newly_paid is True


class TestActions:
    def test_dispatch(self, storefront):
        assert storefront.perform("42", AddItem("prod_003")) == 1
        assert [p.id for p in storefront.perform("42", ShowCategory("clothing"))] == ["prod_003"]
        order = storefront.perform("42", Checkout())
        receipt = storefront.perform("42", ConfirmPaymentAction(order.id))
        assert receipt.newly_paid is True
        assert storefront.perform("42", EmptyCart()).is_empty
        assert len(storefront.perform("42", MainMenu())) == 4
        assert storefront.perform("42", ShowFaq()) == FAQ

    def test_callback_data(self, storefront):
        assert storefront.handle_callback("42", "add_prod_001") == 1
        assert storefront.handle_callback("42", "remove_prod_001") is True
        assert storefront.handle_callback("42", "remove_prod_001") is False

    def test_unknown_product(self, storefront):
        with pytest.raises(ProductNotFoundError):
            storefront.handle_callback("42", "prod_missing")

    def test_inactive_products_are_hidden(self, storefront):
        repo = current_domain.repository_for(Product)
        product = repo.get("prod_003")
        product.active = False
        repo.add(product)

        assert storefront.perform("42", ShowCategory("clothing")) == []
        with pytest.raises(ProductNotFoundError):
            storefront.handle_callback("42", "add_prod_003")


class TestSupport:
    def test_forwarded_to_admin(self, storefront, notifier):
        assert storefront.forward_support_message("42", "Où est ma commande?", display_name="Ana") is True
        assert "Où est ma commande?" in notifier.messages_to("admin-1")[0]

    def test_without_admin_nothing_is_sent(self, persistence, settings):
        from shop.notifications.fake import FakeNotifier
        from shop.storefront import Storefront

        notifier = FakeNotifier(admin_id=None)
        front = Storefront(persistence, notifier, settings)
        front.load()
        assert front.forward_support_message("42", "Bonjour") is False
        assert notifier.sent_messages == []


class TestAdministration:
    def test_non_admin_is_refused(self, storefront):
        with pytest.raises(NotAuthorizedError):
            storefront.admin_stats("42")
        with pytest.raises(NotAuthorizedError):
            storefront.admin_reply("42", "43", "hi")
        with pytest.raises(NotAuthorizedError):
            storefront.admin_broadcast("42", "promo")

    def test_admin_stats(self, storefront):
        _buy(storefront, "42", "prod_003", "prod_003", "prod_001")
        stats = storefront.admin_stats("admin-1")
        assert stats.total_users == 1
        assert stats.total_orders == 1
        assert stats.total_revenue == round(2 * 29.99 + 1199.99, 2)
        assert [(r.name, r.quantity_sold) for r in stats.top_products] == [
            ("T-shirt Premium", 2),
            ("iPhone 15 Pro", 1),
        ]

    def test_admin_reply(self, storefront, notifier):
        assert storefront.admin_reply("admin-1", "42", "Votre colis arrive") is True
        assert "Votre colis arrive" in notifier.messages_to("42")[0]

    def test_broadcast_continues_past_failures(self, storefront, notifier):
        for customer_id in ("1", "2", "3"):
            storefront.ensure_customer(customer_id)
        notifier.configure(failing_recipients=["2"])

        assert storefront.admin_broadcast("admin-1", "-20% ce week-end") == 2
        assert len(notifier.messages_to("1")) == 1
        assert len(notifier.messages_to("3")) == 1

    def test_no_admin_configured_refuses_everyone(self, persistence, notifier):
        from shop.settings import ShopSettings
        from shop.storefront import Storefront

        front = Storefront(persistence, notifier, ShopSettings(admin_id=None))
        with pytest.raises(NotAuthorizedError):
            front.admin_stats("admin-1")


class TestConcurrency:
    def test_two_customers_compete_for_last_unit(self, storefront):
        repo = current_domain.repository_for(Product)
        product = repo.get("prod_002")
        product.stock = 1
        repo.add(product)

        orders = {}
        for customer_id in ("42", "43"):
            storefront.add_to_cart(customer_id, "prod_002")
            orders[customer_id] = storefront.checkout(customer_id).id

        outcomes = {}
        barrier = threading.Barrier(2)

        def confirm(customer_id):
            # A plain domain context: the test fixture's context resets providers on exit
            with shop.domain_context():
                barrier.wait()
                try:
                    storefront.confirm_payment(customer_id, orders[customer_id])
                    outcomes[customer_id] = "paid"
                except Exception as exc:
                    outcomes[customer_id] = type(exc).__name__

        threads = [threading.Thread(target=confirm, args=(cid,)) for cid in orders]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes.values()) == ["InsufficientStockError", "paid"]
        assert repo.get("prod_002").stock == 0
        assert load_stats().total_orders == 1

        order_repo = current_domain.repository_for(Order)
        statuses = {cid: order_repo.get(order_id).status for cid, order_id in orders.items()}
        assert sorted(statuses.values()) == [OrderStatus.PAID.value, OrderStatus.PENDING.value]
        loser = next(cid for cid, outcome in outcomes.items() if outcome != "paid")
        assert statuses[loser] == OrderStatus.PENDING.value
