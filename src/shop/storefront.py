"""Storefront — the entry point a conversational transport calls.

Wraps the shop's commands with what the domain itself does not do:

- per-customer and per-product locking around each command, held until the
  unit of work has committed,
- persisting the affected stores after every mutation, with failed stores
  retried on the next write or checkpoint,
- notifying the customer and the administrator once a payment is confirmed,
- the administrative operations, gated on the configured administrator id,
- loading state at startup and checkpointing it periodically and at shutdown.

Every method expects an active domain context, except the checkpoint thread
which pushes its own.
"""

import threading
from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from shop.actions import (
    AddItem,
    Checkout,
    ConfirmPaymentAction,
    ContactAdmin,
    EmptyCart,
    MainMenu,
    RemoveItem,
    ShowCategory,
    ShowFaq,
    ShowProduct,
    decode_action,
)
from shop.cart.items import AddToCart, ClearCart, RemoveFromCart
from shop.cart.summary import summarize_cart
from shop.catalogue.browsing import get_product, list_active_by_category, list_categories
from shop.catalogue.seed import default_documents
from shop.concurrency import STATS_KEY, KeyedLocks, customer_key, product_key
from shop.customer.account import account_summary, order_history
from shop.customer.customer import Customer
from shop.customer.registration import RegisterCustomer
from shop.domain import shop
from shop.errors import NotAuthorizedError, OrderNotFoundError, ProductNotFoundError
from shop.notifications.templates import (
    LowStockAlertTemplate,
    NewOrderTemplate,
    PaymentReceiptTemplate,
    PromotionTemplate,
    SupportForwardTemplate,
    SupportReplyTemplate,
)
from shop.order.checkout import PlaceOrder
from shop.order.order import Order
from shop.order.payment import ConfirmPayment
from shop.persistence.port import CATEGORIES, ORDERS, PRODUCTS, STATS, STORES, USERS
from shop.persistence.snapshot import RESTORERS, dump_store, restore_store
from shop.settings import ShopSettings
from shop.stats.report import stats_snapshot, top_products
from shop.utils.logging import get_logger, log_context

logger = get_logger(__name__)

FAQ = (
    (
        "Comment passer une commande?",
        "Parcourez le catalogue, ajoutez au panier, puis cliquez sur \"Commander\".",
    ),
    (
        "Quels sont les modes de paiement?",
        "Nous acceptons Stripe et PayPal pour des paiements sécurisés.",
    ),
    (
        "Combien de temps pour la livraison?",
        "Livraison sous 2-5 jours ouvrés selon votre localisation.",
    ),
    (
        "Puis-je modifier ma commande?",
        "Contactez-nous rapidement après validation pour toute modification.",
    ),
)


@dataclass(frozen=True)
class AdminStats:
    total_users: int
    total_orders: int
    total_revenue: float
    top_products: list


class Storefront:
    def __init__(self, persistence, notifier, settings: ShopSettings | None = None, domain=shop):
        self.persistence = persistence
        self.notifier = notifier
        self.settings = settings or ShopSettings.from_env()
        self.domain = domain

        self.locks = KeyedLocks()
        self._persist_lock = threading.Lock()
        self._unsaved_stores: set[str] = set()

        self._checkpoint_stop = threading.Event()
        self._checkpoint_thread: threading.Thread | None = None

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def load(self):
        """Restore every store from persistence, seeding the default catalogue when empty."""
        counts = {}
        for store in RESTORERS:
            counts[store] = restore_store(store, self.persistence.load(store))

        if counts[PRODUCTS] == 0:
            categories, products = default_documents()
            counts[CATEGORIES] = restore_store(CATEGORIES, categories)
            counts[PRODUCTS] = restore_store(PRODUCTS, products)
            logger.info("Default catalogue installed", products=counts[PRODUCTS], categories=counts[CATEGORIES])
            self._persist(PRODUCTS, CATEGORIES, STATS)

        logger.info("Shop state loaded", **counts)
        return counts

    def checkpoint(self):
        """Save every store. Returns True when all of them were written."""
        return self._persist(*STORES)

    def start_checkpoints(self, interval: float | None = None):
        if self._checkpoint_thread is not None:
            return

        interval = interval or self.settings.checkpoint_interval
        self._checkpoint_stop.clear()
        self._checkpoint_thread = threading.Thread(
            target=self._checkpoint_loop,
            args=(interval,),
            name="shop-checkpoint",
            daemon=True,
        )
        self._checkpoint_thread.start()
        logger.info("Periodic checkpoint started", interval=interval)

    def stop_checkpoints(self):
        if self._checkpoint_thread is None:
            return

        self._checkpoint_stop.set()
        self._checkpoint_thread.join()
        self._checkpoint_thread = None

    def shutdown(self):
        """Stop the periodic checkpoint and save everything one last time."""
        self.stop_checkpoints()
        saved = self.checkpoint()
        logger.info("Shop state saved on shutdown", complete=saved)
        return saved

    def _checkpoint_loop(self, interval):
        while not self._checkpoint_stop.wait(interval):
            with self.domain.domain_context():
                saved = self.checkpoint()
            logger.info("Periodic checkpoint", complete=saved)

    def _persist(self, *stores):
        """Save ``stores`` plus any store whose previous save failed."""
        with self._persist_lock:
            pending = set(stores) | self._unsaved_stores
            complete = True
            for store in STORES:
                if store not in pending:
                    continue
                if self.persistence.save(store, dump_store(store)):
                    self._unsaved_stores.discard(store)
                else:
                    complete = False
                    self._unsaved_stores.add(store)
                    logger.error("Store not persisted, will retry", store=store)
            return complete

    @property
    def unsaved_stores(self):
        return frozenset(self._unsaved_stores)

    # -------------------------------------------------------------------
    # Customers
    # -------------------------------------------------------------------
    def ensure_customer(self, customer_id, language=None):
        """Get-or-create the customer. Returns True when it was created."""
        with self.locks.hold(customer_key(customer_id), STATS_KEY):
            created = current_domain.process(
                RegisterCustomer(
                    customer_id=str(customer_id),
                    language=language or self.settings.default_language,
                ),
                asynchronous=False,
            )
        if created:
            logger.info("Customer registered", customer_id=str(customer_id))
            self._persist(USERS, STATS)
        return created

    def account(self, customer_id):
        self.ensure_customer(customer_id)
        return account_summary(customer_id)

    def recent_orders(self, customer_id):
        self.ensure_customer(customer_id)
        return order_history(customer_id)

    # -------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------
    def add_to_cart(self, customer_id, product_id):
        """Add one unit. Returns the product's new quantity in the cart."""
        self.ensure_customer(customer_id)
        with self.locks.hold(customer_key(customer_id)):
            quantity = current_domain.process(
                AddToCart(customer_id=str(customer_id), product_id=str(product_id)),
                asynchronous=False,
            )
        self._persist(USERS)
        return quantity

    def remove_from_cart(self, customer_id, product_id):
        self.ensure_customer(customer_id)
        with self.locks.hold(customer_key(customer_id)):
            removed = current_domain.process(
                RemoveFromCart(customer_id=str(customer_id), product_id=str(product_id)),
                asynchronous=False,
            )
        if removed:
            self._persist(USERS)
        return removed

    def clear_cart(self, customer_id):
        self.ensure_customer(customer_id)
        with self.locks.hold(customer_key(customer_id)):
            current_domain.process(ClearCart(customer_id=str(customer_id)), asynchronous=False)
        self._persist(USERS)

    def cart_summary(self, customer_id):
        self.ensure_customer(customer_id)
        return summarize_cart(customer_id)

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def checkout(self, customer_id):
        """Create a pending order from the cart. Returns the order."""
        self.ensure_customer(customer_id)
        with self.locks.hold(customer_key(customer_id)):
            order_id = current_domain.process(PlaceOrder(customer_id=str(customer_id)), asynchronous=False)
        self._persist(ORDERS)
        return current_domain.repository_for(Order).get(order_id)

    def confirm_payment(self, customer_id, order_id):
        """Confirm payment of the customer's order and send the notifications.

        Returns the ``PaymentReceipt``; a repeated confirmation returns an
        equal receipt and sends nothing.
        """
        try:
            order = current_domain.repository_for(Order).get(str(order_id))
        except ObjectNotFoundError:
            raise OrderNotFoundError({"order_id": [f"Order {order_id} not found"]})

        keys = [customer_key(order.customer_id), STATS_KEY] + [product_key(pid) for pid in order.quantities()]
        with log_context(customer_id=str(customer_id), order_id=str(order_id)):
            with self.locks.hold(*keys):
                receipt = current_domain.process(
                    ConfirmPayment(order_id=str(order_id), customer_id=str(customer_id)),
                    asynchronous=False,
                )

            if receipt.newly_paid:
                self._persist(ORDERS, USERS, PRODUCTS, STATS)
                self._notify_payment(receipt)
        return receipt

    def _notify_payment(self, receipt):
        lines = [{"title": line.title, "quantity": line.quantity} for line in receipt.lines]
        self.notifier.notify_user(
            receipt.customer_id,
            PaymentReceiptTemplate.render({"order_id": receipt.order_id, "total": receipt.total}),
        )
        self.notifier.notify_admin(
            NewOrderTemplate.render(
                {
                    "customer_id": receipt.customer_id,
                    "order_id": receipt.order_id,
                    "total": receipt.total,
                    "lines": lines,
                }
            )
        )
        for alert in receipt.low_stock:
            self.notifier.notify_admin(
                LowStockAlertTemplate.render({"name": alert.name, "remaining_stock": alert.remaining_stock})
            )

    # -------------------------------------------------------------------
    # Support
    # -------------------------------------------------------------------
    def forward_support_message(self, customer_id, text, display_name=None):
        self.ensure_customer(customer_id)
        return self.notifier.notify_admin(
            SupportForwardTemplate.render({"customer_id": str(customer_id), "text": text, "display_name": display_name})
        )

    # -------------------------------------------------------------------
    # Action dispatch
    # -------------------------------------------------------------------
    def handle_callback(self, customer_id, data):
        """Decode raw callback data and perform the action."""
        return self.perform(customer_id, decode_action(data))

    def perform(self, customer_id, action):
        """Run a decoded action on behalf of ``customer_id`` and return its result.

        ``ShowCategory`` returns the category's active products, ``ShowProduct``
        the product, ``AddItem`` the new cart quantity, ``RemoveItem`` whether a
        unit was removed, ``Checkout`` the pending order, ``ConfirmPaymentAction``
        the receipt, ``EmptyCart`` the (empty) cart summary, ``MainMenu`` the
        categories, ``ShowFaq`` the question/answer pairs and ``ContactAdmin``
        nothing.
        """
        with log_context(customer_id=str(customer_id), action=type(action).__name__):
            return self._dispatch(customer_id, action)

    def _dispatch(self, customer_id, action):
        if isinstance(action, ShowCategory):
            return list_active_by_category(action.category_id)
        if isinstance(action, ShowProduct):
            product = get_product(action.product_id)
            if product is None or not product.active:
                raise ProductNotFoundError({"product_id": [f"Product {action.product_id} not found"]})
            return product
        if isinstance(action, AddItem):
            return self.add_to_cart(customer_id, action.product_id)
        if isinstance(action, RemoveItem):
            return self.remove_from_cart(customer_id, action.product_id)
        if isinstance(action, Checkout):
            return self.checkout(customer_id)
        if isinstance(action, ConfirmPaymentAction):
            return self.confirm_payment(customer_id, action.order_id)
        if isinstance(action, EmptyCart):
            self.clear_cart(customer_id)
            return self.cart_summary(customer_id)
        if isinstance(action, MainMenu):
            return list_categories()
        if isinstance(action, ShowFaq):
            return FAQ
        if isinstance(action, ContactAdmin):
            return None

        raise TypeError(f"Unsupported action: {action!r}")

    # -------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------
    def _require_admin(self, caller_id):
        if not self.settings.is_admin(caller_id):
            logger.warning("Administrative operation refused", caller_id=str(caller_id))
            raise NotAuthorizedError({"caller": ["Administrator access required"]})

    def admin_stats(self, caller_id):
        self._require_admin(caller_id)
        snapshot = stats_snapshot()
        return AdminStats(
            total_users=snapshot.total_users,
            total_orders=snapshot.total_orders,
            total_revenue=snapshot.total_revenue,
            top_products=top_products(),
        )

    def admin_reply(self, caller_id, customer_id, text):
        self._require_admin(caller_id)
        return self.notifier.notify_user(customer_id, SupportReplyTemplate.render({"text": text}))

    def admin_broadcast(self, caller_id, text):
        """Send a promotion to every known customer. Returns how many received it."""
        self._require_admin(caller_id)
        message = PromotionTemplate.render({"text": text})
        customer_ids = current_domain.repository_for(Customer).all_ids()

        sent = 0
        for customer_id in customer_ids:
            if self.notifier.notify_user(customer_id, message):
                sent += 1

        logger.info("Broadcast sent", sent=sent, recipients=len(customer_ids))
        return sent
