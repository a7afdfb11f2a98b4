"""Persistence port — where the shop's named document stores live durably."""

from abc import ABC, abstractmethod

PRODUCTS = "products"
CATEGORIES = "categories"
USERS = "users"
ORDERS = "orders"
STATS = "stats"

STORES = (PRODUCTS, CATEGORIES, USERS, ORDERS, STATS)


class PersistencePort(ABC):
    """Abstract interface for document store adapters.

    Each store holds one JSON-compatible dict that is replaced as a whole.
    Adapters never raise: failures are logged and reported through the
    return values.
    """

    @abstractmethod
    def load(self, store: str) -> dict:
        """Return the stored document, or an empty dict when it is missing or unreadable."""
        ...

    @abstractmethod
    def save(self, store: str, data: dict) -> bool:
        """Replace the stored document. Returns False when the write failed."""
        ...
