"""Per-key mutual exclusion for operations that read-modify-write shared records.

Carts and checkouts lock on the customer; payment confirmation also locks
every product of the order so that two confirmations competing for the
last units of a product run one after the other.

A key's lock exists only while some caller holds or waits for it.
"""

import threading
from contextlib import contextmanager

# The shop-wide counters are written by registrations and payments alike
STATS_KEY = "stats"


class _KeyLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class KeyedLocks:
    def __init__(self):
        self._locks: dict[str, _KeyLock] = {}
        self._guard = threading.Lock()

    def __len__(self):
        with self._guard:
            return len(self._locks)

    def _check_out(self, key: str) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyLock()
            entry.users += 1
            return entry.lock

    def _check_in(self, key: str) -> None:
        with self._guard:
            entry = self._locks[key]
            entry.users -= 1
            if entry.users == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, *keys):
        """Acquire the locks for ``keys`` in sorted order, release in reverse."""
        ordered = sorted({str(key) for key in keys})
        locks = [self._check_out(key) for key in ordered]
        acquired = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for key in ordered:
                self._check_in(key)


def customer_key(customer_id) -> str:
    return f"customer:{customer_id}"


def product_key(product_id) -> str:
    return f"product:{product_id}"
