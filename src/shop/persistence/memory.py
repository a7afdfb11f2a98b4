"""In-memory persistence adapter — keeps documents in a dict for tests."""

import json

from shop.persistence.port import PersistencePort


class InMemoryStore(PersistencePort):
    """Store adapter that keeps serialized documents in memory.

    Documents go through a JSON round trip on save, so whatever is saved
    here would also survive the file adapter.
    """

    def __init__(self, documents: dict | None = None):
        self.documents: dict[str, dict] = {
            store: json.loads(json.dumps(data)) for store, data in (documents or {}).items()
        }
        self.save_calls: list[str] = []
        self.should_succeed = True
        self.failing_stores: set[str] = set()

    def configure(self, should_succeed: bool = True, failing_stores=()):
        """Configure the adapter behavior for testing.

        ``should_succeed=False`` fails every save; ``failing_stores`` fails
        only the named stores.
        """
        self.should_succeed = should_succeed
        self.failing_stores = set(failing_stores)

    def load(self, store: str) -> dict:
        return json.loads(json.dumps(self.documents.get(store, {})))

    def save(self, store: str, data: dict) -> bool:
        self.save_calls.append(store)
        if not self.should_succeed or store in self.failing_stores:
            return False

        self.documents[store] = json.loads(json.dumps(data))
        return True

    def reset(self):
        self.documents.clear()
        self.save_calls.clear()
        self.should_succeed = True
        self.failing_stores = set()
