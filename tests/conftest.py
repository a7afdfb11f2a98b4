import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def shop_bed():
    from shop.domain import shop

    bed = DomainFixture(shop)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(shop_bed):
    with shop_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(_ctx):
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from protean import current_domain

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Shared shop fixtures
# ---------------------------------------------------------------------------
ADMIN_ID = "admin-1"


@pytest.fixture
def catalogue():
    """Install the default catalogue (4 categories, prod_001..prod_005)."""
    from shop.catalogue.seed import default_documents
    from shop.persistence.snapshot import restore_categories, restore_products

    categories, products = default_documents()
    restore_categories(categories)
    restore_products(products)


@pytest.fixture
def settings():
    from shop.settings import ShopSettings

    return ShopSettings(admin_id=ADMIN_ID, data_dir="unused", checkpoint_interval=3600)


@pytest.fixture
def persistence():
    from shop.persistence.memory import InMemoryStore

    return InMemoryStore()


@pytest.fixture
def notifier():
    from shop.notifications.fake import FakeNotifier

    return FakeNotifier(admin_id=ADMIN_ID)


@pytest.fixture
def storefront(persistence, notifier, settings):
    """A loaded storefront over empty in-memory stores (default catalogue seeded)."""
    from shop.storefront import Storefront

    front = Storefront(persistence=persistence, notifier=notifier, settings=settings)
    front.load()
    return front
