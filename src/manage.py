"""ShopBot data management CLI.

Works directly on the JSON stores under ``SHOP_DATA_DIR`` (or ``--data-dir``).

Usage:
    python src/manage.py seed            # Install the default catalogue if none exists
    python src/manage.py seed --force    # Overwrite products and categories with the defaults
    python src/manage.py stats           # Print the sales statistics
"""

import argparse
import sys


def _load_shop(data_dir):
    from shop.domain import shop
    from shop.notifications.logging import LoggingNotifier
    from shop.persistence.json_files import JsonFileStore
    from shop.settings import ShopSettings
    from shop.storefront import Storefront

    shop.init()
    settings = ShopSettings.from_env()
    storefront = Storefront(
        persistence=JsonFileStore(data_dir or settings.data_dir),
        notifier=LoggingNotifier(admin_id=settings.admin_id),
        settings=settings,
    )
    return shop, storefront


def seed(data_dir=None, force=False):
    """Write the default catalogue to the products and categories stores."""
    from shop.catalogue.seed import default_documents
    from shop.persistence.json_files import JsonFileStore
    from shop.persistence.port import CATEGORIES, PRODUCTS
    from shop.settings import ShopSettings

    store = JsonFileStore(data_dir or ShopSettings.from_env().data_dir)
    if store.load(PRODUCTS) and not force:
        print(f"Catalogue already present in {store.data_dir}, use --force to overwrite.")
        return

    categories, products = default_documents()
    store.save(CATEGORIES, categories)
    store.save(PRODUCTS, products)
    print(f"Installed {len(categories)} categories and {len(products)} products in {store.data_dir}.")


def show_stats(data_dir=None):
    from shop.stats.report import stats_snapshot, top_products

    shop, storefront = _load_shop(data_dir)
    with shop.domain_context():
        storefront.load()
        snapshot = stats_snapshot()
        ranking = top_products()

    print(f"Users:   {snapshot.total_users}")
    print(f"Orders:  {snapshot.total_orders}")
    print(f"Revenue: {snapshot.total_revenue:.2f}€")
    print("Top products:")
    for entry in ranking:
        print(f"  {entry.name}: {entry.quantity_sold} sold")


def main():
    parser = argparse.ArgumentParser(description="ShopBot data management")
    parser.add_argument("--data-dir", help="Directory holding the JSON stores (default: SHOP_DATA_DIR or ./data)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    seed_parser = subparsers.add_parser("seed", help="Install the default catalogue")
    seed_parser.add_argument("--force", action="store_true", help="Overwrite an existing catalogue")

    subparsers.add_parser("stats", help="Print sales statistics")

    args = parser.parse_args()

    if args.command == "seed":
        seed(args.data_dir, force=args.force)
    elif args.command == "stats":
        show_stats(args.data_dir)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
