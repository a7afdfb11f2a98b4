"""Catalogue read operations used by the storefront menus."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from shop.catalogue.category import Category
from shop.catalogue.product import Product


def get_product(product_id):
    """Return the product, or None when the id is unknown."""
    try:
        return current_domain.repository_for(Product).get(str(product_id))
    except ObjectNotFoundError:
        return None


def get_category(category_id):
    """Return the category, or None when the id is unknown."""
    try:
        return current_domain.repository_for(Category).get(str(category_id))
    except ObjectNotFoundError:
        return None


def list_categories():
    return current_domain.repository_for(Category).in_catalogue_order()


def list_products():
    return current_domain.repository_for(Product).in_catalogue_order()


def list_active_by_category(category_id):
    """Active products of a category, in catalogue insertion order.

    Deactivated products stay resolvable through ``get_product`` so that
    historical orders keep displaying, but they never show up here.
    """
    return current_domain.repository_for(Product).active_in_category(category_id)
