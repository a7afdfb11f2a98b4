"""Shop API package."""

from shop.api.routes import admin_router, catalogue_router, customer_router

__all__ = ["admin_router", "catalogue_router", "customer_router"]
