"""
Catalog Service Routes
======================

API route handlers for the catalog service.
"""

from services.catalog.routes import auth, products, users


__all__ = ["auth", "products", "users"]
