"""
Catalog Services
================

Business logic for the catalog service.
"""

from services.catalog.services.permissions import can_modify, ensure_owner_or_admin
from services.catalog.services.product_store import (
    ProductQuery,
    ProductStore,
    get_product_store,
    parse_sort,
    reset_product_store,
)

__all__ = [
    "ProductQuery",
    "ProductStore",
    "can_modify",
    "ensure_owner_or_admin",
    "get_product_store",
    "parse_sort",
    "reset_product_store",
]
