"""
Product Store
=============

Abstract product store, listing query model, and the configured-store
factory.

Version: 0.1.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from shared.config import StorageMode, settings
from shared.errors import ValidationFailed
from shared.logging import get_logger
from shared.models.product import Category, Product, ProductCreate

logger = get_logger(__name__)

# API sort keys to stored field names
SORTABLE_FIELDS = {
    "name": "name",
    "price": "price",
    "stock": "stock",
    "category": "category",
    "sku": "sku",
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
}


def parse_sort(value: str | None) -> tuple[str, bool]:
    """
    Parse a `field:asc|desc` sort expression.

    Returns:
        Tuple of (stored field name, descending)
    """
    if not value:
        return "created_at", True

    field, _, direction = value.partition(":")
    if field not in SORTABLE_FIELDS:
        raise ValidationFailed(
            f"Cannot sort by '{field}'",
            details={"allowed": sorted(set(SORTABLE_FIELDS))},
        )
    return SORTABLE_FIELDS[field], direction.lower() == "desc"


@dataclass
class ProductQuery:
    """Filters, ordering and paging for product listings."""

    category: Category | None = None
    min_price: float | None = None
    max_price: float | None = None
    in_stock: bool = False
    search: str | None = None
    # None lists products in any status
    is_active: bool | None = True
    sort_field: str = "created_at"
    descending: bool = True
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class ProductStore(ABC):
    """Abstract product store."""

    @property
    @abstractmethod
    def mode(self) -> StorageMode:
        ...

    @abstractmethod
    async def health_check(self) -> dict[str, Any]:
        ...

    @abstractmethod
    async def find_by_id(self, product_id: str) -> Product | None:
        ...

    @abstractmethod
    async def list_products(self, query: ProductQuery) -> tuple[list[Product], int]:
        """
        List products matching a query.

        Returns:
            Tuple of (products on the page, total matches)
        """
        ...

    @abstractmethod
    async def create(self, data: ProductCreate, created_by: str) -> Product:
        """
        Store a new active product.

        Raises:
            DuplicateSku: if the SKU is taken
        """
        ...

    @abstractmethod
    async def update(
        self,
        product_id: str,
        changes: dict[str, Any],
        updated_by: str,
    ) -> Product | None:
        """
        Apply field changes and stamp `updated_by`/`updated_at`.

        Raises:
            DuplicateSku: if the new SKU belongs to another product
        """
        ...

    @abstractmethod
    async def delete(self, product_id: str) -> bool:
        """Permanently remove a product."""
        ...


# Global store instance
_store: ProductStore | None = None


def get_product_store() -> ProductStore:
    """
    Get the configured product store instance.

    Returns:
        ProductStore instance based on settings
    """
    global _store

    if _store is None:
        mode = settings.storage.mode

        if mode == StorageMode.MEMORY:
            from services.catalog.services.product_memory import InMemoryProductStore

            _store = InMemoryProductStore()
        elif mode == StorageMode.MONGODB:
            from services.catalog.services.product_mongo import MongoProductStore

            _store = MongoProductStore()
        else:
            raise ValueError(f"Unknown storage mode: {mode}")

        logger.info("product_store_initialized", mode=mode.value)

    return _store


def reset_product_store() -> None:
    """Reset the store to be re-initialized."""
    global _store
    _store = None
