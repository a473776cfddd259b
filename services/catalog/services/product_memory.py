"""
In-Memory Product Store
=======================

Dictionary-backed product store for development and testing.

Version: 0.1.0
"""

import asyncio
import uuid
from typing import Any

from services.catalog.services.product_store import ProductQuery, ProductStore
from shared.config import StorageMode
from shared.errors import DuplicateSku
from shared.logging import get_logger
from shared.models.common import utcnow
from shared.models.product import Product, ProductCreate

logger = get_logger(__name__)


def _matches(product: Product, query: ProductQuery) -> bool:
    if query.category is not None and product.category != query.category:
        return False
    if query.is_active is not None and product.is_active != query.is_active:
        return False
    if query.min_price is not None and product.price < query.min_price:
        return False
    if query.max_price is not None and product.price > query.max_price:
        return False
    if query.in_stock and product.stock <= 0:
        return False
    if query.search:
        needle = query.search.lower()
        haystacks = [product.name.lower(), (product.description or "").lower()]
        if not any(needle in h for h in haystacks):
            return False
    return True


class InMemoryProductStore(ProductStore):
    """In-memory product store."""

    def __init__(self) -> None:
        self._products: dict[str, Product] = {}
        self._lock = asyncio.Lock()

    @property
    def mode(self) -> StorageMode:
        return StorageMode.MEMORY

    async def health_check(self) -> dict[str, Any]:
        return {"status": "healthy", "mode": self.mode.value, "products": len(self._products)}

    def clear_all(self) -> None:
        """Clear all stored products (for testing)."""
        self._products.clear()

    def _sku_owner(self, sku: str) -> str | None:
        for product in self._products.values():
            if product.sku == sku:
                return product.id
        return None

    async def find_by_id(self, product_id: str) -> Product | None:
        product = self._products.get(product_id)
        return product.model_copy(deep=True) if product else None

    async def list_products(self, query: ProductQuery) -> tuple[list[Product], int]:
        matches = [p for p in self._products.values() if _matches(p, query)]
        matches.sort(key=lambda p: getattr(p, query.sort_field), reverse=query.descending)
        page = matches[query.offset : query.offset + query.limit]
        return [p.model_copy(deep=True) for p in page], len(matches)

    async def create(self, data: ProductCreate, created_by: str) -> Product:
        async with self._lock:
            if self._sku_owner(data.sku) is not None:
                raise DuplicateSku()

            product = Product(
                id=uuid.uuid4().hex,
                created_by=created_by,
                **data.model_dump(mode="json"),
            )
            self._products[product.id] = product

        logger.info("product_created", product_id=product.id, sku=product.sku)
        return product.model_copy(deep=True)

    async def update(
        self,
        product_id: str,
        changes: dict[str, Any],
        updated_by: str,
    ) -> Product | None:
        async with self._lock:
            product = self._products.get(product_id)
            if product is None:
                return None

            sku = changes.get("sku")
            if sku is not None and self._sku_owner(sku) not in (None, product_id):
                raise DuplicateSku("SKU already in use by another product")

            updated = Product.model_validate(
                {
                    **product.model_dump(exclude={"is_active", "stock_status"}),
                    **changes,
                    "updated_by": updated_by,
                    "updated_at": utcnow(),
                }
            )
            self._products[product_id] = updated
            return updated.model_copy(deep=True)

    async def delete(self, product_id: str) -> bool:
        async with self._lock:
            return self._products.pop(product_id, None) is not None
