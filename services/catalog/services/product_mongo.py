"""
MongoDB Product Store
=====================

Product store backed by the `products` collection. SKU uniqueness is
enforced by the unique index created at startup.

Version: 0.1.0
"""

import re
import uuid
from typing import Any

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from services.catalog.services.product_store import ProductQuery, ProductStore
from shared.config import StorageMode
from shared.database.mongodb import PRODUCTS, MongoDBClient
from shared.errors import DuplicateSku
from shared.logging import get_logger
from shared.models.common import RecordStatus, utcnow
from shared.models.product import Product, ProductCreate

logger = get_logger(__name__)


def _to_product(doc: dict[str, Any] | None) -> Product | None:
    if doc is None:
        return None
    doc = dict(doc)
    doc["id"] = doc.pop("_id")
    return Product.model_validate(doc)


def build_filter(query: ProductQuery) -> dict[str, Any]:
    """Translate a listing query into a MongoDB filter document."""
    conditions: dict[str, Any] = {}

    if query.is_active is not None:
        status = RecordStatus.ACTIVE if query.is_active else RecordStatus.DISABLED
        conditions["status"] = status.value

    if query.category is not None:
        conditions["category"] = query.category.value

    price: dict[str, float] = {}
    if query.min_price is not None:
        price["$gte"] = query.min_price
    if query.max_price is not None:
        price["$lte"] = query.max_price
    if price:
        conditions["price"] = price

    if query.in_stock:
        conditions["stock"] = {"$gt": 0}

    if query.search:
        # User input is matched literally
        pattern = re.escape(query.search)
        conditions["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]

    return conditions


class MongoProductStore(ProductStore):
    """MongoDB-backed product store."""

    def __init__(self, collection: AsyncIOMotorCollection | None = None) -> None:  # type: ignore[type-arg]
        self._collection = collection

    @property
    def mode(self) -> StorageMode:
        return StorageMode.MONGODB

    @property
    def products(self) -> AsyncIOMotorCollection:  # type: ignore[type-arg]
        if self._collection is None:
            self._collection = MongoDBClient.collection(PRODUCTS)
        return self._collection

    async def health_check(self) -> dict[str, Any]:
        return await MongoDBClient.health_check()

    async def find_by_id(self, product_id: str) -> Product | None:
        return _to_product(await self.products.find_one({"_id": product_id}))

    async def list_products(self, query: ProductQuery) -> tuple[list[Product], int]:
        conditions = build_filter(query)
        cursor = (
            self.products.find(conditions)
            .sort(query.sort_field, DESCENDING if query.descending else ASCENDING)
            .skip(query.offset)
            .limit(query.limit)
        )
        docs = await cursor.to_list(length=query.limit)
        total = await self.products.count_documents(conditions)
        return [p for p in map(_to_product, docs) if p is not None], total

    async def create(self, data: ProductCreate, created_by: str) -> Product:
        product = Product(
            id=uuid.uuid4().hex,
            created_by=created_by,
            **data.model_dump(mode="json"),
        )
        doc = product.model_dump(mode="python", exclude={"id", "is_active", "stock_status"})
        doc["_id"] = product.id
        doc["category"] = product.category.value
        doc["status"] = product.status.value

        try:
            await self.products.insert_one(doc)
        except DuplicateKeyError as e:
            raise DuplicateSku() from e

        logger.info("product_created", product_id=product.id, sku=product.sku)
        return product

    async def update(
        self,
        product_id: str,
        changes: dict[str, Any],
        updated_by: str,
    ) -> Product | None:
        fields = dict(changes)
        for key in ("category", "status"):
            if key in fields:
                fields[key] = getattr(fields[key], "value", fields[key])
        fields["updated_by"] = updated_by
        fields["updated_at"] = utcnow()

        try:
            doc = await self.products.find_one_and_update(
                {"_id": product_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise DuplicateSku("SKU already in use by another product") from e

        return _to_product(doc)

    async def delete(self, product_id: str) -> bool:
        result = await self.products.delete_one({"_id": product_id})
        return result.deleted_count > 0
