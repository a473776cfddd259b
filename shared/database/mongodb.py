"""
MongoDB Client
==============

Shared Motor client for the `users` and `products` collections.

One client per process; the connection pool is opened lazily on first
use and released by `close()` during application shutdown.

Version: 0.1.0
"""

import time
from typing import Any

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo import ASCENDING, DESCENDING, IndexModel
from pymongo.errors import PyMongoError

from shared.config import settings
from shared.logging import get_logger

logger = get_logger(__name__)


USERS = "users"
PRODUCTS = "products"

# Email and SKU uniqueness are enforced here as well as in the stores
INDEXES: dict[str, list[IndexModel]] = {
    USERS: [
        IndexModel([("email", ASCENDING)], unique=True, name="email_unique"),
        IndexModel([("created_at", DESCENDING)]),
    ],
    PRODUCTS: [
        IndexModel([("sku", ASCENDING)], unique=True, name="sku_unique"),
        IndexModel([("category", ASCENDING), ("price", ASCENDING)]),
        IndexModel([("created_by", ASCENDING)]),
        IndexModel([("status", ASCENDING), ("created_at", DESCENDING)]),
        IndexModel([("name", ASCENDING)]),
    ],
}


class MongoDBClient:
    """Process-wide Motor client holder."""

    _client: AsyncIOMotorClient | None = None  # type: ignore[type-arg]

    @classmethod
    def get_client(cls) -> AsyncIOMotorClient:  # type: ignore[type-arg]
        if cls._client is None:
            cfg = settings.mongodb
            cls._client = AsyncIOMotorClient(
                cfg.uri,
                tz_aware=True,
                serverSelectionTimeoutMS=cfg.timeout_ms,
                connectTimeoutMS=cfg.timeout_ms,
            )
            logger.info("mongodb_client_created", host=cfg.host, database=cfg.db)
        return cls._client

    @classmethod
    def get_database(cls, name: str | None = None) -> AsyncIOMotorDatabase:  # type: ignore[type-arg]
        return cls.get_client()[name or settings.mongodb.db]

    @classmethod
    def collection(cls, name: str) -> AsyncIOMotorCollection:  # type: ignore[type-arg]
        """Collection in the configured database."""
        return cls.get_database()[name]

    @classmethod
    async def close(cls) -> None:
        client, cls._client = cls._client, None
        if client is not None:
            client.close()
            logger.info("mongodb_client_closed")

    @classmethod
    async def health_check(cls) -> dict[str, Any]:
        """
        Ping the server.

        Never raises; connection problems are reported as `unhealthy`
        so the /health endpoint can still answer.
        """
        start = time.perf_counter()
        try:
            reply = await cls.get_client().admin.command("ping")
        except PyMongoError as e:
            logger.error("mongodb_health_check_failed", error=str(e))
            return {"status": "unhealthy", "error": str(e)}

        return {
            "status": "healthy" if reply.get("ok") == 1 else "unhealthy",
            "latency_ms": round((time.perf_counter() - start) * 1000, 2),
        }

    @classmethod
    async def create_indexes(cls) -> None:
        """Create the indexes in INDEXES; existing ones are left alone."""
        for name, models in INDEXES.items():
            created = await cls.collection(name).create_indexes(models)
            logger.info("mongodb_indexes_created", collection=name, indexes=created)
