"""
MongoDB Credential Store
========================

Credential store backed by the `users` collection.

Refresh token list changes are single-document updates, so no
read-modify-write happens across two network calls. Rotation is one
pipeline update matched on the old token being present: it drops the old
entry, appends the new one and re-applies the cap in the same write.

Version: 0.1.0
"""

import uuid
from typing import Any

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from shared.auth.password import PasswordHasher
from shared.auth.store import CredentialStore
from shared.config import StorageMode
from shared.database.mongodb import USERS, MongoDBClient
from shared.errors import DuplicateEmail
from shared.logging import get_logger
from shared.models.common import RecordStatus, utcnow
from shared.models.user import MAX_REFRESH_TOKENS, Role, UserRecord, normalize_email

logger = get_logger(__name__)


def _to_record(doc: dict[str, Any] | None) -> UserRecord | None:
    if doc is None:
        return None
    doc = dict(doc)
    doc["id"] = doc.pop("_id")
    return UserRecord.model_validate(doc)


class MongoCredentialStore(CredentialStore):
    """MongoDB-backed credential store."""

    def __init__(
        self,
        collection: AsyncIOMotorCollection | None = None,  # type: ignore[type-arg]
        hasher: PasswordHasher | None = None,
    ) -> None:
        super().__init__(hasher)
        self._collection = collection

    @property
    def mode(self) -> StorageMode:
        return StorageMode.MONGODB

    async def health_check(self) -> dict[str, Any]:
        return await MongoDBClient.health_check()

    @property
    def users(self) -> AsyncIOMotorCollection:  # type: ignore[type-arg]
        if self._collection is None:
            self._collection = MongoDBClient.collection(USERS)
        return self._collection

    async def _update(self, user_id: str, update: dict[str, Any]) -> UserRecord | None:
        update.setdefault("$set", {})["updated_at"] = utcnow()
        doc = await self.users.find_one_and_update(
            {"_id": user_id},
            update,
            return_document=ReturnDocument.AFTER,
        )
        return _to_record(doc)

    # =========================================================================
    # Lookup
    # =========================================================================

    async def find_by_email(self, email: str) -> UserRecord | None:
        return _to_record(await self.users.find_one({"email": normalize_email(email)}))

    async def find_by_id(self, user_id: str) -> UserRecord | None:
        return _to_record(await self.users.find_one({"_id": user_id}))

    async def list_users(self, page: int, page_size: int) -> tuple[list[UserRecord], int]:
        cursor = (
            self.users.find({})
            .sort("created_at", -1)
            .skip((page - 1) * page_size)
            .limit(page_size)
        )
        docs = await cursor.to_list(length=page_size)
        total = await self.users.count_documents({})
        return [r for r in map(_to_record, docs) if r is not None], total

    # =========================================================================
    # Creation and profile
    # =========================================================================

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: Role = Role.USER,
    ) -> UserRecord:
        record = UserRecord(
            id=uuid.uuid4().hex,
            name=name,
            email=normalize_email(email),
            password_hash=password_hash,
            role=role,
        )
        doc = record.model_dump(mode="python", exclude={"id"})
        doc["_id"] = record.id
        doc["role"] = record.role.value
        doc["status"] = record.status.value

        try:
            await self.users.insert_one(doc)
        except DuplicateKeyError as e:
            raise DuplicateEmail() from e

        logger.info("user_created", user_id=record.id, role=role.value)
        return record

    async def update_profile(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
    ) -> UserRecord | None:
        changes: dict[str, Any] = {}
        if name is not None:
            changes["name"] = name
        if email is not None:
            changes["email"] = normalize_email(email)

        try:
            return await self._update(user_id, {"$set": changes})
        except DuplicateKeyError as e:
            raise DuplicateEmail("Email already in use") from e

    async def set_status(self, user_id: str, status: RecordStatus) -> UserRecord | None:
        return await self._update(user_id, {"$set": {"status": status.value}})

    async def set_role(self, user_id: str, role: Role) -> UserRecord | None:
        return await self._update(user_id, {"$set": {"role": role.value}})

    async def set_password_hash(self, user_id: str, password_hash: str) -> bool:
        result = await self.users.update_one(
            {"_id": user_id},
            {"$set": {"password_hash": password_hash, "updated_at": utcnow()}},
        )
        return result.matched_count > 0

    # =========================================================================
    # Refresh tokens
    # =========================================================================

    async def append_refresh_token(self, user_id: str, token: str) -> None:
        now = utcnow()
        await self.users.update_one(
            {"_id": user_id},
            {
                "$push": {
                    "refresh_tokens": {
                        "$each": [{"token": token, "created_at": now}],
                        "$slice": -MAX_REFRESH_TOKENS,
                    }
                },
                "$set": {"updated_at": now},
            },
        )

    async def remove_refresh_token(self, user_id: str, token: str) -> None:
        await self.users.update_one(
            {"_id": user_id},
            {
                "$pull": {"refresh_tokens": {"token": token}},
                "$set": {"updated_at": utcnow()},
            },
        )

    async def clear_refresh_tokens(self, user_id: str) -> None:
        await self.users.update_one(
            {"_id": user_id},
            {"$set": {"refresh_tokens": [], "updated_at": utcnow()}},
        )

    async def has_refresh_token(self, user_id: str, token: str) -> bool:
        count = await self.users.count_documents(
            {"_id": user_id, "refresh_tokens.token": token},
            limit=1,
        )
        return count > 0

    async def rotate_refresh_token(self, user_id: str, old_token: str, new_token: str) -> bool:
        now = utcnow()
        kept = {
            "$filter": {
                "input": "$refresh_tokens",
                "as": "entry",
                "cond": {"$ne": ["$$entry.token", {"$literal": old_token}]},
            }
        }
        # Pipeline update: claim, remove and append happen in one write
        result = await self.users.update_one(
            {"_id": user_id, "refresh_tokens.token": old_token},
            [
                {
                    "$set": {
                        "refresh_tokens": {
                            "$slice": [
                                {"$concatArrays": [kept, [{"token": new_token, "created_at": now}]]},
                                -MAX_REFRESH_TOKENS,
                            ]
                        },
                        "updated_at": now,
                    }
                }
            ],
        )
        return result.modified_count > 0
