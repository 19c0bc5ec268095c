"""
MongoDB implementation of the UserDirectory.

All writes that must be atomic are single-document operations:
- uniqueness of `email` is enforced by a unique index, so a racing insert
  surfaces as DuplicateKeyError → DuplicateEmailError
- reset-token redemption is one find_one_and_update that matches the token
  hash and a live expiry, swaps the password hash and unsets the token

Any other PyMongoError is logged and re-raised as DependencyError.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import DependencyError, DuplicateEmailError
from schemas.models.base import to_object_id
from schemas.models.user import AccountDoc
from shared.crypto import verify_password
from shared.datetime_utils import utc_now
from shared.logging import get_logger
from shared.validators import normalize_email

log = get_logger(__name__)

USERS_COLLECTION = "users"

_RESET_FIELDS = {"reset_token_hash": "", "reset_expires_at": ""}


class MongoUserRepository:
    def __init__(self, db) -> None:
        self._col = db[USERS_COLLECTION]

    async def ensure_indexes(self) -> None:
        try:
            await self._col.create_index([("email", ASCENDING)], unique=True)
            await self._col.create_index(
                [("reset_token_hash", ASCENDING)], unique=True, sparse=True
            )
        except PyMongoError as e:
            raise self._dependency_error("ensure_indexes", e) from e

    async def find_by_email(self, email: str) -> Optional[AccountDoc]:
        try:
            doc = await self._col.find_one({"email": normalize_email(email)})
        except PyMongoError as e:
            raise self._dependency_error("find_by_email", e) from e
        return AccountDoc.from_mongo(doc)

    async def find_by_id(self, account_id: Any) -> Optional[AccountDoc]:
        oid = to_object_id(account_id)
        if oid is None:
            return None
        try:
            doc = await self._col.find_one({"_id": oid})
        except PyMongoError as e:
            raise self._dependency_error("find_by_id", e) from e
        return AccountDoc.from_mongo(doc)

    async def create(self, account: AccountDoc) -> AccountDoc:
        now = utc_now()
        account = account.model_copy(
            update={
                "email": normalize_email(account.email),
                "created_at": account.created_at or now,
                "updated_at": now,
            }
        )
        try:
            result = await self._col.insert_one(account.to_mongo())
        except DuplicateKeyError as e:
            log.warning("account_insert_rejected", reason="duplicate_email")
            raise DuplicateEmailError(
                "email already registered", field="email"
            ) from e
        except PyMongoError as e:
            raise self._dependency_error("create", e) from e
        return account.model_copy(update={"id": result.inserted_id})

    async def update_credential(self, account_id: Any, password_hash: str) -> None:
        try:
            await self._col.update_one(
                {"_id": to_object_id(account_id)},
                {"$set": {"password_hash": password_hash, "updated_at": utc_now()}},
            )
        except PyMongoError as e:
            raise self._dependency_error("update_credential", e) from e

    async def save(self, account_id: Any, fields: dict) -> Optional[AccountDoc]:
        update = dict(fields)
        update["updated_at"] = utc_now()
        try:
            doc = await self._col.find_one_and_update(
                {"_id": to_object_id(account_id)},
                {"$set": update},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise self._dependency_error("save", e) from e
        return AccountDoc.from_mongo(doc)

    async def set_reset_token(
        self, account_id: Any, token_hash: str, expires_at: datetime
    ) -> None:
        try:
            await self._col.update_one(
                {"_id": to_object_id(account_id)},
                {
                    "$set": {
                        "reset_token_hash": token_hash,
                        "reset_expires_at": expires_at,
                        "updated_at": utc_now(),
                    }
                },
            )
        except PyMongoError as e:
            raise self._dependency_error("set_reset_token", e) from e

    async def redeem_reset_token(
        self, token_hash: str, password_hash: str, now: datetime
    ) -> Optional[AccountDoc]:
        try:
            doc = await self._col.find_one_and_update(
                {"reset_token_hash": token_hash, "reset_expires_at": {"$gt": now}},
                {
                    "$set": {"password_hash": password_hash, "updated_at": now},
                    "$unset": _RESET_FIELDS,
                },
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise self._dependency_error("redeem_reset_token", e) from e
        return AccountDoc.from_mongo(doc)

    async def clear_expired_reset_tokens(self, now: datetime) -> int:
        try:
            result = await self._col.update_many(
                {"reset_expires_at": {"$lte": now}},
                {"$unset": _RESET_FIELDS},
            )
        except PyMongoError as e:
            raise self._dependency_error("clear_expired_reset_tokens", e) from e
        return result.modified_count

    def verify_password(self, account: AccountDoc, candidate: str) -> bool:
        return verify_password(candidate, account.password_hash)

    @staticmethod
    def _dependency_error(operation: str, exc: Exception) -> DependencyError:
        log.error(
            "user_directory_error",
            operation=operation,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return DependencyError(f"user directory {operation} failed: {exc}")
