"""
Account document model.

Maps to the `users` MongoDB collection.

Accounts are only ever created verified: either after the email code was
confirmed, or directly when verification is bypassed. The reset_* fields
hold at most one outstanding password-reset token (stored as a SHA-256
hash) and are unset as soon as it is redeemed.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from schemas.models.base import MongoBaseModel


class AccountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class AccountRole(str, Enum):
    CUSTOMER = "customer"
    PARTNER = "partner"
    ADMIN = "admin"


SELF_ASSIGNABLE_ROLES = (AccountRole.CUSTOMER, AccountRole.PARTNER)


class Address(BaseModel):
    """Pickup/delivery address embedded in the account."""

    label: Optional[str] = None
    street: str
    city: str
    state: Optional[str] = None
    postal_code: Optional[str] = None
    is_default: bool = False


class AccountDoc(MongoBaseModel):
    """Document model for the `users` collection."""

    email: str
    password_hash: str
    email_verified: bool = False
    status: AccountStatus = AccountStatus.ACTIVE
    role: AccountRole = AccountRole.CUSTOMER

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    addresses: list[Address] = []
    preferences: dict[str, Any] = Field(default_factory=dict)

    reset_token_hash: Optional[str] = None
    reset_expires_at: Optional[datetime] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    def to_mongo(self, *, exclude_none: bool = True) -> dict:
        # Unset reset fields are omitted, never null: the reset_token_hash index is sparse.
        data = super().to_mongo(exclude_none=exclude_none)
        data["status"] = self.status.value
        data["role"] = self.role.value
        return data
