"""
Response DTOs for authentication and account endpoints.

AddressInfo            - address entry inside AccountProfileResponse
AccountProfileResponse - public account fields, never secrets
AuthResponse           - register / login / profile update
MeResponse             - GET /api/auth/me
CheckEmailResponse     - POST /api/auth/check-email
CodeIssuedResponse     - POST /api/auth/request-code
ResetRequestedResponse - POST /api/auth/forgot-password
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from schemas.models.user import AccountDoc
from shared.datetime_utils import to_iso


class AddressInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    label: Optional[str] = None
    street: str
    city: str
    state: Optional[str] = None
    postal_code: Optional[str] = None
    is_default: bool = False


class AccountProfileResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    email_verified: bool
    status: str
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    addresses: list[AddressInfo] = []
    preferences: dict[str, Any] = {}
    created_at: Optional[str] = None  # ISO 8601 string
    last_login_at: Optional[str] = None

    @classmethod
    def from_account(cls, account: AccountDoc) -> "AccountProfileResponse":
        return cls(
            id=str(account.id),
            email=account.email,
            email_verified=account.email_verified,
            status=account.status.value,
            role=account.role.value,
            first_name=account.first_name,
            last_name=account.last_name,
            phone_number=account.phone_number,
            addresses=[AddressInfo(**a.model_dump()) for a in account.addresses],
            preferences=account.preferences,
            created_at=to_iso(account.created_at),
            last_login_at=to_iso(account.last_login_at),
        )


class AuthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str
    user: AccountProfileResponse


class MeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user: AccountProfileResponse


class CheckEmailResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    available: bool
    message: str


class CodeIssuedResponse(BaseModel):
    """``code`` is only present when the deployment delivers secrets directly."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    email: str
    expires_at: str
    code: Optional[str] = None


class ResetRequestedResponse(BaseModel):
    """``reset_token`` is only present when the deployment delivers secrets directly."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    expires_at: str
    reset_token: Optional[str] = None
