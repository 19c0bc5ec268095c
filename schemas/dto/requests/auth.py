"""
Request DTOs for authentication and account endpoints.

CheckEmailRequest        - POST /api/auth/check-email
RequestCodeRequest       - POST /api/auth/request-code
RegisterRequest          - POST /api/auth/register
LoginRequest             - POST /api/auth/login
UpdateProfileRequest     - PUT  /api/auth/profile
ChangePasswordRequest    - PUT  /api/auth/password
ForgotPasswordRequest    - POST /api/auth/forgot-password
ResetPasswordRequest     - POST /api/auth/reset-password

Field-level rules (email syntax, password policy) are enforced in the
service layer so they surface as typed AppErrors; the DTOs only pin shape
and strip surrounding whitespace.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.models.user import AccountRole, Address


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class CheckEmailRequest(_Request):
    email: str


class RequestCodeRequest(_Request):
    email: str


class RegisterRequest(_Request):
    """Request body for POST /api/auth/register.

    ``code`` is the 6-digit code from /request-code; it is ignored when the
    deployment runs with verification bypassed.
    """

    email: str
    code: Optional[str] = None
    password: str = Field(json_schema_extra={"format": "password"})
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone_number: Optional[str] = None
    role: AccountRole = AccountRole.CUSTOMER

    def account_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude={"email", "code"})


class LoginRequest(_Request):
    email: str
    password: str


class UpdateProfileRequest(_Request):
    """Request body for PUT /api/auth/profile. Omitted fields are left unchanged."""

    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone_number: Optional[str] = None
    addresses: Optional[list[Address]] = None
    preferences: Optional[dict[str, Any]] = None


class ChangePasswordRequest(_Request):
    current_password: str
    new_password: str


class ForgotPasswordRequest(_Request):
    email: str


class ResetPasswordRequest(BaseModel):
    """Request body for POST /api/auth/reset-password.

    The token is kept exactly as sent; the password is stripped like every
    other password field so later logins match it.
    """

    model_config = ConfigDict(populate_by_name=True)

    reset_token: str = Field(alias="resetToken")
    new_password: str = Field(alias="newPassword")

    @field_validator("new_password")
    @classmethod
    def _strip_password(cls, v: str) -> str:
        return v.strip()
