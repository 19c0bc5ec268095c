"""
Login and self-service account management for existing accounts.
"""

from __future__ import annotations

from typing import Any

from errors import (
    AccountNotFoundError,
    AuthenticationError,
    AuthMismatchError,
    ForbiddenError,
    ValidationError,
)
from repositories.protocol import UserDirectory
from schemas.models.user import AccountDoc, AccountStatus
from services.registration_service import require_valid_password
from services.results import AuthResult
from services.token_service import TokenService
from shared.crypto import hash_password
from shared.datetime_utils import Clock, utc_now
from shared.logging import get_logger
from shared.validators import normalize_email, validate_phone_number

log = get_logger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "phone_number", "addresses", "preferences")
CLEARABLE_FIELDS = ("phone_number",)


class AccountService:
    def __init__(
        self,
        directory: UserDirectory,
        token_service: TokenService,
        clock: Clock = utc_now,
    ) -> None:
        self._directory = directory
        self._tokens = token_service
        self._clock = clock

    async def login(self, email: str, password: str) -> AuthResult:
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("email and password are required")

        account = await self._directory.find_by_email(email)
        if account is None or not self._directory.verify_password(account, password):
            # Do not reveal which part failed
            log.warning("login_failed", reason="invalid_credentials", email_exists=account is not None)
            raise AuthenticationError("Invalid email or password")
        if account.status != AccountStatus.ACTIVE:
            log.warning("login_failed", reason="inactive_account", account_id=str(account.id))
            raise ForbiddenError("This account is not active")

        account = await self._directory.save(account.id, {"last_login_at": self._clock()}) or account
        log.info("login_success", account_id=str(account.id))
        return AuthResult(
            account=account,
            access_token=self._tokens.issue(str(account.id), email_verified=account.email_verified),
        )

    async def get_profile(self, account_id: str) -> AccountDoc:
        account = await self._directory.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError("User not found")
        return account

    async def update_profile(self, account_id: str, changes: dict[str, Any]) -> AuthResult:
        """Apply the provided profile fields.

        None clears a clearable field and leaves any other field unchanged.
        """
        await self.get_profile(account_id)

        update = {
            k: v
            for k, v in changes.items()
            if k in PROFILE_FIELDS and (v is not None or k in CLEARABLE_FIELDS)
        }
        phone = update.get("phone_number")
        if phone and not validate_phone_number(phone):
            raise ValidationError("Invalid phone number", field="phone_number")
        if "addresses" in update:
            update["addresses"] = [
                a.model_dump() if hasattr(a, "model_dump") else dict(a)
                for a in update["addresses"]
            ]

        account = await self._directory.save(account_id, update)
        if account is None:
            raise AccountNotFoundError("User not found")
        log.info("profile_updated", account_id=str(account.id), fields=sorted(update))
        return AuthResult(
            account=account,
            access_token=self._tokens.issue(str(account.id), email_verified=account.email_verified),
        )

    async def change_password(
        self, account_id: str, current_password: str, new_password: str
    ) -> None:
        account = await self.get_profile(account_id)
        if not self._directory.verify_password(account, current_password or ""):
            log.warning("password_change_failed", reason="wrong_current_password", account_id=account_id)
            raise AuthMismatchError("Current password is incorrect", field="current_password")
        require_valid_password(new_password, field="new_password")

        await self._directory.update_credential(account.id, hash_password(new_password))
        log.info("password_changed", account_id=str(account.id))
