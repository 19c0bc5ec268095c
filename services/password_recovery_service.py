"""
Password recovery with single-use reset tokens.

The token lives on the account itself (only its SHA-256 hash is stored),
so issuing a new one overwrites, and thereby revokes, the previous one.
Redemption is a single atomic directory call that matches the exact token
hash with a live expiry, swaps the password hash and clears the token.
"""

from __future__ import annotations

from typing import Optional

from config import VerificationSettings
from errors import AccountNotFoundError, EmailDeliveryError, InvalidOrExpiredTokenError
from infrastructure.email.protocol import EmailProvider
from repositories.protocol import UserDirectory
from schemas.models.user import AccountDoc
from services.registration_service import require_email, require_valid_password
from services.results import IssuedSecret
from shared.crypto import hash_password, hash_token
from shared.datetime_utils import Clock, expiry_from, utc_now
from shared.generators import SecretGenerator
from shared.logging import get_logger

log = get_logger(__name__)


class PasswordRecoveryService:
    def __init__(
        self,
        directory: UserDirectory,
        email_provider: EmailProvider,
        settings: VerificationSettings,
        generator: Optional[SecretGenerator] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._directory = directory
        self._email = email_provider
        self._settings = settings
        self._generator = generator or SecretGenerator()
        self._clock = clock

    async def request_reset(self, email: str) -> IssuedSecret:
        email = require_email(email)
        account = await self._directory.find_by_email(email)
        if account is None:
            raise AccountNotFoundError("No account found for this email", field="email")

        reset_token = self._generator.issue_reset_token()
        expires_at = expiry_from(self._clock(), self._settings.reset_token_ttl_seconds)
        await self._directory.set_reset_token(account.id, hash_token(reset_token), expires_at)
        log.info("password_reset_issued", account_id=str(account.id))

        if not self._settings.deliver_by_email:
            return IssuedSecret(email=email, expires_at=expires_at, secret=reset_token)

        # The stored token stays redeemable even if delivery fails.
        if not await self._email.send_password_reset(email, reset_token):
            raise EmailDeliveryError("password reset delivery failed")
        return IssuedSecret(email=email, expires_at=expires_at)

    async def redeem(self, reset_token: str, new_password: str) -> AccountDoc:
        """Set *new_password* on the account holding *reset_token* and burn the token."""
        if not reset_token:
            raise InvalidOrExpiredTokenError("Reset token is required", field="reset_token")
        require_valid_password(new_password, field="new_password")

        account = await self._directory.redeem_reset_token(
            hash_token(reset_token), hash_password(new_password), self._clock()
        )
        if account is None:
            log.warning("password_reset_rejected", reason="invalid_or_expired_token")
            raise InvalidOrExpiredTokenError(
                "Invalid or expired reset token", field="reset_token"
            )
        log.info("password_reset_completed", account_id=str(account.id))
        return account
