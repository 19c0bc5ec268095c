"""UserDirectory protocol - services depend on this, not on MongoDB."""

from datetime import datetime
from typing import Any, Optional, Protocol

from schemas.models.user import AccountDoc


class UserDirectory(Protocol):
    async def find_by_email(self, email: str) -> Optional[AccountDoc]: ...

    async def find_by_id(self, account_id: Any) -> Optional[AccountDoc]: ...

    async def create(self, account: AccountDoc) -> AccountDoc:
        """Insert *account*. Raises DuplicateEmailError if the email is taken."""
        ...

    async def update_credential(self, account_id: Any, password_hash: str) -> None: ...

    async def save(self, account_id: Any, fields: dict) -> Optional[AccountDoc]:
        """Set *fields* on the account and return the updated document."""
        ...

    async def set_reset_token(
        self, account_id: Any, token_hash: str, expires_at: datetime
    ) -> None: ...

    async def redeem_reset_token(
        self, token_hash: str, password_hash: str, now: datetime
    ) -> Optional[AccountDoc]:
        """Atomically swap the password and clear the token if it is live.

        This is the credential update on the reset path; it replaces
        update_credential there so matching and writing cannot interleave.

        Returns the updated account, or None when no account holds
        *token_hash* with an expiry after *now*.
        """
        ...

    async def clear_expired_reset_tokens(self, now: datetime) -> int: ...

    def verify_password(self, account: AccountDoc, candidate: str) -> bool: ...
