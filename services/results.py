"""Return types shared by the account services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from schemas.models.user import AccountDoc


@dataclass(frozen=True)
class IssuedSecret:
    """Outcome of issuing a verification code or reset token.

    ``secret`` is only set when the deployment hands secrets back to the
    caller instead of emailing them.
    """

    email: str
    expires_at: datetime
    secret: Optional[str] = None


@dataclass(frozen=True)
class AuthResult:
    account: AccountDoc
    access_token: str
