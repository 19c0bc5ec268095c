"""
Pending registration record.

Lives only in the in-process PendingVerificationStore: one entry per
normalised email, holding the code issued for an account that does not
exist yet.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from shared.datetime_utils import is_expired, utc_now


@dataclass
class PendingRegistration:
    email: str
    verification_code: str
    expires_at: datetime
    created_at: datetime = field(default_factory=utc_now)
    attempts: int = 0

    def is_expired(self, now: datetime) -> bool:
        return is_expired(self.expires_at, now)
