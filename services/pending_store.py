"""
In-process store for pending registrations.

One entry per normalised email. Every method takes the store lock, so each
call is atomic with respect to the others; none of them awaits anything
else while holding it. Expiry is checked on every read, so correctness does
not depend on how often the reaper sweeps.

consume() is the only way a code can be redeemed: it compares and deletes
in one step, so two concurrent confirmations cannot both succeed and a code
that was superseded by a newer put() can never match.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional

from errors import CodeExpiredError, CodeMismatchError, NoPendingRequestError
from schemas.models.pending import PendingRegistration
from shared.crypto import secrets_match
from shared.datetime_utils import Clock, expiry_from, utc_now
from shared.logging import get_logger, hash_email
from shared.validators import normalize_email

log = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


class PendingVerificationStore:
    def __init__(
        self,
        clock: Clock = utc_now,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._clock = clock
        self._max_attempts = max_attempts
        self._entries: dict[str, PendingRegistration] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    async def put(self, email: str, code: str, ttl_seconds: int) -> PendingRegistration:
        """Store *code* for *email*, replacing any earlier entry."""
        key = normalize_email(email)
        now = self._clock()
        entry = PendingRegistration(
            email=key,
            verification_code=code,
            expires_at=expiry_from(now, ttl_seconds),
            created_at=now,
        )
        async with self._lock:
            superseded = key in self._entries
            self._entries[key] = entry
        log.debug("pending_registration_stored", email_hash=hash_email(key), superseded=superseded)
        return entry

    async def get(self, email: str) -> Optional[PendingRegistration]:
        """Return the live entry for *email*; expired entries read as absent."""
        key = normalize_email(email)
        async with self._lock:
            entry = self._entries.get(key)
        if entry is None or entry.is_expired(self._clock()):
            return None
        return entry

    async def remove(self, email: str) -> None:
        async with self._lock:
            self._entries.pop(normalize_email(email), None)

    async def consume(
        self, email: str, code: str, now: Optional[datetime] = None
    ) -> PendingRegistration:
        """Check *code* against the entry for *email* and remove it on success.

        Raises:
            NoPendingRequestError: no entry for the email.
            CodeExpiredError: the entry expired; it is evicted.
            CodeMismatchError: wrong code. After ``max_attempts`` failures the
                entry is evicted and a new code must be requested.
        """
        key = normalize_email(email)
        now = now or self._clock()
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                raise NoPendingRequestError(
                    "No verification request found for this email. Please request a new code.",
                    field="email",
                )
            if entry.is_expired(now):
                del self._entries[key]
                raise CodeExpiredError(
                    "Verification code has expired. Please request a new code.",
                    field="code",
                )
            if not secrets_match(entry.verification_code, code or ""):
                entry.attempts += 1
                if entry.attempts >= self._max_attempts:
                    del self._entries[key]
                    log.warning("pending_registration_locked", email_hash=hash_email(key), attempts=entry.attempts)
                    raise CodeMismatchError(
                        "Too many failed attempts. Please request a new code.",
                        field="code",
                    )
                raise CodeMismatchError("Invalid verification code", field="code")
            del self._entries[key]
        return entry

    async def restore(self, entry: PendingRegistration) -> bool:
        """Put a consumed *entry* back unless a newer one was issued meanwhile."""
        async with self._lock:
            if entry.email in self._entries:
                return False
            self._entries[entry.email] = entry
        return True

    async def sweep_expired(self, now: Optional[datetime] = None) -> int:
        """Remove every entry whose expiry is at or before *now*."""
        now = now or self._clock()
        async with self._lock:
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)
