"""
Cryptographic helpers - password hashing, token hashing, constant-time compare.

Uses argon2 for passwords (via argon2-cffi) and SHA-256 for token hashing.
"""

from __future__ import annotations

import hashlib
import hmac

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_password_hasher = PasswordHasher()


def hash_password(plain_password: str) -> str:
    """Hash *plain_password* with argon2id.

    Returns:
        Argon2 hash string (includes algorithm parameters and salt).
    """
    return _password_hasher.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify *plain_password* against an argon2 *password_hash*.

    Returns:
        ``True`` if the password matches, ``False`` for a wrong password or
        a hash that cannot be parsed.
    """
    try:
        return _password_hasher.verify(password_hash, plain_password)
    except (VerificationError, InvalidHashError):
        return False


def hash_token(token: str) -> str:
    """Return the hex-encoded SHA-256 digest of *token*.

    Reset tokens are stored hashed so the plaintext is never persisted.
    Equal tokens always hash equal, so lookups stay exact-match.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def secrets_match(expected: str, candidate: str) -> bool:
    """Constant-time string comparison for user-supplied secrets."""
    return hmac.compare_digest(expected.encode("utf-8"), candidate.encode("utf-8"))
