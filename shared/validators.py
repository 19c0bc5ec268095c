"""
Input validators - framework-agnostic, pure functions.

Raise nothing; each returns a boolean (or a boolean plus the list of unmet
requirements) and leaves error construction to the service layer.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

import validators as _validators

_PHONE_RE = re.compile(r"^\+?[0-9][0-9\s\-()]{6,19}$")
_SAFE_PASSWORD_RE = re.compile(
    r'^[a-zA-Z0-9!@#$%^&*()_+\-=\[\]{};\':"\\|,.<>\/?~`\s]+$'
)
_SPECIAL_RE = re.compile(r'[!@#$%^&*()_+\-=\[\]{};\':"\\|,.<>\/?~`]')

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


def normalize_email(email: Optional[str]) -> str:
    """Return the canonical form of *email*: trimmed and lower-cased."""
    return (email or "").strip().lower()


def validate_email(email: str) -> bool:
    """Return True if *email* is a syntactically valid address."""
    if not email or len(email) > 254:
        return False
    return bool(_validators.email(email))


def validate_phone_number(phone: str) -> bool:
    """Loose international phone check: digits with optional +, spaces, dashes, parens."""
    return bool(_PHONE_RE.match(phone.strip()))


def validate_verification_code(code: str) -> bool:
    return bool(re.fullmatch(r"\d{6}", code or ""))


def validate_password(password: str) -> Tuple[bool, List[str]]:
    """
    Validate a password against the account password policy.

    Returns:
        (is_valid, missing_requirements)
    """
    if not password:
        return False, ["Password is required"]

    missing = []
    if len(password) < PASSWORD_MIN_LENGTH:
        missing.append(f"At least {PASSWORD_MIN_LENGTH} characters")
    if len(password) > PASSWORD_MAX_LENGTH:
        missing.append(f"Maximum {PASSWORD_MAX_LENGTH} characters")
    if not re.search(r"[A-Z]", password):
        missing.append("At least one uppercase letter")
    if not re.search(r"[a-z]", password):
        missing.append("At least one lowercase letter")
    if not re.search(r"[0-9]", password):
        missing.append("At least one number")
    if not _SPECIAL_RE.search(password):
        missing.append("At least one special character")
    if not _SAFE_PASSWORD_RE.match(password):
        missing.append("Contains invalid characters")

    return len(missing) == 0, missing

