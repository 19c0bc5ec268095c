"""
Secret generators - verification codes and password-reset tokens.

All generators draw from the ``secrets`` module. Codes are short and numeric
so they are easy to type from an email; reset tokens are long because on
their own they authorize a password change.
"""

from __future__ import annotations

import secrets
import string

VERIFICATION_CODE_LENGTH = 6
RESET_TOKEN_LENGTH = 40

_ALPHANUMERIC = string.ascii_letters + string.digits


def generate_otp_code(length: int = VERIFICATION_CODE_LENGTH) -> str:
    """Generate a cryptographically secure numeric OTP.

    Args:
        length: Number of digits (default 6).

    Returns:
        String of random decimal digits; leading zeros are kept.
    """
    return "".join(secrets.choice(string.digits) for _ in range(length))


def generate_reset_token(length: int = RESET_TOKEN_LENGTH) -> str:
    """Generate a cryptographically secure alphanumeric token.

    Args:
        length: Number of characters (default 40).

    Returns:
        Random string of ASCII letters and digits.
    """
    return "".join(secrets.choice(_ALPHANUMERIC) for _ in range(length))


class SecretGenerator:
    """Issues verification codes and reset tokens.

    Services take an instance instead of calling the functions above so tests
    can substitute a deterministic generator.
    """

    def issue_verification_code(self) -> str:
        return generate_otp_code()

    def issue_reset_token(self) -> str:
        return generate_reset_token()
