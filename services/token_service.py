"""
Bearer access tokens (JWT).

RS256 when a key pair is configured, HS256 with JWT_SECRET otherwise.
Keys supplied via env may contain literal ``\\n`` sequences.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import jwt

from config import JWTSettings
from errors import AuthenticationError
from shared.datetime_utils import Clock, utc_now
from shared.logging import get_logger

log = get_logger(__name__)


class TokenService:
    def __init__(self, settings: JWTSettings, clock: Clock = utc_now) -> None:
        self._settings = settings
        self._clock = clock
        if settings.use_rs256:
            self._algorithm = "RS256"
            self._signing_key: Any = settings.jwt_private_key.replace("\\n", "\n")
            self._verify_key: Any = settings.jwt_public_key.replace("\\n", "\n")
        else:
            if not settings.jwt_secret:
                raise RuntimeError(
                    "JWT_SECRET must be set when RS256 keys are not provided"
                )
            self._algorithm = "HS256"
            self._signing_key = self._verify_key = settings.jwt_secret

    def issue(self, account_id: str, email_verified: bool = True) -> str:
        now = self._clock()
        claims = {
            "iss": self._settings.jwt_issuer,
            "aud": self._settings.jwt_audience,
            "sub": str(account_id),
            "iat": int(now.timestamp()),
            "exp": int(
                (now + timedelta(seconds=self._settings.access_token_ttl_seconds)).timestamp()
            ),
            "email_verified": email_verified,
        }
        return jwt.encode(claims, self._signing_key, algorithm=self._algorithm)

    def verify(self, token: str) -> dict:
        """Decode *token*; raises AuthenticationError if it is invalid or expired."""
        try:
            return jwt.decode(
                token,
                self._verify_key,
                algorithms=[self._algorithm],
                audience=self._settings.jwt_audience,
                issuer=self._settings.jwt_issuer,
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("access token expired") from e
        except jwt.InvalidTokenError as e:
            log.warning("access_token_rejected", error=str(e))
            raise AuthenticationError("invalid access token") from e
