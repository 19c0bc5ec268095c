"""
FastAPI dependency providers.

Services are built once in the application lifespan and stored on
app.state; these providers hand them to route handlers so tests can swap
them via app.dependency_overrides.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from errors import AuthenticationError
from services.account_service import AccountService
from services.password_recovery_service import PasswordRecoveryService
from services.registration_service import RegistrationService
from services.token_service import TokenService

_bearer = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_registration_service(request: Request) -> RegistrationService:
    return request.app.state.registration_service


def get_password_recovery_service(request: Request) -> PasswordRecoveryService:
    return request.app.state.password_recovery_service


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service


def get_current_account_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """Resolve the bearer token to the authenticated account id."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("missing bearer token")
    claims = tokens.verify(credentials.credentials)
    return claims["sub"]
