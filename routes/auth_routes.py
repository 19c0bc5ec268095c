"""
Account endpoints under /api/auth.

POST /check-email       - is the email free to register?
POST /request-code      - issue (or re-issue) an email verification code
POST /register          - confirm the code and create the account
POST /login             - password login
GET  /me                - current account
PUT  /profile           - update profile fields
PUT  /password          - change password (knows the current one)
POST /forgot-password   - issue a password reset token
POST /reset-password    - redeem the reset token

Handlers only translate between DTOs and services; every failure is an
AppError rendered by the global handler.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from dependencies import (
    get_account_service,
    get_current_account_id,
    get_password_recovery_service,
    get_registration_service,
)
from schemas.dto.requests.auth import (
    ChangePasswordRequest,
    CheckEmailRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    RequestCodeRequest,
    ResetPasswordRequest,
    UpdateProfileRequest,
)
from schemas.dto.responses.auth import (
    AccountProfileResponse,
    AuthResponse,
    CheckEmailResponse,
    CodeIssuedResponse,
    MeResponse,
    ResetRequestedResponse,
)
from schemas.dto.responses.common import MessageResponse
from services.account_service import AccountService
from services.password_recovery_service import PasswordRecoveryService
from services.registration_service import RegistrationService
from services.results import AuthResult

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        access_token=result.access_token,
        user=AccountProfileResponse.from_account(result.account),
    )


@router.post("/check-email", response_model=CheckEmailResponse)
async def check_email(
    body: CheckEmailRequest,
    registration: RegistrationService = Depends(get_registration_service),
) -> CheckEmailResponse:
    available = await registration.check_email(body.email)
    return CheckEmailResponse(
        available=available,
        message="Email is available" if available else "Email already registered",
    )


@router.post(
    "/request-code",
    response_model=CodeIssuedResponse,
    response_model_exclude_none=True,
)
async def request_code(
    body: RequestCodeRequest,
    registration: RegistrationService = Depends(get_registration_service),
) -> CodeIssuedResponse:
    issued = await registration.request_code(body.email)
    return CodeIssuedResponse(
        message="Verification code sent" if issued.secret is None else "Verification code issued",
        email=issued.email,
        expires_at=issued.expires_at.isoformat(),
        code=issued.secret,
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    body: RegisterRequest,
    registration: RegistrationService = Depends(get_registration_service),
) -> AuthResponse:
    result = await registration.register(body.email, body.code, body.account_fields())
    return _auth_response(result)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
) -> AuthResponse:
    return _auth_response(await accounts.login(body.email, body.password))


@router.get("/me", response_model=MeResponse)
async def me(
    account_id: str = Depends(get_current_account_id),
    accounts: AccountService = Depends(get_account_service),
) -> MeResponse:
    account = await accounts.get_profile(account_id)
    return MeResponse(user=AccountProfileResponse.from_account(account))


@router.put("/profile", response_model=AuthResponse)
async def update_profile(
    body: UpdateProfileRequest,
    account_id: str = Depends(get_current_account_id),
    accounts: AccountService = Depends(get_account_service),
) -> AuthResponse:
    result = await accounts.update_profile(account_id, body.model_dump(exclude_unset=True))
    return _auth_response(result)


@router.put("/password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    account_id: str = Depends(get_current_account_id),
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await accounts.change_password(account_id, body.current_password, body.new_password)
    return MessageResponse(success=True, message="Password updated successfully")


@router.post(
    "/forgot-password",
    response_model=ResetRequestedResponse,
    response_model_exclude_none=True,
)
async def forgot_password(
    body: ForgotPasswordRequest,
    recovery: PasswordRecoveryService = Depends(get_password_recovery_service),
) -> ResetRequestedResponse:
    issued = await recovery.request_reset(body.email)
    return ResetRequestedResponse(
        message="Password reset email sent" if issued.secret is None else "Password reset token issued",
        expires_at=issued.expires_at.isoformat(),
        reset_token=issued.secret,
    )


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    recovery: PasswordRecoveryService = Depends(get_password_recovery_service),
) -> MessageResponse:
    await recovery.redeem(body.reset_token, body.new_password)
    return MessageResponse(success=True, message="Password reset successful")
