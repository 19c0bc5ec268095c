"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. The global exception handler
converts AppError subclasses to consistent JSON responses.

The identity subsystem raises the narrow subclasses (CodeMismatchError,
NoPendingRequestError, ...); callers that only care about the family can
catch the parent (AuthMismatchError, NotFoundError, ...).

Non-AppError exceptions bubble up as 500s (with Sentry reporting in production).
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.logging import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {"error": self.message, "code": self.error_code}
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status_code = 400
    error_code = "validation_error"


class AuthenticationError(AppError):
    status_code = 401
    error_code = "authentication_error"


class ForbiddenError(AppError):
    status_code = 403
    error_code = "forbidden"


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"


class AccountNotFoundError(NotFoundError):
    error_code = "account_not_found"


class NoPendingRequestError(NotFoundError):
    error_code = "no_pending_request"


class ConflictError(AppError):
    status_code = 409
    error_code = "conflict"


class AlreadyRegisteredError(ConflictError):
    error_code = "already_registered"


class DuplicateEmailError(ConflictError):
    """Raised by the user directory when the unique email index rejects an insert."""

    error_code = "duplicate_email"


class ExpiredSecretError(AppError):
    status_code = 410
    error_code = "secret_expired"


class CodeExpiredError(ExpiredSecretError):
    error_code = "code_expired"


class AuthMismatchError(AppError):
    status_code = 400
    error_code = "auth_mismatch"


class CodeMismatchError(AuthMismatchError):
    error_code = "code_mismatch"


class InvalidOrExpiredTokenError(AuthMismatchError):
    error_code = "invalid_or_expired_token"


class DependencyError(AppError):
    """A backing service (database, email provider) failed.

    The message is replaced with a generic one in the HTTP response; the
    original cause is only logged.
    """

    status_code = 500
    error_code = "dependency_error"
    public_message = "An internal server error occurred."

    def to_dict(self) -> dict:
        return {"error": self.public_message, "code": self.error_code}


class EmailDeliveryError(DependencyError):
    status_code = 502
    error_code = "delivery_failed"
    public_message = "We could not deliver the email. Please try again."


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if isinstance(exc, DependencyError):
            log.error(
                "dependency_error",
                path=request.url.path,
                error=exc.message,
                error_type=type(exc).__name__,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        loc = [str(part) for part in first.get("loc", ()) if part != "body"]
        err = ValidationError(
            first.get("msg", "Invalid request"),
            field=".".join(loc) or None,
        )
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        log.error(
            "unhandled_exception",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "An internal server error occurred.", "code": "internal_error"},
        )
