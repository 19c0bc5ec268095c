"""
Registration with email verification.

Per email the flow moves NoAccount → PendingVerification → Account:

1. request_code() refuses emails that already have an account, stores a
   fresh code in the PendingVerificationStore (superseding any earlier one)
   and emails it, or hands it back when secrets are delivered directly.
2. confirm_and_create() consumes the code and creates a verified account.

With ``verification_required = False`` (bypass mode) register() skips both
steps and creates the account directly, already verified.

The "no account yet" check here is advisory. Two confirmations that race
past it are settled by the unique email index: the loser gets
DuplicateEmailError from the directory and surfaces AlreadyRegisteredError.
"""

from __future__ import annotations

from typing import Any, Optional

from config import VerificationSettings
from errors import (
    AlreadyRegisteredError,
    DependencyError,
    DuplicateEmailError,
    EmailDeliveryError,
    ValidationError,
)
from infrastructure.email.protocol import EmailProvider
from repositories.protocol import UserDirectory
from schemas.models.user import (
    SELF_ASSIGNABLE_ROLES,
    AccountDoc,
    AccountRole,
    AccountStatus,
)
from services.pending_store import PendingVerificationStore
from services.results import AuthResult, IssuedSecret
from services.token_service import TokenService
from shared.crypto import hash_password
from shared.datetime_utils import Clock, utc_now
from shared.generators import SecretGenerator
from shared.logging import get_logger, hash_email
from shared.validators import (
    normalize_email,
    validate_email,
    validate_password,
    validate_phone_number,
    validate_verification_code,
)

log = get_logger(__name__)


def require_email(email: Optional[str]) -> str:
    """Normalise *email* or raise ValidationError if it is missing or malformed."""
    normalized = normalize_email(email)
    if not normalized:
        raise ValidationError("Email is required", field="email")
    if not validate_email(normalized):
        raise ValidationError("Invalid email address", field="email")
    return normalized


def require_valid_password(password: Optional[str], field: str = "password") -> str:
    is_valid, missing = validate_password(password or "")
    if not is_valid:
        raise ValidationError(
            "Password does not meet requirements",
            field=field,
            details={"missing_requirements": missing},
        )
    return password


class RegistrationService:
    def __init__(
        self,
        directory: UserDirectory,
        pending_store: PendingVerificationStore,
        email_provider: EmailProvider,
        token_service: TokenService,
        settings: VerificationSettings,
        generator: Optional[SecretGenerator] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._directory = directory
        self._pending = pending_store
        self._email = email_provider
        self._tokens = token_service
        self._settings = settings
        self._generator = generator or SecretGenerator()
        self._clock = clock

    @property
    def verification_required(self) -> bool:
        return self._settings.verification_required

    async def check_email(self, email: str) -> bool:
        """Return True if no account exists for *email*."""
        email = require_email(email)
        return await self._directory.find_by_email(email) is None

    async def request_code(self, email: str) -> IssuedSecret:
        email = require_email(email)
        if await self._directory.find_by_email(email) is not None:
            log.warning("verification_code_refused", reason="already_registered")
            raise AlreadyRegisteredError("Email already registered", field="email")

        code = self._generator.issue_verification_code()
        entry = await self._pending.put(
            email, code, self._settings.verification_code_ttl_seconds
        )
        log.info(
            "verification_code_issued",
            email_hash=hash_email(email),
            expires_at=entry.expires_at.isoformat(),
        )

        if not self._settings.deliver_by_email:
            return IssuedSecret(email=email, expires_at=entry.expires_at, secret=code)

        # The stored code stays valid even if delivery fails.
        if not await self._email.send_verification_code(email, code):
            raise EmailDeliveryError("verification code delivery failed")
        return IssuedSecret(email=email, expires_at=entry.expires_at)

    async def register(
        self, email: str, code: Optional[str], account_fields: dict[str, Any]
    ) -> AuthResult:
        """Create an account, confirming *code* unless verification is bypassed."""
        if self.verification_required:
            if not code:
                raise ValidationError("Verification code is required", field="code")
            return await self.confirm_and_create(email, code, account_fields)

        email = require_email(email)
        fields = self._clean_account_fields(account_fields)
        if await self._directory.find_by_email(email) is not None:
            raise AlreadyRegisteredError("Email already registered", field="email")
        account = await self._create_account(email, fields)
        await self._pending.remove(email)
        return await self._complete(account, verified_by="bypass")

    async def confirm_and_create(
        self, email: str, code: str, account_fields: dict[str, Any]
    ) -> AuthResult:
        email = require_email(email)
        # Fields and code format are validated before the code is consumed.
        fields = self._clean_account_fields(account_fields)
        if not validate_verification_code(code):
            raise ValidationError("Verification code must be 6 digits", field="code")

        if await self._directory.find_by_email(email) is not None:
            await self._pending.remove(email)
            raise AlreadyRegisteredError("Email already registered", field="email")

        entry = await self._pending.consume(email, code, self._clock())
        try:
            account = await self._create_account(email, fields)
        except DependencyError:
            await self._pending.restore(entry)
            raise
        return await self._complete(account, verified_by="code")

    def _clean_account_fields(self, account_fields: dict[str, Any]) -> dict[str, Any]:
        fields = dict(account_fields)
        require_valid_password(fields.get("password"))

        role = fields.get("role") or AccountRole.CUSTOMER
        try:
            role = AccountRole(role)
        except ValueError:
            raise ValidationError(f"Unknown role: {role}", field="role") from None
        if role not in SELF_ASSIGNABLE_ROLES:
            raise ValidationError("This role cannot be chosen at sign-up", field="role")
        fields["role"] = role

        phone = fields.get("phone_number")
        if phone and not validate_phone_number(phone):
            raise ValidationError("Invalid phone number", field="phone_number")
        return fields

    async def _create_account(self, email: str, fields: dict[str, Any]) -> AccountDoc:
        now = self._clock()
        account = AccountDoc(
            email=email,
            password_hash=hash_password(fields["password"]),
            email_verified=True,
            status=AccountStatus.ACTIVE,
            role=fields["role"],
            first_name=fields.get("first_name"),
            last_name=fields.get("last_name"),
            phone_number=fields.get("phone_number"),
            created_at=now,
            updated_at=now,
        )
        try:
            return await self._directory.create(account)
        except DuplicateEmailError as e:
            log.warning("registration_failed", reason="race_condition_duplicate")
            raise AlreadyRegisteredError("Email already registered", field="email") from e

    async def _complete(self, account: AccountDoc, verified_by: str) -> AuthResult:
        access_token = self._tokens.issue(str(account.id), email_verified=account.email_verified)
        log.info(
            "account_registered",
            account_id=str(account.id),
            role=account.role.value,
            verified_by=verified_by,
        )
        if self._settings.deliver_by_email:
            if not await self._email.send_welcome_email(account.email, account.first_name):
                log.warning("welcome_email_not_sent", account_id=str(account.id))
        return AuthResult(account=account, access_token=access_token)
