"""Unit tests for request and response DTOs."""

from datetime import datetime, timezone

import pytest
from bson import ObjectId
from pydantic import ValidationError

from schemas.dto.requests.auth import (
    ChangePasswordRequest,
    CheckEmailRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateProfileRequest,
)
from schemas.dto.responses.auth import (
    AccountProfileResponse,
    AuthResponse,
    CodeIssuedResponse,
    ResetRequestedResponse,
)
from schemas.dto.responses.common import ErrorResponse, HealthResponse
from schemas.models.user import AccountDoc, AccountRole, Address

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


# ── Requests ──────────────────────────────────────────────────────────────────


class TestRegisterRequest:
    def _body(self, **overrides):
        body = {
            "email": " ada@x.com ",
            "code": "123456",
            "password": "Fresh&Folded9",
            "first_name": "Ada",
            "last_name": "Lovelace",
        }
        body.update(overrides)
        return body

    def test_strips_whitespace(self):
        req = RegisterRequest(**self._body())
        assert req.email == "ada@x.com"

    def test_role_defaults_to_customer(self):
        assert RegisterRequest(**self._body()).role == AccountRole.CUSTOMER

    def test_code_optional(self):
        assert RegisterRequest(**self._body(code=None)).code is None

    def test_unknown_role_rejected(self):
        with pytest.raises(ValidationError):
            RegisterRequest(**self._body(role="superuser"))

    @pytest.mark.parametrize("missing", ["email", "password", "first_name", "last_name"])
    def test_required_fields(self, missing):
        body = self._body()
        del body[missing]
        with pytest.raises(ValidationError):
            RegisterRequest(**body)

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            RegisterRequest(**self._body(first_name="   "))

    def test_account_fields_exclude_identity(self):
        fields = RegisterRequest(**self._body(phone_number="+1 555 010 2030")).account_fields()
        assert "email" not in fields
        assert "code" not in fields
        assert fields["password"] == "Fresh&Folded9"
        assert fields["phone_number"] == "+1 555 010 2030"


class TestUpdateProfileRequest:
    def test_unset_fields_excluded(self):
        req = UpdateProfileRequest(last_name="Lovelace")
        assert req.model_dump(exclude_unset=True) == {"last_name": "Lovelace"}

    def test_addresses_parsed(self):
        req = UpdateProfileRequest(addresses=[{"street": "1 Main St", "city": "Springfield"}])
        assert isinstance(req.addresses[0], Address)

    def test_address_requires_city(self):
        with pytest.raises(ValidationError):
            UpdateProfileRequest(addresses=[{"street": "1 Main St"}])


class TestResetPasswordRequest:
    def test_accepts_camel_case_aliases(self):
        req = ResetPasswordRequest(resetToken="abc", newPassword="Fresh&Folded9")
        assert req.reset_token == "abc"
        assert req.new_password == "Fresh&Folded9"

    def test_accepts_field_names(self):
        req = ResetPasswordRequest(reset_token="abc", new_password="x")
        assert req.reset_token == "abc"

    def test_token_not_stripped(self):
        assert ResetPasswordRequest(resetToken=" abc ", newPassword="x").reset_token == " abc "

    def test_password_stripped(self):
        req = ResetPasswordRequest(resetToken=" abc ", newPassword=" Fresh&Folded9 ")
        assert req.new_password == "Fresh&Folded9"


@pytest.mark.parametrize(
    "cls, body",
    [
        (CheckEmailRequest, {}),
        (LoginRequest, {"email": "a@b.com"}),
        (ChangePasswordRequest, {"current_password": "x"}),
    ],
    ids=["check_email", "login", "change_password"],
)
def test_missing_required_field(cls, body):
    with pytest.raises(ValidationError):
        cls(**body)


# ── Responses ─────────────────────────────────────────────────────────────────


def _account(**overrides) -> AccountDoc:
    fields = dict(
        _id=ObjectId("507f1f77bcf86cd799439011"),
        email="ada@x.com",
        password_hash="argon2-hash",
        email_verified=True,
        first_name="Ada",
        addresses=[Address(street="1 Main St", city="Springfield", is_default=True)],
        reset_token_hash="secret-hash",
        created_at=NOW,
    )
    fields.update(overrides)
    return AccountDoc(**fields)


class TestAccountProfileResponse:
    def test_from_account(self):
        profile = AccountProfileResponse.from_account(_account())
        assert profile.id == "507f1f77bcf86cd799439011"
        assert profile.status == "active"
        assert profile.role == "customer"
        assert profile.created_at == "2026-01-01T12:00:00+00:00"
        assert profile.last_login_at is None
        assert profile.addresses[0].is_default is True

    def test_never_exposes_secrets(self):
        dumped = AccountProfileResponse.from_account(_account()).model_dump()
        assert "password_hash" not in dumped
        assert "reset_token_hash" not in dumped
        assert "argon2-hash" not in str(dumped)


def test_auth_response_shape():
    resp = AuthResponse(access_token="jwt", user=AccountProfileResponse.from_account(_account()))
    assert set(resp.model_dump()) == {"access_token", "user"}


def test_code_issued_response_omits_code_by_default():
    resp = CodeIssuedResponse(message="sent", email="a@b.com", expires_at=NOW.isoformat())
    assert "code" not in resp.model_dump(exclude_none=True)


def test_reset_requested_response_direct_delivery():
    resp = ResetRequestedResponse(message="ok", expires_at=NOW.isoformat(), reset_token="abc")
    assert resp.model_dump()["reset_token"] == "abc"


def test_error_response_matches_app_error_shape():
    resp = ErrorResponse(error="Invalid verification code", code="code_mismatch", field="code")
    assert resp.model_dump(exclude_none=True) == {
        "error": "Invalid verification code",
        "code": "code_mismatch",
        "field": "code",
    }


def test_health_response():
    resp = HealthResponse(status="ok", checks={"mongodb": "ok", "expiry_reaper": "ok"})
    assert resp.checks["expiry_reaper"] == "ok"
