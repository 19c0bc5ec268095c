"""
Unit tests for the shared/ utility modules.

Covers:
- shared.validators      (normalize_email, validate_email, validate_phone_number,
                          validate_verification_code, validate_password)
- shared.generators      (generate_otp_code, generate_reset_token, SecretGenerator)
- shared.datetime_utils  (as_utc, expiry_from, is_expired, to_iso)
- shared.crypto          (hash_password, verify_password, hash_token, secrets_match)
- shared.logging         (redact_sensitive_fields, hash_ip, hash_email)
"""

from __future__ import annotations

import hashlib
import string
from datetime import datetime, timedelta, timezone

import pytest

import shared.logging as shared_logging
from shared.crypto import hash_password, hash_token, secrets_match, verify_password
from shared.datetime_utils import as_utc, expiry_from, is_expired, to_iso
from shared.generators import (
    RESET_TOKEN_LENGTH,
    SecretGenerator,
    generate_otp_code,
    generate_reset_token,
)
from shared.logging import hash_email, hash_ip, redact_sensitive_fields
from shared.validators import (
    normalize_email,
    validate_email,
    validate_password,
    validate_phone_number,
    validate_verification_code,
)

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# shared.validators
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value, expected",
    [
        ("  User@Example.COM ", "user@example.com"),
        ("", ""),
        (None, ""),
    ],
    ids=["trim_and_lower", "empty", "none"],
)
def test_normalize_email(value, expected):
    assert normalize_email(value) == expected


@pytest.mark.parametrize(
    "email, expected",
    [
        ("user@example.com", True),
        ("first.last+tag@sub.example.org", True),
        ("user@", False),
        ("@example.com", False),
        ("no-at-sign", False),
        ("", False),
        ("a" * 250 + "@x.com", False),
    ],
    ids=["simple", "plus_tag", "no_domain", "no_local", "no_at", "empty", "too_long"],
)
def test_validate_email(email, expected):
    assert validate_email(email) is expected


@pytest.mark.parametrize(
    "phone, expected",
    [
        ("+1 555 010 2030", True),
        ("555-010-2030", True),
        ("5550102030", True),
        ("12345", False),
        ("call me", False),
    ],
)
def test_validate_phone_number(phone, expected):
    assert validate_phone_number(phone) is expected


@pytest.mark.parametrize(
    "code, expected",
    [("123456", True), ("012345", True), ("12345", False), ("12345a", False), ("", False)],
)
def test_validate_verification_code(code, expected):
    assert validate_verification_code(code) is expected


@pytest.mark.parametrize(
    "password, valid",
    [
        ("Fresh&Folded9", True),
        ("short1!", False),
        ("alllowercase1!", False),
        ("ALLUPPERCASE1!", False),
        ("NoDigitsHere!", False),
        ("NoSpecial123", False),
        ("", False),
    ],
    ids=["valid", "too_short", "no_upper", "no_lower", "no_digit", "no_special", "empty"],
)
def test_validate_password(password, valid):
    is_valid, missing = validate_password(password)
    assert is_valid is valid
    assert (missing == []) is valid


def test_validate_password_lists_every_missing_requirement():
    _, missing = validate_password("abc")
    assert "At least one uppercase letter" in missing
    assert "At least one number" in missing
    assert "At least one special character" in missing


# ---------------------------------------------------------------------------
# shared.generators
# ---------------------------------------------------------------------------


_ALPHANUM = set(string.ascii_letters + string.digits)


class TestGenerateOtpCode:
    @pytest.mark.parametrize("length", [4, 6, 8])
    def test_length(self, length):
        assert len(generate_otp_code(length=length)) == length

    def test_only_digits(self):
        assert generate_otp_code().isdigit()


class TestGenerateResetToken:
    def test_default_length(self):
        assert len(generate_reset_token()) == RESET_TOKEN_LENGTH

    def test_only_alphanumeric(self):
        assert set(generate_reset_token()).issubset(_ALPHANUM)

    def test_produces_variety(self):
        assert len({generate_reset_token() for _ in range(10)}) == 10


def test_secret_generator_shapes():
    generator = SecretGenerator()
    assert validate_verification_code(generator.issue_verification_code())
    assert len(generator.issue_reset_token()) == RESET_TOKEN_LENGTH


# ---------------------------------------------------------------------------
# shared.datetime_utils
# ---------------------------------------------------------------------------


def test_as_utc_assumes_naive_is_utc():
    assert as_utc(datetime(2026, 1, 1, 12, 0)) == NOW


def test_as_utc_converts_other_zones():
    plus_two = timezone(timedelta(hours=2))
    assert as_utc(datetime(2026, 1, 1, 14, 0, tzinfo=plus_two)) == NOW


def test_as_utc_none():
    assert as_utc(None) is None


@pytest.mark.parametrize(
    "offset, expected",
    [(-1, False), (0, True), (1, True)],
    ids=["before", "at_expiry", "after"],
)
def test_is_expired_boundary(offset, expected):
    expires_at = expiry_from(NOW, 600)
    assert is_expired(expires_at, expires_at + timedelta(seconds=offset)) is expected


def test_is_expired_mixes_naive_and_aware():
    assert is_expired(datetime(2026, 1, 1, 12, 0), NOW) is True


def test_to_iso():
    assert to_iso(NOW) == "2026-01-01T12:00:00+00:00"
    assert to_iso(None) is None


# ---------------------------------------------------------------------------
# shared.crypto
# ---------------------------------------------------------------------------


class TestPasswordHashing:
    def test_round_trip(self):
        hashed = hash_password("Fresh&Folded9")
        assert hashed != "Fresh&Folded9"
        assert verify_password("Fresh&Folded9", hashed) is True

    def test_wrong_password(self):
        assert verify_password("nope", hash_password("Fresh&Folded9")) is False

    def test_unparseable_hash(self):
        assert verify_password("Fresh&Folded9", "not-an-argon2-hash") is False

    def test_salted(self):
        assert hash_password("Fresh&Folded9") != hash_password("Fresh&Folded9")


def test_hash_token_is_sha256_hex():
    assert hash_token("abc") == hashlib.sha256(b"abc").hexdigest()


@pytest.mark.parametrize(
    "expected, candidate, result",
    [("123456", "123456", True), ("123456", "123457", False), ("123456", "", False)],
)
def test_secrets_match(expected, candidate, result):
    assert secrets_match(expected, candidate) is result


# ---------------------------------------------------------------------------
# shared.logging
# ---------------------------------------------------------------------------


def test_redact_sensitive_fields():
    event = {
        "event": "password_reset_issued",
        "password": "x",
        "reset_token": "y",
        "code": "123456",
        "jwt_private_key": "z",
        "account_id": "abc",
    }
    redacted = redact_sensitive_fields(None, "info", event)
    assert redacted["event"] == "password_reset_issued"
    assert redacted["account_id"] == "abc"
    for key in ("password", "reset_token", "code", "jwt_private_key"):
        assert redacted[key] == "***REDACTED***"


def test_hash_ip(monkeypatch):
    monkeypatch.setattr(shared_logging, "_hash_ips", False)
    assert hash_ip("10.0.0.1") == "10.0.0.1"

    monkeypatch.setattr(shared_logging, "_hash_ips", True)
    hashed = hash_ip("10.0.0.1")
    assert hashed != "10.0.0.1"
    assert len(hashed) == 16
    assert hash_ip(None) is None


def test_hash_email():
    hashed = hash_email("Ada@X.com")
    assert len(hashed) == 16
    assert "ada" not in hashed
    assert hash_email(" ada@x.com ") == hashed
    assert hash_email("other@x.com") != hashed
    assert hash_email(None) is None
