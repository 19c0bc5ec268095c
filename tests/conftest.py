"""Fixtures shared by unit and integration tests."""

import pytest

from config import JWTSettings, VerificationSettings
from services.account_service import AccountService
from services.password_recovery_service import PasswordRecoveryService
from services.pending_store import PendingVerificationStore
from services.registration_service import RegistrationService
from services.token_service import TokenService
from tests.fakes import (
    FixedSecretGenerator,
    InMemoryUserDirectory,
    MutableClock,
    RecordingEmailProvider,
)

STRONG_PASSWORD = "Fresh&Folded9"
OTHER_STRONG_PASSWORD = "Crisp#Linen42"


@pytest.fixture
def clock():
    return MutableClock()


@pytest.fixture
def directory():
    return InMemoryUserDirectory()


@pytest.fixture
def mailer():
    return RecordingEmailProvider()


@pytest.fixture
def jwt_settings():
    return JWTSettings(jwt_secret="test-secret-with-enough-length-for-hs256")


@pytest.fixture
def token_service(jwt_settings):
    return TokenService(jwt_settings)


@pytest.fixture
def verification_settings():
    return VerificationSettings(
        verification_required=True,
        secret_delivery="email",
        verification_code_ttl_seconds=600,
        reset_token_ttl_seconds=600,
        max_verification_attempts=5,
    )


@pytest.fixture
def pending_store(clock):
    return PendingVerificationStore(clock=clock, max_attempts=5)


@pytest.fixture
def generator():
    return FixedSecretGenerator(
        codes=["123456", "654321", "111111", "222222"],
        tokens=["abc123resettokenAAAAAAAAAAAAAAAAAAAAAAA", "def456resettokenBBBBBBBBBBBBBBBBBBBBBBB"],
    )


@pytest.fixture
def registration(directory, pending_store, mailer, token_service, verification_settings, generator, clock):
    return RegistrationService(
        directory,
        pending_store,
        mailer,
        token_service,
        verification_settings,
        generator=generator,
        clock=clock,
    )


@pytest.fixture
def recovery(directory, mailer, verification_settings, generator, clock):
    return PasswordRecoveryService(
        directory, mailer, verification_settings, generator=generator, clock=clock
    )


@pytest.fixture
def accounts(directory, token_service, clock):
    return AccountService(directory, token_service, clock=clock)


@pytest.fixture
def account_fields():
    return {
        "password": STRONG_PASSWORD,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "phone_number": "+1 555 010 2030",
        "role": "customer",
    }
