"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from repositories.user_repository import MongoUserRepository
from routes.auth_routes import router as auth_router
from routes.health_routes import router as health_router
from services.account_service import AccountService
from services.expiry_reaper import ExpiryReaper
from services.password_recovery_service import PasswordRecoveryService
from services.pending_store import PendingVerificationStore
from services.registration_service import RegistrationService
from services.token_service import TokenService
from shared.log_context import RequestLoggingMiddleware
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(
        settings.logging.log_level,
        settings.logging.log_format,
        hash_client_ips=settings.is_production,
    )

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
            environment=settings.env,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        db = mongo_client[settings.db.db_name]
        app.state.mongo_client = mongo_client
        app.state.db = db
        app.state.settings = settings

        verification = settings.verification
        directory = MongoUserRepository(db)
        await directory.ensure_indexes()

        http_client = HttpClient(timeout=settings.email.email_timeout_seconds)
        email_provider = ZeptoMailProvider(
            settings.email,
            http_client,
            app_name=settings.app_name,
            app_url=settings.app_url,
            ttl_minutes=verification.verification_code_ttl_seconds // 60,
            reset_ttl_minutes=verification.reset_token_ttl_seconds // 60,
        )
        token_service = TokenService(settings.jwt)
        pending_store = PendingVerificationStore(
            max_attempts=verification.max_verification_attempts
        )

        app.state.token_service = token_service
        app.state.registration_service = RegistrationService(
            directory, pending_store, email_provider, token_service, verification
        )
        app.state.password_recovery_service = PasswordRecoveryService(
            directory, email_provider, verification
        )
        app.state.account_service = AccountService(directory, token_service)

        reaper = ExpiryReaper(
            pending_store,
            directory,
            interval_seconds=verification.reaper_interval_seconds,
        )
        reaper.start()
        app.state.reaper = reaper

        log.info(
            "app_started",
            env=settings.env,
            verification_required=verification.verification_required,
            secret_delivery=verification.secret_delivery,
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        reaper.stop()
        await http_client.aclose()
        await mongo_client.close()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(auth_router)

    return app
