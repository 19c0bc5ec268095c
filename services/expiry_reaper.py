"""
Periodic sweep of expired verification secrets.

Every run evicts expired pending registrations from the in-process store and
unsets expired reset tokens on accounts. Neither is needed for correctness,
since every read path re-checks expiry. The sweep only keeps the pending
table and the reset-token index from growing without bound.

The schedule is owned by the application lifespan: start() on startup,
stop() on shutdown.
"""

from __future__ import annotations

from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from errors import DependencyError
from repositories.protocol import UserDirectory
from services.pending_store import PendingVerificationStore
from shared.datetime_utils import Clock, utc_now
from shared.logging import get_logger

log = get_logger(__name__)

JOB_ID = "expiry_reaper"
DEFAULT_INTERVAL_SECONDS = 600


class ExpiryReaper:
    def __init__(
        self,
        pending_store: PendingVerificationStore,
        directory: Optional[UserDirectory] = None,
        interval_seconds: int = DEFAULT_INTERVAL_SECONDS,
        clock: Clock = utc_now,
    ) -> None:
        self._pending = pending_store
        self._directory = directory
        self._interval = interval_seconds
        self._clock = clock
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def sweep(self) -> dict[str, int]:
        """Run one sweep now. Returns how many entries of each kind were removed."""
        now = self._clock()
        removed = {"pending": await self._pending.sweep_expired(now), "reset_tokens": 0}

        if self._directory is not None:
            try:
                removed["reset_tokens"] = await self._directory.clear_expired_reset_tokens(now)
            except DependencyError as e:
                # Next run retries; the directory already logged the cause.
                log.warning("expiry_sweep_partial", reason="directory_unavailable", error=e.message)

        if removed["pending"] or removed["reset_tokens"]:
            log.info("expiry_sweep_completed", **removed)
        return removed

    def start(self) -> None:
        """Schedule the sweep. Must be called from inside the running event loop."""
        if self.running:
            return
        scheduler = AsyncIOScheduler(timezone="UTC")
        scheduler.add_job(
            self.sweep,
            "interval",
            seconds=self._interval,
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        log.info("expiry_reaper_started", interval_seconds=self._interval)

    def stop(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        log.info("expiry_reaper_stopped")
