"""
Background purge of abandoned running sessions.

Exposes:
- is_expired(running, now, ttl)
- ExpirySweeper: owns a daemon thread that runs sweep() on a fixed period
  (call .start() at process start and .stop() on exit)
"""
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import sessionmaker

from app.core.constants import (
    RUNNING_TTL_MINUTES,
    SWEEP_INTERVAL_SECONDS,
    SWEEPER_JOIN_TIMEOUT_SECONDS,
)
from app.core.time_utils import is_past_ttl, utc_now
from app.db import session_scope
from app.models.running import Running, RunningStatus
from app.repositories import running_repository

logger = logging.getLogger(__name__)


def is_expired(running: Running, now: datetime, ttl: timedelta) -> bool:
    """An in-progress session whose last change is older than ttl."""
    return running.status == RunningStatus.IN_PROGRESS and is_past_ttl(
        running.modified_at, now, ttl
    )


@dataclass
class SweepResult:
    scanned: int = 0
    expired: int = 0
    deleted: int = 0
    failed: int = 0


class ExpirySweeper:
    """Periodically delete in-progress sessions idle for longer than the TTL."""

    def __init__(
        self,
        session_factory: sessionmaker,
        interval_seconds: float = SWEEP_INTERVAL_SECONDS,
        ttl: timedelta = timedelta(minutes=RUNNING_TTL_MINUTES),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self.interval_seconds = interval_seconds
        self.ttl = ttl
        self._clock = clock
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ---------- lifecycle ----------

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="running-expiry-sweeper", daemon=True
        )
        self._thread.start()
        logger.info(
            f"Expiry sweeper started (every {self.interval_seconds}s, ttl {self.ttl})"
        )

    def stop(self, timeout: float = SWEEPER_JOIN_TIMEOUT_SECONDS) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning(f"Expiry sweeper did not stop within {timeout:.1f}s")
            self._thread = None
        logger.info("Expiry sweeper stopped")

    def _loop(self) -> None:
        # Fixed period, first pass right after start
        while True:
            try:
                self.sweep()
            except Exception:
                logger.exception("Expiry sweep failed")
            if self._stop.wait(self.interval_seconds):
                break

    # ---------- sweep ----------

    def sweep(self) -> SweepResult:
        """Run one pass; each expired session is deleted in its own transaction."""
        now = self._clock()
        result = SweepResult()

        with session_scope(self._session_factory) as db:
            runnings = running_repository.find_all_runnings(db)
            result.scanned = len(runnings)
            expired_ids = [r.id for r in runnings if is_expired(r, now, self.ttl)]
        result.expired = len(expired_ids)

        for running_id in expired_ids:
            try:
                if self._delete_if_expired(running_id, now):
                    result.deleted += 1
            except Exception:
                result.failed += 1
                logger.exception(f"Failed to delete expired running {running_id}")

        if result.expired:
            logger.info(
                f"Expiry sweep: scanned={result.scanned} expired={result.expired} "
                f"deleted={result.deleted} failed={result.failed}"
            )
        else:
            logger.debug(f"Expiry sweep: scanned={result.scanned}, nothing expired")
        return result

    def _delete_if_expired(self, running_id: int, now: datetime) -> bool:
        with session_scope(self._session_factory) as db:
            running = running_repository.find_running_by_id(db, running_id)
            # Gone or touched by a client since the scan
            if running is None or not is_expired(running, now, self.ttl):
                return False
            running_repository.delete_running(db, running)
            db.commit()
            return True
