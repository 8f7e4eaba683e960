import logging
import signal
import threading
from datetime import timedelta

from app.db import Base, SessionLocal, engine
from app.models.running import Running, RunningLocation  # noqa: F401  (import ensures table is registered)
from app.models.scenario import Scenario  # noqa: F401
from app.models.user import User  # noqa: F401
from app.core.config import settings
from app.services.expiry_sweeper import ExpirySweeper

logger = logging.getLogger(__name__)


def configure_logging(level: str = settings.log_level) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def init_db(bind=engine) -> None:
    # Create DB tables (users, scenarios, runnings, ...) on startup
    Base.metadata.create_all(bind=bind)


def build_sweeper(session_factory=SessionLocal) -> ExpirySweeper:
    return ExpirySweeper(
        session_factory,
        interval_seconds=settings.sweep_interval_seconds,
        ttl=timedelta(minutes=settings.running_ttl_minutes),
    )


def run(stop_event: threading.Event | None = None) -> None:
    """Own the background sweeper until SIGINT/SIGTERM (or stop_event) arrives."""
    stop_event = stop_event or threading.Event()
    init_db()

    sweeper = build_sweeper() if settings.sweeper_enabled else None
    if sweeper is not None:
        sweeper.start()
    else:
        logger.info("Expiry sweeper disabled by configuration")

    try:
        stop_event.wait()
    finally:
        if sweeper is not None:
            sweeper.stop()


def main():
    configure_logging()
    stop_event = threading.Event()

    def _handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        stop_event.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)
    run(stop_event)


if __name__ == "__main__":
    main()
