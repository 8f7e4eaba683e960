"""Store queries for running sessions.

Writes only stage changes on the session; the caller owns the commit so a
save or delete plus its waypoint changes land in one transaction.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.models.running import Running
from app.models.scenario import Scenario  # noqa: F401  (registers mapper)
from app.models.user import User  # noqa: F401


def find_running_by_id(db: Session, running_id: int) -> Optional[Running]:
    return db.get(Running, running_id)


def find_runnings_by_user_id(db: Session, user_id: int) -> list[Running]:
    return (
        db.query(Running)
        .filter(Running.user_id == user_id)
        .order_by(Running.start_time)
        .all()
    )


def find_runnings_by_user_id_and_date_range(
    db: Session, user_id: int, start: datetime, end: datetime
) -> list[Running]:
    """Sessions of a user whose start_time falls in [start, end]."""
    return (
        db.query(Running)
        .filter(Running.user_id == user_id)
        .filter(Running.start_time >= start)
        .filter(Running.start_time <= end)
        .order_by(Running.start_time)
        .all()
    )


def find_all_runnings(db: Session) -> list[Running]:
    return db.query(Running).order_by(Running.id).all()


def save_running(db: Session, running: Running) -> Running:
    db.add(running)
    db.flush()
    return running


def delete_running(db: Session, running: Running) -> None:
    db.delete(running)
    db.flush()
