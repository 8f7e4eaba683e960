"""Running-session lifecycle: create/update from snapshots, lookups, deletes.

Every public function is one unit of work against the session it is given
and commits before returning.
"""
import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.errors import (
    BadRequestError,
    ConflictError,
    ErrorMessage,
    NotFoundError,
)
from app.core.time_utils import month_bounds, to_naive_utc, utc_now
from app.models.running import Running, RunningStatus
from app.models.scenario import Scenario
from app.models.user import User
from app.repositories import running_repository
from app.repositories.scenario_repository import find_scenario_by_id
from app.repositories.user_repository import find_user_by_id
from app.schemas.running import RunningRead, RunningRequest, RunningStatsRead
from app.services.running_stats import summarize_runnings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def save_running_session(
    db: Session,
    user_id: int,
    request: RunningRequest,
    clock: Clock = utc_now,
) -> RunningRead:
    """
    Create a session (request without id) or update an existing one.

    Owner and scenario are bound only on creation; later requests cannot
    rebind them even if they carry a different scenario_id.
    """
    running = _get_or_create_running(db, request)
    user = _find_user(db, user_id)
    now = clock()

    creating = running.id is None
    if creating:
        running.owner = user
        running.scenario = _find_scenario(db, request.scenario_id)
        running.start_time = now

    _apply_request(running, request, now)

    try:
        running_repository.save_running(db, running)
        db.commit()
    except StaleDataError as e:
        db.rollback()
        logger.warning(f"Conflicting save on running {request.id}: {e}")
        raise ConflictError(ErrorMessage.RUNNING_CONFLICT) from e

    db.refresh(running)
    logger.info(
        f"{'Created' if creating else 'Updated'} running {running.id} "
        f"for user {user_id} ({running.status.value})"
    )
    return RunningRead.model_validate(running)


def _get_or_create_running(db: Session, request: RunningRequest) -> Running:
    if request.id is not None:
        running = running_repository.find_running_by_id(db, request.id)
        if running is None:
            raise NotFoundError(ErrorMessage.RUNNING_NOT_FOUND)
        return running
    return Running()


def _find_user(db: Session, user_id: int) -> User:
    user = find_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError(ErrorMessage.USER_NOT_EXIST)
    return user


def _find_scenario(db: Session, scenario_id: int | None) -> Scenario:
    scenario = find_scenario_by_id(db, scenario_id)
    if scenario is None:
        raise NotFoundError(ErrorMessage.SCENARIO_NOT_FOUND)
    return scenario


def _apply_request(running: Running, request: RunningRequest, now: datetime) -> None:
    running.end_time = request.end_time
    running.distance = request.distance
    running.pace = request.pace
    running.status = (
        RunningStatus.IN_PROGRESS if request.end_time is None else RunningStatus.COMPLETED
    )

    # Targets are write-once. The first request carrying either value locks
    # both, so a lone target_pace cannot be followed by a new target_distance.
    if not running.targets_locked:
        running.target_distance = request.target_distance
        running.target_pace = request.target_pace
        running.targets_locked = (
            request.target_distance is not None or request.target_pace is not None
        )

    running.modified_at = now

    if request.latitude is not None and request.longitude is not None:
        running.add_location(request.latitude, request.longitude)


def get_runnings_by_user_id(db: Session, user_id: int) -> list[Running]:
    return running_repository.find_runnings_by_user_id(db, user_id)


def get_running_by_id(db: Session, running_id: int) -> Running:
    running = running_repository.find_running_by_id(db, running_id)
    if running is None:
        raise BadRequestError(ErrorMessage.RUNNING_NOT_FOUND)
    return running


def delete_running(db: Session, running_id: int) -> None:
    """Delete a session and its waypoints in one transaction."""
    running = running_repository.find_running_by_id(db, running_id)
    if running is None:
        raise NotFoundError(ErrorMessage.RUNNING_NOT_FOUND)

    try:
        running_repository.delete_running(db, running)
        db.commit()
    except StaleDataError as e:
        db.rollback()
        logger.warning(f"Conflicting delete on running {running_id}: {e}")
        raise ConflictError(ErrorMessage.RUNNING_CONFLICT) from e

    logger.info(f"Deleted running {running_id}")


def get_runnings_by_user_id_and_date_range(
    db: Session, user_id: int, start_date: datetime, end_date: datetime
) -> list[Running]:
    return running_repository.find_runnings_by_user_id_and_date_range(
        db, user_id, to_naive_utc(start_date), to_naive_utc(end_date)
    )


def get_running_stats(
    db: Session, user_id: int, start_date: datetime, end_date: datetime
) -> RunningStatsRead:
    runnings = get_runnings_by_user_id_and_date_range(db, user_id, start_date, end_date)
    return summarize_runnings(runnings)


def get_runnings_by_user_id_and_month(
    db: Session, user_id: int, year: int, month: int
) -> list[Running]:
    try:
        start, end = month_bounds(year, month)
    except ValueError as e:
        raise BadRequestError(ErrorMessage.INVALID_MONTH) from e
    return running_repository.find_runnings_by_user_id_and_date_range(
        db, user_id, start, end
    )
