import time
from datetime import datetime, timedelta

from app.models.running import Running, RunningStatus
from app.repositories import running_repository
from app.schemas.running import RunningRequest
from app.services import running_service
from app.services.expiry_sweeper import ExpirySweeper, is_expired


def _open(db, user, scenario, clock, **fields):
    return running_service.save_running_session(
        db,
        user.id,
        RunningRequest(scenario_id=scenario.id, distance=0.0, pace=0.0, **fields),
        clock=clock,
    )


def _running_ids(session_factory):
    session = session_factory()
    try:
        return {r.id for r in session.query(Running).all()}
    finally:
        session.close()


def test_idle_past_ttl_is_deleted(session_factory, db, user, scenario, clock):
    saved = _open(db, user, scenario, clock, latitude=37.5, longitude=127.0)
    clock.advance(minutes=16)

    result = ExpirySweeper(session_factory, clock=clock).sweep()

    assert result.expired == 1
    assert result.deleted == 1
    assert saved.id not in _running_ids(session_factory)


def test_idle_within_ttl_is_kept(session_factory, db, user, scenario, clock):
    saved = _open(db, user, scenario, clock)
    clock.advance(minutes=14)

    result = ExpirySweeper(session_factory, clock=clock).sweep()

    assert result.scanned == 1
    assert result.expired == 0
    assert saved.id in _running_ids(session_factory)


def test_completed_sessions_never_expire(session_factory, db, user, scenario, clock):
    saved = _open(db, user, scenario, clock, end_time=datetime(2024, 5, 10, 7, 30))
    clock.advance(hours=2)

    ExpirySweeper(session_factory, clock=clock).sweep()

    assert saved.id in _running_ids(session_factory)


def test_update_resets_ttl(session_factory, db, user, scenario, clock):
    saved = _open(db, user, scenario, clock)
    clock.advance(minutes=10)
    running_service.save_running_session(
        db, user.id, RunningRequest(id=saved.id, distance=1.0, pace=6.0), clock=clock
    )
    clock.advance(minutes=10)

    ExpirySweeper(session_factory, clock=clock).sweep()

    assert saved.id in _running_ids(session_factory)


def test_failure_on_one_record_does_not_stop_sweep(
    monkeypatch, session_factory, db, user, scenario, clock
):
    first = _open(db, user, scenario, clock)
    _open(db, user, scenario, clock)
    clock.advance(minutes=30)

    real_delete = running_repository.delete_running

    def flaky_delete(session, running):
        if running.id == first.id:
            raise RuntimeError("disk on fire")
        real_delete(session, running)

    monkeypatch.setattr(running_repository, "delete_running", flaky_delete)

    result = ExpirySweeper(session_factory, clock=clock).sweep()

    assert result.expired == 2
    assert result.failed == 1
    assert result.deleted == 1
    assert _running_ids(session_factory) == {first.id}


def test_deleted_sessions_leave_owner_view(session_factory, db, user, scenario, clock):
    _open(db, user, scenario, clock)
    clock.advance(minutes=20)
    kept = _open(db, user, scenario, clock)

    ExpirySweeper(session_factory, clock=clock).sweep()

    db.expire_all()
    assert [r.id for r in user.runnings] == [kept.id]


def test_is_expired_uses_status_and_modified_at():
    now = datetime(2024, 5, 10, 12, 0)
    ttl = timedelta(minutes=15)
    stale = now - timedelta(minutes=16)

    assert is_expired(Running(status=RunningStatus.IN_PROGRESS, modified_at=stale), now, ttl)
    assert not is_expired(Running(status=RunningStatus.COMPLETED, modified_at=stale), now, ttl)
    assert not is_expired(
        Running(status=RunningStatus.IN_PROGRESS, modified_at=now - timedelta(minutes=14)),
        now,
        ttl,
    )


def test_background_thread_sweeps_until_stopped(session_factory, db, user, scenario, clock):
    saved = _open(db, user, scenario, clock)
    clock.advance(minutes=20)

    sweeper = ExpirySweeper(session_factory, interval_seconds=0.01, clock=clock)
    sweeper.start()
    try:
        assert sweeper.is_running
        deadline = time.monotonic() + 5
        while saved.id in _running_ids(session_factory) and time.monotonic() < deadline:
            time.sleep(0.02)
    finally:
        sweeper.stop()

    assert not sweeper.is_running
    assert saved.id not in _running_ids(session_factory)


def test_first_sweep_runs_at_start(session_factory, db, user, scenario, clock):
    saved = _open(db, user, scenario, clock)
    clock.advance(minutes=20)

    sweeper = ExpirySweeper(session_factory, interval_seconds=3600, clock=clock)
    sweeper.start()
    try:
        deadline = time.monotonic() + 5
        while saved.id in _running_ids(session_factory) and time.monotonic() < deadline:
            time.sleep(0.02)
    finally:
        sweeper.stop()

    assert saved.id not in _running_ids(session_factory)


def test_client_touch_between_scan_and_delete_keeps_session(
    monkeypatch, session_factory, db, user, scenario, clock
):
    saved = _open(db, user, scenario, clock)
    clock.advance(minutes=16)

    real_find_all = running_repository.find_all_runnings

    def find_all_then_touch(session):
        runnings = real_find_all(session)
        client = session_factory()
        try:
            running_service.save_running_session(
                client,
                user.id,
                RunningRequest(id=saved.id, distance=1.5, pace=6.0),
                clock=clock,
            )
        finally:
            client.close()
        return runnings

    monkeypatch.setattr(running_repository, "find_all_runnings", find_all_then_touch)

    result = ExpirySweeper(session_factory, clock=clock).sweep()

    assert result.expired == 1
    assert result.deleted == 0
    assert result.failed == 0
    assert saved.id in _running_ids(session_factory)
