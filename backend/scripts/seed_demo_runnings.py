from datetime import timedelta
import random

from app.db import SessionLocal
from app.main import init_db
from app.core.time_utils import utc_now
from app.repositories.scenario_repository import create_scenario
from app.repositories.user_repository import create_user
from app.schemas.running import RunningRequest
from app.services.running_service import save_running_session


def seed_demo_runnings(db, days: int = 14) -> int:
    """Create a demo runner, a scenario and one completed session per day."""
    user = create_user(db, name="Demo Runner")
    scenario = create_scenario(
        db,
        title="Riverside loop",
        description="Flat 5k loop along the river.",
    )

    today = utc_now().replace(hour=7, minute=0, second=0, microsecond=0)
    created = 0

    for offset in range(days, 0, -1):
        started = today - timedelta(days=offset)
        distance = round(random.uniform(3.0, 10.0), 2)
        pace = round(random.uniform(4.5, 7.0), 2)

        # First snapshot opens the session with goals and a waypoint
        opened = save_running_session(
            db,
            user.id,
            RunningRequest(
                scenario_id=scenario.id,
                distance=0.0,
                pace=0.0,
                target_distance=5.0,
                target_pace=6.0,
                latitude=37.5665,
                longitude=126.9780,
            ),
            clock=lambda: started,
        )
        # Second snapshot completes it
        finished = started + timedelta(minutes=int(distance * pace))
        save_running_session(
            db,
            user.id,
            RunningRequest(
                id=opened.id,
                end_time=finished,
                distance=distance,
                pace=pace,
                latitude=37.5700,
                longitude=126.9830,
            ),
            clock=lambda: finished,
        )
        created += 1

    return created


def main():
    init_db()
    db = SessionLocal()
    try:
        count = seed_demo_runnings(db)
    finally:
        db.close()
    print(f"Seeded {count} demo runnings")


if __name__ == "__main__":
    main()
