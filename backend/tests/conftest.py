import os
from datetime import datetime, timedelta

# Import after env is set so the default engine is created with sqlite
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.db import Base, make_engine  # noqa: E402
from app.models.running import Running  # noqa: E402,F401
from app.repositories.scenario_repository import create_scenario  # noqa: E402
from app.repositories.user_repository import create_user  # noqa: E402


class FakeClock:
    """Controllable stand-in for utc_now()."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def engine(tmp_path):
    # File-backed so separate sessions get separate connections
    eng = make_engine(f"sqlite+pysqlite:///{tmp_path / 'runtale.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 10, 7, 0, 0))


@pytest.fixture
def user(db):
    return create_user(db, name="Test Runner")


@pytest.fixture
def other_user(db):
    return create_user(db, name="Other Runner")


@pytest.fixture
def scenario(db):
    return create_scenario(db, title="Park loop", description="5k around the park")
