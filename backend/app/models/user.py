from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from app.core.time_utils import utc_now
from app.db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)

    # Naive UTC, like every other stored timestamp
    created_at = Column(DateTime, nullable=False, default=utc_now)

    # Derived from runnings.user_id; the foreign key is the only source of
    # truth, so this view is read-only and never edited by hand.
    runnings = relationship(
        "Running",
        primaryjoin="User.id == Running.user_id",
        order_by="Running.start_time",
        viewonly=True,
    )
