import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
)
from sqlalchemy.orm import relationship
from app.db import Base


class RunningStatus(str, enum.Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class Running(Base):
    __tablename__ = "runnings"
    __table_args__ = (
        # Sweeper and stats both filter on these
        Index("ix_runnings_status_modified_at", "status", "modified_at"),
        Index("ix_runnings_user_id_start_time", "user_id", "start_time"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Owner and scenario are bound once at creation and never rebound
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    scenario_id = Column(Integer, ForeignKey("scenarios.id"), nullable=False)

    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)  # null while in progress

    distance = Column(Float, nullable=True)
    pace = Column(Float, nullable=True)

    # Goals are write-once: assigned while unlocked, locked once either is set
    target_distance = Column(Float, nullable=True)
    target_pace = Column(Float, nullable=True)
    targets_locked = Column(Boolean, nullable=False, default=False)

    status = Column(
        Enum(RunningStatus, name="running_status", native_enum=False, length=20),
        nullable=False,
        default=RunningStatus.IN_PROGRESS,
    )

    # Last mutation, written by the service; drives TTL expiry
    modified_at = Column(DateTime, nullable=False)

    # Optimistic concurrency between client saves and the expiry sweeper
    version = Column(Integer, nullable=False)

    owner = relationship("User")
    scenario = relationship("Scenario")
    locations = relationship(
        "RunningLocation",
        order_by="RunningLocation.seq",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}

    def add_location(self, latitude: float, longitude: float) -> "RunningLocation":
        location = RunningLocation(
            seq=len(self.locations),
            latitude=latitude,
            longitude=longitude,
        )
        self.locations.append(location)
        return location


class RunningLocation(Base):
    __tablename__ = "running_locations"

    id = Column(Integer, primary_key=True, index=True)
    running_id = Column(
        Integer,
        ForeignKey("runnings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    seq = Column(Integer, nullable=False)  # 0-based append order
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
