from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from app.core.time_utils import to_naive_utc
from app.models.running import RunningStatus


class RunningRequest(BaseModel):
    """Client-submitted snapshot used to create (no id) or update a session."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    scenario_id: Optional[int] = None  # required only when creating

    end_time: Optional[datetime] = None
    distance: Optional[float] = None
    pace: Optional[float] = None

    target_distance: Optional[float] = None
    target_pace: Optional[float] = None

    # A waypoint is recorded only when both are present
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("end_time")
    @classmethod
    def _end_time_utc(cls, v):
        return to_naive_utc(v)


class LocationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    latitude: float
    longitude: float


class RunningRead(BaseModel):
    """Projection returned to callers after a save or inside stats."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    scenario_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    distance: Optional[float] = None
    pace: Optional[float] = None
    target_distance: Optional[float] = None
    target_pace: Optional[float] = None
    status: RunningStatus
    modified_at: datetime
    locations: list[LocationRead] = []


class RunningStatsRead(BaseModel):
    runnings: list[RunningRead]
    target_pace_achieved_count: int
    target_distance_achieved_count: int
    total_distance: float
    total_running_count: int
    average_pace: float
