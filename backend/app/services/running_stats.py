from typing import Iterable, Optional

from app.models.running import Running, RunningStatus
from app.schemas.running import RunningRead, RunningStatsRead


def _pace_achieved(pace: Optional[float], target_pace: Optional[float]) -> bool:
    """Lower pace is faster; an unset value never counts as achieved."""
    if pace is None or target_pace is None:
        return False
    return pace <= target_pace


def _distance_achieved(distance: Optional[float], target_distance: Optional[float]) -> bool:
    if distance is None or target_distance is None:
        return False
    return distance >= target_distance


def average_pace(total_pace: float, count: int) -> float:
    return total_pace / count if count > 0 else 0.0


def summarize_runnings(runnings: Iterable[Running]) -> RunningStatsRead:
    """
    Reduce the completed sessions among `runnings` to a stats summary.

    In-progress sessions are ignored. Missing distance/pace contribute 0 to
    the sums; missing targets count as not achieved.
    """
    completed = [r for r in runnings if r.status == RunningStatus.COMPLETED]

    total_running_count = len(completed)
    total_distance = sum(r.distance or 0.0 for r in completed)
    total_pace = sum(r.pace or 0.0 for r in completed)

    return RunningStatsRead(
        runnings=[RunningRead.model_validate(r) for r in completed],
        target_pace_achieved_count=sum(
            1 for r in completed if _pace_achieved(r.pace, r.target_pace)
        ),
        target_distance_achieved_count=sum(
            1 for r in completed if _distance_achieved(r.distance, r.target_distance)
        ),
        total_distance=total_distance,
        total_running_count=total_running_count,
        average_pace=average_pace(total_pace, total_running_count),
    )
