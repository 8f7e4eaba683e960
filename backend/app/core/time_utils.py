import calendar
from datetime import datetime, timedelta, timezone

from app.core.constants import END_OF_DAY


def utc_now() -> datetime:
    """
    Current time as a naive UTC datetime.

    Every timestamp the service writes goes through here so stored values
    compare cleanly regardless of the database's timezone support.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: datetime | None) -> datetime | None:
    """Normalize an aware datetime to naive UTC; naive values are assumed UTC."""
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """
    Return (first instant, last second) of a calendar month.
    Example: (2024, 2) -> (2024-02-01 00:00:00, 2024-02-29 23:59:59)
    """
    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")

    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime(year, month, last_day, *END_OF_DAY)
    return start, end


def is_past_ttl(modified_at: datetime | None, now: datetime, ttl: timedelta) -> bool:
    """True when modified_at + ttl is strictly before now."""
    if modified_at is None:
        return False
    return modified_at + ttl < now
