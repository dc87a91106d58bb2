"""Date manipulation utilities"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching stored values"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize aware datetimes to naive UTC; naive values are assumed UTC"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def period_bounds(duration: str, now: datetime) -> Tuple[datetime, datetime]:
    """
    Calendar period containing `now` for a budget duration.

    daily -> today, weekly -> ISO week starting Monday, monthly -> calendar
    month, yearly -> calendar year. The end bound is exclusive.
    """
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if duration == "daily":
        return day_start, day_start + timedelta(days=1)
    if duration == "weekly":
        start = day_start - timedelta(days=day_start.weekday())
        return start, start + timedelta(days=7)
    if duration == "monthly":
        start = day_start.replace(day=1)
        if start.month == 12:
            end = start.replace(year=start.year + 1, month=1)
        else:
            end = start.replace(month=start.month + 1)
        return start, end
    if duration == "yearly":
        start = day_start.replace(month=1, day=1)
        return start, start.replace(year=start.year + 1)

    raise ValueError(f"Unknown budget duration: {duration}")
