"""
Shared datetime helpers and the yearly window generator.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Union

from .models import YearlyWindow


def ensure_utc(dt: datetime) -> datetime:
    """Return a timezone-aware UTC datetime."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp and normalize it to UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return ensure_utc(parsed)


def to_date(value: Union[date, datetime]) -> date:
    """Reduce a datetime to its UTC calendar date; pass dates through."""
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    return value


def age_in_days(created: Union[date, datetime], now: Union[date, datetime]) -> int:
    """Whole days between creation and now, never less than one."""
    return max((to_date(now) - to_date(created)).days, 1)


def generate_yearly_windows(
    creation_date: Union[date, datetime],
    now: Union[date, datetime],
) -> List[YearlyWindow]:
    """Partition [creation month, now] into consecutive one-year windows.

    The first window starts on the first day of the creation month. Each
    window spans one year less a day; the last one is clipped to ``now``.
    A package created today can yield no windows at all.
    """
    today = to_date(now)
    start = to_date(creation_date).replace(day=1)
    windows: List[YearlyWindow] = []

    while start < today:
        # start is always the first of a month, so the replace is safe
        end = start.replace(year=start.year + 1) - timedelta(days=1)
        if end > today:
            end = today
        if start >= end:
            break
        windows.append(YearlyWindow(start_date=start, end_date=end, year=start.year))
        start = end + timedelta(days=1)

    return windows
