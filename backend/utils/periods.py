# utils/periods.py
"""Date-range and bucket helpers shared by the report and stock endpoints.

All ranges are inclusive whole days: ``start`` at 00:00:00 and ``end`` at
23:59:59.999999.
"""
from datetime import date, datetime, time, timedelta
from typing import List, Literal, Optional, Tuple

from fastapi import HTTPException

from utils.timeutils import utcnow

GroupBy = Literal["day", "week", "month", "year"]


def day_start(d: date) -> datetime:
    return datetime.combine(d, time.min)


def day_end(d: date) -> datetime:
    return datetime.combine(d, time.max)


def resolve_range(
    start_date: Optional[date],
    end_date: Optional[date],
    default_start: Optional[date] = None,
) -> Tuple[datetime, datetime]:
    """Turn optional query dates into a datetime window.

    Without ``start_date`` the window opens on ``default_start`` or, failing
    that, the first day of the current month. ``end_date`` defaults to today.
    """
    today = utcnow().date()
    end = end_date or today
    start = start_date or default_start or today.replace(day=1)
    if start > end:
        raise HTTPException(status_code=422, detail="start_date must not be after end_date")
    return day_start(start), day_end(end)


def bucket_key(ts: datetime, group_by: GroupBy) -> str:
    if group_by == "week":
        year, week, _ = ts.isocalendar()
        return f"{year}-W{week:02d}"
    if group_by == "month":
        return ts.strftime("%Y-%m")
    if group_by == "year":
        return ts.strftime("%Y")
    return ts.strftime("%Y-%m-%d")


def bucket_label(key: str, group_by: GroupBy) -> str:
    if group_by == "week":
        year, week = key.split("-W")
        monday = date.fromisocalendar(int(year), int(week), 1)
        return f"Week {int(week)} ({monday.strftime('%d %b')} - {(monday + timedelta(days=6)).strftime('%d %b %Y')})"
    if group_by == "month":
        return datetime.strptime(key, "%Y-%m").strftime("%B %Y")
    if group_by == "year":
        return key
    return datetime.strptime(key, "%Y-%m-%d").strftime("%d %b %Y")


def bucket_keys(start: datetime, end: datetime, group_by: GroupBy) -> List[str]:
    """Every bucket between ``start`` and ``end`` in order, so empty periods still show up."""
    keys: List[str] = []
    current = start.date()
    while current <= end.date():
        key = bucket_key(datetime.combine(current, time.min), group_by)
        if not keys or keys[-1] != key:
            keys.append(key)
        current += timedelta(days=1)
    return keys


def days_between(start: date, end: date) -> List[date]:
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def growth(current: float, previous: float) -> float:
    """Percentage change from ``previous`` to ``current``; 100 when starting from zero."""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 2)
