# backend/utils/timeutils.py
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Server-side 'now' in UTC, stored naive."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
