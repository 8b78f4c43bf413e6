# teamtasks/core/clock.py
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time, timezone-aware UTC. Tests patch this function."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken as UTC; aware ones are converted."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
