"""
Time helpers shared by services.

SQLite hands back naive datetimes even when timezone-aware values were
stored, so comparisons always go through ``ensure_aware``.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def hours_since(dt: datetime, now: datetime | None = None) -> float:
    now = now or utc_now()
    return (now - ensure_aware(dt)).total_seconds() / 3600


def age_in_days(dt: datetime, now: datetime | None = None) -> int:
    """Whole days elapsed since ``dt``."""
    now = now or utc_now()
    return (now - ensure_aware(dt)).days
