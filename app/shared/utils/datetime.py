"""
Datetime utilities for consistent timezone handling.

Instants are stored timezone-aware UTC. Calendar reasoning (event dates,
"today", dedup day windows) happens in the tenant's reference timezone.
"""

from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of:
        - datetime.now() - naive, uses local timezone
        - datetime.utcnow() - naive, deprecated in Python 3.12

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def is_valid_timezone(name: str) -> bool:
    """Return True if name is a known IANA timezone."""
    if not name:
        return False
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def get_zone(name: str | None, default: str = "UTC") -> ZoneInfo:
    """Return ZoneInfo for name; unknown or empty names fall back to default."""
    if name and is_valid_timezone(name):
        return ZoneInfo(name)
    return ZoneInfo(default)


def local_today(now: datetime, tz: ZoneInfo) -> date:
    """Calendar date of the instant `now` in timezone tz (naive now is treated as UTC)."""
    return ensure_utc(now).astimezone(tz).date()


def day_bounds_utc(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Return [start, end) of the calendar day in tz, as UTC instants."""
    start_local = datetime.combine(day, time.min, tzinfo=tz)
    end_local = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start_local.astimezone(UTC), end_local.astimezone(UTC)

