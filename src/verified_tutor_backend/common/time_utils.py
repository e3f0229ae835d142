'''
Timezone helpers shared by the services and the pure core functions.
'''
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import settings
from .logger import log


def get_zone(tz_name: str | None) -> ZoneInfo:
    """Resolves an IANA timezone name (DEFAULT_TIMEZONE when empty), falling back to UTC when unknown."""
    if not tz_name:
        tz_name = settings.DEFAULT_TIMEZONE
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        log.warning(f"Invalid timezone '{tz_name}', defaulting to UTC.")
        return ZoneInfo("UTC")


def ensure_aware(value: datetime) -> datetime:
    """
    Returns a timezone-aware datetime.
    Some drivers (SQLite) hand back naive values for timestamptz columns;
    those are stored in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
