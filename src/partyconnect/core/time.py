"""
Timestamps for events, contributions and messages.

Dates go to storage as ISO-8601 text and come back through pydantic. Values without
an offset (the sample catalog, form input) are read as wall time in `app.timezone`,
so "upcoming" comparisons never mix naive and aware datetimes.
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo


def ensure_tz(dt: datetime, timezone: str) -> datetime:
    """Aware values pass through; naive ones get `timezone` attached (same wall time)."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=ZoneInfo(timezone))


def parse_datetime(value: str, timezone: str) -> datetime:
    """Parse ISO-8601 text, including the trailing `Z` browsers emit."""
    return ensure_tz(datetime.fromisoformat(value.strip()), timezone)


def now_in(timezone: str) -> datetime:
    return datetime.now(tz=ZoneInfo(timezone))


def millis_id(prefix: str, now: datetime | None = None) -> str:
    """Timestamp-derived id such as `event-1752600000000`."""
    moment = now or datetime.now().astimezone()
    return f"{prefix}-{int(moment.timestamp() * 1000)}"
