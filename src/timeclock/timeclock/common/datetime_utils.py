from __future__ import annotations

import calendar
from datetime import date, datetime, timezone


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def to_utc_iso(value: datetime) -> str:
    """ISO-8601 instant in UTC with a trailing ``Z`` (naive values are local time)."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_time(value: datetime) -> str:
    """12-hour clock without spaces, e.g. ``9:05am``."""
    hour = value.hour % 12 or 12
    suffix = "am" if value.hour < 12 else "pm"
    return f"{hour}:{value.minute:02d}{suffix}"


def format_date(value: date) -> str:
    """Short month and day, e.g. ``Jan 10``."""
    return f"{calendar.month_abbr[value.month]} {value.day}"


def minutes_to_hm(minutes: int) -> str:
    return f"{minutes // 60}h {minutes % 60}m"


def format_hms(total_seconds: int) -> str:
    h = total_seconds // 3600
    m = (total_seconds % 3600) // 60
    s = total_seconds % 60
    return f"{h:02d}:{m:02d}:{s:02d}"


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def parse_client_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 instant sent by a client into a naive UTC datetime."""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
