"""
Timestamp helpers for the ParkAPI wire format.

The server speaks `yyyy-MM-ddTHH:mm:ss` without an offset. Request parameters are
rendered verbatim from the caller's datetime; server-reported snapshot times are
read as UTC.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

API_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


def format_api_timestamp(dt: datetime) -> str:
    """Render `dt` in the wire format (wall-clock fields, no offset)."""
    return dt.strftime(API_TIMESTAMP_FORMAT)


def parse_api_timestamp(value: str) -> datetime:
    """Parse a naive wire timestamp (no offset)."""
    return datetime.strptime(value.strip(), API_TIMESTAMP_FORMAT)


def parse_utc_timestamp(value: str) -> datetime:
    """Parse a server-reported timestamp and attach UTC.

    Notes:
    - Accepts a trailing `Z` and fractional seconds, which some ParkAPI
      deployments emit for `last_downloaded`.
    - Offsets, when present, are converted to UTC.
    """
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def start_of_day(dt: datetime) -> datetime:
    """Midnight of the calendar day containing `dt`, keeping its tzinfo."""
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def day_window(reference: datetime) -> tuple[datetime, datetime]:
    """Return `(start, start + 1 day)` for the day containing `reference`."""
    start = start_of_day(reference)
    return start, start + timedelta(days=1)


def week_window(start: datetime, *, days: int = 7) -> tuple[datetime, datetime]:
    """Return `(start, start + days)`."""
    return start, start + timedelta(days=days)
