"""Timestamps as stored (UTC-naive) and as sent over the wire (ISO-8601 with Z)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Union


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def now_ms() -> int:
    """Milliseconds since the epoch; used for time-based identifiers."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def days_from_now(days: int) -> datetime:
    return utcnow() + timedelta(days=days)


def _naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string ("...Z", "+08:00" offsets, or naive as UTC); blank gives None."""
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return _naive_utc(datetime.fromisoformat(s))


def parse_timestamp(value: Union[str, int, float, None]) -> Optional[datetime]:
    """
    Parse a webhook timestamp into a UTC-naive datetime.

    GHL sends either ISO-8601 strings ("...Z", "+08:00" offsets or naive,
    which is taken as UTC) or epoch milliseconds. Blank input gives None.
    Raises ValueError for anything else.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _naive_utc(datetime.fromtimestamp(value / 1000, tz=timezone.utc))

    if not isinstance(value, str):
        raise ValueError(f"Unsupported timestamp: {value!r}")
    if value.strip().isdigit():
        return parse_timestamp(int(value))
    return parse_iso_datetime(value)


def split_date_time(dt: datetime) -> tuple[str, str]:
    """Split a datetime into ("YYYY-MM-DD", "HH:MM") as stored on calendar events."""
    return dt.strftime("%Y-%m-%d"), dt.strftime("%H:%M")


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
