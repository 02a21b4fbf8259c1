"""
Shared Utility Functions

Time conversions and formatting used across parsers and services.
"""

from datetime import datetime, timezone
from typing import Optional


def to_iso(epoch_seconds: float) -> str:
    """
    Render Unix seconds as a UTC ISO-8601 string with millisecond precision.

    Example: 1735732800 -> "2025-01-01T12:00:00.000Z"
    """
    dt = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string (``Z`` suffix allowed). Returns None if invalid."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def iso_to_epoch(value: Optional[str]) -> Optional[float]:
    """ISO-8601 string to Unix seconds, or None."""
    dt = parse_iso(value)
    return dt.timestamp() if dt else None


def slack_ts_to_float(ts: Optional[str]) -> float:
    """Slack ts ("1234567890.123456") to float seconds; 0.0 when missing or invalid."""
    try:
        return float(ts or 0)
    except (TypeError, ValueError):
        return 0.0


def format_duration(seconds: float) -> str:
    """
    Format a duration as hours and minutes.

    Example: 5430 -> "1h 30m"
    """
    minutes = int(seconds // 60)
    hours = minutes // 60
    remaining_minutes = minutes % 60
    return f"{hours}h {remaining_minutes}m"


def format_utc_short(epoch_seconds: float) -> str:
    """Render Unix seconds as "Jan 1 09:05" (UTC, 24h clock)."""
    dt = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return f"{dt:%b} {dt.day} {dt:%H:%M}"
