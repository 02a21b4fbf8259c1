"""
Utility package exports
"""

from incident_bot.utils.helpers import (
    to_iso,
    parse_iso,
    iso_to_epoch,
    slack_ts_to_float,
    format_duration,
    format_utc_short,
)

__all__ = [
    "to_iso",
    "parse_iso",
    "iso_to_epoch",
    "slack_ts_to_float",
    "format_duration",
    "format_utc_short",
]
