"""
Slack Permalink Parser

Builds and parses Slack message permalinks. The summary message keeps a link to
the team announcement, so the announcement's ts is recovered from the link.
"""

import re
from dataclasses import dataclass
from typing import Optional

from incident_bot.config import get_settings

# https://{workspace}.slack.com/archives/{channel_id}/p{digits} (workspace optional)
PERMALINK_PATTERN = re.compile(
    r"https://(?:([^./]+)\.)?slack\.com/archives/([A-Za-z0-9]+)/p(\d+)"
)
# A URL inside mrkdwn, bare or as the target of <url|label>
URL_PATTERN = re.compile(r"https://[^\s|>]+")


@dataclass
class ParsedPermalink:
    """Parsed Slack permalink components."""

    workspace: Optional[str]
    channel_id: str
    message_ts: str


def ts_from_permalink_digits(digits: str) -> str:
    """
    Convert permalink digits back to a Slack ts.

    Slack uses 10 digits before the decimal point:
        1234567890123456 -> 1234567890.123456
    """
    return f"{digits[:10]}.{digits[10:]}"


def build_permalink(
    channel_id: str, message_ts: str, base_url: Optional[str] = None
) -> str:
    """
    Build an archive permalink for a message.

    Examples:
        build_permalink("C123", "1234567890.123456")
        -> https://slack.com/archives/C123/p1234567890123456
    """
    if base_url is None:
        base_url = get_settings().slack_archive_base_url
    url_ts = message_ts.replace(".", "")
    return f"{base_url.rstrip('/')}/archives/{channel_id}/p{url_ts}"


def parse_permalink(permalink: str) -> ParsedPermalink:
    """
    Parse a Slack permalink to extract channel and timestamp.

    Args:
        permalink: Full Slack permalink URL

    Returns:
        ParsedPermalink with workspace, channel_id, and message_ts

    Raises:
        ValueError: If permalink format is invalid
    """
    match = PERMALINK_PATTERN.match(permalink)

    if not match:
        raise ValueError(f"Invalid Slack permalink format: {permalink}")

    workspace, channel_id, ts_raw = match.groups()

    return ParsedPermalink(
        workspace=workspace,
        channel_id=channel_id,
        message_ts=ts_from_permalink_digits(ts_raw),
    )


def find_permalink_ts(text: str) -> Optional[str]:
    """Return the ts of the first Slack permalink embedded in text, if any."""
    for url in URL_PATTERN.findall(text or ""):
        try:
            return parse_permalink(url).message_ts
        except ValueError:
            continue
    return None
