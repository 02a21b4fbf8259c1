"""
Summary Message Parser

Extracts incident fields back out of the blocks rendered by
messages.summary_message. Every extractor runs against every block, so block
order and malformed blocks do not matter; missing fields decode to "".
"""

import re
from typing import Any, Dict, Iterable, Optional

from incident_bot.integrations.slack.parser import find_permalink_ts
from incident_bot.messages.summary_message import (
    ISSUE_LABEL,
    IC_LABEL,
    STARTED_BY_MARKER,
)
from incident_bot.models.incident import ParsedIncidentData

Message = Dict[str, Any]

ISSUE_PREFIX = re.compile(r"^\*Issue:\*\s*\n?\s*")
USER_MENTION = re.compile(r"<@(\w+)>")
STARTER_MENTION = re.compile(r"Started by \*<@(\w+)>")


def _section_text(block: Any) -> Optional[str]:
    if not isinstance(block, dict) or block.get("type") != "section":
        return None
    text = block.get("text")
    if not isinstance(text, dict) or not isinstance(text.get("text"), str):
        return None
    return text["text"]


def has_summary_message_header(message: Message) -> bool:
    """A message is treated as the summary message if it has a header block."""
    blocks = message.get("blocks") if isinstance(message, dict) else None
    if not isinstance(blocks, list):
        return False
    return any(isinstance(b, dict) and b.get("type") == "header" for b in blocks)


def find_summary_message(messages: Iterable[Message]) -> Optional[Message]:
    """Return the first message carrying a header block, or None."""
    for message in messages:
        if has_summary_message_header(message):
            return message
    return None


def extract_issue(text: str) -> Optional[str]:
    if not text.startswith(ISSUE_LABEL):
        return None
    return ISSUE_PREFIX.sub("", text, count=1).strip()


def extract_incident_commander(text: str) -> Optional[str]:
    if IC_LABEL not in text:
        return None
    match = USER_MENTION.search(text)
    return match.group(1) if match else ""


def extract_starter_user(text: str) -> Optional[str]:
    if STARTED_BY_MARKER not in text:
        return None
    match = STARTER_MENTION.search(text)
    return match.group(1) if match else None


def extract_team_message_ts(block: Any) -> Optional[str]:
    """Read the team announcement ts from a context block's archive link."""
    if not isinstance(block, dict) or block.get("type") != "context":
        return None
    elements = block.get("elements")
    if not isinstance(elements, list):
        return None

    for element in elements:
        if not isinstance(element, dict) or element.get("type") != "mrkdwn":
            continue
        text = element.get("text")
        if isinstance(text, str) and "/archives/" in text:
            ts = find_permalink_ts(text)
            if ts:
                return ts
    return None


def parse_summary_message(message: Message) -> ParsedIncidentData:
    """
    Parse incident data from a summary message.

    Args:
        message: Raw Slack message dict (only "blocks" is read)

    Returns:
        ParsedIncidentData; fields that are not found stay ""
    """
    result = ParsedIncidentData()

    blocks = message.get("blocks") if isinstance(message, dict) else None
    if not isinstance(blocks, list):
        return result

    for block in blocks:
        text = _section_text(block)
        if text is not None:
            issue = extract_issue(text)
            if issue is not None:
                result.issue = issue

            commander = extract_incident_commander(text)
            if commander is not None:
                result.incident_commander_id = commander

            starter = extract_starter_user(text)
            if starter is not None:
                result.start_user_id = starter

        team_ts = extract_team_message_ts(block)
        if team_ts is not None:
            result.team_message_ts = team_ts

    return result
