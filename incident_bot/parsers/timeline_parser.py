"""
Timeline Event Parser

Recovers typed timeline events from the human-readable messages the bot posts
into an incident channel. Each matcher takes one raw Slack message dict and
returns a TimelineEvent or None; none of them raise on malformed input.

Message shapes:
- Log:     "🕐 ..." with a context block "<!date^TS^...|...> - <@USER>: *text*"
- Update:  "📢 Update from <@USER>:\n\ntext"
- IC:      "🎯 <@USER> is now the Incident Commander!"
           "🎯 Incident Commander handoff: <@USER1> → <@USER2>"
- Resolve: "✅ Incident resolved by <@USER> after 1h 5m"
"""

import re
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from incident_bot.models.incident import TimelineEvent, TimelineEventType
from incident_bot.utils.helpers import slack_ts_to_float

logger = logging.getLogger(__name__)

Message = Dict[str, Any]

CLOCK_GLYPHS = ("🕐", ":clock")
UPDATE_PHRASE = "📢 Update from"
UPDATE_SEPARATOR = ":\n\n"
IC_GLYPHS = ("🎯", ":dart:")
IC_PHRASES = ("Incident Commander", "handoff")
RESOLVE_GLYPHS = ("✅", ":white_check_mark:")
RESOLVE_PHRASE = "Incident resolved"

USER_MENTION = re.compile(r"<@(\w+)>")


@dataclass(frozen=True)
class LogEventFormat:
    """One version of the log entry grammar."""

    name: str
    pattern: "re.Pattern[str]"
    build: Callable[["re.Match[str]", Message], TimelineEvent]


def _build_current_log(match: "re.Match[str]", message: Message) -> TimelineEvent:
    user = match.group(2)
    return TimelineEvent(
        timestamp=int(match.group(1)),
        type=TimelineEventType.LOG,
        text=f"<@{user}>: {match.group(3)}",
        user=user,
    )


def _build_legacy_log(match: "re.Match[str]", message: Message) -> TimelineEvent:
    author = message.get("user")
    return TimelineEvent(
        timestamp=int(match.group(1)),
        type=TimelineEventType.LOG,
        text=match.group(2),
        user=author if isinstance(author, str) else None,
    )


# Tried in order; richest grammar first. New formats go at the front.
# The body runs to the last "*" so it may hold "*" and newlines.
LOG_EVENT_FORMATS: List[LogEventFormat] = [
    LogEventFormat(
        name="with_user",
        pattern=re.compile(
            r"date\^(\d+)\^[^|>]+\|[^>]+> - <@(\w+)>: \*(.+)\*\s*\Z", re.S
        ),
        build=_build_current_log,
    ),
    LogEventFormat(
        name="legacy",
        pattern=re.compile(r"date\^(\d+)\^[^|>]+\|[^>]+> - \*(.+)\*\s*\Z", re.S),
        build=_build_legacy_log,
    ),
]


def _message_text(message: Message) -> str:
    text = message.get("text") if isinstance(message, dict) else None
    return text if isinstance(text, str) else ""


def _first_context_element_text(message: Message) -> Optional[str]:
    blocks = message.get("blocks")
    if not isinstance(blocks, list):
        return None

    context_block = next(
        (b for b in blocks if isinstance(b, dict) and b.get("type") == "context"),
        None,
    )
    if context_block is None:
        return None

    elements = context_block.get("elements")
    if not isinstance(elements, list) or not elements:
        return None

    element = elements[0]
    if not isinstance(element, dict) or "text" not in element:
        return None
    return str(element["text"])


def parse_log_event(message: Message) -> Optional[TimelineEvent]:
    """Parse an entry posted by the log command."""
    text = _message_text(message)
    if not any(glyph in text for glyph in CLOCK_GLYPHS):
        return None

    element_text = _first_context_element_text(message)
    if element_text is None:
        return None

    for log_format in LOG_EVENT_FORMATS:
        match = log_format.pattern.search(element_text)
        if match:
            return log_format.build(match, message)

    logger.debug(f"Clock message {message.get('ts')} matched no log format")
    return None


def parse_update_event(message: Message) -> Optional[TimelineEvent]:
    """Parse a broadcast update ("📢 Update from <@USER>:\\n\\ntext")."""
    text = _message_text(message)
    if UPDATE_PHRASE not in text:
        return None

    user_match = USER_MENTION.search(text)
    parts = text.split(UPDATE_SEPARATOR, 1)
    if not user_match or len(parts) < 2:
        return None

    return TimelineEvent(
        timestamp=slack_ts_to_float(message.get("ts")),
        type=TimelineEventType.UPDATE,
        text=parts[1],
        user=user_match.group(1),
    )


def parse_ic_event(message: Message) -> Optional[TimelineEvent]:
    """Parse an IC assignment or handoff message."""
    text = _message_text(message)
    glyph = next((g for g in IC_GLYPHS if text.startswith(g)), None)
    if glyph is None:
        return None
    if not any(phrase in text for phrase in IC_PHRASES):
        return None

    # The mention stays in the text for display
    return TimelineEvent(
        timestamp=slack_ts_to_float(message.get("ts")),
        type=TimelineEventType.IC,
        text=text[len(glyph):].lstrip(),
    )


def parse_resolve_event(message: Message) -> Optional[TimelineEvent]:
    """Parse an incident resolution message."""
    text = _message_text(message)
    if not any(glyph in text for glyph in RESOLVE_GLYPHS):
        return None
    if RESOLVE_PHRASE not in text:
        return None

    user_match = USER_MENTION.search(text)
    user = user_match.group(1) if user_match else None

    return TimelineEvent(
        timestamp=slack_ts_to_float(message.get("ts")),
        type=TimelineEventType.RESOLVE,
        text=f"Incident resolved by <@{user}>" if user else "Incident resolved",
        user=user,
    )


# A message represents at most one event; first match wins.
EVENT_MATCHERS: List[Callable[[Message], Optional[TimelineEvent]]] = [
    parse_log_event,
    parse_update_event,
    parse_ic_event,
    parse_resolve_event,
]


def parse_timeline_event(message: Message) -> Optional[TimelineEvent]:
    """Classify a single message, or None if it is not a timeline event."""
    if not isinstance(message, dict):
        return None
    for matcher in EVENT_MATCHERS:
        event = matcher(message)
        if event is not None:
            return event
    return None


def parse_timeline_events(messages: Iterable[Message]) -> List[TimelineEvent]:
    """Parse all timeline events from a list of Slack messages, in input order."""
    events = []
    for message in messages:
        event = parse_timeline_event(message)
        if event is not None:
            events.append(event)
    return events


def sort_timeline_events(events: Iterable[TimelineEvent]) -> List[TimelineEvent]:
    """Sort events oldest first. Stable; returns a new list."""
    return sorted(events, key=lambda event: event.timestamp)


def get_participants(messages: Iterable[Message]) -> Set[str]:
    """Unique message authors, excluding bots."""
    participants = set()
    for message in messages:
        if not isinstance(message, dict):
            continue
        user = message.get("user")
        if user and not message.get("bot_id") and message.get("subtype") != "bot_message":
            participants.add(user)
    return participants
