# Parsers that rebuild incident state from channel messages
from incident_bot.parsers.summary_message_parser import (
    parse_summary_message,
    has_summary_message_header,
    find_summary_message,
)
from incident_bot.parsers.timeline_parser import (
    parse_timeline_event,
    parse_timeline_events,
    sort_timeline_events,
    get_participants,
)

__all__ = [
    "parse_summary_message",
    "has_summary_message_header",
    "find_summary_message",
    "parse_timeline_event",
    "parse_timeline_events",
    "sort_timeline_events",
    "get_participants",
]
