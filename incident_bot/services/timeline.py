"""
Incident Timeline

Replays a channel's history into an ordered timeline. build_incident_timeline
is pure and takes already-fetched messages; TimelineService wires it to Slack.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from incident_bot.config import Settings, get_settings
from incident_bot.integrations.slack.client import SlackClient
from incident_bot.integrations.slack.parser import build_permalink
from incident_bot.models.incident import (
    IncidentMetadata,
    IncidentTimeline,
    TimelineEvent,
    TimelineEventType,
)
from incident_bot.parsers.timeline_parser import (
    get_participants,
    parse_timeline_events,
    sort_timeline_events,
)
from incident_bot.services.incident_store import IncidentStore
from incident_bot.utils.helpers import (
    format_duration,
    format_utc_short,
    iso_to_epoch,
    slack_ts_to_float,
)

logger = logging.getLogger(__name__)

EVENT_PREFIXES = {
    TimelineEventType.START: "🚨",
    TimelineEventType.LOG: "🕐",
    TimelineEventType.UPDATE: "📢",
    TimelineEventType.IC: "🎯",
    TimelineEventType.RESOLVE: "✅",
}
PINNED_TEXT_LIMIT = 100


def start_event(incident: IncidentMetadata) -> Optional[TimelineEvent]:
    """Synthetic "incident started" event from the snapshot."""
    started = iso_to_epoch(incident.created_at)
    if started is None:
        return None

    user = incident.start_user_id or None
    text = f"Incident started by <@{user}>" if user else "Incident started"
    return TimelineEvent(
        timestamp=started, type=TimelineEventType.START, text=text, user=user
    )


def build_incident_timeline(
    incident: IncidentMetadata,
    messages: List[Dict[str, Any]],
    now: Optional[float] = None,
) -> IncidentTimeline:
    """
    Merge the start event with every event parsed from history.

    Args:
        incident: Reconstructed snapshot
        messages: Channel history, any order
        now: Current Unix time, used as the end of unresolved incidents

    Returns:
        IncidentTimeline sorted oldest first
    """
    events = []
    first = start_event(incident)
    if first is not None:
        events.append(first)
    events.extend(parse_timeline_events(messages))

    # The bot's own channel-creation message counts as one author
    participants = get_participants(messages)
    participant_count = max(0, len(participants) - 1)

    created = iso_to_epoch(incident.created_at)
    closed = iso_to_epoch(incident.closed_at)
    end = closed if closed is not None else (now if now is not None else time.time())
    duration = end - created if created is not None else 0.0

    return IncidentTimeline(
        events=sort_timeline_events(events),
        participant_count=participant_count,
        duration_seconds=duration,
        resolved=closed is not None,
    )


def _format_event_line(event: TimelineEvent) -> str:
    text = event.text
    if event.type == TimelineEventType.UPDATE:
        text = f"<@{event.user}>: {text}"
    prefix = EVENT_PREFIXES.get(event.type, "")
    return f"• {format_utc_short(event.timestamp)} {prefix} {text}"


def _format_pinned_lines(pinned: Dict[str, Any], channel_id: str) -> List[str]:
    ts = str(pinned.get("ts") or "")
    when = format_utc_short(slack_ts_to_float(ts))
    link = build_permalink(channel_id, ts)

    files = pinned.get("files") or []
    if files:
        return [
            f"• {when} - <{link}|📎 {file.get('name') or 'File'}>" for file in files
        ]

    text = pinned.get("text")
    if not text:
        return []
    if len(text) > PINNED_TEXT_LIMIT:
        text = text[:PINNED_TEXT_LIMIT] + "..."
    return [f"• {when} - <{link}|{text}>"]


def format_timeline_report(
    incident: IncidentMetadata,
    timeline: IncidentTimeline,
    pins: List[Dict[str, Any]],
    channel_id: str,
) -> str:
    """Render the mrkdwn timeline report shown to users."""
    lines = [
        "*Incident Timeline Report*",
        "",
        f"*Channel:* {incident.name}",
        f"*Issue:* {incident.issue}",
    ]

    duration_line = f"*Duration:* {format_duration(timeline.duration_seconds)}"
    if timeline.resolved:
        duration_line += " (resolved)"
    lines.append(duration_line)

    if incident.incident_commander_id:
        lines.append(f"*Incident Commander:* <@{incident.incident_commander_id}>")
    lines.append(f"*Participants:* {timeline.participant_count}")
    lines.extend(["", "---", ""])

    if timeline.events:
        lines.extend(["*📋 Timeline* (all times UTC)", ""])
        lines.extend(_format_event_line(event) for event in timeline.events)
    else:
        lines.extend(["*📋 Timeline*", "", "_No events logged yet._"])
    lines.append("")

    pinned_lines = []
    for item in pins:
        pinned = item.get("message")
        if not pinned or pinned.get("ts") == incident.summary_message_ts:
            continue
        pinned_lines.extend(_format_pinned_lines(pinned, channel_id))

    if pinned_lines:
        lines.extend(["*📌 Pinned Items* (all times UTC)", ""])
        lines.extend(pinned_lines)
        lines.append("")

    return "\n".join(lines)


@dataclass
class TimelineReport:
    """A timeline together with its rendered report."""

    incident: IncidentMetadata
    timeline: IncidentTimeline
    text: str


class TimelineService:
    """Builds timelines and reports for incident channels."""

    def __init__(
        self,
        client: Optional[SlackClient] = None,
        store: Optional[IncidentStore] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.client = client or SlackClient()
        self.store = store or IncidentStore(self.client, self.settings)

    async def _load(
        self, channel_id: str, now: Optional[float]
    ) -> Optional[Tuple[IncidentMetadata, IncidentTimeline]]:
        incident = await self.store.get_incident_metadata(channel_id)
        if incident is None:
            return None

        try:
            messages = await self.client.get_history(
                channel_id, limit=self.settings.history_limit
            )
        except Exception as e:
            logger.error(f"Failed to get incident history for {channel_id}: {e}")
            return None

        timeline = build_incident_timeline(incident, messages, now=now)
        logger.info(
            f"Timeline for {incident.name}: {len(timeline.events)} events, "
            f"{timeline.participant_count} participants"
        )
        return incident, timeline

    async def build_timeline(
        self, channel_id: str, now: Optional[float] = None
    ) -> Optional[IncidentTimeline]:
        """Timeline for an incident channel, or None if there is no incident."""
        loaded = await self._load(channel_id, now)
        return loaded[1] if loaded else None

    async def build_report(
        self, channel_id: str, now: Optional[float] = None
    ) -> Optional[TimelineReport]:
        """Timeline plus mrkdwn report, or None if there is no incident."""
        loaded = await self._load(channel_id, now)
        if loaded is None:
            return None

        incident, timeline = loaded
        try:
            pins = await self.client.list_pins(channel_id)
        except Exception as e:
            logger.error(f"Failed to list pins for {channel_id}: {e}")
            return None

        text = format_timeline_report(incident, timeline, pins, channel_id)
        return TimelineReport(incident=incident, timeline=timeline, text=text)
