"""
Incident Store

There is no database: an incident is rebuilt on every read from
1. channel facts (name, visibility, creation time),
2. the pinned summary message (issue, starter, IC, team announcement link).

fold_incident_metadata is the pure part of the reconstruction; IncidentStore
does the fetching around it.

Pipeline:
conversations.info -> pins.list -> history at each pin ts -> header check
    -> parse summary -> merge with channel facts
"""

import logging
from typing import Any, Dict, List, Optional

from incident_bot.config import Settings, get_settings
from incident_bot.integrations.slack.client import SlackClient
from incident_bot.integrations.slack.models import SlackChannel
from incident_bot.models.incident import (
    IncidentMetadata,
    ParsedIncidentData,
    RequireIncidentResult,
)
from incident_bot.parsers.summary_message_parser import (
    has_summary_message_header,
    parse_summary_message,
)
from incident_bot.utils.helpers import to_iso

logger = logging.getLogger(__name__)

NOT_AN_INCIDENT_ERROR = "This command must be used in an incident channel."


class IncidentNotFoundError(LookupError):
    """Raised when an update targets a channel without an incident."""


def fold_incident_metadata(
    channel: Dict[str, Any],
    summary_message: Optional[Dict[str, Any]],
    prefix: str,
) -> Optional[IncidentMetadata]:
    """
    Merge channel facts with the decoded summary message.

    Args:
        channel: conversations.info channel dict
        summary_message: The selected pinned summary message, or None
        prefix: Incident channel name prefix

    Returns:
        IncidentMetadata, or None if the channel is not an incident channel
    """
    channel_facts = SlackChannel.model_validate(channel or {})
    if not channel_facts.has_prefix(prefix):
        return None

    parsed = (
        parse_summary_message(summary_message)
        if summary_message
        else ParsedIncidentData()
    )
    summary_ts = summary_message.get("ts") if summary_message else None

    return IncidentMetadata(
        name=channel_facts.name,
        issue=parsed.issue,
        start_user_id=parsed.start_user_id,
        start_user_name="",
        incident_commander_id=parsed.incident_commander_id,
        incident_commander_name="",
        is_private=channel_facts.is_private,
        created_at=to_iso(channel_facts.created) if channel_facts.created else "",
        closed_at=None,
        summary_message_ts=str(summary_ts) if summary_ts else None,
        team_message_ts=parsed.team_message_ts,
    )


class IncidentStore:
    """Reads incident snapshots out of Slack channels."""

    def __init__(
        self,
        client: Optional[SlackClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.client = client or SlackClient()

    @property
    def prefix(self) -> str:
        return self.settings.incident_channel_prefix

    async def find_summary_message(
        self, channel_id: str
    ) -> Optional[Dict[str, Any]]:
        """
        Scan pinned items in listing order for the summary message.

        Pin records only reference a message, so each one is loaded from
        history before the header check. The first match wins.
        """
        pins = await self.client.list_pins(channel_id)

        for item in pins:
            pinned = item.get("message") or {}
            ts = pinned.get("ts")
            if not ts:
                continue

            message = await self.client.get_history_at(channel_id, ts)
            if message and has_summary_message_header(message):
                logger.debug(f"Summary message for {channel_id} is {ts}")
                return message

        logger.info(f"No summary message among {len(pins)} pins in {channel_id}")
        return None

    async def get_incident_metadata(
        self, channel_id: str
    ) -> Optional[IncidentMetadata]:
        """
        Reconstruct the incident snapshot for a channel.

        Returns:
            IncidentMetadata, or None if the channel is not an incident
            channel or any lookup failed
        """
        try:
            channel = await self.client.get_channel_info(channel_id)
            name = channel.get("name") or ""
            if not name.startswith(self.prefix):
                logger.debug(f"Channel {channel_id} ({name}) is not an incident channel")
                return None

            summary = await self.find_summary_message(channel_id)
            return fold_incident_metadata(channel, summary, self.prefix)

        except Exception as e:
            logger.error(f"Failed to get incident metadata for {channel_id}: {e}")
            return None

    async def update_incident_metadata(
        self, channel_id: str, updates: Dict[str, Any]
    ) -> IncidentMetadata:
        """
        Reconstruct and shallow-merge updates over the snapshot.

        Writing the result back (summary message, team announcement) is left
        to the caller.

        Raises:
            IncidentNotFoundError: If the channel has no incident
        """
        current = await self.get_incident_metadata(channel_id)
        if current is None:
            raise IncidentNotFoundError(f"No incident found in channel {channel_id}")

        return current.model_copy(update=updates)

    async def require_incident_channel(self, channel_id: str) -> RequireIncidentResult:
        """Guard for commands that only make sense inside an incident channel."""
        incident = await self.get_incident_metadata(channel_id)
        if incident is None:
            return RequireIncidentResult.fail(NOT_AN_INCIDENT_ERROR)
        return RequireIncidentResult.ok(incident)

    async def list_incidents(self) -> List[Dict[str, Any]]:
        """
        List every incident channel with its reconstructed snapshot.

        Returns:
            List of {"channel_id": ..., "metadata": IncidentMetadata}
        """
        try:
            channels = await self.client.list_channels()
        except Exception as e:
            logger.error(f"Failed to list incidents: {e}")
            return []

        incidents = []
        for channel in channels:
            channel_id = channel.get("id")
            name = channel.get("name") or ""
            if not channel_id or not name.startswith(self.prefix):
                continue

            metadata = await self.get_incident_metadata(channel_id)
            if metadata:
                incidents.append({"channel_id": channel_id, "metadata": metadata})

        logger.info(f"Found {len(incidents)} incident channels")
        return incidents
