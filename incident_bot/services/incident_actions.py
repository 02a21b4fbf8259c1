"""
Incident Actions

State-changing operations on an incident channel. Each one reconstructs the
current snapshot, applies a change, re-renders the pinned summary message and
overwrites it in place, then posts the timeline message the parsers read back.

Writes are plain overwrites by ts; a concurrent action can overwrite this one.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from incident_bot.config import Settings, get_settings
from incident_bot.integrations.slack.client import SlackClient
from incident_bot.messages.summary_message import summary_message
from incident_bot.messages.team_summary_message import team_summary_message
from incident_bot.models.incident import IncidentMetadata
from incident_bot.services.incident_store import IncidentStore
from incident_bot.utils.helpers import format_duration, iso_to_epoch, to_iso

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """Outcome of an incident action, shown to the invoking user."""

    success: bool
    message: str
    incident: Optional[IncidentMetadata] = None


class IncidentActions:
    """Read-modify-write operations against the live summary message."""

    def __init__(
        self,
        client: Optional[SlackClient] = None,
        store: Optional[IncidentStore] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.client = client or SlackClient()
        self.store = store or IncidentStore(self.client, self.settings)

    @property
    def team_channel_id(self) -> str:
        return self.settings.team_update_channel_id

    async def _overwrite_summary(
        self, channel_id: str, incident: IncidentMetadata, text: str
    ) -> None:
        if not incident.summary_message_ts:
            logger.warning(f"No summary message to update in {channel_id}")
            return
        await self.client.update_message(
            channel_id,
            incident.summary_message_ts,
            text=text,
            blocks=summary_message(incident, self.team_channel_id),
        )

    async def publish_incident(
        self, channel_id: str, incident: IncidentMetadata, test_mode: bool = False
    ) -> ActionResult:
        """
        Post and pin the summary message of a freshly created incident channel.

        Also announces the incident in the team update channel unless the
        incident is private or test_mode is set, and links the announcement
        from the summary message.
        """
        try:
            starting_text = f"{incident.name} Starting..."
            posted = await self.client.post_message(
                channel_id, text=starting_text,
                blocks=summary_message(incident, self.team_channel_id),
            )
            summary_ts = posted.get("ts")
            if not summary_ts:
                logger.error("Failed to get summary message timestamp")
                return ActionResult(False, "Failed to start incident. Please try again.")

            incident = incident.model_copy(update={"summary_message_ts": summary_ts})
            await self.client.add_pin(channel_id, summary_ts)

            if self.team_channel_id and not incident.is_private and not test_mode:
                announcement = await self.client.post_message(
                    self.team_channel_id,
                    text=f"🚨 {incident.name} - {incident.issue}",
                    blocks=team_summary_message(incident),
                )
                if announcement.get("ts"):
                    incident = incident.model_copy(
                        update={"team_message_ts": announcement["ts"]}
                    )
                    await self._overwrite_summary(channel_id, incident, starting_text)

            await self.client.post_message(
                channel_id,
                text=f"🚨 Incident Channel Created by <@{incident.start_user_id}>",
            )
            logger.info(f"Published incident {incident.name} in {channel_id}")
            return ActionResult(True, f"Created channel <#{channel_id}|{incident.name}>.", incident)

        except Exception as e:
            logger.error(f"Error publishing incident: {e}")
            return ActionResult(False, "Failed to start incident. Please try again.")

    async def assign_commander(
        self, channel_id: str, user_id: str, user_name: str = ""
    ) -> ActionResult:
        """Make user_id the Incident Commander, announcing a handoff if needed."""
        result = await self.store.require_incident_channel(channel_id)
        if not result.success:
            return ActionResult(False, result.error)

        incident = result.incident
        if user_id == incident.incident_commander_id:
            return ActionResult(
                True,
                "You're already the Incident Commander, but extra points for enthusiasm!",
                incident,
            )

        try:
            previous = incident.incident_commander_id
            updated = await self.store.update_incident_metadata(
                channel_id,
                {"incident_commander_id": user_id, "incident_commander_name": user_name},
            )
            await self._overwrite_summary(channel_id, updated, f"{updated.name} - Incident")

            if previous:
                text = f"🎯 Incident Commander handoff: <@{previous}> → <@{user_id}>"
            else:
                text = f"🎯 <@{user_id}> is now the Incident Commander!"
            await self.client.post_message(channel_id, text=text)
            return ActionResult(True, text, updated)

        except Exception as e:
            logger.error(f"Error assigning incident commander: {e}")
            return ActionResult(False, "Failed to check in as Incident Commander. Please try again.")

    async def log_event(
        self, channel_id: str, user_id: str, event_text: str, now: Optional[float] = None
    ) -> ActionResult:
        """Post a timeline entry in the current log grammar."""
        result = await self.store.require_incident_channel(channel_id)
        if not result.success:
            return ActionResult(False, result.error)

        event_text = (event_text or "").strip()
        if not event_text:
            return ActionResult(
                False, "Please provide an event description: `/incident log <your event>`"
            )

        now = time.time() if now is None else now
        timestamp = int(now)
        iso_now = to_iso(now)

        try:
            await self.client.post_message(
                channel_id,
                text=f"🕐 <!date^{timestamp}^{{time}}|{iso_now}> - <@{user_id}>: {event_text}",
                blocks=[
                    {
                        "type": "context",
                        "elements": [
                            {
                                "type": "mrkdwn",
                                "text": (
                                    f"🕐 <!date^{timestamp}^{{date_short_pretty}} at {{time}}|{iso_now}>"
                                    f" - <@{user_id}>: *{event_text}*"
                                ),
                            }
                        ],
                    }
                ],
            )
            return ActionResult(True, "Event logged.", result.incident)

        except Exception as e:
            logger.error(f"Error logging incident event: {e}")
            return ActionResult(False, "Failed to log event. Please try again.")

    async def post_update(
        self,
        channel_id: str,
        user_id: str,
        update_text: str,
        post_to_channel: bool = False,
        now: Optional[float] = None,
    ) -> ActionResult:
        """
        Share an update in the team announcement thread.

        With post_to_channel the thread reply is broadcast and the update is
        also posted in the incident channel.
        """
        result = await self.store.require_incident_channel(channel_id)
        if not result.success:
            return ActionResult(False, result.error)

        incident = result.incident
        if incident.is_private:
            return ActionResult(
                False, "This incident channel is private so no public updates can be shared."
            )
        if not update_text:
            return ActionResult(False, "No update provided.")

        now = time.time() if now is None else now
        team_update_sent = False

        try:
            if self.team_channel_id and incident.team_message_ts:
                await self.client.post_message(
                    self.team_channel_id,
                    text=(
                        f"📢 Update from <@{user_id}> at <!date^{int(now)}^{{time}}|now>:"
                        f"\n\n{update_text}"
                    ),
                    thread_ts=incident.team_message_ts,
                    reply_broadcast=post_to_channel,
                )
                team_update_sent = True

            if post_to_channel:
                await self.client.post_message(
                    channel_id, text=f"📢 Update from <@{user_id}>:\n\n{update_text}"
                )

        except Exception as e:
            logger.error(f"Error posting incident update: {e}")
            return ActionResult(False, "Failed to send update. Please try again.")

        if team_update_sent and post_to_channel:
            confirm = "Update sent to team channel (visible in main channel) and posted in incident channel."
        elif team_update_sent:
            confirm = "Update sent to team channel thread."
        elif post_to_channel:
            confirm = "Update posted in incident channel only (no team channel configured)."
        else:
            confirm = "No team channel configured."
        return ActionResult(True, confirm, incident)

    async def resolve_incident(
        self, channel_id: str, user_id: str, now: Optional[float] = None
    ) -> ActionResult:
        """Mark the incident resolved and announce how long it lasted."""
        result = await self.store.require_incident_channel(channel_id)
        if not result.success:
            return ActionResult(False, result.error)

        incident = result.incident
        if incident.closed_at:
            return ActionResult(False, "This incident is already resolved.", incident)

        now = time.time() if now is None else now

        try:
            updated = await self.store.update_incident_metadata(
                channel_id, {"closed_at": to_iso(now)}
            )
            await self._overwrite_summary(channel_id, updated, f"{updated.name} - RESOLVED")

            created = iso_to_epoch(incident.created_at) or now
            duration = format_duration(now - created)
            text = f"✅ Incident resolved by <@{user_id}> after {duration}"
            await self.client.post_message(channel_id, text=text)
            return ActionResult(True, text, updated)

        except Exception as e:
            logger.error(f"Error resolving incident: {e}")
            return ActionResult(False, "Failed to resolve incident. Please try again.")
