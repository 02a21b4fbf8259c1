"""
Shared fixtures: settings, a mocked Slack client and incident channel data.
"""

from unittest.mock import AsyncMock

import pytest

from incident_bot.config import Settings
from incident_bot.integrations.slack.client import SlackClient
from incident_bot.messages.summary_message import summary_message
from incident_bot.models.incident import IncidentMetadata

CHANNEL_ID = "C123INCIDENT"
TEAM_CHANNEL_ID = "C123TEAM"
CREATED = 1735732800  # 2025-01-01 12:00:00 UTC
SUMMARY_TS = "1735732801.000100"


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        slack_bot_token="xoxb-test",
        team_update_channel_id=TEAM_CHANNEL_ID,
        incident_channel_prefix="incident_",
        history_limit=1000,
    )


@pytest.fixture
def incident():
    return IncidentMetadata(
        name="incident_furious_chicken",
        issue="Database connection pool exhausted",
        start_user_id="U123START",
        start_user_name="starter",
        incident_commander_id="U456IC",
        incident_commander_name="commander",
        is_private=False,
        created_at="2025-01-01T12:00:00.000Z",
        team_message_ts="1735732900.123456",
    )


@pytest.fixture
def summary(incident):
    """Summary message as it would come back from conversations.history."""
    return {
        "ts": SUMMARY_TS,
        "text": f"{incident.name} Starting...",
        "blocks": summary_message(incident, TEAM_CHANNEL_ID),
    }


@pytest.fixture
def channel_info():
    return {
        "id": CHANNEL_ID,
        "name": "incident_furious_chicken",
        "is_private": False,
        "created": CREATED,
    }


@pytest.fixture
def slack_client(channel_info, summary):
    """Slack client whose channel has the summary message as its only pin."""
    client = AsyncMock(spec=SlackClient)
    client.get_channel_info.return_value = channel_info
    client.list_pins.return_value = [{"message": {"ts": summary["ts"]}}]
    client.get_history_at.return_value = summary
    client.get_history.return_value = []
    client.list_channels.return_value = []
    client.post_message.return_value = {"ok": True, "ts": "1735733000.000200"}
    client.update_message.return_value = {"ok": True}
    client.add_pin.return_value = {"ok": True}
    return client
