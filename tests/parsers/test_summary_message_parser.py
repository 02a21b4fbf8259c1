"""
Tests for the summary message: rendering and parsing it back.
"""

import pytest

from incident_bot.messages.summary_message import summary_message
from incident_bot.messages.team_summary_message import team_summary_message
from incident_bot.models.incident import IncidentMetadata, ParsedIncidentData
from incident_bot.parsers.summary_message_parser import (
    find_summary_message,
    has_summary_message_header,
    parse_summary_message,
)


def section(text):
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


class TestHasSummaryMessageHeader:
    """Test suite for the summary message predicate."""

    def test_with_header_block(self):
        message = {"ts": "123.456", "blocks": [{"type": "header"}, {"type": "section"}]}
        assert has_summary_message_header(message) is True

    def test_without_header_block(self):
        message = {"ts": "123.456", "blocks": [{"type": "section"}, {"type": "divider"}]}
        assert has_summary_message_header(message) is False

    def test_no_blocks(self):
        assert has_summary_message_header({"ts": "123.456"}) is False
        assert has_summary_message_header({"ts": "123.456", "blocks": []}) is False


class TestParseSummaryMessage:
    """Test suite for decoding summary messages."""

    def test_extracts_all_fields(self):
        """Test every field is read from a complete summary message."""
        message = {
            "ts": "1234567890.123456",
            "blocks": [
                {"type": "header", "text": {"type": "plain_text", "text": "incident_test"}},
                section("*Issue:*\n Database connection timeout"),
                section("*Incident Commander:* <@U123IC>"),
                section("Started by *<@U456START>* <!date^1234567890^{date_short_pretty} at {time}|...>"),
                {
                    "type": "context",
                    "elements": [
                        {
                            "type": "mrkdwn",
                            "text": "<https://slack.com/archives/C123TEAM/p1735732900123456|View team announcement>",
                        }
                    ],
                },
            ],
        }

        assert parse_summary_message(message) == ParsedIncidentData(
            issue="Database connection timeout",
            start_user_id="U456START",
            incident_commander_id="U123IC",
            team_message_ts="1735732900.123456",
        )

    def test_none_assigned_commander(self):
        """Test the placeholder decodes to an empty commander."""
        message = {
            "ts": "1234567890.123456",
            "blocks": [
                section("*Issue:*\n Test issue"),
                section("*Incident Commander:* _None assigned_"),
                section("Started by *<@U789>* <!date^1234567890^{date_short_pretty} at {time}|...>"),
            ],
        }
        result = parse_summary_message(message)

        assert result.incident_commander_id == ""
        assert result.start_user_id == "U789"

    def test_no_team_link(self):
        message = {"ts": "1.0", "blocks": [section("*Issue:*\n Test issue")]}
        assert parse_summary_message(message).team_message_ts is None

    def test_no_blocks(self):
        assert parse_summary_message({"ts": "1.0"}) == ParsedIncidentData(
            issue="", start_user_id="", incident_commander_id=""
        )

    def test_malformed_blocks(self):
        """Test broken blocks are skipped, not fatal."""
        message = {
            "ts": "1.0",
            "blocks": [
                {"type": "section"},
                {"type": "section", "text": "not a dict"},
                {"type": "context", "elements": "not a list"},
                None,
                section("*Issue:*\n Still works"),
            ],
        }
        assert parse_summary_message(message).issue == "Still works"

    def test_block_order_does_not_matter(self):
        message = {
            "blocks": [
                section("Started by *<@U1>* <!date^1^{time}|x>"),
                section("*Incident Commander:* <@U2>"),
                section("*Issue:*\n Reordered"),
            ]
        }
        result = parse_summary_message(message)

        assert (result.issue, result.start_user_id, result.incident_commander_id) == (
            "Reordered",
            "U1",
            "U2",
        )

    def test_started_by_without_mention(self):
        message = {"blocks": [section("Started by someone")]}
        assert parse_summary_message(message).start_user_id == ""

    def test_archive_link_in_non_mrkdwn_element_is_ignored(self):
        message = {
            "blocks": [
                {
                    "type": "context",
                    "elements": [{"type": "plain_text", "text": "https://slack.com/archives/C1/p1735732900123456"}],
                }
            ]
        }
        assert parse_summary_message(message).team_message_ts is None


class TestFindSummaryMessage:
    """Test suite for picking the summary message out of pinned messages."""

    def test_first_message_with_header(self):
        messages = [
            {"ts": "123.456", "blocks": [{"type": "section"}]},
            {"ts": "123.789", "blocks": [{"type": "header"}, {"type": "section"}]},
            {"ts": "123.999", "blocks": [{"type": "header"}, {"type": "section"}]},
        ]
        assert find_summary_message(messages)["ts"] == "123.789"

    def test_none_found(self):
        messages = [
            {"ts": "123.456", "blocks": [{"type": "section"}]},
            {"ts": "123.789", "blocks": [{"type": "divider"}]},
        ]
        assert find_summary_message(messages) is None

    def test_empty_list(self):
        assert find_summary_message([]) is None


class TestSummaryMessage:
    """Test suite for rendering summary messages."""

    def test_block_layout(self, incident):
        blocks = summary_message(incident, "C123TEAM")

        assert [b["type"] for b in blocks] == [
            "header",
            "divider",
            "section",
            "section",
            "section",
            "divider",
            "context",
            "context",
        ]
        assert blocks[0]["text"]["text"] == "incident_furious_chicken"
        assert blocks[2]["text"]["text"] == "*Issue:*\n Database connection pool exhausted"
        assert blocks[3]["text"]["text"] == "*Incident Commander:* <@U456IC>"
        assert blocks[4]["text"]["text"] == (
            "Started by *<@U123START>* "
            "<!date^1735732800^{date_short_pretty} at {time}|2025-01-01T12:00:00.000Z>"
        )
        assert blocks[7]["elements"][0]["text"] == (
            "<https://slack.com/archives/C123TEAM/p1735732900123456|View team announcement>"
        )

    def test_none_assigned_placeholder(self, incident):
        incident = incident.model_copy(update={"incident_commander_id": None})
        blocks = summary_message(incident, "C123TEAM")

        assert blocks[3]["text"]["text"] == "*Incident Commander:* _None assigned_"
        assert parse_summary_message({"blocks": blocks}).incident_commander_id == ""

    @pytest.mark.parametrize("team_channel", ["", None])
    def test_no_team_link_without_team_channel(self, incident, team_channel, monkeypatch):
        monkeypatch.setenv("TEAM_UPDATE_CHANNEL_ID", "")
        from incident_bot.config import get_settings

        get_settings.cache_clear()
        try:
            blocks = summary_message(incident, team_channel)
        finally:
            get_settings.cache_clear()

        assert len(blocks) == 7
        assert parse_summary_message({"blocks": blocks}).team_message_ts is None

    def test_no_team_link_without_team_message(self, incident):
        incident = incident.model_copy(update={"team_message_ts": None})
        assert len(summary_message(incident, "C123TEAM")) == 7

    def test_round_trip(self, incident):
        """Test decoding a rendered summary gives back the encoded fields."""
        parsed = parse_summary_message({"blocks": summary_message(incident, "C123TEAM")})

        assert parsed.issue == incident.issue
        assert parsed.start_user_id == incident.start_user_id
        assert parsed.incident_commander_id == incident.incident_commander_id
        assert parsed.team_message_ts == incident.team_message_ts

    def test_reencoding_is_stable(self, incident):
        """Test re-rendering a decoded snapshot reproduces the section texts."""
        blocks = summary_message(incident, "C123TEAM")
        parsed = parse_summary_message({"blocks": blocks})
        rebuilt = IncidentMetadata(
            name=incident.name,
            created_at=incident.created_at,
            issue=parsed.issue,
            start_user_id=parsed.start_user_id,
            incident_commander_id=parsed.incident_commander_id,
            team_message_ts=parsed.team_message_ts,
        )

        assert summary_message(rebuilt, "C123TEAM") == blocks

    def test_multiline_issue_round_trip(self, incident):
        incident = incident.model_copy(update={"issue": "Checkout fails\nfor EU customers"})
        parsed = parse_summary_message({"blocks": summary_message(incident, "C123TEAM")})
        assert parsed.issue == "Checkout fails\nfor EU customers"


class TestTeamSummaryMessage:
    def test_announcement_blocks(self, incident):
        blocks = team_summary_message(incident)

        assert blocks[0]["text"]["text"] == "🚨 incident_furious_chicken"
        assert blocks[2]["text"]["text"] == "*Issue:*\n Database connection pool exhausted"
        assert blocks[4]["text"]["text"] == "*Incident Channel:* #incident_furious_chicken"
