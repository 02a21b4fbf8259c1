"""
Tests for Slack permalink parsing and building.
"""

import pytest
from incident_bot.integrations.slack.parser import (
    ParsedPermalink,
    build_permalink,
    find_permalink_ts,
    parse_permalink,
)


class TestParsePermalink:
    """Test suite for Slack permalink parsing."""

    def test_valid_permalink(self):
        """Test parsing a workspace permalink."""
        permalink = "https://myworkspace.slack.com/archives/C123ABC456/p1234567890123456"
        result = parse_permalink(permalink)

        assert isinstance(result, ParsedPermalink)
        assert result.workspace == "myworkspace"
        assert result.channel_id == "C123ABC456"
        assert result.message_ts == "1234567890.123456"

    def test_permalink_without_workspace(self):
        """Test parsing the workspace-less link used in summary messages."""
        result = parse_permalink("https://slack.com/archives/C123TEAM/p1735732900123456")

        assert result.workspace is None
        assert result.channel_id == "C123TEAM"
        assert result.message_ts == "1735732900.123456"

    def test_invalid_permalink_format(self):
        """Test that invalid formats raise ValueError."""
        invalid_urls = [
            "https://myworkspace.slack.com/messages/C123",
            "https://example.com/archives/C123/p123",
            "not-a-url",
        ]
        for url in invalid_urls:
            with pytest.raises(ValueError):
                parse_permalink(url)


class TestBuildPermalink:
    """Test suite for building permalinks."""

    def test_build(self):
        assert (
            build_permalink("C123", "1234567890.123456", base_url="https://slack.com")
            == "https://slack.com/archives/C123/p1234567890123456"
        )

    def test_build_strips_trailing_slash(self):
        assert (
            build_permalink("C1", "1.5", base_url="https://acme.slack.com/")
            == "https://acme.slack.com/archives/C1/p15"
        )

    def test_build_then_parse(self):
        link = build_permalink("C123TEAM", "1735732900.123456", base_url="https://slack.com")
        assert parse_permalink(link).message_ts == "1735732900.123456"


class TestFindPermalinkTs:
    """Test suite for finding a ts inside mrkdwn text."""

    def test_link_inside_mrkdwn(self):
        text = "<https://slack.com/archives/C123TEAM/p1735732900123456|View team announcement>"
        assert find_permalink_ts(text) == "1735732900.123456"

    def test_no_link(self):
        assert find_permalink_ts("Use `/incident help` to get command options.") is None
        assert find_permalink_ts("") is None

    def test_bare_workspace_link(self):
        text = "See https://acme.slack.com/archives/C1/p1735732900000002 for details"
        assert find_permalink_ts(text) == "1735732900.000002"

    def test_skips_links_that_are_not_permalinks(self):
        text = (
            "<https://status.example.com/incidents/42|Status page> "
            "<https://slack.com/archives/C123TEAM/p1735732900123456|View team announcement>"
        )
        assert find_permalink_ts(text) == "1735732900.123456"
