# Slack integration module
from incident_bot.integrations.slack.client import SlackClient
from incident_bot.integrations.slack.models import SlackChannel
from incident_bot.integrations.slack.parser import (
    ParsedPermalink,
    build_permalink,
    parse_permalink,
    find_permalink_ts,
)

__all__ = [
    "SlackClient",
    "SlackChannel",
    "ParsedPermalink",
    "build_permalink",
    "parse_permalink",
    "find_permalink_ts",
]
