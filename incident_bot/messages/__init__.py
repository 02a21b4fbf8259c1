# Outgoing message builders
from incident_bot.messages.summary_message import summary_message
from incident_bot.messages.team_summary_message import team_summary_message

__all__ = ["summary_message", "team_summary_message"]
