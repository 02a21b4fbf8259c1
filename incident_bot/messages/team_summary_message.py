from typing import Any, Dict, List

from incident_bot.models.incident import IncidentMetadata


def team_summary_message(incident: IncidentMetadata) -> List[Dict[str, Any]]:
    """Blocks for the announcement posted to the team update channel."""
    return [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": f"🚨 {incident.name}"},
        },
        {"type": "divider"},
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": f"*Issue:*\n {incident.issue}"},
        },
        {"type": "divider"},
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": f"*Incident Channel:* #{incident.name}"},
        },
    ]
