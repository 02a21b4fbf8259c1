"""
Incident Summary Message

Renders the pinned summary message. The section texts form a small grammar
that parsers.summary_message_parser reads back, so labels here and there must
stay in sync.
"""

from typing import Any, Dict, List, Optional

from incident_bot.config import get_settings
from incident_bot.integrations.slack.parser import build_permalink
from incident_bot.models.incident import IncidentMetadata
from incident_bot.utils.helpers import iso_to_epoch

ISSUE_LABEL = "*Issue:*"
IC_LABEL = "*Incident Commander:*"
IC_NONE_ASSIGNED = "_None assigned_"
STARTED_BY_MARKER = "Started by"
FOOTER_TEXT = "Use `/incident help` to get command options."
TEAM_LINK_LABEL = "View team announcement"


def _section(text: str) -> Dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _context(text: str) -> Dict[str, Any]:
    return {"type": "context", "elements": [{"type": "mrkdwn", "text": text}]}


def summary_message(
    incident: IncidentMetadata, team_channel_id: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    Build the summary message blocks for an incident.

    Args:
        incident: Snapshot to render
        team_channel_id: Channel holding the team announcement. Defaults to
            the configured team update channel; the announcement link is only
            rendered when both this and incident.team_message_ts are set.

    Returns:
        Ordered list of Slack blocks
    """
    if team_channel_id is None:
        team_channel_id = get_settings().team_update_channel_id

    commander = (
        f"<@{incident.incident_commander_id}>"
        if incident.incident_commander_id
        else IC_NONE_ASSIGNED
    )
    started_epoch = int(iso_to_epoch(incident.created_at) or 0)

    blocks = [
        {"type": "header", "text": {"type": "plain_text", "text": incident.name}},
        {"type": "divider"},
        _section(f"{ISSUE_LABEL}\n {incident.issue}"),
        _section(f"{IC_LABEL} {commander}"),
        _section(
            f"{STARTED_BY_MARKER} *<@{incident.start_user_id}>* "
            f"<!date^{started_epoch}^{{date_short_pretty}} at {{time}}|{incident.created_at}>"
        ),
        {"type": "divider"},
        _context(FOOTER_TEXT),
    ]

    # The link is the only place team_message_ts survives between requests
    if incident.team_message_ts and team_channel_id:
        link = build_permalink(team_channel_id, incident.team_message_ts)
        blocks.append(_context(f"<{link}|{TEAM_LINK_LABEL}>"))

    return blocks
