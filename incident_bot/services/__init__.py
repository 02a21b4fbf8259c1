# Incident reconstruction and actions
from incident_bot.services.incident_store import (
    IncidentStore,
    IncidentNotFoundError,
    fold_incident_metadata,
)
from incident_bot.services.timeline import (
    TimelineService,
    build_incident_timeline,
    format_timeline_report,
)
from incident_bot.services.incident_actions import IncidentActions, ActionResult

__all__ = [
    "IncidentStore",
    "IncidentNotFoundError",
    "fold_incident_metadata",
    "TimelineService",
    "build_incident_timeline",
    "format_timeline_report",
    "IncidentActions",
    "ActionResult",
]
