# Shared data models
from incident_bot.models.incident import (
    IncidentMetadata,
    ParsedIncidentData,
    TimelineEvent,
    TimelineEventType,
    RequireIncidentResult,
    IncidentTimeline,
)

__all__ = [
    "IncidentMetadata",
    "ParsedIncidentData",
    "TimelineEvent",
    "TimelineEventType",
    "RequireIncidentResult",
    "IncidentTimeline",
]
