"""
Incident Models

Incident state is never stored anywhere but the incident channel itself.
These models describe what gets reconstructed from channel facts, the pinned
summary message and the channel history.
"""

from pydantic import BaseModel, ConfigDict, Field
from enum import Enum
from typing import List, Optional


class IncidentMetadata(BaseModel):
    """Reconstructed snapshot of an incident channel."""

    name: str  # Channel name, always carries the incident prefix
    issue: str = ""
    start_user_id: str = ""
    start_user_name: str = ""
    incident_commander_id: Optional[str] = None
    incident_commander_name: Optional[str] = None
    is_private: bool = False
    created_at: str = ""  # ISO-8601, from channel creation time
    closed_at: Optional[str] = None
    summary_message_ts: Optional[str] = None  # Pinned summary message to overwrite
    team_message_ts: Optional[str] = None  # Team announcement, used for threading


class ParsedIncidentData(BaseModel):
    """Fields recoverable from the text of a summary message."""

    issue: str = ""
    start_user_id: str = ""
    incident_commander_id: str = ""
    team_message_ts: Optional[str] = None


class TimelineEventType(str, Enum):
    """Kinds of events found in an incident channel."""

    START = "start"
    LOG = "log"
    UPDATE = "update"
    IC = "ic"
    RESOLVE = "resolve"


class TimelineEvent(BaseModel):
    """A single classified event parsed from a channel message."""

    model_config = ConfigDict(frozen=True)

    timestamp: float  # Seconds since epoch
    type: TimelineEventType
    text: str
    user: Optional[str] = None


class RequireIncidentResult(BaseModel):
    """Guard result for operations that need an incident channel."""

    success: bool
    incident: Optional[IncidentMetadata] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, incident: IncidentMetadata) -> "RequireIncidentResult":
        return cls(success=True, incident=incident)

    @classmethod
    def fail(cls, error: str) -> "RequireIncidentResult":
        return cls(success=False, error=error)


class IncidentTimeline(BaseModel):
    """Ordered timeline plus summary statistics for one incident."""

    events: List[TimelineEvent] = Field(default_factory=list)
    participant_count: int = 0
    duration_seconds: float = 0.0
    resolved: bool = False
