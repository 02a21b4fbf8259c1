"""
Incident API Routes

Read endpoints expose the reconstructed state; action endpoints run the same
read-modify-write operations as the slash commands.
"""

import logging
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from incident_bot.messages.summary_message import summary_message
from incident_bot.models.incident import IncidentMetadata, TimelineEvent
from incident_bot.services.incident_actions import ActionResult, IncidentActions
from incident_bot.services.incident_store import IncidentStore
from incident_bot.services.timeline import TimelineService

logger = logging.getLogger(__name__)

router = APIRouter()

# Lazy initialization to avoid import-time Slack client setup
_store = None
_timeline_service = None
_actions = None


def get_incident_store() -> IncidentStore:
    """Get IncidentStore instance with lazy initialization."""
    global _store
    if _store is None:
        _store = IncidentStore()
    return _store


def get_timeline_service() -> TimelineService:
    """Get TimelineService instance with lazy initialization."""
    global _timeline_service
    if _timeline_service is None:
        store = get_incident_store()
        _timeline_service = TimelineService(store.client, store, store.settings)
    return _timeline_service


def get_incident_actions() -> IncidentActions:
    """Get IncidentActions instance with lazy initialization."""
    global _actions
    if _actions is None:
        store = get_incident_store()
        _actions = IncidentActions(store.client, store, store.settings)
    return _actions


# Request/Response Models

class IncidentListItem(BaseModel):
    channel_id: str
    metadata: IncidentMetadata


class TimelineResponse(BaseModel):
    """Timeline of one incident."""

    channel_id: str
    events: List[TimelineEvent]
    participant_count: int
    duration_seconds: float
    resolved: bool
    report: str = Field(..., description="mrkdwn report as shown in Slack")


class CommanderRequest(BaseModel):
    user_id: str = Field(..., description="Slack user ID of the new Incident Commander")
    user_name: str = Field("", description="Display name of the new Incident Commander")


class LogEventRequest(BaseModel):
    user_id: str = Field(..., description="Slack user ID logging the event")
    text: str = Field(..., description="Event description")


class UpdateRequest(BaseModel):
    user_id: str = Field(..., description="Slack user ID sending the update")
    text: str = Field(..., description="Update text")
    post_to_channel: bool = Field(False, description="Also post in the incident channel")


class ResolveRequest(BaseModel):
    user_id: str = Field(..., description="Slack user ID resolving the incident")


class ActionResponse(BaseModel):
    status: str = Field(..., description="Response status: success or error")
    message: str
    incident: Optional[IncidentMetadata] = None


def _action_response(result: ActionResult) -> ActionResponse:
    if not result.success:
        raise HTTPException(
            status_code=400,
            detail={"status": "error", "message": result.message},
        )
    return ActionResponse(status="success", message=result.message, incident=result.incident)


async def _require_incident(channel_id: str) -> IncidentMetadata:
    incident = await get_incident_store().get_incident_metadata(channel_id)
    if incident is None:
        raise HTTPException(
            status_code=404,
            detail=f"Channel {channel_id} is not an incident channel",
        )
    return incident


@router.get("", response_model=List[IncidentListItem])
async def list_incidents():
    """List all incident channels with their reconstructed metadata."""
    return await get_incident_store().list_incidents()


@router.get("/{channel_id}", response_model=IncidentMetadata)
async def get_incident(channel_id: str):
    """Reconstruct the incident snapshot of a channel."""
    return await _require_incident(channel_id)


@router.get("/{channel_id}/summary-blocks")
async def get_summary_blocks(channel_id: str) -> Dict[str, Any]:
    """Render the summary message blocks for the current snapshot."""
    incident = await _require_incident(channel_id)
    return {"channel_id": channel_id, "blocks": summary_message(incident)}


@router.get("/{channel_id}/timeline", response_model=TimelineResponse)
async def get_timeline(channel_id: str):
    """Replay channel history into an ordered incident timeline."""
    report = await get_timeline_service().build_report(channel_id)
    if report is None:
        raise HTTPException(
            status_code=404,
            detail=f"No incident timeline available for channel {channel_id}",
        )

    timeline = report.timeline
    return TimelineResponse(
        channel_id=channel_id,
        events=timeline.events,
        participant_count=timeline.participant_count,
        duration_seconds=timeline.duration_seconds,
        resolved=timeline.resolved,
        report=report.text,
    )


@router.post("/{channel_id}/commander", response_model=ActionResponse)
async def assign_commander(channel_id: str, request: CommanderRequest):
    """Check in as Incident Commander."""
    result = await get_incident_actions().assign_commander(
        channel_id, request.user_id, request.user_name
    )
    return _action_response(result)


@router.post("/{channel_id}/log", response_model=ActionResponse)
async def log_event(channel_id: str, request: LogEventRequest):
    """Log a timeline event."""
    result = await get_incident_actions().log_event(
        channel_id, request.user_id, request.text
    )
    return _action_response(result)


@router.post("/{channel_id}/updates", response_model=ActionResponse)
async def post_update(channel_id: str, request: UpdateRequest):
    """Send an update to the team channel thread."""
    result = await get_incident_actions().post_update(
        channel_id, request.user_id, request.text, request.post_to_channel
    )
    return _action_response(result)


@router.post("/{channel_id}/resolve", response_model=ActionResponse)
async def resolve_incident(channel_id: str, request: ResolveRequest):
    """Mark the incident as resolved."""
    result = await get_incident_actions().resolve_incident(channel_id, request.user_id)
    return _action_response(result)
