"""
Punch endpoints: punch in/out, free-standing notes, recent events.
Server time is always used for the event clock, never client time.
"""
import logging
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from punch.core.config import settings
from punch.core.deps import get_db, get_current_project
from punch.models.event import EventType
from punch.models.project import Project
from punch.schemas.event import EventOut, NoteRequest, PunchEvent, PunchRequest
from punch.services import event_store

router = APIRouter()
_log = logging.getLogger(__name__)


@router.post("/punch", response_model=EventOut, status_code=201)
async def punch_endpoint(
    body: PunchRequest,
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """
    Punch in or out for the current project.
    If the direction contradicts the last punch (already in / already out) => 409.
    """
    event = event_store.record_event(
        db,
        project.id,
        body.direction.event_type,
        note=body.note,
    )
    return EventOut.model_validate(event)


@router.post("/notes", response_model=EventOut, status_code=201)
async def note_endpoint(
    body: NoteRequest,
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Record a timestamped note. Notes never open or close a work session."""
    event = event_store.record_event(db, project.id, EventType.NOTE, note=body.note)
    return EventOut.model_validate(event)


@router.get("/events", response_model=List[PunchEvent])
async def list_events(
    limit: int = Query(settings.RECENT_EVENTS, ge=1, le=500, description="Number of events"),
    db: Session = Depends(get_db),
    project: Project = Depends(get_current_project),
):
    """Most recent events of the current project, most recent first."""
    return event_store.recent_events(db, project.id, limit)
