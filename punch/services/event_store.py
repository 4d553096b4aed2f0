"""
Event store: reads and appends punch events in the database.
All clocks stored in UTC. Database failures surface once as StoreUnavailable; nothing is retried.
"""
import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from punch.core.exceptions import ProjectNotFound, PunchStateError, StoreUnavailable
from punch.models.event import Event, EventType, PunchDirection
from punch.models.project import Project
from punch.models.user import User
from punch.schemas.event import PunchEvent
from punch.utils.datetime_utils import ensure_utc, now_utc

_log = logging.getLogger(__name__)

PUNCH_TYPES = (EventType.IN, EventType.OUT)


def _to_punch_event(row: Event) -> PunchEvent:
    # SQLite hands back naive datetimes; they were written as UTC.
    return PunchEvent(id=row.id, kind=row.event_type, clock=ensure_utc(row.clock), note=row.note)


def load_project(db: Session, project_id: Optional[int] = None) -> Project:
    """
    Load a project by id, or the first project of the first user.

    Raises:
        ProjectNotFound: If no such project exists (or nothing has been set up)
        StoreUnavailable: If the database cannot be read
    """
    try:
        if project_id is not None:
            project = db.query(Project).filter(Project.id == project_id).first()
        else:
            user = db.query(User).order_by(User.id).first()
            project = None
            if user is not None:
                project = (
                    db.query(Project)
                    .filter(Project.user_id == user.id)
                    .order_by(Project.id)
                    .first()
                )
    except SQLAlchemyError as e:
        _log.error("Unable to load project: %s", e)
        raise StoreUnavailable("Event store is unavailable") from e
    if project is None:
        raise ProjectNotFound("Project not found. Run `punch init` first.")
    return project


def fetch_events(
    db: Session,
    project_id: int,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    include_lead_in: bool = True,
) -> List[PunchEvent]:
    """
    Events of a project in [since, until), ascending by clock then id.

    Args:
        db: Database session
        project_id: Project to read
        since: Inclusive lower bound (UTC), None = from the beginning
        until: Exclusive upper bound (UTC), None = up to the latest event
        include_lead_in: When `since` cuts through a work session, also return the
            IN that started it so the session's OUT still has a partner

    Returns:
        List of PunchEvent

    Raises:
        StoreUnavailable: If the database cannot be read
    """
    since = ensure_utc(since)
    until = ensure_utc(until)
    try:
        query = db.query(Event).filter(Event.project_id == project_id)
        if since is not None:
            query = query.filter(Event.clock >= since)
        if until is not None:
            query = query.filter(Event.clock < until)
        rows = query.order_by(Event.clock, Event.id).all()

        lead_in = None
        if since is not None and include_lead_in:
            lead_in = (
                db.query(Event)
                .filter(
                    Event.project_id == project_id,
                    Event.event_type.in_(PUNCH_TYPES),
                    Event.clock < since,
                )
                .order_by(Event.clock.desc(), Event.id.desc())
                .first()
            )
    except SQLAlchemyError as e:
        _log.error("Unable to fetch events for project %s: %s", project_id, e)
        raise StoreUnavailable("Event store is unavailable") from e

    events = [_to_punch_event(row) for row in rows]
    if lead_in is not None and lead_in.event_type == EventType.IN:
        events.insert(0, _to_punch_event(lead_in))
    return events


def recent_events(db: Session, project_id: int, limit: int) -> List[PunchEvent]:
    """The `limit` most recent events of a project, most recent first."""
    try:
        rows = (
            db.query(Event)
            .filter(Event.project_id == project_id)
            .order_by(Event.clock.desc(), Event.id.desc())
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as e:
        _log.error("Unable to fetch recent events for project %s: %s", project_id, e)
        raise StoreUnavailable("Event store is unavailable") from e
    return [_to_punch_event(row) for row in rows]


def next_expected_direction(db: Session, project_id: int) -> PunchDirection:
    """
    Direction of the next punch, from the latest IN/OUT event.

    OUT after an IN; IN after an OUT or when nothing has been punched yet.
    """
    try:
        last = (
            db.query(Event)
            .filter(Event.project_id == project_id, Event.event_type.in_(PUNCH_TYPES))
            .order_by(Event.clock.desc(), Event.id.desc())
            .first()
        )
    except SQLAlchemyError as e:
        _log.error("Unable to read last punch for project %s: %s", project_id, e)
        raise StoreUnavailable("Event store is unavailable") from e
    if last is not None and last.event_type == EventType.IN:
        return PunchDirection.OUT
    return PunchDirection.IN


def record_event(
    db: Session,
    project_id: int,
    kind: EventType,
    now: Optional[datetime] = None,
    note: Optional[str] = None,
) -> Event:
    """
    Append an event to the log. Server time is used when `now` is not given.

    IN/OUT must match the next expected direction; notes are always accepted.

    Raises:
        PunchStateError: If the punch contradicts the last punch
        StoreUnavailable: If the database cannot be written
    """
    now = ensure_utc(now) or now_utc()
    if kind in PUNCH_TYPES:
        expected = next_expected_direction(db, project_id)
        if kind.value != expected.value:
            raise PunchStateError(
                f"You were already punched {'in' if kind == EventType.IN else 'out'}. "
                "Try refreshing."
            )

    event = Event(project_id=project_id, event_type=kind, clock=now, note=note)
    try:
        db.add(event)
        db.commit()
        db.refresh(event)
    except SQLAlchemyError as e:
        db.rollback()
        _log.error("Unable to record %s event for project %s: %s", kind.value, project_id, e)
        raise StoreUnavailable("Event store is unavailable") from e
    _log.info("Recorded %s event for project %s at %s", kind.value, project_id, now.isoformat())
    return event
