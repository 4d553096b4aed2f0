"""
Session pairing: fold the ordered event log into work sessions.

IN opens a session, OUT closes it, NOTE is ignored. A second IN while a session
is open abandons the open one; an OUT with nothing open is an orphan. Both are
reported as anomalies and produce no countable session.
"""
import logging
from typing import Iterable, List, NamedTuple, Optional

from punch.models.event import EventType, PunchDirection
from punch.schemas.event import PunchEvent
from punch.schemas.report import Anomaly, AnomalyKind, SessionState, WorkSession

_log = logging.getLogger(__name__)


class PairingResult(NamedTuple):
    sessions: List[WorkSession]
    anomalies: List[Anomaly]
    next_direction: PunchDirection


def _orphan_out(event: PunchEvent) -> Anomaly:
    return Anomaly(
        kind=AnomalyKind.ORPHAN_OUT,
        event_id=event.id,
        at=event.clock,
        message=f"Punch-out at {event.clock.isoformat()} has no matching punch-in",
    )


def _double_in(first: PunchEvent, second: PunchEvent) -> Anomaly:
    return Anomaly(
        kind=AnomalyKind.DOUBLE_IN,
        event_id=first.id,
        at=first.clock,
        message=(
            f"Punch-in at {first.clock.isoformat()} was never punched out "
            f"before the next punch-in at {second.clock.isoformat()}"
        ),
    )


def pair_events(events: Iterable[PunchEvent]) -> PairingResult:
    """
    Pair IN/OUT events into work sessions.

    Args:
        events: Events for one project, ascending by clock (ties by id)

    Returns:
        PairingResult with sessions in log order (a trailing session may be OPEN),
        anomalies in log order, and the next expected punch direction
    """
    sessions: List[WorkSession] = []
    anomalies: List[Anomaly] = []
    open_in: Optional[PunchEvent] = None

    for event in events:
        if event.kind == EventType.IN:
            if open_in is not None:
                anomaly = _double_in(open_in, event)
                _log.warning("Unexpected event: %s", anomaly.message)
                anomalies.append(anomaly)
                sessions.append(WorkSession(start=open_in, state=SessionState.ABANDONED))
            open_in = event
        elif event.kind == EventType.OUT:
            if open_in is None:
                anomaly = _orphan_out(event)
                _log.warning("Unexpected event: %s", anomaly.message)
                anomalies.append(anomaly)
                continue
            sessions.append(WorkSession(start=open_in, end=event, state=SessionState.CLOSED))
            open_in = None

    if open_in is not None:
        sessions.append(WorkSession(start=open_in, state=SessionState.OPEN))
        next_direction = PunchDirection.OUT
    else:
        next_direction = PunchDirection.IN

    return PairingResult(sessions=sessions, anomalies=anomalies, next_direction=next_direction)
