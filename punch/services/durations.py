"""
Duration calculation for a single work session.
"""
from datetime import datetime, timedelta
from typing import Optional

from punch.core.exceptions import MalformedSessionError
from punch.schemas.report import SessionState, WorkSession, WorkTime


def session_end(session: WorkSession, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    End instant of a session: its OUT clock, or `now` for an open session.

    Returns None for an open session when `now` is not given, and always for an
    abandoned session.
    """
    if session.end is not None:
        return session.end.clock
    if session.state == SessionState.OPEN:
        return now
    return None


def session_work_time(
    session: WorkSession,
    overhead: timedelta,
    now: Optional[datetime] = None,
) -> WorkTime:
    """
    Gross and net time of one session.

    Overhead is deducted once per session; a day with three sessions pays it three times.

    Args:
        session: A closed session, or an open one measured up to `now`
        overhead: Ramp-up time deducted from the gross time
        now: Reference instant for open sessions

    Returns:
        WorkTime for the session

    Raises:
        ValueError: If the session has no end to measure against
        MalformedSessionError: If the end precedes the start (clock skew)
    """
    end = session_end(session, now)
    if end is None:
        raise ValueError(f"Session starting {session.start.clock.isoformat()} has no end to measure against")
    gross = end - session.start.clock
    if gross < timedelta(0):
        raise MalformedSessionError(
            f"Session starting {session.start.clock.isoformat()} ends earlier, at {end.isoformat()}"
        )
    return WorkTime.from_gross(gross, overhead)
