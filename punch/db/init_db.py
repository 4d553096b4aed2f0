"""
Database initialization: the admin user and first project, and optional demo data.
"""
import logging
import random
from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from punch.constants import DEFAULT_OVERHEAD_MINUTES, DEFAULT_PROJECT_NAME
from punch.core.exceptions import AlreadySetUp, ConfigurationError, StoreUnavailable
from punch.db.base import Base
from punch.models.event import Event, EventType
from punch.models.project import Project
from punch.models.user import User
from punch.utils.datetime_utils import UTC

logger = logging.getLogger(__name__)

# Demo data shape
DEMO_DAYS_IN_PAST = 38
DEMO_MIN_SESSION = timedelta(hours=1)
DEMO_MAX_SESSION = timedelta(hours=6)
DEMO_MIN_TIME_PER_DAY = timedelta(hours=7)
DEMO_MAX_FUZZ = timedelta(hours=1)
DEMO_EARLIEST_START = time(7, 0)
DEMO_WEEKEND_WORK_PERCENT = 30
DEMO_DEFAULT_SEED = 1868


def create_tables(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


def init_db(
    db: Session,
    username: str,
    project_name: str = DEFAULT_PROJECT_NAME,
    overhead_minutes: int = DEFAULT_OVERHEAD_MINUTES,
    time_zone: Optional[str] = None,
) -> Project:
    """
    Create the admin user and its first project

    Args:
        db: Database session
        username: Name of the admin user
        project_name: Name of the first project
        overhead_minutes: Per-session overhead for the project
        time_zone: IANA zone for the project's reports (None = settings.TIME_ZONE)

    Returns:
        The new Project

    Raises:
        AlreadySetUp: If an admin user already exists
        ConfigurationError: If the overhead is negative or the zone unknown
    """
    if overhead_minutes < 0:
        raise ConfigurationError(f"Overhead must not be negative (got {overhead_minutes})")
    if time_zone is not None:
        try:
            ZoneInfo(time_zone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ConfigurationError(f"Unknown time zone '{time_zone}'")

    try:
        if db.query(User).filter(User.admin == True).first() is not None:  # noqa: E712
            raise AlreadySetUp("Database is already set up (an admin user exists)")

        user = User(name=username, admin=True)
        db.add(user)
        db.flush()
        project = Project(
            user_id=user.id,
            name=project_name,
            overhead_minutes=overhead_minutes,
            time_zone=time_zone,
        )
        db.add(project)
        db.commit()
        db.refresh(project)
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreUnavailable(f"Unable to initialize database: {e}") from e

    logger.info("Created user %s and project %s (overhead=%sm)", username, project_name, overhead_minutes)
    return project


def seed_demo_events(
    db: Session,
    project: Project,
    zone: ZoneInfo,
    today: date,
    seed: int = DEMO_DEFAULT_SEED,
) -> int:
    """
    Fill a project with plausible work sessions, starting on the Monday at or
    before 38 days ago and ending yesterday.

    Weekdays get at least 7 hours in sessions of 1 to 6 hours; weekends are
    worked 30% of the time. The same seed always gives the same events.

    Returns:
        Number of sessions created
    """
    rng = random.Random(seed)
    day = today - timedelta(days=DEMO_DAYS_IN_PAST)
    day -= timedelta(days=day.weekday())
    end_of_day = time(23, 59, 59)
    sessions = 0

    while day < today:
        if day.weekday() >= 5 and rng.randrange(100) >= DEMO_WEEKEND_WORK_PERCENT:
            day += timedelta(days=1)
            continue

        day_end = datetime.combine(day, end_of_day)
        cursor = datetime.combine(day, DEMO_EARLIEST_START)
        worked = timedelta(0)
        while worked < DEMO_MIN_TIME_PER_DAY:
            fuzz = min(DEMO_MAX_FUZZ, day_end - cursor)
            cursor += timedelta(seconds=rng.randrange(max(int(fuzz.total_seconds()), 1)))
            max_session = min(DEMO_MAX_SESSION, day_end - cursor)
            if max_session <= DEMO_MIN_SESSION:
                break
            length = timedelta(seconds=rng.randrange(
                int(DEMO_MIN_SESSION.total_seconds()), int(max_session.total_seconds())
            ))
            start = cursor.replace(tzinfo=zone)
            cursor += length
            end = cursor.replace(tzinfo=zone)
            db.add(Event(project_id=project.id, event_type=EventType.IN, clock=start.astimezone(UTC)))
            db.add(Event(project_id=project.id, event_type=EventType.OUT, clock=end.astimezone(UTC)))
            worked += length
            sessions += 1
        logger.debug("Demo day %s: %s worked", day, worked)
        day += timedelta(days=1)

    db.commit()
    logger.info("Seeded %s demo sessions for project %s", sessions, project.id)
    return sessions
