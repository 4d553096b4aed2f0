"""
Timezone-aware datetime helpers.
- Store and compare instants in UTC.
- Convert to the reporting zone only when deriving a calendar day or week.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

UTC = timezone.utc

MINUTES_IN_HOUR = 60


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware). Use for event clocks and report "now"."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """If dt is naive, treat as UTC and return timezone-aware UTC. If already aware, convert to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    else:
        dt = dt.astimezone(UTC)
    return dt


def to_local(dt: datetime, zone: ZoneInfo) -> datetime:
    """Convert to the reporting zone. Naive datetimes are treated as UTC before converting."""
    return ensure_utc(dt).astimezone(zone)


def local_date(dt: datetime, zone: ZoneInfo) -> date:
    """Calendar date of an instant in the reporting zone."""
    return to_local(dt, zone).date()


def local_midnight_utc(day: date, zone: ZoneInfo) -> datetime:
    """The UTC instant at which `day` begins in the reporting zone."""
    return datetime.combine(day, time(0), tzinfo=zone).astimezone(UTC)


def week_start_of(day: date, week_start: int = 0) -> date:
    """
    First day of the week containing `day`.

    Args:
        day: Any calendar date
        week_start: First weekday of a week, 0=Monday .. 6=Sunday

    Returns:
        The date at or before `day` whose weekday is `week_start`
    """
    return day - timedelta(days=(day.weekday() - week_start) % 7)


def iso_8601_utc(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with Z for UTC."""
    if dt is None:
        return None
    utc = ensure_utc(dt)
    s = utc.isoformat()
    if s.endswith("+00:00"):
        s = s[:-6] + "Z"
    return s


def format_elapsed(span: timedelta) -> str:
    """Render a duration as hours and minutes, e.g. 4h15m. Seconds are truncated."""
    total_minutes = int(span.total_seconds()) // 60
    hours, minutes = divmod(total_minutes, MINUTES_IN_HOUR)
    return f"{hours}h{minutes:02d}m"
