"""
Report engine: event log in, day/week totals out.

Pure functions only. Everything a report depends on (events, configuration,
"now") is passed in, so the same inputs always give the same report.
"""
import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from punch.core.exceptions import ConfigurationError, MalformedSessionError
from punch.models.event import PunchDirection
from punch.schemas.event import PunchEvent
from punch.schemas.report import (
    Anomaly,
    AnomalyKind,
    DayTotal,
    ReportConfig,
    ReportResult,
    SessionState,
    SummaryReport,
    WeekTotal,
    WorkTime,
)
from punch.services.buckets import ONE_DAY, ONE_WEEK, BucketAggregator
from punch.services.durations import session_end, session_work_time
from punch.services.pairing import pair_events
from punch.utils.datetime_utils import ensure_utc, now_utc, week_start_of

_log = logging.getLogger(__name__)


def check_config(config: ReportConfig) -> ZoneInfo:
    """
    Validate engine configuration before any computation.

    Returns:
        The resolved reporting zone

    Raises:
        ConfigurationError: On negative overhead, unknown zone, empty window or bad week start
    """
    if config.overhead.total_seconds() < 0:
        raise ConfigurationError(f"Overhead must not be negative (got {config.overhead})")
    if config.days_window <= 0 or config.weeks_window <= 0:
        raise ConfigurationError(
            f"Report windows must be greater than zero (days={config.days_window}, weeks={config.weeks_window})"
        )
    if not 0 <= config.week_start <= 6:
        raise ConfigurationError(f"Week start must be between 0 and 6 (got {config.week_start})")
    try:
        return ZoneInfo(config.time_zone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigurationError(f"Unknown time zone '{config.time_zone}'")


def assemble_report(
    day_totals: Dict[date, WorkTime],
    week_totals: Dict[date, WorkTime],
    next_direction: PunchDirection,
    config: ReportConfig,
    through: Optional[date] = None,
    recent_events: Optional[List[PunchEvent]] = None,
) -> SummaryReport:
    """
    Order buckets most recent first and cut them to the configured windows.

    Args:
        day_totals: Totals keyed by local date
        week_totals: Totals keyed by week start date
        next_direction: Punch the user is expected to make next
        config: Supplies days_window, weeks_window and week_start
        through: When given, the windows end at this date and days/weeks without
            activity are reported with zero totals. Otherwise only buckets with
            activity are reported.
        recent_events: Events to show beside the totals, most recent first

    Returns:
        SummaryReport
    """
    if through is None:
        day_keys = sorted(day_totals, reverse=True)[:config.days_window]
        week_keys = sorted(week_totals, reverse=True)[:config.weeks_window]
    else:
        day_keys = [through - ONE_DAY * i for i in range(config.days_window)]
        this_week = week_start_of(through, config.week_start)
        week_keys = [this_week - ONE_WEEK * i for i in range(config.weeks_window)]

    return SummaryReport(
        days=[DayTotal(day=d, work_time=day_totals.get(d, WorkTime())) for d in day_keys],
        weeks=[WeekTotal(week_start=w, work_time=week_totals.get(w, WorkTime())) for w in week_keys],
        next_direction=next_direction,
        recent_events=recent_events or [],
    )


def build_report(
    events: Iterable[PunchEvent],
    config: Optional[ReportConfig] = None,
    now: Optional[datetime] = None,
    include_open: bool = True,
    through: Optional[date] = None,
    recent_limit: int = 0,
) -> ReportResult:
    """
    Build a report from one project's event log.

    Args:
        events: Events ascending by clock (ties by id)
        config: Engine configuration (defaults: 15 minute overhead, UTC, 14 days, 8 weeks)
        now: Instant an open session is measured up to (default: current time)
        include_open: Count a session still in progress up to `now`. Use False
            for closed historical ranges.
        through: Anchor the report windows at this local date (see assemble_report)
        recent_limit: Number of most recent events to include in the report

    Returns:
        ReportResult with the report and every anomaly found. Anomalous sessions
        contribute nothing to the totals.

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    config = config or ReportConfig()
    zone = check_config(config)
    now = ensure_utc(now) if now is not None else now_utc()
    events = list(events)

    pairing = pair_events(events)
    anomalies: List[Anomaly] = list(pairing.anomalies)
    aggregator = BucketAggregator(zone, config.week_start)

    for session in pairing.sessions:
        if session.state == SessionState.ABANDONED:
            continue
        if session.is_open and not include_open:
            continue
        try:
            work_time = session_work_time(session, config.overhead, now)
        except MalformedSessionError as e:
            _log.warning("Skipping session: %s", e.detail)
            anomalies.append(Anomaly(
                kind=AnomalyKind.CLOCK_SKEW,
                event_id=session.start.id,
                at=session.start.clock,
                message=e.detail,
            ))
            continue
        aggregator.add(session.start.clock, session_end(session, now), work_time)

    anomalies.sort(key=lambda a: a.at)
    recent = list(reversed(events[-recent_limit:])) if recent_limit > 0 else []
    report = assemble_report(
        aggregator.day_totals(),
        aggregator.week_totals(),
        pairing.next_direction,
        config,
        through=through,
        recent_events=recent,
    )
    _log.debug(
        "Report built: events=%s sessions=%s anomalies=%s days=%s weeks=%s",
        len(events), len(pairing.sessions), len(anomalies), len(report.days), len(report.weeks),
    )
    return ReportResult(report=report, anomalies=anomalies)
