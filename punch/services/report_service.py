"""
Report service - summary report for the dashboard, CLI and API
"""
import logging
from datetime import date, datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from punch.core.config import settings
from punch.schemas.report import ReportConfig, ReportResult, SummaryReport
from punch.services import event_store
from punch.services.report_engine import build_report, check_config
from punch.utils.datetime_utils import ensure_utc, local_date, local_midnight_utc, now_utc, week_start_of

_log = logging.getLogger(__name__)


def report_window_start(today: date, config: ReportConfig) -> date:
    """
    First local date the summary report needs events from.

    The earliest of the day window and the first day of the oldest week in the
    week window, so that week totals are complete.
    """
    first_day = today - timedelta(days=config.days_window - 1)
    first_week = week_start_of(today, config.week_start) - timedelta(weeks=config.weeks_window - 1)
    return min(first_day, first_week)


def summary_report(
    db: Session,
    project_id: Optional[int] = None,
    now: Optional[datetime] = None,
    config: Optional[ReportConfig] = None,
    include_open: bool = True,
) -> ReportResult:
    """
    Build the summary report of recent days and weeks for a project

    Args:
        db: Database session
        project_id: Project to report on (None = the singleton user's first project)
        now: Reference instant (default: current time)
        config: Engine configuration (default: settings plus the project's overhead and zone)
        include_open: Count a session in progress up to `now`

    Returns:
        ReportResult with zero-filled day and week windows ending today

    Raises:
        ProjectNotFound: If no project has been set up
        StoreUnavailable: If events cannot be read
        ConfigurationError: If the configuration is invalid
    """
    project = event_store.load_project(db, project_id)
    if config is None:
        config = settings.report_config(
            overhead_minutes=project.overhead_minutes,
            time_zone=project.time_zone,
        )
    zone = check_config(config)
    now = ensure_utc(now) if now is not None else now_utc()

    today = local_date(now, zone)
    since = local_midnight_utc(report_window_start(today, config), zone)
    events = event_store.fetch_events(db, project.id, since=since, until=now)

    result = build_report(events, config, now=now, include_open=include_open, through=today)
    recent = event_store.recent_events(db, project.id, settings.RECENT_EVENTS)
    _log.debug("Summary report for project %s: %s events since %s", project.id, len(events), since.isoformat())
    return ReportResult(
        report=result.report.model_copy(update={"recent_events": recent}),
        anomalies=result.anomalies,
    )


def render_text(result: ReportResult) -> str:
    """Plain text rendering of a summary report, for the command line."""
    report: SummaryReport = result.report
    lines = [
        "Summary report:",
        f"\tNext expected direction: {report.next_direction.value}",
        "\tDays:",
    ]
    for day in report.days:
        lines.append(f"\t\t{day.day.isoformat()}: {day.work_time.gross_display} {day.work_time.net_display}")
    lines.append("\tWeeks:")
    for week in report.weeks:
        lines.append(f"\t\t{week.label}: {week.work_time.gross_display} {week.work_time.net_display}")
    lines.append("\tRecent events:")
    for event in report.recent_events:
        note = f" {event.note}" if event.note else ""
        lines.append(f"\t\t{event.clock.isoformat()} {event.kind.value}{note}")
    if result.anomalies:
        lines.append("\tAnomalies:")
        for anomaly in result.anomalies:
            lines.append(f"\t\t{anomaly.kind.value}: {anomaly.message}")
    return "\n".join(lines) + "\n"

