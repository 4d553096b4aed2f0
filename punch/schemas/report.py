"""
Report schemas: value types produced by the report engine.

All of these are immutable; a report is rebuilt from the event log on every request.
"""
import enum
from datetime import date, datetime, timedelta
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer

from punch.constants import DEFAULT_OVERHEAD_MINUTES, DEFAULT_REPORT_DAYS, DEFAULT_REPORT_WEEKS
from punch.models.event import PunchDirection
from punch.schemas.event import PunchEvent
from punch.utils.datetime_utils import format_elapsed, iso_8601_utc

ZERO = timedelta(0)


class ReportConfig(BaseModel):
    """Engine configuration. Checked by the engine before any computation."""
    overhead: timedelta = Field(default=timedelta(minutes=DEFAULT_OVERHEAD_MINUTES))
    time_zone: str = "UTC"
    days_window: int = DEFAULT_REPORT_DAYS
    weeks_window: int = DEFAULT_REPORT_WEEKS
    week_start: int = 0  # 0=Monday .. 6=Sunday

    model_config = ConfigDict(frozen=True)


class WorkTime(BaseModel):
    """Gross (elapsed) and net (after overhead) time. Sums exactly; no floating point."""
    gross: timedelta = ZERO
    net: timedelta = ZERO

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_gross(cls, gross: timedelta, overhead: timedelta) -> "WorkTime":
        """Net is gross minus overhead, floored at zero."""
        return cls(gross=gross, net=max(ZERO, gross - overhead))

    def __add__(self, other: "WorkTime") -> "WorkTime":
        return WorkTime(gross=self.gross + other.gross, net=self.net + other.net)

    @computed_field
    @property
    def gross_display(self) -> str:
        return format_elapsed(self.gross)

    @computed_field
    @property
    def net_display(self) -> str:
        return format_elapsed(self.net)

    @field_serializer("gross", "net", when_used="json")
    def _ser_seconds(self, v: timedelta) -> int:
        return int(v.total_seconds())


class SessionState(str, enum.Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"            # still in progress at the end of the log
    ABANDONED = "ABANDONED"  # superseded by a second IN before any OUT


class WorkSession(BaseModel):
    """An IN paired with its OUT, or left without one."""
    start: PunchEvent
    end: Optional[PunchEvent] = None
    state: SessionState = SessionState.CLOSED

    model_config = ConfigDict(frozen=True)

    @property
    def is_open(self) -> bool:
        return self.state == SessionState.OPEN


class AnomalyKind(str, enum.Enum):
    ORPHAN_OUT = "ORPHAN_OUT"  # OUT with no open session
    DOUBLE_IN = "DOUBLE_IN"    # IN while a session was already open
    CLOCK_SKEW = "CLOCK_SKEW"  # session ends before it starts


class Anomaly(BaseModel):
    """A malformed piece of the event log, excluded from all totals."""
    kind: AnomalyKind
    event_id: Optional[int] = None
    at: datetime
    message: str

    model_config = ConfigDict(frozen=True)

    @field_serializer("at", when_used="json")
    def _ser_at(self, dt: datetime) -> str:
        return iso_8601_utc(dt)


class DayTotal(BaseModel):
    """Work time attributed to one calendar day of the reporting zone."""
    day: date
    work_time: WorkTime

    model_config = ConfigDict(frozen=True)


class WeekTotal(BaseModel):
    """Work time attributed to one week, keyed by the week's first day."""
    week_start: date
    work_time: WorkTime

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def label(self) -> str:
        """ISO week of the first day, e.g. 2018-W29"""
        year, week, _ = self.week_start.isocalendar()
        return f"{year}-W{week:02d}"


class SummaryReport(BaseModel):
    """Recent days and weeks, most recent first, and the punch the user is expected to make next."""
    days: List[DayTotal] = Field(default_factory=list)
    weeks: List[WeekTotal] = Field(default_factory=list)
    next_direction: PunchDirection = PunchDirection.IN
    recent_events: List[PunchEvent] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class ReportResult(BaseModel):
    """A report plus the anomalies found while building it."""
    report: SummaryReport
    anomalies: List[Anomaly] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
