"""
Bucket aggregation: attribute session time to calendar days and weeks of the reporting zone.

A session that crosses midnight is split at each local midnight; one that crosses a
week boundary is split there, independently of the day split. Net time follows the
gross split ratio, so the overhead is still paid once per session. All arithmetic is
done on integer microseconds; fragments of a session always add back up to the whole.
"""
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, List, Tuple
from zoneinfo import ZoneInfo

from punch.schemas.report import WorkTime
from punch.utils.datetime_utils import local_date, local_midnight_utc, week_start_of

ONE_DAY = timedelta(days=1)
ONE_WEEK = timedelta(weeks=1)
_MICROSECOND = timedelta(microseconds=1)

Fragment = Tuple[date, timedelta]


def _split(start: datetime, end: datetime, zone: ZoneInfo, key: date, step: timedelta) -> List[Fragment]:
    fragments: List[Fragment] = []
    cursor = start
    while True:
        next_key = key + step
        boundary = local_midnight_utc(next_key, zone)
        if boundary >= end:
            fragments.append((key, end - cursor))
            return fragments
        fragments.append((key, boundary - cursor))
        cursor = boundary
        key = next_key


def split_by_day(start: datetime, end: datetime, zone: ZoneInfo) -> List[Fragment]:
    """
    Split [start, end) at every local midnight.

    Args:
        start: UTC start instant
        end: UTC end instant, not before start
        zone: Reporting zone

    Returns:
        (local date, elapsed time on that date) pairs in chronological order
    """
    return _split(start, end, zone, local_date(start, zone), ONE_DAY)


def split_by_week(start: datetime, end: datetime, zone: ZoneInfo, week_start: int = 0) -> List[Fragment]:
    """Split [start, end) at every local week boundary; keys are the weeks' first days."""
    first = week_start_of(local_date(start, zone), week_start)
    return _split(start, end, zone, first, ONE_WEEK)


def prorate(work_time: WorkTime, fragments: List[Fragment]) -> List[Tuple[date, WorkTime]]:
    """
    Distribute a session's net time over its gross fragments by duration ratio.

    Net shares are taken from the running gross total, so rounding never creates
    or loses time: the last fragment receives whatever remains.
    """
    gross_total = sum((span for _, span in fragments), timedelta(0)) // _MICROSECOND
    net_total = work_time.net // _MICROSECOND
    shares: List[Tuple[date, WorkTime]] = []
    running_gross = 0
    allocated_net = 0
    for key, span in fragments:
        running_gross += span // _MICROSECOND
        net_so_far = net_total * running_gross // gross_total if gross_total else 0
        shares.append((key, WorkTime(gross=span, net=timedelta(microseconds=net_so_far - allocated_net))))
        allocated_net = net_so_far
    return shares


class BucketAggregator:
    """
    Accumulates day and week totals for one report.

    Totals are sums, so the order in which sessions are added does not matter.
    """

    def __init__(self, zone: ZoneInfo, week_start: int = 0):
        self.zone = zone
        self.week_start = week_start
        self.days: Dict[date, WorkTime] = defaultdict(WorkTime)
        self.weeks: Dict[date, WorkTime] = defaultdict(WorkTime)

    def add(self, start: datetime, end: datetime, work_time: WorkTime) -> None:
        """Add one session's work time, split across the days and weeks it touches."""
        for day, share in prorate(work_time, split_by_day(start, end, self.zone)):
            self.days[day] += share
        for week, share in prorate(work_time, split_by_week(start, end, self.zone, self.week_start)):
            self.weeks[week] += share

    def day_totals(self) -> Dict[date, WorkTime]:
        return dict(self.days)

    def week_totals(self) -> Dict[date, WorkTime]:
        return dict(self.weeks)
