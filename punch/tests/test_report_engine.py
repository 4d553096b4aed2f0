"""
Tests for the report engine: events in, day and week totals out
"""
import random
from datetime import date, datetime, timedelta, timezone

import pytest

from punch.core.exceptions import ConfigurationError
from punch.models.event import EventType, PunchDirection
from punch.schemas.event import PunchEvent
from punch.schemas.report import AnomalyKind, ReportConfig, WorkTime
from punch.services.report_engine import assemble_report, build_report, check_config

UTC = timezone.utc
NOW = datetime(2026, 10, 21, 12, tzinfo=UTC)


def at(day, hour, minute=0):
    return datetime(2026, 10, day, hour, minute, tzinfo=UTC)


def log(*pairs):
    """Build an event log from (kind, clock) pairs, numbering ids in order"""
    return [PunchEvent(id=i, kind=kind, clock=clock) for i, (kind, clock) in enumerate(pairs, start=1)]


IN, OUT, NOTE = EventType.IN, EventType.OUT, EventType.NOTE


def test_single_session_gross_and_net():
    """In 08:00, Out 12:15 with 15 minute overhead: 4h15m gross, 4h00m net"""
    result = build_report(log((IN, at(19, 8)), (OUT, at(19, 12, 15))), now=NOW)
    report = result.report

    expected = WorkTime(gross=timedelta(hours=4, minutes=15), net=timedelta(hours=4))
    assert [(d.day, d.work_time) for d in report.days] == [(date(2026, 10, 19), expected)]
    assert [(w.week_start, w.work_time) for w in report.weeks] == [(date(2026, 10, 19), expected)]
    assert report.next_direction == PunchDirection.IN
    assert result.anomalies == []


def test_session_across_midnight_is_split_proportionally():
    """In 23:00, Out 01:00: one hour on each day, net 52m30s on each"""
    result = build_report(log((IN, at(19, 23)), (OUT, at(20, 1))), now=NOW)

    half = WorkTime(gross=timedelta(hours=1), net=timedelta(minutes=52, seconds=30))
    assert [(d.day, d.work_time) for d in result.report.days] == [
        (date(2026, 10, 20), half),
        (date(2026, 10, 19), half),
    ]
    assert result.report.weeks[0].work_time == WorkTime(
        gross=timedelta(hours=2), net=timedelta(hours=1, minutes=45)
    )


def test_open_session_is_measured_to_now():
    """In 08:00 with now at 10:00: counted up to now, next punch is OUT"""
    result = build_report(log((IN, at(21, 8))), now=at(21, 10))

    assert result.report.days[0].work_time == WorkTime(
        gross=timedelta(hours=2), net=timedelta(hours=1, minutes=45)
    )
    assert result.report.next_direction == PunchDirection.OUT


def test_open_session_left_out_for_closed_ranges():
    result = build_report(log((IN, at(21, 8))), now=at(21, 10), include_open=False)

    assert result.report.days == []
    assert result.report.next_direction == PunchDirection.OUT


def test_orphan_out_is_an_anomaly_and_report_still_built():
    """Out 09:00 with no In: no sessions, one anomaly, report from the rest"""
    result = build_report(
        log((OUT, at(19, 9)), (IN, at(20, 8)), (OUT, at(20, 9))),
        now=NOW,
    )

    assert [a.kind for a in result.anomalies] == [AnomalyKind.ORPHAN_OUT]
    assert result.anomalies[0].event_id == 1
    assert [d.day for d in result.report.days] == [date(2026, 10, 20)]


def test_empty_log_gives_empty_report():
    result = build_report([], now=NOW)

    assert result.report.days == []
    assert result.report.weeks == []
    assert result.report.next_direction == PunchDirection.IN
    assert result.anomalies == []


def test_double_in_excludes_the_abandoned_session():
    """Only the second In, paired with the Out, is counted"""
    result = build_report(
        log((IN, at(19, 8)), (IN, at(19, 10)), (OUT, at(19, 11))),
        now=NOW,
    )

    assert [a.kind for a in result.anomalies] == [AnomalyKind.DOUBLE_IN]
    assert result.report.days[0].work_time == WorkTime(
        gross=timedelta(hours=1), net=timedelta(minutes=45)
    )


def test_clock_skew_is_an_anomaly():
    """An Out logged before its In is reported and left out of the totals"""
    result = build_report(
        log((IN, at(19, 12)), (OUT, at(19, 10)), (IN, at(20, 8)), (OUT, at(20, 9))),
        now=NOW,
    )

    assert [a.kind for a in result.anomalies] == [AnomalyKind.CLOCK_SKEW]
    assert result.anomalies[0].event_id == 1
    assert [d.day for d in result.report.days] == [date(2026, 10, 20)]


def test_anomalies_are_ordered_by_time():
    result = build_report(
        log((IN, at(19, 12)), (OUT, at(19, 10)), (OUT, at(19, 11))),
        now=NOW,
    )

    assert [a.kind for a in result.anomalies] == [AnomalyKind.ORPHAN_OUT, AnomalyKind.CLOCK_SKEW]


def test_notes_do_not_affect_totals():
    with_notes = build_report(
        log((NOTE, at(19, 7)), (IN, at(19, 8)), (NOTE, at(19, 9)), (OUT, at(19, 10))),
        now=NOW,
    )
    without_notes = build_report(log((IN, at(19, 8)), (OUT, at(19, 10))), now=NOW)

    assert with_notes.report.days == without_notes.report.days
    assert with_notes.report.weeks == without_notes.report.weeks


def test_overhead_is_paid_once_per_session():
    """Three one-hour sessions on a day pay the overhead three times"""
    result = build_report(
        log(
            (IN, at(19, 8)), (OUT, at(19, 9)),
            (IN, at(19, 10)), (OUT, at(19, 11)),
            (IN, at(19, 12)), (OUT, at(19, 13)),
        ),
        now=NOW,
    )

    assert result.report.days[0].work_time == WorkTime(
        gross=timedelta(hours=3), net=timedelta(hours=2, minutes=15)
    )


def test_short_session_nets_zero():
    result = build_report(log((IN, at(19, 8)), (OUT, at(19, 8, 5))), now=NOW)

    assert result.report.days[0].work_time == WorkTime(gross=timedelta(minutes=5), net=timedelta(0))


def test_custom_overhead():
    config = ReportConfig(overhead=timedelta(minutes=10))
    result = build_report(log((IN, at(19, 8)), (OUT, at(19, 9))), config, now=NOW)

    assert result.report.days[0].work_time.net == timedelta(minutes=50)


def test_days_are_attributed_in_the_reporting_zone():
    """20:00-22:00 EDT lands on the New York date, not the UTC date"""
    config = ReportConfig(time_zone="America/New_York")
    result = build_report(log((IN, at(20, 0)), (OUT, at(20, 2))), config, now=NOW)

    assert [d.day for d in result.report.days] == [date(2026, 10, 19)]


def test_dst_day_counts_elapsed_time():
    """A night session across Berlin's spring-forward is 5h, not 6h of wall clock"""
    config = ReportConfig(time_zone="Europe/Berlin", overhead=timedelta(0))
    events = log(
        (IN, datetime(2026, 3, 28, 21, tzinfo=UTC)),
        (OUT, datetime(2026, 3, 29, 2, tzinfo=UTC)),
    )

    result = build_report(events, config, now=NOW)

    assert [(d.day, d.work_time.gross) for d in result.report.days] == [
        (date(2026, 3, 29), timedelta(hours=3)),
        (date(2026, 3, 28), timedelta(hours=2)),
    ]
    assert result.report.weeks[0].work_time.gross == timedelta(hours=5)


def test_days_window_truncates_most_recent_first():
    events = []
    for day in range(1, 21):
        events += [(IN, at(day, 8)), (OUT, at(day, 9))]
    config = ReportConfig(days_window=14, weeks_window=2)

    result = build_report(log(*events), config, now=NOW)

    assert len(result.report.days) == 14
    assert result.report.days[0].day == date(2026, 10, 20)
    assert result.report.days[-1].day == date(2026, 10, 7)
    assert [w.week_start for w in result.report.weeks] == [date(2026, 10, 19), date(2026, 10, 12)]


def test_through_zero_fills_windows():
    config = ReportConfig(days_window=3, weeks_window=2)
    result = build_report(
        log((IN, at(19, 8)), (OUT, at(19, 9))),
        config,
        now=NOW,
        through=date(2026, 10, 21),
    )

    assert [d.day for d in result.report.days] == [date(2026, 10, 21), date(2026, 10, 20), date(2026, 10, 19)]
    assert result.report.days[0].work_time == WorkTime()
    assert result.report.days[2].work_time.gross == timedelta(hours=1)
    assert [w.week_start for w in result.report.weeks] == [date(2026, 10, 19), date(2026, 10, 12)]
    assert result.report.weeks[1].work_time == WorkTime()


def test_week_start_on_sunday():
    config = ReportConfig(week_start=6)
    result = build_report(log((IN, at(18, 23)), (OUT, at(19, 1))), config, now=NOW)

    assert [(w.week_start, w.work_time.gross) for w in result.report.weeks] == [
        (date(2026, 10, 18), timedelta(hours=2)),
    ]


def test_recent_events_most_recent_first():
    events = log((IN, at(19, 8)), (NOTE, at(19, 9)), (OUT, at(19, 10)))

    result = build_report(events, now=NOW, recent_limit=2)

    assert [e.id for e in result.report.recent_events] == [3, 2]


@pytest.mark.parametrize(
    "config",
    [
        ReportConfig(overhead=timedelta(minutes=-1)),
        ReportConfig(time_zone="Mars/Olympus_Mons"),
        ReportConfig(days_window=0),
        ReportConfig(weeks_window=0),
        ReportConfig(week_start=7),
    ],
)
def test_invalid_configuration_is_rejected(config):
    with pytest.raises(ConfigurationError):
        build_report([], config, now=NOW)


def test_check_config_returns_zone():
    zone = check_config(ReportConfig(time_zone="Europe/Berlin"))

    assert zone.key == "Europe/Berlin"


def test_assemble_report_orders_buckets_most_recent_first():
    totals = {
        date(2026, 10, 5): WorkTime(gross=timedelta(hours=1)),
        date(2026, 10, 19): WorkTime(gross=timedelta(hours=2)),
        date(2026, 10, 12): WorkTime(gross=timedelta(hours=3)),
    }

    report = assemble_report(totals, totals, PunchDirection.OUT, ReportConfig(weeks_window=2))

    assert [d.day for d in report.days] == [date(2026, 10, 19), date(2026, 10, 12), date(2026, 10, 5)]
    assert [w.week_start for w in report.weeks] == [date(2026, 10, 19), date(2026, 10, 12)]
    assert report.next_direction == PunchDirection.OUT


def _random_log(rng, days=30):
    events = []
    cursor = datetime(2026, 9, 14, 6, tzinfo=UTC)
    for _ in range(days * 2):
        cursor += timedelta(minutes=rng.randrange(1, 16 * 60))
        events.append((IN, cursor))
        cursor += timedelta(minutes=rng.randrange(0, 10 * 60), seconds=rng.randrange(60))
        events.append((OUT, cursor))
    return log(*events)


@pytest.mark.parametrize("time_zone", ["UTC", "Europe/Berlin", "America/New_York"])
def test_totals_conserve_session_time(time_zone):
    """Day buckets and week buckets both add up to the sum over sessions"""
    rng = random.Random(1868)
    events = _random_log(rng)
    config = ReportConfig(time_zone=time_zone, days_window=1000, weeks_window=1000)

    result = build_report(events, config, now=NOW)

    expected = WorkTime()
    for start, end in zip(events[::2], events[1::2]):
        expected += WorkTime.from_gross(end.clock - start.clock, config.overhead)
    day_sum = sum((d.work_time for d in result.report.days), WorkTime())
    week_sum = sum((w.work_time for w in result.report.weeks), WorkTime())
    assert day_sum == expected
    assert week_sum == expected


def test_week_total_equals_its_days():
    rng = random.Random(7)
    events = _random_log(rng)
    config = ReportConfig(time_zone="Europe/Berlin", days_window=1000, weeks_window=1000)

    result = build_report(events, config, now=NOW)

    for week in result.report.weeks:
        days = [
            d.work_time for d in result.report.days
            if week.week_start <= d.day < week.week_start + timedelta(weeks=1)
        ]
        assert sum(days, WorkTime()) == week.work_time


def test_every_bucket_has_gross_at_least_net():
    result = build_report(_random_log(random.Random(3)), ReportConfig(days_window=1000), now=NOW)

    for day in result.report.days:
        assert day.work_time.gross >= day.work_time.net >= timedelta(0)


def test_same_inputs_same_report():
    events = _random_log(random.Random(11))

    assert build_report(events, now=NOW) == build_report(events, now=NOW)
