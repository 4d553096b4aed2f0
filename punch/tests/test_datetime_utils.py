"""
Tests for datetime helpers
"""
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from punch.utils.datetime_utils import (
    ensure_utc,
    format_elapsed,
    iso_8601_utc,
    local_date,
    local_midnight_utc,
    week_start_of,
)

UTC = timezone.utc


def test_ensure_utc_treats_naive_as_utc():
    assert ensure_utc(datetime(2026, 10, 19, 8)) == datetime(2026, 10, 19, 8, tzinfo=UTC)
    assert ensure_utc(None) is None


def test_ensure_utc_converts_aware():
    berlin = datetime(2026, 10, 19, 10, tzinfo=ZoneInfo("Europe/Berlin"))

    assert ensure_utc(berlin) == datetime(2026, 10, 19, 8, tzinfo=UTC)
    assert ensure_utc(berlin).tzinfo == UTC


def test_local_date():
    instant = datetime(2026, 10, 20, 2, tzinfo=UTC)

    assert local_date(instant, ZoneInfo("UTC")) == date(2026, 10, 20)
    assert local_date(instant, ZoneInfo("America/New_York")) == date(2026, 10, 19)


def test_local_midnight_utc_follows_dst():
    berlin = ZoneInfo("Europe/Berlin")

    assert local_midnight_utc(date(2026, 3, 29), berlin) == datetime(2026, 3, 28, 23, tzinfo=UTC)
    assert local_midnight_utc(date(2026, 3, 30), berlin) == datetime(2026, 3, 29, 22, tzinfo=UTC)


def test_week_start_of():
    wednesday = date(2026, 10, 21)

    assert week_start_of(wednesday) == date(2026, 10, 19)
    assert week_start_of(wednesday, week_start=6) == date(2026, 10, 18)
    assert week_start_of(date(2026, 10, 19)) == date(2026, 10, 19)


def test_iso_8601_utc():
    assert iso_8601_utc(datetime(2026, 10, 19, 8, 30, tzinfo=UTC)) == "2026-10-19T08:30:00Z"
    assert iso_8601_utc(None) is None


def test_format_elapsed():
    assert format_elapsed(timedelta(hours=4, minutes=15)) == "4h15m"
    assert format_elapsed(timedelta(minutes=52, seconds=30)) == "0h52m"
    assert format_elapsed(timedelta(hours=41, minutes=5)) == "41h05m"
    assert format_elapsed(timedelta(0)) == "0h00m"
