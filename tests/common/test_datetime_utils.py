from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from workforce_ops.common.clock import FixedClock, SystemClock
from workforce_ops.common.datetime_utils import (
    ensure_aware,
    local_day_bucket,
    local_wall_time,
    parse_iso_datetime,
    to_naive_utc,
    utc_day_bucket,
)

NEW_YORK = ZoneInfo("America/New_York")


def test_buckets_diverge_around_midnight():
    # 22:30 in New York on Feb 1 is already Feb 2 in UTC.
    ts = datetime(2026, 2, 1, 22, 30, tzinfo=NEW_YORK)

    assert utc_day_bucket(ts) == date(2026, 2, 2)
    assert local_day_bucket(ts, NEW_YORK) == date(2026, 2, 1)


def test_naive_timestamps_are_utc():
    naive = datetime(2026, 2, 2, 23, 59)

    assert ensure_aware(naive).tzinfo is timezone.utc
    assert utc_day_bucket(naive) == date(2026, 2, 2)


def test_parse_iso_datetime_accepts_z_suffix():
    parsed = parse_iso_datetime("2026-02-02T08:04:00Z")

    assert parsed == datetime(2026, 2, 2, 8, 4, tzinfo=timezone.utc)


def test_to_naive_utc_converts_offset():
    ts = datetime(2026, 2, 2, 9, 0, tzinfo=timezone(timedelta(hours=2)))

    assert to_naive_utc(ts) == datetime(2026, 2, 2, 7, 0)
    assert to_naive_utc(None) is None


def test_local_wall_time_drops_seconds():
    ts = datetime(2026, 2, 2, 13, 5, 59, tzinfo=timezone.utc)

    assert local_wall_time(ts, NEW_YORK) == time(8, 5)


def test_fixed_clock_advances():
    clock = FixedClock(current=datetime(2026, 2, 2, 8, 0, tzinfo=timezone.utc))
    clock.advance(minutes=90)

    assert clock.now() == datetime(2026, 2, 2, 9, 30, tzinfo=timezone.utc)


def test_system_clock_follows_daylight_saving(monkeypatch):
    monkeypatch.setenv("TZ", "America/New_York")
    clock = SystemClock.from_name(None)

    # 23:30 EDT in July and 23:30 EST in December both stay on the local day.
    assert local_day_bucket(datetime(2026, 7, 15, 3, 30, tzinfo=timezone.utc), clock.tz) == date(2026, 7, 14)
    assert local_day_bucket(datetime(2026, 12, 15, 4, 30, tzinfo=timezone.utc), clock.tz) == date(2026, 12, 14)
    assert local_wall_time(datetime(2026, 12, 15, 13, 5, tzinfo=timezone.utc), clock.tz) == time(8, 5)


def test_unknown_tz_variable_does_not_break_clock(monkeypatch):
    monkeypatch.setenv("TZ", "Not/A_Zone")

    assert SystemClock().now().tzinfo is not None
