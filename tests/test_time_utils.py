from datetime import UTC, datetime, timedelta, timezone

from freelance_ledger.app.core.time import ensure_utc, minutes_between, utc_now


def test_utc_now_is_timezone_aware_utc():
    value = utc_now()
    assert value.tzinfo is UTC


def test_ensure_utc_treats_naive_values_as_utc():
    naive = datetime(2030, 1, 1, 10, 0, 0)
    assert ensure_utc(naive) == datetime(2030, 1, 1, 10, 0, 0, tzinfo=UTC)
    assert ensure_utc(None) is None


def test_ensure_utc_converts_offsets():
    local = datetime(2030, 1, 1, 12, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert ensure_utc(local) == datetime(2030, 1, 1, 10, 0, 0, tzinfo=UTC)


def test_minutes_between_rounds_half_up():
    start = datetime(2030, 1, 1, 10, 0, 0, tzinfo=UTC)
    assert minutes_between(start, start + timedelta(minutes=52, seconds=29)) == 52
    assert minutes_between(start, start + timedelta(minutes=52, seconds=30)) == 53
    assert minutes_between(start, start + timedelta(seconds=10)) == 0
