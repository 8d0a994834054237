from datetime import datetime, timedelta, timezone

from partyconnect.core.time import ensure_tz, millis_id, parse_datetime


def test_parse_datetime_attaches_default_timezone_to_naive_values():
    dt = parse_datetime("2025-07-15T18:00:00", "America/Los_Angeles")
    assert dt.utcoffset() == timedelta(hours=-7)


def test_parse_datetime_keeps_explicit_offsets():
    assert parse_datetime(" 2025-07-15T18:00:00Z ", "Asia/Tokyo").utcoffset() == timedelta(0)
    assert parse_datetime("2025-07-15T18:00:00-05:00", "UTC").utcoffset() == timedelta(hours=-5)


def test_ensure_tz_leaves_aware_values_alone():
    aware = datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert ensure_tz(aware, "Europe/Paris") is aware


def test_millis_id():
    moment = datetime(2025, 7, 15, 18, 0, tzinfo=timezone.utc)
    assert millis_id("event", moment) == "event-1752602400000"
