from __future__ import annotations

from datetime import date, datetime, timedelta, timezone as dt_timezone

import pytest

from devotional.utils import (
    format_check_in_date,
    format_record_date,
    format_record_date_short,
    get_check_in_for_date,
    get_date_key,
    is_today,
    new_record_id,
    parse_timestamp,
    strip_or_none,
)

from tests.factories import make_check_in


def test_parse_timestamp_handles_z_suffix() -> None:
    dt = parse_timestamp("2024-01-01T09:30:00.000Z")
    assert dt == datetime(2024, 1, 1, 9, 30, tzinfo=dt_timezone.utc)


def test_parse_timestamp_reads_naive_values_as_local_time() -> None:
    dt = parse_timestamp("2024-01-01T09:30:00")
    assert dt.utcoffset() == timedelta(hours=8)
    assert dt.hour == 9


def test_parse_timestamp_accepts_date_only() -> None:
    dt = parse_timestamp("2024-01-01")
    assert (dt.year, dt.month, dt.day, dt.hour) == (2024, 1, 1, 0)
    assert parse_timestamp(date(2024, 1, 1)) == dt


@pytest.mark.parametrize("value", ["", "   ", "yesterday", "2024-13-01"])
def test_parse_timestamp_rejects_garbage(value) -> None:
    with pytest.raises(ValueError):
        parse_timestamp(value)


def test_date_key_uses_local_calendar() -> None:
    assert get_date_key("2024-01-01T15:59:00Z") == "2024-01-01"
    assert get_date_key("2024-01-01T16:00:00Z") == "2024-01-02"
    assert get_date_key(date(2024, 7, 4)) == "2024-07-04"


def test_is_today() -> None:
    now = parse_timestamp("2024-06-01T23:00:00+08:00")
    assert is_today("2024-06-01T00:10:00+08:00", now)
    assert not is_today("2024-05-31T23:59:00+08:00", now)


def test_get_check_in_for_date() -> None:
    check_ins = [
        make_check_in("b", "2024-06-02T08:00:00+08:00"),
        make_check_in("a", "2024-06-01T08:00:00+08:00"),
    ]
    assert get_check_in_for_date(check_ins, date(2024, 6, 1)).id == "a"
    assert get_check_in_for_date(check_ins, "2024-06-02T20:00:00+08:00").id == "b"
    assert get_check_in_for_date(check_ins, date(2024, 6, 3)) is None


def test_display_formats() -> None:
    value = "2024-01-05T01:30:00Z"  # 09:30 in Taipei
    assert format_record_date(value) == "Jan 5, 2024, 09:30"
    assert format_record_date_short(value) == "Jan 5"
    assert format_check_in_date(value) == "Jan 5, 2024"


def test_new_record_id_uses_epoch_millis() -> None:
    now = datetime(2024, 1, 1, tzinfo=dt_timezone.utc)
    assert new_record_id("checkin", now) == "checkin-1704067200000"


def test_strip_or_none() -> None:
    assert strip_or_none("  hi ") == "hi"
    assert strip_or_none("   ") is None
    assert strip_or_none(None) is None
