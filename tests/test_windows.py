"""Minute-of-day windows and clock helpers."""
from datetime import date, datetime, time

import pytest

from booking_engine.services.availability.windows import (
    TimeWindow,
    minutes_to_time,
    minutes_until,
    parse_time,
    to_local_naive,
    time_in_range,
    time_to_minutes,
    weekday_index,
    window_for,
)


def test_time_to_minutes_and_back():
    assert time_to_minutes(time(18, 30)) == 1110
    assert minutes_to_time(1110) == time(18, 30)
    # Past midnight wraps onto the clock face
    assert minutes_to_time(1440 + 45) == time(0, 45)


@pytest.mark.parametrize("raw,expected", [("19:00", time(19, 0)), ("07:05:30", time(7, 5, 30)), (" 12:15 ", time(12, 15))])
def test_parse_time(raw, expected):
    assert parse_time(raw) == expected


@pytest.mark.parametrize("raw", ["", "19", "25:00", "ab:cd", "1:2:3:4"])
def test_parse_time_rejects_garbage(raw):
    with pytest.raises(ValueError):
        parse_time(raw)


def test_overlap_is_half_open():
    a = TimeWindow(600, 720)
    assert a.overlaps(TimeWindow(719, 800))
    # Touching ends do not overlap
    assert not a.overlaps(TimeWindow(720, 800))
    assert not TimeWindow(500, 600).overlaps(a)


def test_expand_adds_buffer_on_both_sides():
    assert TimeWindow(1080, 1200).expand(30) == TimeWindow(1050, 1230)


def test_window_rejects_empty():
    with pytest.raises(ValueError):
        TimeWindow(600, 600)


def test_window_defaults_duration_and_handles_midnight():
    assert window_for(time(18, 0), None, 120) == TimeWindow(1080, 1200)
    assert window_for(time(18, 0), time(19, 30), 120) == TimeWindow(1080, 1170)
    assert window_for(time(23, 0), time(1, 0), 120) == TimeWindow(1380, 1500)
    # equal start and end reads as a full day
    assert window_for(time(18, 0), time(18, 0), 120) == TimeWindow(1080, 2520)


def test_minutes_until_is_fractional_and_signed():
    now = datetime(2025, 6, 13, 11, 0, 30)
    assert minutes_until(date(2025, 6, 13), time(12, 0), now) == pytest.approx(59.5)
    assert minutes_until(date(2025, 6, 13), time(10, 0), now) < 0


def test_weekday_index_starts_on_sunday():
    assert weekday_index(date(2025, 6, 15)) == 0  # Sunday
    assert weekday_index(date(2025, 6, 16)) == 1  # Monday
    assert weekday_index(date(2025, 6, 14)) == 6  # Saturday


def test_time_in_range_inclusive_and_overnight():
    assert time_in_range(time(9, 0), time(9, 0), time(22, 0))
    assert time_in_range(time(22, 0), time(9, 0), time(22, 0))
    assert not time_in_range(time(22, 1), time(9, 0), time(22, 0))
    assert time_in_range(time(1, 0), time(18, 0), time(2, 0))
    assert not time_in_range(time(3, 0), time(18, 0), time(2, 0))


def test_to_local_naive():
    naive = datetime(2025, 6, 16, 12, 0)
    assert to_local_naive(naive, "Europe/Berlin") is naive
    aware = datetime.fromisoformat("2025-06-16T10:00:00+00:00")
    assert to_local_naive(aware, "Europe/Berlin") == datetime(2025, 6, 16, 12, 0)
    winter = datetime.fromisoformat("2025-01-15T10:00:00+00:00")
    assert to_local_naive(winter, "Europe/Berlin") == datetime(2025, 1, 15, 11, 0)
