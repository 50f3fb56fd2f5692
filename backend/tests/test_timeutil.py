from datetime import time

import pytest

from core.timeutil import (
    compute_end_time,
    format_time_of_day,
    normalize_to_minute_precision,
    parse_time_of_day,
    slot_matches,
)


@pytest.mark.parametrize(
    "start,expected",
    [
        ("09:00", "10:00"),
        ("09:45", "10:45"),
        ("12:30", "13:30"),
        ("23:00", "00:00"),
        ("23:30", "00:30"),
        ("00:00", "01:00"),
    ],
)
def test_compute_end_time_adds_one_hour(start, expected):
    assert compute_end_time(start) == expected


def test_compute_end_time_is_sixty_minutes_later_for_every_minute_of_the_day():
    for minute_of_day in range(24 * 60):
        start = f"{minute_of_day // 60:02d}:{minute_of_day % 60:02d}"
        end = compute_end_time(start)
        end_minutes = int(end[:2]) * 60 + int(end[3:])
        assert end_minutes == (minute_of_day + 60) % (24 * 60)


def test_compute_end_time_accepts_seconds_suffix():
    assert compute_end_time("09:00:00") == "10:00"


@pytest.mark.parametrize(
    "bad", ["", "9:00", "24:00", "12:60", "ab:cd", None, "09:00garbage", "09:00:5", "09:00:75", "09:00:00x"]
)
def test_compute_end_time_rejects_malformed_input(bad):
    with pytest.raises(ValueError):
        compute_end_time(bad)


def test_normalize_to_minute_precision():
    assert normalize_to_minute_precision("09:00:00") == "09:00"
    assert normalize_to_minute_precision("09:00") == "09:00"
    assert normalize_to_minute_precision(None) == ""
    assert normalize_to_minute_precision(900) == ""


@pytest.mark.parametrize(
    "entry_start,slot,expected",
    [
        ("09:00:00", "09:00", True),
        ("09:00", "09:00:00", True),
        ("09:00:00", "10:00", False),
        ("09:30:00", "09:00", False),
        (None, "09:00", False),
    ],
)
def test_slot_matches_compares_minute_prefix(entry_start, slot, expected):
    assert slot_matches(entry_start, slot) is expected


def test_parse_and_format_time_of_day():
    assert parse_time_of_day("14:05") == time(14, 5)
    assert format_time_of_day(time(14, 5)) == "14:05:00"
    assert format_time_of_day("14:05:00") == "14:05:00"
    assert format_time_of_day(None) == ""


def test_parse_time_of_day_accepts_only_a_seconds_suffix():
    assert parse_time_of_day("14:05:30") == time(14, 5)
    with pytest.raises(ValueError):
        parse_time_of_day("09:00garbage")
