from __future__ import annotations

from datetime import time


MINUTES_PER_DAY = 24 * 60
PERIOD_MINUTES = 60


def normalize_to_minute_precision(value) -> str:
    """Return the "HH:MM" prefix of a time-of-day string.

    Accepts "09:00" as well as Postgres' "09:00:00". Anything that is not a
    string normalizes to "" so a bad row simply matches no slot.
    """

    if not isinstance(value, str):
        return ""
    return value.strip()[:5]


def slot_matches(entry_start_time, slot_label) -> bool:
    # Prefix comparison only; slot labels and stored times share zero-padded HH:MM.
    key = normalize_to_minute_precision(entry_start_time)
    return bool(key) and key == normalize_to_minute_precision(slot_label)


def _split_hh_mm(value: str) -> tuple[int, int]:
    if not isinstance(value, str):
        raise ValueError(f"invalid time of day: {value!r}")
    text = value.strip()
    head, rest = text[:5], text[5:]
    if len(head) != 5 or head[2] != ":" or not (head[:2].isdigit() and head[3:].isdigit()):
        raise ValueError(f"invalid time of day: {value!r}")
    # Only an optional ":SS" may follow, as Postgres renders time columns.
    if rest and not (len(rest) == 3 and rest[0] == ":" and rest[1:].isdigit() and int(rest[1:]) < 60):
        raise ValueError(f"invalid time of day: {value!r}")
    hours, minutes = int(head[:2]), int(head[3:])
    if hours > 23 or minutes > 59:
        raise ValueError(f"invalid time of day: {value!r}")
    return hours, minutes


def compute_end_time(start_time: str) -> str:
    """Start time plus one period, as "HH:MM" on a 24-hour clock.

    Wraps past midnight without tracking the day ("23:30" -> "00:30").
    """

    hours, minutes = _split_hh_mm(start_time)
    total = (hours * 60 + minutes + PERIOD_MINUTES) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def parse_time_of_day(value: str) -> time:
    hours, minutes = _split_hh_mm(value)
    return time(hours, minutes)


def format_time_of_day(value: time | str | None) -> str:
    """Render a ``time`` column the way Postgres returns it over the wire ("HH:MM:SS")."""

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return value.strftime("%H:%M:%S")
