import re
from datetime import date, datetime, time
from typing import Optional

MINUTES_PER_DAY = 24 * 60

# Accepts "9:00" as well as "09:00"; request schemas enforce the padded form.
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


# =========================
# Clock strings <-> minutes
# =========================
def to_minutes(value) -> Optional[int]:
    """Convert an "HH:mm" string to minutes since midnight.

    Returns None for anything that is not a valid 24-hour clock time, so
    callers can skip the record instead of handling an exception.
    """
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def to_time_string(minutes: int) -> str:
    """Convert minutes since midnight back to a zero-padded "HH:mm" string."""
    if minutes < 0 or minutes >= MINUTES_PER_DAY:
        raise ValueError(f"minutes out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(value) -> Optional[str]:
    minutes = to_minutes(value)
    return None if minutes is None else to_time_string(minutes)


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open interval overlap: [a_start, a_end) vs [b_start, b_end).

    Back-to-back intervals (one ends exactly when the other starts) do not overlap.
    """
    return a_start < b_end and a_end > b_start


# =========================
# Calendar helpers
# =========================
def parse_date(value) -> Optional[date]:
    """Parse a "YYYY-MM-DD" string (or pass through a date). None if invalid."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def day_of_week(day: date) -> int:
    """Weekday index with 0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


def combine(day: date, clock: str) -> datetime:
    """Naive local datetime for a calendar day and an "HH:mm" string."""
    minutes = to_minutes(clock)
    if minutes is None:
        raise ValueError(f"invalid time: {clock!r}")
    return datetime.combine(day, time(minutes // 60, minutes % 60))
