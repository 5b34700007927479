"""
Time Model Module

Canonical handling of clock times and calendar day keys.

Clock times are stored as zero-padded 24-hour "HH:MM" strings. They are
parsed once into minute-of-day integers for comparison and only formatted
back at presentation boundaries.
"""

import re
from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Iterator, List, Optional

HOLIDAY_TOKEN = "HOLIDAY"

MINUTES_PER_DAY = 24 * 60

# 08:05, 8:05, 08:05:59
_TIME_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})(?::(\d{2}))?$')

# 1899-12-30T08:05:00.000Z (spreadsheet time cells serialised as datetimes)
_ISO_DATETIME_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}[T ](\d{2}):(\d{2})')

_DATE_KEY_PATTERN = re.compile(r'^(\d{4})-(\d{2})-(\d{2})')


def parse_time(value) -> Optional[int]:
    """
    Parse a clock time into minutes since midnight.

    Returns None for blank or unparseable values.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    match = _TIME_PATTERN.match(text) or _ISO_DATETIME_PATTERN.match(text)
    if not match:
        return None

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def to_hhmm(minutes: int) -> str:
    """Format minutes since midnight as zero-padded HH:MM."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"minute of day out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(value) -> str:
    """Return the canonical HH:MM form of a time, or "" if there is none."""
    minutes = parse_time(value)
    return to_hhmm(minutes) if minutes is not None else ""


def is_later_than(value: str, threshold: str) -> bool:
    """True if value is a real time strictly after threshold. Blank is never late."""
    minutes = parse_time(value)
    limit = parse_time(threshold)
    if minutes is None or limit is None:
        return False
    return minutes > limit


def is_within(value: int, start: str, end: str) -> bool:
    """
    Inclusive window check on minute-of-day values.

    Raises:
        ValueError: If a window boundary is not a clock time
    """
    low, high = parse_time(start), parse_time(end)
    if low is None or high is None:
        raise ValueError(f"Invalid time window: {start!r} to {end!r}")
    return low <= value <= high


def format_time(value: Optional[str]) -> str:
    """
    Convert a 24-hour time to 12-hour "h:mm AM/PM" for display.

    Blank values, the HOLIDAY token, strings already carrying an AM/PM
    marker and anything unparseable are returned unchanged, so applying
    this twice gives the same result as applying it once.
    """
    if not value or value == HOLIDAY_TOKEN:
        return value or ""
    if 'm' in value.lower():
        return value

    minutes = parse_time(value)
    if minutes is None:
        return value

    hour, minute = divmod(minutes, 60)
    suffix = "PM" if hour >= 12 else "AM"
    hour12 = hour % 12 or 12
    return f"{hour12}:{minute:02d} {suffix}"


def clock_time(moment: datetime) -> str:
    """HH:MM string of a wall-clock moment."""
    return moment.strftime('%H:%M')


# ==============================================================================
# Calendar days
# ==============================================================================
def date_key(day: date) -> str:
    """Local calendar day key (YYYY-MM-DD)."""
    return day.strftime('%Y-%m-%d')


def parse_date_key(value) -> date:
    """
    Parse a YYYY-MM-DD key.

    Surrounding whitespace and a trailing timestamp are tolerated because
    the spreadsheet backend sometimes returns either.

    Raises:
        ValueError: If the value is not a valid calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value or '').strip()
    match = _DATE_KEY_PATTERN.match(text)
    if not match:
        raise ValueError(f"Invalid date: {value!r}")
    return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))


def normalize_date_key(value) -> str:
    """Trimmed YYYY-MM-DD key; unparseable input is returned trimmed as-is."""
    try:
        return date_key(parse_date_key(value))
    except ValueError:
        return str(value or '').strip()


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def days_in_month(year: int, month: int) -> int:
    return monthrange(year, month)[1]


def month_dates(year: int, month: int) -> List[date]:
    return [date(year, month, d) for d in range(1, days_in_month(year, month) + 1)]


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def week_dates(day: date) -> List[date]:
    """Monday to Friday of the week containing day."""
    monday = day - timedelta(days=day.weekday())
    return [monday + timedelta(days=i) for i in range(5)]


WEEKDAY_NAMES = [
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
]


def weekday_name(day: date) -> str:
    return WEEKDAY_NAMES[day.weekday()]
