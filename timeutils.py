from __future__ import annotations
import re
from datetime import date, datetime, time, timedelta
from typing import List
from errors import ParseError


DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
MINUTES_PER_DAY = 24 * 60

_HHMM = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def days_until(target: date | datetime, from_date: date | datetime) -> int:
    # both sides normalised to midnight, so the ceiling is the plain day delta
    return (_as_date(target) - _as_date(from_date)).days


def is_same_day(a: date | datetime, b: date | datetime) -> bool:
    return _as_date(a) == _as_date(b)


def weekday_name(d: date | datetime) -> str:
    return DAY_NAMES[_as_date(d).weekday()]


def is_weekend(d: date | datetime) -> bool:
    return _as_date(d).weekday() >= 5


def week_dates(start: date, num_days: int = 7) -> List[date]:
    return [start + timedelta(days=i) for i in range(num_days)]


def parse_hhmm(value: str, field: str = "time") -> int:
    """
    Parse "HH:MM" (optionally "HH:MM:SS", seconds ignored) into minutes after
    midnight. Anything else raises ParseError, never a silent default.
    """
    if not isinstance(value, str):
        raise ParseError(value, field)
    match = _HHMM.match(value)
    if not match:
        raise ParseError(value, field)
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ParseError(value, field)
    return hours * 60 + minutes


def format_hhmm(minutes: int) -> str:
    """Minutes after midnight as "HH:MM"; the end of the day prints as "24:00"."""
    minutes = max(0, min(MINUTES_PER_DAY, int(minutes)))
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_span(start: time, duration_minutes: int) -> str:
    """Start-end label whose end comes from the duration, so midnight shows as 24:00."""
    begin = time_to_minutes(start)
    return f"{format_hhmm(begin)}-{format_hhmm(begin + duration_minutes)}"


def minutes_to_time(minutes: int) -> time:
    """
    datetime.time cannot hold 24:00, so minutes are clamped to 00:00-23:59.
    A block ending at midnight therefore reads 23:59; its duration_minutes
    stays exact and is what format_span uses.
    """
    minutes = max(0, min(MINUTES_PER_DAY - 1, int(minutes)))
    return time(hour=minutes // 60, minute=minutes % 60)


def time_to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute
