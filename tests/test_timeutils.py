"""Unit tests for date and time helpers."""

import pytest
from datetime import date, datetime, time

from errors import ParseError
from timeutils import (
    days_until,
    format_hhmm,
    format_span,
    is_same_day,
    is_weekend,
    minutes_to_time,
    parse_hhmm,
    week_dates,
    weekday_name,
)


def test_days_until_counts_calendar_days():
    assert days_until(date(2026, 10, 29), date(2026, 10, 19)) == 10
    assert days_until(date(2026, 10, 19), date(2026, 10, 19)) == 0
    assert days_until(date(2026, 10, 18), date(2026, 10, 19)) == -1


def test_days_until_ignores_time_of_day():
    # late evening to just after midnight is still one day
    assert days_until(datetime(2026, 10, 20, 0, 5), datetime(2026, 10, 19, 23, 59)) == 1
    assert days_until(datetime(2026, 10, 20, 23, 0), date(2026, 10, 19)) == 1


def test_same_day_and_names():
    assert is_same_day(datetime(2026, 10, 19, 8, 0), date(2026, 10, 19))
    assert not is_same_day(date(2026, 10, 19), date(2026, 10, 20))
    assert weekday_name(date(2026, 10, 19)) == "Monday"
    assert weekday_name(date(2026, 10, 25)) == "Sunday"
    assert is_weekend(date(2026, 10, 24))
    assert not is_weekend(date(2026, 10, 23))


def test_week_dates():
    days = week_dates(date(2026, 10, 19))
    assert len(days) == 7
    assert days[0] == date(2026, 10, 19)
    assert days[-1] == date(2026, 10, 25)


def test_parse_hhmm():
    assert parse_hhmm("17:00") == 17 * 60
    assert parse_hhmm("7:05") == 7 * 60 + 5
    assert parse_hhmm("13:30:00") == 13 * 60 + 30
    assert parse_hhmm("00:00") == 0


@pytest.mark.parametrize("bad", ["25:00", "12:60", "noon", "", "17-00", "1700", None])
def test_parse_hhmm_rejects_malformed(bad):
    with pytest.raises(ParseError):
        parse_hhmm(bad)


def test_parse_error_is_value_error():
    with pytest.raises(ValueError) as exc_info:
        parse_hhmm("9am", "start_time of activity 'Piano'")
    assert "Piano" in str(exc_info.value)


def test_format_hhmm_and_time():
    assert format_hhmm(17 * 60) == "17:00"
    assert format_hhmm(5) == "00:05"
    assert minutes_to_time(18 * 60 + 30).strftime("%H:%M") == "18:30"


def test_end_of_day_formatting():
    assert format_hhmm(24 * 60) == "24:00"
    assert minutes_to_time(24 * 60) == time(23, 59)
    assert format_span(time(23, 30), 30) == "23:30-24:00"
    assert format_span(time(17, 0), 90) == "17:00-18:30"
