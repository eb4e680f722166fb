"""
Calendar helpers that turn days, months and datetime pairs into inclusive
query windows and their textual interval labels.

Timestamps are naive wall-clock datetimes in the configured zone; no
conversion happens here.
"""

import calendar
from datetime import date, datetime, time

START_OF_DAY = time.min
END_OF_DAY = time.max


def day_window(day: date) -> tuple[datetime, datetime]:
    """Return the first and last representable instants of *day*."""
    return datetime.combine(day, START_OF_DAY), datetime.combine(day, END_OF_DAY)


def month_window(any_day: date) -> tuple[datetime, datetime]:
    """Return the inclusive window covering the whole month that contains *any_day*."""
    last_day = calendar.monthrange(any_day.year, any_day.month)[1]
    first = date(any_day.year, any_day.month, 1)
    last = date(any_day.year, any_day.month, last_day)
    return datetime.combine(first, START_OF_DAY), datetime.combine(last, END_OF_DAY)


def month_label(any_day: date) -> str:
    return f"{any_day.year:04d}-{any_day.month:02d}"


def format_instant(value: datetime) -> str:
    """Render *value* as a compact ISO-8601 local date-time.

    Seconds are dropped when both seconds and the fraction are zero, and the
    fraction is printed in milliseconds when it has no sub-millisecond part:
    ``2022-01-01T00:00``, ``2022-01-01T00:00:01``, ``2022-01-01T00:00:01.500``.
    """
    text = value.strftime("%Y-%m-%dT%H:%M")
    if value.second == 0 and value.microsecond == 0:
        return text
    text += f":{value.second:02d}"
    if value.microsecond == 0:
        return text
    if value.microsecond % 1000 == 0:
        return f"{text}.{value.microsecond // 1000:03d}"
    return f"{text}.{value.microsecond:06d}"


def range_label(start: datetime, end: datetime) -> str:
    return f"{format_instant(start)} - {format_instant(end)}"
