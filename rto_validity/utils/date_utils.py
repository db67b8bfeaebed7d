"""Date manipulation utilities"""

import calendar
from datetime import date, timedelta


def shift_date(start: date, years: int = 0, months: int = 0, days: int = 0) -> date:
    """
    Move a calendar date by whole years, months and days.

    A day that does not exist in the target month rolls over into the next
    month (29-02-2024 + 1 year -> 01-03-2025), the way office software that
    set the year on a date object has always behaved.
    """
    month_index = start.month - 1 + months
    year = start.year + years + month_index // 12
    month = month_index % 12 + 1

    last_day = calendar.monthrange(year, month)[1]
    shifted = date(year, month, min(start.day, last_day))
    overflow = start.day - last_day
    if overflow > 0:
        shifted += timedelta(days=overflow)

    return shifted + timedelta(days=days)


def days_between(start: date, end: date) -> int:
    """Signed whole days from start to end (negative when end is earlier)"""
    return (end - start).days
