"""
Date normalizer for hand-typed office dates.

Staff type dates as DD-MM-YYYY, DD/MM/YYYY, DD-MM-YY or as bare digits
while the field reformats itself. Everything is reduced to a calendar date
and rendered back as DD-MM-YYYY.
"""

import re
from datetime import date
from typing import Union

from rto_validity.config import settings
from rto_validity.domain.exceptions import NormalizationError

DISPLAY_FORMAT = "%d-%m-%Y"

_SEPARATOR = re.compile(r"[-/]")
_NON_DIGIT = re.compile(r"[^\d]")
_MIN_YEAR = 1900
_MAX_YEAR = 2100


def expand_year(value: int, pivot: int | None = None) -> int:
    """Two-digit year to four digits: 00-50 -> 2000-2050, 51-99 -> 1951-1999"""
    pivot = settings.two_digit_year_pivot if pivot is None else pivot
    return 2000 + value if value <= pivot else 1900 + value


def format_date(value: date) -> str:
    return value.strftime(DISPLAY_FORMAT)


def normalize(raw: Union[str, date]) -> date:
    """
    Parse a complete date string into a calendar date.

    Accepts "-" or "/" separators, 1-2 digit day and month, and a 2 or 4
    digit year. ISO "YYYY-MM-DD" as produced by date inputs is accepted too.
    Already-parsed dates pass through unchanged.

    Raises:
        NormalizationError: When the input is not three numeric components
            or the components do not form a real calendar date.
    """
    if isinstance(raw, date):
        return raw
    if raw is None or not str(raw).strip():
        raise NormalizationError("" if raw is None else raw, "date is empty")

    parts = [p.strip() for p in _SEPARATOR.split(str(raw).strip())]
    if len(parts) != 3 or not all(parts):
        raise NormalizationError(raw, "expected DD-MM-YYYY")
    if not all(p.isdigit() for p in parts):
        raise NormalizationError(raw, "date components must be numeric")

    if len(parts[0]) == 4:
        year_part, month_part, day_part = parts
    else:
        day_part, month_part, year_part = parts

    if len(day_part) > 2 or len(month_part) > 2:
        raise NormalizationError(raw, "day and month take at most two digits")

    if len(year_part) == 2:
        year = expand_year(int(year_part))
    elif len(year_part) == 4:
        year = int(year_part)
    else:
        raise NormalizationError(raw, "year must have 2 or 4 digits")

    if not _MIN_YEAR <= year <= _MAX_YEAR:
        raise NormalizationError(raw, f"year {year} out of range")

    try:
        return date(year, int(month_part), int(day_part))
    except ValueError as e:
        raise NormalizationError(raw, "not a calendar date") from e


def normalize_to_string(raw: Union[str, date]) -> str:
    """Canonical DD-MM-YYYY rendering of any accepted input"""
    return format_date(normalize(raw))


def format_date_input(value: str) -> str:
    """
    Reformat a date field on every keystroke.

    Examples:
        "5"        -> "05-"        (no day starts with 4-9)
        "0711"     -> "07-11-"
        "07112"    -> "07-11-2"
        "071125"   -> "07-11-2025" (two-digit year expanded)
        "451399"   -> "31-12-1999" (day and month clamped)

    The result is always a parseable intermediate state; nothing is
    validated against the calendar here.
    """
    digits = _NON_DIGIT.sub("", value or "")[:8]

    # Day: a lone 4-9 can only be a single-digit day
    if len(digits) == 1 and int(digits[0]) >= 4:
        digits = "0" + digits
    if len(digits) >= 2:
        day = int(digits[:2])
        if day > 31:
            digits = "31" + digits[2:]
        elif day == 0:
            digits = "01" + digits[2:]

    # Month: a lone 2-9 can only be a single-digit month
    if len(digits) == 3 and int(digits[2]) >= 2:
        digits = digits[:2] + "0" + digits[2]
    if len(digits) >= 4:
        month = int(digits[2:4])
        if month > 12:
            digits = digits[:2] + "12" + digits[4:]
        elif month == 0:
            digits = digits[:2] + "01" + digits[4:]

    if not digits:
        return ""
    if len(digits) <= 2:
        return digits + "-" if len(digits) == 2 else digits
    if len(digits) <= 4:
        formatted = f"{digits[:2]}-{digits[2:]}"
        return formatted + "-" if len(digits) == 4 else formatted

    if len(digits) == 6:
        return f"{digits[:2]}-{digits[2:4]}-{expand_year(int(digits[4:6]))}"
    return f"{digits[:2]}-{digits[2:4]}-{digits[4:]}"


def complete_date_input(value: str) -> str:
    """
    Finish a date field when it loses focus.

    Pads single-digit day and month, clamps them into 01-31 / 01-12 and
    expands a two-digit year. ISO "YYYY-MM-DD" is reordered to DD-MM-YYYY. Only rewrites the value when exactly three
    non-empty components are present and the year ends up with four
    digits; any other partial input is returned unchanged so the user can
    keep editing.
    """
    if not value:
        return value

    candidate = value.strip()
    if not _SEPARATOR.search(candidate) and candidate.isdigit():
        candidate = format_date_input(candidate)

    parts = _SEPARATOR.split(candidate)
    if len(parts) != 3 or not all(parts) or not all(p.isdigit() for p in parts):
        return value

    # ISO "YYYY-MM-DD" from date inputs
    if len(parts[0]) == 4:
        year, month_part, day_part = parts
    else:
        day_part, month_part, year = parts

    day = min(max(int(day_part), 1), 31)
    month = min(max(int(month_part), 1), 12)
    if len(year) == 2:
        year = str(expand_year(int(year)))

    if len(year) != 4:
        return value
    return f"{day:02d}-{month:02d}-{year}"
