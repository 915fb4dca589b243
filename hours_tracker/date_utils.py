"""
Date utility functions for spreadsheet and report dates.

This module converts the date shapes found in human-authored spreadsheets
(serial numbers, "1-Nov" style labels, ISO strings, datetime cells) into
canonical day keys (YYYY-MM-DD), month keys (YYYY-MM) and (month, day) pairs.
"""

import calendar
import math
import re
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple


# Serial 25569 is 1970-01-01 in the 1899-12-30 based spreadsheet calendar
UNIX_EPOCH_SERIAL = 25569
UNIX_EPOCH = date(1970, 1, 1)

# Numeric header cells below this are treated as plain numbers, not dates
HEADER_SERIAL_THRESHOLD = 20000

# News rows need a serial above this before the first cell counts as a date
NEWS_SERIAL_THRESHOLD = 40000

MONTH_ABBREVIATIONS = {
    'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4, 'may': 5, 'jun': 6,
    'jul': 7, 'aug': 8, 'sep': 9, 'oct': 10, 'nov': 11, 'dec': 12,
}

DAY_MONTH_PATTERN = re.compile(r'^(\d{1,2})[-/]([a-zA-Z]{3}|\d{1,2})(?:[-/]\d{2,4})?')
ISO_DATE_PATTERN = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})')

MONTH_KEY_PATTERN = re.compile(r'^(\d{4})-(\d{2})$')


class MonthKeyError(ValueError):
    """Raised when a month key is not in YYYY-MM form."""
    pass


def is_number(value) -> bool:
    """True for int/float cell values; booleans are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def serial_to_date(serial: float) -> date:
    """
    Convert a spreadsheet date serial into a calendar date.

    The fractional (time of day) part is discarded.

    Examples:
        >>> serial_to_date(44866)
        datetime.date(2022, 11, 1)
    """
    days = math.floor(serial) - UNIX_EPOCH_SERIAL
    return UNIX_EPOCH + timedelta(days=days)


def _serial_or_none(serial: float) -> Optional[date]:
    """serial_to_date, or None when the serial lies outside the calendar range."""
    try:
        return serial_to_date(serial)
    except (OverflowError, ValueError):
        return None


def excel_serial_to_iso(serial: float) -> str:
    """Convert a spreadsheet date serial into a YYYY-MM-DD string."""
    return serial_to_date(serial).isoformat()


def parse_header_date(cell) -> Optional[Tuple[int, int]]:
    """
    Interpret a header cell as a calendar day.

    Accepted shapes:
    - Numeric serial greater than 20000 (e.g., 44866)
    - datetime/date cell values (as produced by workbook readers)
    - "<day>-<month>[-<year>]" with a 3-letter English month or a 1-2
      digit month and "-" or "/" separators (e.g., "1-Nov", "01/11/25")
    - ISO strings (e.g., "2025-11-01")

    Args:
        cell: Raw cell value

    Returns:
        (month, day) tuple, or None if the cell is not a date
    """
    if isinstance(cell, datetime):
        return cell.month, cell.day
    if isinstance(cell, date):
        return cell.month, cell.day

    if is_number(cell):
        if not math.isfinite(cell) or cell <= HEADER_SERIAL_THRESHOLD:
            return None
        parsed = _serial_or_none(cell)
        if parsed is None:
            return None
        return parsed.month, parsed.day

    if not isinstance(cell, str):
        return None

    clean = cell.strip()

    match = ISO_DATE_PATTERN.match(clean)
    if match:
        month, day = int(match.group(2)), int(match.group(3))
        return _checked(month, day)

    match = DAY_MONTH_PATTERN.match(clean)
    if not match:
        return None

    day = int(match.group(1))
    month_text = match.group(2).lower()
    if month_text.isdigit():
        month = int(month_text)
    else:
        month = MONTH_ABBREVIATIONS.get(month_text)
        if month is None:
            return None
    return _checked(month, day)


def _checked(month: int, day: int) -> Optional[Tuple[int, int]]:
    if not 1 <= month <= 12:
        return None
    if not 1 <= day <= 31:
        return None
    return month, day


def parse_absolute_date(cell) -> Optional[str]:
    """
    Interpret a cell as a full calendar date for news entries.

    Only serials above 40000 qualify, so small numeric cells (row numbers,
    counts) are never mistaken for dates. datetime/date cells are accepted
    as they are.

    Returns:
        YYYY-MM-DD string or None
    """
    if isinstance(cell, datetime):
        return cell.date().isoformat()
    if isinstance(cell, date):
        return cell.isoformat()
    if is_number(cell) and math.isfinite(cell) and cell > NEWS_SERIAL_THRESHOLD:
        parsed = _serial_or_none(cell)
        return parsed.isoformat() if parsed else None
    return None


def month_key(year: int, month: int) -> str:
    """Format a month key, e.g. month_key(2025, 3) -> "2025-03"."""
    return f"{year}-{month:02d}"


def day_key(year: int, month: int, day: int) -> str:
    """Format a day key, e.g. day_key(2025, 3, 7) -> "2025-03-07"."""
    return f"{year}-{month:02d}-{day:02d}"


def parse_month_key(key: str) -> Tuple[int, int]:
    """
    Split a YYYY-MM month key into (year, month).

    Raises:
        MonthKeyError: If the key is malformed or the month is out of range
    """
    match = MONTH_KEY_PATTERN.match(key.strip()) if isinstance(key, str) else None
    if not match:
        raise MonthKeyError(f"Invalid month key: '{key}' (expected YYYY-MM)")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise MonthKeyError(f"Month out of range in '{key}'")
    return year, month


def month_of_day(day: str) -> str:
    """Month key of a YYYY-MM-DD day key."""
    parsed = datetime.strptime(day, '%Y-%m-%d')
    return month_key(parsed.year, parsed.month)


def shift_month(key: str, delta: int) -> str:
    """
    Move a month key by a number of months, crossing year boundaries.

    Examples:
        >>> shift_month("2025-12", 1)
        '2026-01'
        >>> shift_month("2025-01", -1)
        '2024-12'
    """
    year, month = parse_month_key(key)
    index = year * 12 + (month - 1) + delta
    return month_key(index // 12, index % 12 + 1)


def days_in_month(year: int, month: int) -> List[str]:
    """Every day key of the given month, in order."""
    count = calendar.monthrange(year, month)[1]
    return [day_key(year, month, d) for d in range(1, count + 1)]
