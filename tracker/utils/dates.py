#!/usr/bin/env python3
"""
dates.py
-------------------
Calendar date and clock time helpers.

Dates travel through the system as ``datetime.date`` objects; at the edges
(CLI arguments, config, exports) they are ``YYYY-MM-DD`` strings. Times are
``HH:MM`` strings on a 24-hour clock.
"""
from __future__ import annotations

import calendar
import re
from datetime import date, datetime
from typing import Any, Optional, Tuple

from tracker.core.exceptions import ValidationError

DATE_FORMAT = "%Y-%m-%d"
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
TIME_PATTERN = re.compile(r"([01]?[0-9]|2[0-3]):[0-5][0-9]")


def parse_date(value: Any) -> date:
    """
    Convert a ``YYYY-MM-DD`` string or a date into a date.

    Args:
        value: String, date or datetime

    Returns:
        The calendar date

    Raises:
        ValidationError: If the value is not a real calendar date in
            ``YYYY-MM-DD`` form

    Examples:
        >>> parse_date("2025-10-25")
        datetime.date(2025, 10, 25)
        >>> parse_date("2025-02-30")
        Traceback (most recent call last):
        ...
        tracker.core.exceptions.ValidationError: Invalid date: 2025-02-30
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
        raise ValidationError(
            f"Date must be in YYYY-MM-DD format: {value!r}",
            [{"field": "date", "message": "Date must be in YYYY-MM-DD format",
              "code": "INVALID_DATE_FORMAT"}],
        )
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as e:
        raise ValidationError(
            f"Invalid date: {value}",
            [{"field": "date", "message": "Invalid date", "code": "INVALID_DATE"}],
        ) from e


def parse_optional_date(value: Any) -> Optional[date]:
    """Like parse_date, but passes None through."""
    return None if value is None else parse_date(value)


def format_date(value: date) -> str:
    """Render a date as ``YYYY-MM-DD``."""
    return value.strftime(DATE_FORMAT)


def is_valid_time(value: Any) -> bool:
    """Check for an ``HH:MM`` 24-hour clock time."""
    return isinstance(value, str) and TIME_PATTERN.fullmatch(value) is not None


def generate_timestamp(entry_date: Any, entry_time: str) -> datetime:
    """
    Combine an entry's date and ``HH:MM`` time into a sortable timestamp.

    Raises:
        ValidationError: If either part is malformed
    """
    day = parse_date(entry_date)
    if not is_valid_time(entry_time):
        raise ValidationError(f"Time must be in HH:MM format (24-hour): {entry_time!r}")
    hours, minutes = entry_time.split(":")
    return datetime(day.year, day.month, day.day, int(hours), int(minutes))


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """
    First and last day of a calendar month.

    Raises:
        ValidationError: If month is outside 1..12 or year outside 1..9999

    Examples:
        >>> month_bounds(2024, 2)
        (datetime.date(2024, 2, 1), datetime.date(2024, 2, 29))
    """
    if not 1 <= month <= 12:
        raise ValidationError(f"Month must be between 1 and 12: {month}")
    if not 1 <= year <= 9999:
        raise ValidationError(f"Year out of range: {year}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def validate_range(start: date, end: date) -> None:
    """Raise ValidationError when start falls after end."""
    if start > end:
        raise ValidationError(f"Start date {start} is after end date {end}")
