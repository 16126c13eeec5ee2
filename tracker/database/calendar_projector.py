#!/usr/bin/env python3
"""
calendar_projector.py
---------------------
Month views of tagged dates for calendar rendering.

A calendar only needs to know which dates of the displayed month carry
tags and which ones. Those views are cached per (year, month) and dropped
whenever an association on a date of that month changes.

Usage:
    projector = CalendarProjector(logger)

    with db.session_scope() as session:
        month = projector.get_month(session, 2025, 10)
        # {date(2025, 10, 25): ["Vacation"], date(2025, 10, 26): ["Vacation"]}

    projector.invalidate(date(2025, 10, 25))   # after a tag change that day
    projector.invalidate()                     # after deleting a tag
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

# --- Third party imports ---
from sqlalchemy.orm import Session

# --- Local imports ---
from tracker.core.logging_manager import TrackerLogger, safe_logger
from tracker.database.managers import DayTagManager
from tracker.utils.dates import month_bounds, parse_date

MonthView = Dict[date, List[str]]


class CalendarProjector:
    """Read-through cache over DayTagManager.tagged_dates_in_month."""

    def __init__(self, logger: Optional[TrackerLogger] = None) -> None:
        self.logger = logger
        self._cache: Dict[Tuple[int, int], MonthView] = {}

    def get_month(self, session: Session, year: int, month: int) -> MonthView:
        """
        Tagged dates of a month mapped to their tags' display names.

        Args:
            session: SQLAlchemy session used on a cache miss
            year: Calendar year
            month: Month number, 1-12

        Returns:
            Mapping of date to display names; untagged dates are absent.
            The caller gets a copy and may modify it freely.

        Raises:
            ValidationError: If month or year is out of range
        """
        month_bounds(year, month)
        key = (year, month)

        if key not in self._cache:
            self._cache[key] = DayTagManager(session, self.logger).tagged_dates_in_month(
                year, month
            )
            safe_logger(self.logger).log_debug(
                "Cached month view", {"year": year, "month": month, "dates": len(self._cache[key])}
            )

        return {day: list(names) for day, names in self._cache[key].items()}

    def invalidate(self, day: Optional[Any] = None) -> None:
        """
        Drop cached views.

        Args:
            day: A date (or YYYY-MM-DD string) whose month should be dropped.
                None drops every cached month.
        """
        if day is None:
            self._cache.clear()
            return
        day = parse_date(day)
        self._cache.pop((day.year, day.month), None)

    def is_cached(self, year: int, month: int) -> bool:
        return (year, month) in self._cache
