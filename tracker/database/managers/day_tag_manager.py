#!/usr/bin/env python3
"""
day_tag_manager.py
--------------------
Manages the links between day tags and calendar dates.

Every association insert or delete is paired with the matching change to
the owning tag's usage_count, and both statements run inside one SAVEPOINT:
either both are written or neither is.

Key Features:
    - Add a tag to a date (duplicate and per-day capacity checks)
    - Remove a tag from a date (counter floored at zero)
    - Tags for a date, dates for a tag, month projections
    - Usage counter repair from the association table

Usage:
    day_mgr = DayTagManager(session, logger)

    day_mgr.add_to_day(tag.id, "2025-10-25")
    day_mgr.tags_for_date("2025-10-25")        # [<DayTag vacation>]
    day_mgr.tagged_dates_in_month(2025, 10)    # {date(2025, 10, 25): ["Vacation"]}
    day_mgr.remove_from_day(tag.id, "2025-10-25")
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import date
from typing import Any, Dict, List, Optional

# --- Third party imports ---
from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError

# --- Local imports ---
from tracker.core.exceptions import (
    DuplicateAssociationError,
    MaxTagsExceededError,
    TagNotFoundError,
)
from tracker.core.logging_manager import safe_logger
from tracker.database.decorators import (
    DatabaseOperation,
    handle_db_errors,
    log_database_operation,
)
from tracker.database.models import DayTag, DayTagAssociation
from tracker.utils.dates import month_bounds, parse_date, parse_optional_date, validate_range
from tracker.utils.tags import MAX_TAGS_PER_DAY

from .base_manager import BaseManager


class DayTagManager(BaseManager):
    """
    Manages the day_tag_associations table and the usage counters it drives.

    Dates may be passed as ``date`` objects or ``YYYY-MM-DD`` strings.
    """

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("add_tag_to_day")
    def add_to_day(self, tag_id: int, day: Any) -> DayTagAssociation:
        """
        Apply a tag to a date.

        Checks run in this order: date format, tag existence, duplicate
        pair, day capacity.

        Args:
            tag_id: Tag to apply
            day: Date to tag

        Returns:
            The new DayTagAssociation

        Raises:
            ValidationError: If day is not a valid YYYY-MM-DD date
            TagNotFoundError: If no tag has this ID
            DuplicateAssociationError: If the tag is already on this date
            MaxTagsExceededError: If the date already has MAX_TAGS_PER_DAY tags
        """
        day = parse_date(day)

        tag = self.session.get(DayTag, tag_id)
        if tag is None:
            raise TagNotFoundError(tag_id)

        if self._find(tag_id, day) is not None:
            raise DuplicateAssociationError(tag.display_name, day)

        current = self.count_for_date(day)
        if current >= MAX_TAGS_PER_DAY:
            raise MaxTagsExceededError(day, MAX_TAGS_PER_DAY)

        try:
            with self._atomic():
                association = DayTagAssociation(tag=tag, date=day)
                self.session.add(association)
                self.session.flush()
                self.session.execute(
                    update(DayTag)
                    .where(DayTag.id == tag.id)
                    .values(usage_count=DayTag.usage_count + 1)
                    .execution_options(synchronize_session=False)
                )
        except IntegrityError as e:
            raise DuplicateAssociationError(tag.display_name, day) from e

        self.session.refresh(tag)

        safe_logger(self.logger).log_debug(
            f"Tagged {day} with {tag.display_name}",
            {"tag_id": tag.id, "date": day.isoformat(), "tags_on_day": current + 1},
        )
        return association

    @handle_db_errors
    @log_database_operation("remove_tag_from_day")
    def remove_from_day(self, tag_id: int, day: Any) -> bool:
        """
        Remove a tag from a date.

        Removing an association that does not exist is a no-op: nothing is
        deleted and no counter changes.

        Args:
            tag_id: Tag to remove
            day: Date to untag

        Returns:
            True if an association was removed, False if there was none

        Raises:
            ValidationError: If day is not a valid YYYY-MM-DD date
        """
        day = parse_date(day)

        association = self._find(tag_id, day)
        if association is None:
            return False

        with self._atomic():
            self.session.delete(association)
            self.session.flush()
            self.session.execute(
                update(DayTag)
                .where(DayTag.id == tag_id)
                .values(
                    usage_count=case(
                        (DayTag.usage_count > 0, DayTag.usage_count - 1),
                        else_=0,
                    )
                )
                .execution_options(synchronize_session=False)
            )

        tag = self.session.get(DayTag, tag_id)
        if tag is not None:
            self.session.refresh(tag)

        safe_logger(self.logger).log_debug(
            "Removed tag from day", {"tag_id": tag_id, "date": day.isoformat()}
        )
        return True

    def recount_usage(self) -> Dict[int, int]:
        """
        Reset every tag's usage_count to its live association count.

        Returns:
            Mapping of tag_id to corrected count, for tags that had drifted
        """
        with DatabaseOperation(self.logger, "recount_usage", log_start=True):
            counts = dict(
                self.session.execute(
                    select(DayTagAssociation.tag_id, func.count(DayTagAssociation.id))
                    .group_by(DayTagAssociation.tag_id)
                ).all()
            )

            corrections: Dict[int, int] = {}
            with self._atomic():
                for tag in self.session.scalars(select(DayTag)):
                    actual = counts.get(tag.id, 0)
                    if tag.usage_count != actual:
                        corrections[tag.id] = actual
                        tag.usage_count = actual

            if corrections:
                safe_logger(self.logger).log_warning(
                    "Corrected tag usage counts",
                    {"corrections": {str(k): v for k, v in corrections.items()}},
                )
            return corrections

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("get_tags_for_date")
    def tags_for_date(self, day: Any) -> List[DayTag]:
        """
        Tags applied to a date, ordered by display name.

        Args:
            day: Date to look up

        Returns:
            List of DayTag (empty if the date is untagged)
        """
        day = parse_date(day)
        stmt = (
            select(DayTag)
            .join(DayTagAssociation, DayTagAssociation.tag_id == DayTag.id)
            .where(DayTagAssociation.date == day)
            .order_by(DayTag.display_name.asc())
        )
        return list(self.session.scalars(stmt))

    @handle_db_errors
    @log_database_operation("get_dates_for_tag")
    def dates_for_tag(
        self,
        tag_id: int,
        start_date: Optional[Any] = None,
        end_date: Optional[Any] = None,
    ) -> List[date]:
        """
        Dates carrying a tag, in chronological order.

        Args:
            tag_id: Tag to look up
            start_date: Optional inclusive lower bound
            end_date: Optional inclusive upper bound

        Returns:
            List of dates (empty for an unknown or unused tag)

        Raises:
            ValidationError: If a bound is malformed or start is after end
        """
        start = parse_optional_date(start_date)
        end = parse_optional_date(end_date)
        if start is not None and end is not None:
            validate_range(start, end)

        stmt = select(DayTagAssociation.date).where(DayTagAssociation.tag_id == tag_id)
        if start is not None:
            stmt = stmt.where(DayTagAssociation.date >= start)
        if end is not None:
            stmt = stmt.where(DayTagAssociation.date <= end)

        return list(self.session.scalars(stmt.order_by(DayTagAssociation.date.asc())))

    @handle_db_errors
    @log_database_operation("get_tagged_dates_in_month")
    def tagged_dates_in_month(self, year: int, month: int) -> Dict[date, List[str]]:
        """
        Tagged dates of one month with their tags' display names.

        Untagged dates are omitted. Dates come out in chronological order
        and each name list is sorted by display name.

        Args:
            year: Calendar year
            month: Month number, 1-12

        Returns:
            Mapping of date to list of display names

        Raises:
            ValidationError: If month or year is out of range
        """
        first, last = month_bounds(year, month)
        stmt = (
            select(DayTagAssociation.date, DayTag.display_name)
            .join(DayTag, DayTag.id == DayTagAssociation.tag_id)
            .where(DayTagAssociation.date.between(first, last))
            .order_by(DayTagAssociation.date.asc(), DayTag.display_name.asc())
        )

        result: Dict[date, List[str]] = {}
        for day, display_name in self.session.execute(stmt):
            result.setdefault(day, []).append(display_name)
        return result

    def count_for_date(self, day: Any) -> int:
        """Number of tags applied to a date."""
        day = parse_date(day)
        return self._count(DayTagAssociation, date=day)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _find(self, tag_id: int, day: date) -> Optional[DayTagAssociation]:
        """Association for (tag_id, day), or None."""
        return self.session.scalars(
            select(DayTagAssociation).where(
                DayTagAssociation.tag_id == tag_id,
                DayTagAssociation.date == day,
            )
        ).first()
