#!/usr/bin/env python3
"""
entry_manager.py
--------------------
Manager for Entry CRUD operations.

Entries are the observations recorded on a date: bowel movements and
free-form notes. They never store day tags; the tags of an entry are the
tags of its date, joined in at read time by the tag filter.

Key Features:
    - Validated creation of bowel movement and note entries
    - Lookups by id, single date, inclusive range or explicit date set
    - Partial updates that keep the ordering timestamp in sync
    - Counting and deletion

Usage:
    entry_mgr = EntryManager(session, logger)
    entry = entry_mgr.create_bowel_movement({
        "date": "2025-10-25", "time": "08:30", "consistency": 4, "urgency": 2,
    })
    entry_mgr.get_for_date("2025-10-25")
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Collection, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from tracker.core.exceptions import EntryNotFoundError
from tracker.core.logging_manager import TrackerLogger, safe_logger
from tracker.core.validators import DataValidator
from tracker.database.decorators import handle_db_errors, log_database_operation
from tracker.database.models import BowelMovement, Entry, EntryType, Note, NoteCategory
from tracker.utils.dates import (
    format_date,
    generate_timestamp,
    parse_date,
    parse_optional_date,
    validate_range,
)

from .base_manager import BaseManager


class EntryManager(BaseManager):
    """
    Manager for Entry CRUD operations.

    Each entry owns exactly one payload row: a BowelMovement for
    ``bowel_movement`` entries or a Note for ``note`` entries. Reads always
    load the payload together with the entry.
    """

    def __init__(
        self,
        session: Session,
        logger: Optional[TrackerLogger] = None,
        today: Optional[date] = None,
    ):
        """
        Initialize EntryManager.

        Args:
            session: SQLAlchemy session
            logger: Optional logger for operation tracking
            today: Reference date for the future-date check (defaults to
                the current date at validation time)
        """
        super().__init__(session, logger)
        self.today = today

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("create_bowel_movement")
    def create_bowel_movement(self, data: Dict[str, Any]) -> Entry:
        """
        Record a bowel movement.

        Args:
            data: Dict with keys
                - date (str | date): YYYY-MM-DD, not in the future
                - time (str): HH:MM, 24-hour
                - consistency (int): Bristol scale 1..7
                - urgency (int): 1..4
                - notes (str, optional): up to 500 characters

        Returns:
            The new Entry with its bowel_movement payload

        Raises:
            EntryValidationError: Listing every field that failed
        """
        DataValidator.validate_bowel_movement(data, self.today)
        entry_date = parse_date(data["date"])

        def _do_create():
            entry = Entry(
                type=EntryType.BOWEL_MOVEMENT,
                date=entry_date,
                time=data["time"],
                timestamp=generate_timestamp(entry_date, data["time"]),
            )
            entry.bowel_movement = BowelMovement(
                consistency=data["consistency"],
                urgency=data["urgency"],
                notes=DataValidator.normalize_string(data.get("notes")),
            )
            self.session.add(entry)
            self.session.flush()
            return entry

        entry = self._execute_with_retry(_do_create)
        safe_logger(self.logger).log_debug(
            "Created bowel movement entry",
            {"entry_id": entry.id, "date": format_date(entry_date)},
        )
        return entry

    @handle_db_errors
    @log_database_operation("create_note")
    def create_note(self, data: Dict[str, Any]) -> Entry:
        """
        Record a free-form note.

        Args:
            data: Dict with keys
                - date (str | date): YYYY-MM-DD, not in the future
                - time (str): HH:MM, 24-hour
                - category (str): food, exercise, medication or other
                - content (str): 1..1000 characters
                - tags (str, optional): comma-separated, up to 200 characters

        Returns:
            The new Entry with its note payload

        Raises:
            EntryValidationError: Listing every field that failed
        """
        DataValidator.validate_note(data, self.today)
        entry_date = parse_date(data["date"])

        def _do_create():
            entry = Entry(
                type=EntryType.NOTE,
                date=entry_date,
                time=data["time"],
                timestamp=generate_timestamp(entry_date, data["time"]),
            )
            entry.note = Note(
                category=NoteCategory(data["category"]),
                content=data["content"].strip(),
                tags=DataValidator.normalize_string(data.get("tags")),
            )
            self.session.add(entry)
            self.session.flush()
            return entry

        entry = self._execute_with_retry(_do_create)
        safe_logger(self.logger).log_debug(
            "Created note entry",
            {"entry_id": entry.id, "date": format_date(entry_date)},
        )
        return entry

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("get_entry")
    def get(self, entry_id: int) -> Optional[Entry]:
        """Retrieve an entry by ID, or None."""
        return self._get_by_id(Entry, entry_id)

    @handle_db_errors
    @log_database_operation("get_entries_for_date")
    def get_for_date(self, day: Any) -> List[Entry]:
        """Entries recorded on one date, oldest first."""
        day = parse_date(day)
        stmt = self._select().where(Entry.date == day).order_by(Entry.timestamp.asc())
        return list(self.session.scalars(stmt))

    @handle_db_errors
    @log_database_operation("get_entries_in_range")
    def get_in_range(self, start_date: Any, end_date: Any) -> List[Entry]:
        """
        Entries between two dates (inclusive), oldest first.

        Raises:
            ValidationError: If a bound is malformed or start is after end
        """
        start, end = parse_date(start_date), parse_date(end_date)
        validate_range(start, end)
        stmt = (
            self._select()
            .where(Entry.date.between(start, end))
            .order_by(Entry.timestamp.asc())
        )
        return list(self.session.scalars(stmt))

    @handle_db_errors
    @log_database_operation("get_entries_for_dates")
    def get_for_dates(
        self,
        dates: Collection[date],
        start_date: Optional[Any] = None,
        end_date: Optional[Any] = None,
        newest_first: bool = True,
        entry_type: Optional[EntryType] = None,
    ) -> List[Entry]:
        """
        Entries recorded on any of the given dates.

        Args:
            dates: Dates to include
            start_date: Optional inclusive lower bound
            end_date: Optional inclusive upper bound
            newest_first: Order by timestamp descending (default) or ascending
            entry_type: Restrict to one EntryType

        Returns:
            List of Entry objects (empty when ``dates`` is empty)
        """
        if not dates:
            return []

        stmt = self._select().where(Entry.date.in_(list(dates)))

        start = parse_optional_date(start_date)
        end = parse_optional_date(end_date)
        if start is not None:
            stmt = stmt.where(Entry.date >= start)
        if end is not None:
            stmt = stmt.where(Entry.date <= end)
        if entry_type is not None:
            stmt = stmt.where(Entry.type == entry_type)

        order = Entry.timestamp.desc() if newest_first else Entry.timestamp.asc()
        return list(self.session.scalars(stmt.order_by(order, Entry.id)))

    @handle_db_errors
    @log_database_operation("count_entries")
    def count(self, start_date: Optional[Any] = None, end_date: Optional[Any] = None) -> int:
        """Number of entries, optionally within an inclusive date range."""
        stmt = select(func.count(Entry.id))
        start = parse_optional_date(start_date)
        end = parse_optional_date(end_date)
        if start is not None:
            stmt = stmt.where(Entry.date >= start)
        if end is not None:
            stmt = stmt.where(Entry.date <= end)
        return self.session.scalar(stmt) or 0

    # -------------------------------------------------------------------------
    # Updates and deletion
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("update_bowel_movement")
    def update_bowel_movement(self, entry_id: int, changes: Dict[str, Any]) -> Entry:
        """
        Apply a partial update to a bowel movement entry.

        Args:
            entry_id: Entry to update
            changes: Any of date, time, consistency, urgency, notes

        Returns:
            The updated Entry

        Raises:
            EntryNotFoundError: If no bowel movement entry has this ID
            EntryValidationError: If the merged values fail validation
        """
        entry = self._require(entry_id, EntryType.BOWEL_MOVEMENT)
        payload = entry.bowel_movement

        merged = {
            "date": format_date(entry.date),
            "time": entry.time,
            "consistency": payload.consistency,
            "urgency": payload.urgency,
            "notes": payload.notes,
        }
        merged.update(changes)
        DataValidator.validate_bowel_movement(merged, self.today)

        def _do_update():
            self._apply_date_time(entry, merged)
            payload.consistency = merged["consistency"]
            payload.urgency = merged["urgency"]
            payload.notes = DataValidator.normalize_string(merged.get("notes"))
            self.session.flush()
            return entry

        return self._execute_with_retry(_do_update)

    @handle_db_errors
    @log_database_operation("update_note")
    def update_note(self, entry_id: int, changes: Dict[str, Any]) -> Entry:
        """
        Apply a partial update to a note entry.

        Args:
            entry_id: Entry to update
            changes: Any of date, time, category, content, tags

        Returns:
            The updated Entry

        Raises:
            EntryNotFoundError: If no note entry has this ID
            EntryValidationError: If the merged values fail validation
        """
        entry = self._require(entry_id, EntryType.NOTE)
        payload = entry.note

        merged = {
            "date": format_date(entry.date),
            "time": entry.time,
            "category": payload.category.value,
            "content": payload.content,
            "tags": payload.tags,
        }
        merged.update(changes)
        DataValidator.validate_note(merged, self.today)

        def _do_update():
            self._apply_date_time(entry, merged)
            payload.category = NoteCategory(merged["category"])
            payload.content = merged["content"].strip()
            payload.tags = DataValidator.normalize_string(merged.get("tags"))
            self.session.flush()
            return entry

        return self._execute_with_retry(_do_update)

    @handle_db_errors
    @log_database_operation("delete_entry")
    def delete(self, entry_id: int) -> None:
        """
        Permanently delete an entry and its payload.

        Raises:
            EntryNotFoundError: If no entry has this ID
        """
        entry = self._get_by_id(Entry, entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)

        def _do_delete():
            self.session.delete(entry)
            self.session.flush()

        self._execute_with_retry(_do_delete)
        safe_logger(self.logger).log_info(
            f"Deleted entry {entry_id}", {"date": format_date(entry.date)}
        )

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    @staticmethod
    def _select():
        return select(Entry).options(
            selectinload(Entry.bowel_movement), selectinload(Entry.note)
        )

    def _require(self, entry_id: int, entry_type: EntryType) -> Entry:
        entry = self._get_by_id(Entry, entry_id)
        if entry is None or entry.type is not entry_type:
            raise EntryNotFoundError(entry_id)
        return entry

    @staticmethod
    def _apply_date_time(entry: Entry, values: Dict[str, Any]) -> None:
        """Write date and time back and recompute the ordering timestamp."""
        new_date = parse_date(values["date"])
        if new_date != entry.date or values["time"] != entry.time:
            entry.date = new_date
            entry.time = values["time"]
            entry.timestamp = generate_timestamp(new_date, values["time"])
        entry.updated_at = datetime.now(timezone.utc)
