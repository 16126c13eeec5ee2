#!/usr/bin/env python3
"""
tag_filter.py
-------------
Multi-tag filtering of entries.

A TagFilter names one or more day tags and a match mode. The engine turns
it into the set of qualifying dates, then joins those dates against the
entry store. Entries inherit the tags of their date at query time; no tag
reference is ever stored on an entry.

    ANY  -> dates carrying at least one of the tags (OR)
    ALL  -> dates carrying every one of the tags (AND)

Usage:
    engine = TagFilterEngine(logger)
    tag_filter = TagFilter(["vacation", "new medicine"], MatchMode.ALL)

    with db.session_scope() as session:
        for item in engine.entries_by_tags(session, tag_filter, "2025-10-01", "2025-10-31"):
            print(item.timestamp, item.day_tag_names)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Set, Union

# --- Third party imports ---
from sqlalchemy import distinct, func, select
from sqlalchemy.orm import Session

# --- Local imports ---
from tracker.core.exceptions import TagNotFoundError, ValidationError
from tracker.core.logging_manager import TrackerLogger, safe_logger
from tracker.database.decorators import handle_db_errors, log_database_operation
from tracker.database.managers import DayTagManager, EntryManager
from tracker.database.models import DayTag, DayTagAssociation, Entry, MatchMode
from tracker.utils.dates import parse_date, validate_range
from tracker.utils.tags import normalize_tag_name


@dataclass
class TagFilter:
    """
    Query input: tag names plus how to combine them.

    Attributes:
        tags: Tag names in any casing
        match_mode: MatchMode, or the strings "any" / "all"
    """

    tags: List[str]
    match_mode: Union[MatchMode, str] = MatchMode.ANY

    def __post_init__(self) -> None:
        self.match_mode = MatchMode.coerce(self.match_mode)
        if isinstance(self.tags, str):
            raise ValidationError(
                "Tag filter takes a list of tag names, not a single string"
            )
        self.tags = list(self.tags)

    @property
    def normalized_tags(self) -> List[str]:
        """Distinct normalized names, in first-seen order."""
        return list(dict.fromkeys(normalize_tag_name(t) for t in self.tags))


@dataclass
class TaggedEntry:
    """
    An entry together with the day tags of its date.

    Attributes:
        entry: Entry with its payload loaded
        day_tags: Tags applied to the entry's date, by display name
    """

    entry: Entry
    day_tags: List[DayTag] = field(default_factory=list)

    @property
    def date(self) -> date:
        return self.entry.date

    @property
    def timestamp(self) -> datetime:
        return self.entry.timestamp

    @property
    def day_tag_names(self) -> List[str]:
        return [tag.display_name for tag in self.day_tags]

    def to_dict(self) -> Dict[str, Any]:
        data = self.entry.to_dict()
        data["day_tags"] = self.day_tag_names
        return data


class TagFilterEngine:
    """
    Resolves tag filters into dates and tagged entries.

    Unknown tag names are an error rather than an empty result, so a typo
    in a filter is reported instead of silently matching nothing.
    """

    def __init__(self, logger: Optional[TrackerLogger] = None) -> None:
        """
        Initialize the filter engine.

        Args:
            logger: Optional logger for query operations
        """
        self.logger = logger

    @handle_db_errors
    @log_database_operation("resolve_filter_dates")
    def resolve_dates(
        self,
        session: Session,
        tag_filter: TagFilter,
        start_date: Any,
        end_date: Any,
    ) -> Set[date]:
        """
        Dates within a range that satisfy a tag filter.

        Args:
            session: SQLAlchemy session
            tag_filter: Tags and match mode
            start_date: Inclusive lower bound
            end_date: Inclusive upper bound

        Returns:
            Set of qualifying dates

        Raises:
            ValidationError: If the filter has no tags, a bound is
                malformed, or start_date is after end_date
            TagNotFoundError: If any tag name does not exist
        """
        start, end = parse_date(start_date), parse_date(end_date)
        validate_range(start, end)

        names = tag_filter.normalized_tags
        if not names:
            raise ValidationError("Tag filter must name at least one tag")

        tag_ids = self._resolve_tag_ids(session, names)

        stmt = select(DayTagAssociation.date).where(
            DayTagAssociation.tag_id.in_(tag_ids),
            DayTagAssociation.date.between(start, end),
        )

        if tag_filter.match_mode is MatchMode.ALL:
            stmt = stmt.group_by(DayTagAssociation.date).having(
                func.count(distinct(DayTagAssociation.tag_id)) == len(tag_ids)
            )
        else:
            stmt = stmt.distinct()

        dates = set(session.scalars(stmt))

        safe_logger(self.logger).log_debug(
            "Resolved tag filter",
            {
                "tags": names,
                "match_mode": tag_filter.match_mode.value,
                "dates": len(dates),
            },
        )
        return dates

    def entries_by_tags(
        self,
        session: Session,
        tag_filter: TagFilter,
        start_date: Any,
        end_date: Any,
    ) -> List[TaggedEntry]:
        """
        Entries on dates that satisfy a tag filter, newest first.

        Each result carries the full tag set of its date. Tags are looked
        up once per distinct date, not once per entry.

        Args:
            session: SQLAlchemy session
            tag_filter: Tags and match mode
            start_date: Inclusive lower bound
            end_date: Inclusive upper bound

        Returns:
            List of TaggedEntry ordered by timestamp descending

        Raises:
            ValidationError: See resolve_dates
            TagNotFoundError: If any tag name does not exist
        """
        dates = self.resolve_dates(session, tag_filter, start_date, end_date)
        if not dates:
            return []

        entries = EntryManager(session, self.logger).get_for_dates(
            dates, start_date, end_date, newest_first=True
        )
        return self.attach_day_tags(session, entries)

    def entries_by_tag(
        self, session: Session, tag_name: str, start_date: Any, end_date: Any
    ) -> List[TaggedEntry]:
        """Entries on dates carrying a single tag, newest first."""
        return self.entries_by_tags(
            session, TagFilter([tag_name], MatchMode.ANY), start_date, end_date
        )

    def attach_day_tags(
        self, session: Session, entries: Sequence[Entry]
    ) -> List[TaggedEntry]:
        """Pair each entry with the tags of its date, preserving order."""
        day_tags = DayTagManager(session, self.logger)
        tags_by_date: Dict[date, List[DayTag]] = {}
        for day in {entry.date for entry in entries}:
            tags_by_date[day] = day_tags.tags_for_date(day)

        return [TaggedEntry(entry, tags_by_date[entry.date]) for entry in entries]

    @staticmethod
    def _resolve_tag_ids(session: Session, names: List[str]) -> List[int]:
        rows = session.execute(
            select(DayTag.name, DayTag.id).where(DayTag.name.in_(names))
        ).all()
        found = {name: tag_id for name, tag_id in rows}
        for name in names:
            if name not in found:
                raise TagNotFoundError(name)
        return [found[name] for name in names]
