"""
Database Models Package
------------------------

SQLAlchemy ORM models for the tracker database.

- base: Base class and timestamp helper
- enums: EntryType, NoteCategory, MatchMode
- core: Entry with its BowelMovement and Note payloads
- day_tags: DayTag and DayTagAssociation

Usage:
    from tracker.database.models import Entry, DayTag, DayTagAssociation
"""
from .base import Base, utc_now
from .enums import EntryType, MatchMode, NoteCategory
from .core import BowelMovement, Entry, Note
from .day_tags import DayTag, DayTagAssociation

__all__ = [
    "Base",
    "utc_now",
    "EntryType",
    "MatchMode",
    "NoteCategory",
    "BowelMovement",
    "Entry",
    "Note",
    "DayTag",
    "DayTagAssociation",
]
