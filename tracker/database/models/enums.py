"""
Enumerations
------------

Enum types used by the ORM models and the tag filter.

Classes:
    - EntryType: Kind of journal entry
    - NoteCategory: Category of a free-form note
    - MatchMode: How a multi-tag filter combines its tags
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from enum import Enum
from typing import Any

# --- Local imports ---
from tracker.core.exceptions import ValidationError


class EntryType(str, Enum):
    """Kind of entry recorded on a date."""

    BOWEL_MOVEMENT = "bowel_movement"
    NOTE = "note"

    @property
    def label(self) -> str:
        return "Bowel Movement" if self is EntryType.BOWEL_MOVEMENT else "Note"


class NoteCategory(str, Enum):
    """Category of a free-form note."""

    FOOD = "food"
    EXERCISE = "exercise"
    MEDICATION = "medication"
    OTHER = "other"


class MatchMode(str, Enum):
    """
    How the tags of a filter are combined.

    ANY keeps dates carrying at least one of the tags (OR);
    ALL keeps dates carrying every one of them (AND).
    """

    ANY = "any"
    ALL = "all"

    @classmethod
    def coerce(cls, value: Any) -> "MatchMode":
        """
        Accept a MatchMode or its string value.

        Raises:
            ValidationError: For anything other than 'any' or 'all'
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as e:
            raise ValidationError(
                f"Match mode must be 'any' or 'all', got {value!r}"
            ) from e
