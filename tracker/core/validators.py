#!/usr/bin/env python3
"""
validators.py
--------------------
Data validation and normalization for entry input.

Provides the checks the entry store applies to bowel movement and note
input before anything is written. Each check appends structured errors
(field, message, code) so a form can show every problem at once.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from tracker.utils.dates import DATE_PATTERN, is_valid_time, parse_date

from .exceptions import EntryValidationError, ValidationError

BRISTOL_SCALE_MIN, BRISTOL_SCALE_MAX = 1, 7
URGENCY_MIN, URGENCY_MAX = 1, 4

NOTE_CATEGORIES = ("food", "exercise", "medication", "other")
MAX_NOTE_LENGTH = 1000
MAX_BOWEL_MOVEMENT_NOTES_LENGTH = 500
MAX_NOTE_TAGS_LENGTH = 200


def _error(field: str, message: str, code: str) -> Dict[str, str]:
    return {"field": field, "message": message, "code": code}


class DataValidator:
    """Centralized data validation for entry operations."""

    @staticmethod
    def validate_required_fields(
        data: Dict[str, Any], required_fields: List[str]
    ) -> None:
        """
        Validate that required fields are present and non-empty.

        Raises:
            ValidationError: If any field is missing
        """
        for field in required_fields:
            if field not in data or data[field] in (None, ""):
                raise ValidationError(f"Required field '{field}' missing or empty")

    @staticmethod
    def normalize_string(value: Any) -> Optional[str]:
        """Strip a string; empty results become None."""
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @staticmethod
    def check_date(value: Any, today: Optional[date] = None) -> List[Dict[str, str]]:
        """Errors for a malformed, impossible or future entry date."""
        if isinstance(value, str) and not DATE_PATTERN.fullmatch(value):
            return [_error("date", "Date must be in YYYY-MM-DD format", "INVALID_DATE_FORMAT")]
        try:
            day = parse_date(value)
        except ValidationError as e:
            return e.errors or [_error("date", "Invalid date", "INVALID_DATE")]

        if day > (today or date.today()):
            return [
                _error("date", "Entry date cannot be in the future", "FUTURE_DATE_NOT_ALLOWED")
            ]
        return []

    @staticmethod
    def check_time(value: Any) -> List[Dict[str, str]]:
        """Errors for a time that is not ``HH:MM`` (24-hour)."""
        if not is_valid_time(value):
            return [
                _error("time", "Time must be in HH:MM format (24-hour)", "INVALID_TIME_FORMAT")
            ]
        return []

    @staticmethod
    def check_scale(
        value: Any, field: str, minimum: int, maximum: int, message: str, code: str
    ) -> List[Dict[str, str]]:
        """Errors for a value that is not an integer within [minimum, maximum]."""
        if isinstance(value, bool) or not isinstance(value, int):
            return [_error(field, message, code)]
        if not minimum <= value <= maximum:
            return [_error(field, message, code)]
        return []

    @classmethod
    def validate_bowel_movement(
        cls, data: Dict[str, Any], today: Optional[date] = None
    ) -> None:
        """
        Validate bowel movement input.

        Args:
            data: Dict with date, time, consistency, urgency, optional notes
            today: Reference date for the future-date check

        Raises:
            EntryValidationError: Listing every failed field
        """
        errors = cls.check_date(data.get("date"), today)
        errors += cls.check_time(data.get("time"))
        errors += cls.check_scale(
            data.get("consistency"), "consistency",
            BRISTOL_SCALE_MIN, BRISTOL_SCALE_MAX,
            "Bristol scale consistency must be between 1 and 7",
            "INVALID_BRISTOL_SCALE",
        )
        errors += cls.check_scale(
            data.get("urgency"), "urgency",
            URGENCY_MIN, URGENCY_MAX,
            "Urgency level must be between 1 and 4",
            "INVALID_URGENCY_LEVEL",
        )

        notes = data.get("notes")
        if notes is not None and len(notes) > MAX_BOWEL_MOVEMENT_NOTES_LENGTH:
            errors.append(
                _error("notes", "Notes cannot exceed 500 characters", "NOTES_TOO_LONG")
            )

        if errors:
            raise EntryValidationError(errors)

    @classmethod
    def validate_note(cls, data: Dict[str, Any], today: Optional[date] = None) -> None:
        """
        Validate note input.

        Args:
            data: Dict with date, time, category, content, optional tags
            today: Reference date for the future-date check

        Raises:
            EntryValidationError: Listing every failed field
        """
        errors = cls.check_date(data.get("date"), today)
        errors += cls.check_time(data.get("time"))

        if data.get("category") not in NOTE_CATEGORIES:
            errors.append(_error("category", "Invalid note category", "INVALID_CATEGORY"))

        content = data.get("content")
        if not content or not str(content).strip():
            errors.append(_error("content", "Note content is required", "CONTENT_REQUIRED"))
        elif len(content) > MAX_NOTE_LENGTH:
            errors.append(
                _error("content", "Note content cannot exceed 1000 characters", "CONTENT_TOO_LONG")
            )

        tags = data.get("tags")
        if tags is not None and len(tags) > MAX_NOTE_TAGS_LENGTH:
            errors.append(
                _error("tags", "Tags cannot exceed 200 characters", "TAGS_TOO_LONG")
            )

        if errors:
            raise EntryValidationError(errors)
