#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the tracker.

Exception Hierarchy:
    Exception (built-in)
    └── TrackerError - Base for every error raised by this package
        ├── ValidationError - Caller input failed validation
        │   ├── TagValidationError - Malformed tag text
        │   └── EntryValidationError - Malformed entry input
        ├── NotFoundError - A referenced record does not exist
        │   ├── TagNotFoundError
        │   └── EntryNotFoundError
        ├── ConflictError - The write would duplicate an existing record
        │   └── DuplicateAssociationError
        ├── CapacityError - A fixed limit would be exceeded
        │   └── MaxTagsExceededError
        ├── DatabaseError - Storage layer failures
        │   └── ExportError - Export operation failures
        └── TemporalFileError - Temporary file handling failures

Validation, not-found, conflict and capacity errors are expected conditions
that a UI or CLI reports to the user. DatabaseError wraps storage failures
(integrity violations, aborted transactions) and means nothing from the
failed operation was committed.

Usage:
    from tracker.core.exceptions import ValidationError, TagNotFoundError

    try:
        db.add_tag_to_day("2025-10-25", "Vacation")
    except MaxTagsExceededError as e:
        click.echo(str(e))
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union


class TrackerError(Exception):
    """Base exception for all tracker errors."""

    pass


# ----- Validation -----
class ValidationError(TrackerError):
    """
    Exception for data validation failures.

    Raised when caller input fails validation checks:
    - Invalid date or time formats
    - Missing required fields
    - Values outside their scale
    - Malformed configuration

    Attributes:
        errors: Optional list of structured errors
            (dicts with ``field``, ``message`` and ``code``)

    Examples:
        >>> raise ValidationError("Date must be in YYYY-MM-DD format")
    """

    def __init__(
        self, message: str, errors: Optional[List[Dict[str, Any]]] = None
    ) -> None:
        super().__init__(message)
        self.errors: List[Dict[str, Any]] = errors or []


class TagValidationError(ValidationError):
    """
    Exception for malformed tag names.

    The message joins every individual problem so it can be shown as-is.

    Examples:
        >>> raise TagValidationError([{"field": "display_name",
        ...     "message": "Tag cannot be empty", "code": "TAG_EMPTY"}])
    """

    def __init__(self, errors: List[Dict[str, Any]]) -> None:
        details = "; ".join(e["message"] for e in errors)
        super().__init__(f"Tag validation failed: {details}", errors)


class EntryValidationError(ValidationError):
    """Exception for bowel movement or note input that fails validation."""

    def __init__(self, errors: List[Dict[str, Any]]) -> None:
        details = ", ".join(e["message"] for e in errors)
        super().__init__(f"Validation failed: {details}", errors)


# ----- Lookups -----
class NotFoundError(TrackerError):
    """Base exception for references to records that do not exist."""

    pass


class TagNotFoundError(NotFoundError):
    """
    Exception for unknown tag ids or names.

    Examples:
        >>> raise TagNotFoundError(42)
        >>> raise TagNotFoundError("vacaton")
    """

    def __init__(self, tag: Union[int, str]) -> None:
        self.tag = tag
        if isinstance(tag, int):
            super().__init__(f"Tag with ID {tag} not found")
        else:
            super().__init__(f'Tag "{tag}" not found')


class EntryNotFoundError(NotFoundError):
    """Exception for unknown entry ids."""

    def __init__(self, entry_id: int) -> None:
        self.entry_id = entry_id
        super().__init__(f"Entry with ID {entry_id} not found")


# ----- Conflicts and limits -----
class ConflictError(TrackerError):
    """Base exception for writes that would duplicate an existing record."""

    pass


class DuplicateAssociationError(ConflictError):
    """Raised when a tag is already applied to a date."""

    def __init__(self, tag_name: str, day: Any) -> None:
        self.tag_name = tag_name
        self.day = day
        super().__init__(f'Tag "{tag_name}" is already applied to {day}')


class CapacityError(TrackerError):
    """Base exception for fixed limits being exceeded."""

    pass


class MaxTagsExceededError(CapacityError):
    """Raised when a date already carries the maximum number of tags."""

    def __init__(self, day: Any, max_tags: int) -> None:
        self.day = day
        self.max_tags = max_tags
        super().__init__(f"Cannot add more than {max_tags} tags to {day}")


# ----- Storage -----
class DatabaseError(TrackerError):
    """
    Base exception for database-related errors.

    Raised when database operations fail due to connection issues,
    query errors, integrity violations, or aborted transactions. The
    operation that raised it committed nothing.

    Examples:
        >>> raise DatabaseError("Connection to database failed")
    """

    pass


class ExportError(DatabaseError):
    """
    Exception for data export failures.

    Examples:
        >>> raise ExportError("No entries found for the selected date range")
        >>> raise ExportError("Unsupported export format: pdf")
    """

    pass


class TemporalFileError(TrackerError):
    """
    Exception for temporary file management errors.

    Raised when a staging file for an export cannot be created.
    """

    pass
