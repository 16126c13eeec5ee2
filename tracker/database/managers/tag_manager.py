#!/usr/bin/env python3
"""
tag_manager.py
--------------------
Manages DayTag entities: the set of unique, reusable day labels.

Tags are identified by their normalized name. Creation is get-or-create:
asking for "VACATION" after "Vacation" exists returns the existing tag,
which keeps the display name it was first created with.

Key Features:
    - Idempotent get-or-create by normalized name
    - Lookup by id or by (normalized) name
    - Listing ordered by popularity, then alphabetically
    - Description editing
    - Hard delete with cascade to all date associations

Usage:
    tag_mgr = TagManager(session, logger)

    tag = tag_mgr.get_or_create("Vacation", description="Beach trip")
    same = tag_mgr.get_or_create("vacation")   # same.id == tag.id

    for tag in tag_mgr.get_all():
        print(tag.display_name, tag.usage_count)

    tag_mgr.delete(tag.id)
"""
from typing import List, Optional

from sqlalchemy import select

from tracker.core.exceptions import TagNotFoundError, TagValidationError
from tracker.core.logging_manager import safe_logger
from tracker.database.decorators import handle_db_errors, log_database_operation
from tracker.database.models import DayTag
from tracker.utils.tags import normalize_tag_name, validate_tag_name

from .base_manager import BaseManager


class TagManager(BaseManager):
    """
    Manages the day_tags table.

    Each tag is a unique normalized name with a preserved display name,
    an optional description and a usage counter. The counter is written
    only by DayTagManager, together with the association it counts.
    """

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("tag_exists")
    def exists(self, tag_name: str) -> bool:
        """
        Check if a tag exists without raising exceptions.

        Args:
            tag_name: Tag text in any casing

        Returns:
            True if a tag with the same normalized name exists
        """
        if not tag_name:
            return False
        return self.get(tag_name) is not None

    @handle_db_errors
    @log_database_operation("get_tag")
    def get(self, tag_name: str) -> Optional[DayTag]:
        """
        Retrieve a tag by name.

        Args:
            tag_name: Tag text; normalized before matching

        Returns:
            DayTag if found, None otherwise
        """
        if not tag_name:
            return None
        normalized = normalize_tag_name(tag_name)
        return self.session.scalars(
            select(DayTag).where(DayTag.name == normalized)
        ).first()

    @handle_db_errors
    @log_database_operation("get_tag_by_id")
    def get_by_id(self, tag_id: int) -> Optional[DayTag]:
        """Retrieve a tag by ID, or None."""
        return self._get_by_id(DayTag, tag_id)

    @handle_db_errors
    @log_database_operation("get_all_tags")
    def get_all(self) -> List[DayTag]:
        """
        Retrieve all tags, most used first.

        Ties on usage_count are ordered by display_name ascending using a
        plain binary comparison, so zero-usage tags still have a stable
        order for autocomplete.

        Returns:
            List of all DayTag objects
        """
        stmt = select(DayTag).order_by(
            DayTag.usage_count.desc(), DayTag.display_name.asc()
        )
        return list(self.session.scalars(stmt))

    @handle_db_errors
    @log_database_operation("get_unused_tags")
    def get_unused(self) -> List[DayTag]:
        """Tags not applied to any date, alphabetically by display name."""
        stmt = (
            select(DayTag)
            .where(DayTag.usage_count == 0)
            .order_by(DayTag.display_name.asc())
        )
        return list(self.session.scalars(stmt))

    def require(self, tag_id: int) -> DayTag:
        """
        Retrieve a tag by ID or fail.

        Raises:
            TagNotFoundError: If no tag has this ID
        """
        tag = self.get_by_id(tag_id)
        if tag is None:
            raise TagNotFoundError(tag_id)
        return tag

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("get_or_create_tag")
    def get_or_create(
        self, display_name: str, description: Optional[str] = None
    ) -> DayTag:
        """
        Get the tag matching a name, creating it on first use.

        Args:
            display_name: Name as typed by the user. Becomes the tag's
                display name only if the tag is new.
            description: Optional description. On an existing tag it is
                applied only when the tag has no description yet.

        Returns:
            DayTag (existing or newly created)

        Raises:
            TagValidationError: If display_name is empty, too long or
                contains disallowed characters
        """
        validation = validate_tag_name(display_name)
        if not validation.is_valid:
            raise TagValidationError(validation.errors)

        normalized = normalize_tag_name(display_name)
        tag, created = self._get_or_create(
            DayTag,
            {"name": normalized},
            {"display_name": display_name, "description": description, "usage_count": 0},
        )

        if created:
            safe_logger(self.logger).log_debug(
                f"Created tag: {display_name}", {"tag_id": tag.id, "name": normalized}
            )
        elif not tag.description and description:
            tag.description = description
            self.session.flush()
            safe_logger(self.logger).log_debug(
                "Backfilled tag description", {"tag_id": tag.id}
            )

        return tag

    @handle_db_errors
    @log_database_operation("update_tag_description")
    def update_description(self, tag_id: int, description: Optional[str]) -> DayTag:
        """
        Overwrite a tag's description.

        Args:
            tag_id: Tag to update
            description: New text, or None to clear it

        Returns:
            The updated DayTag

        Raises:
            TagNotFoundError: If no tag has this ID
        """
        tag = self.require(tag_id)
        tag.description = description
        self.session.flush()
        return tag

    @handle_db_errors
    @log_database_operation("delete_tag")
    def delete(self, tag_id: int) -> int:
        """
        Delete a tag together with every date association it has.

        Deletion is unconditional; a tag in use is deleted all the same.

        Args:
            tag_id: Tag to delete

        Returns:
            Number of associations removed with it

        Raises:
            TagNotFoundError: If no tag has this ID
        """
        tag = self.require(tag_id)
        removed = len(tag.associations)

        safe_logger(self.logger).log_debug(
            f"Deleting tag: {tag.display_name}",
            {"tag_id": tag.id, "associations": removed},
        )

        with self._atomic():
            self.session.delete(tag)

        return removed
