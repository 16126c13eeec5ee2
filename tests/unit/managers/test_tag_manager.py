"""
test_tag_manager.py
-------------------
Unit tests for TagManager.

Covers get-or-create by normalized name, lookups, popularity ordering,
description edits and cascading deletes.
"""
import pytest
from sqlalchemy import func, select

from tracker.core.exceptions import TagNotFoundError, TagValidationError
from tracker.database.models import DayTag, DayTagAssociation


class TestTagManagerExists:
    """Test TagManager.exists() and get()."""

    def test_exists_returns_false_when_not_found(self, tag_manager):
        assert tag_manager.exists("nonexistent") is False

    def test_exists_normalizes_input(self, tag_manager, db_session):
        db_session.add(DayTag(name="vacation", display_name="Vacation", usage_count=0))
        db_session.flush()

        assert tag_manager.exists("  VACATION ") is True

    @pytest.mark.parametrize("value", ["", None])
    def test_exists_empty_returns_false(self, tag_manager, value):
        assert tag_manager.exists(value) is False

    def test_get_returns_none_when_not_found(self, tag_manager):
        assert tag_manager.get("nonexistent") is None

    def test_get_by_id(self, tag_manager):
        tag = tag_manager.get_or_create("Vacation")
        assert tag_manager.get_by_id(tag.id) is tag

    def test_require_unknown_id_raises(self, tag_manager):
        with pytest.raises(TagNotFoundError, match="Tag with ID 999 not found"):
            tag_manager.require(999)


class TestTagManagerGetOrCreate:
    """Test TagManager.get_or_create()."""

    def test_creates_tag(self, tag_manager):
        tag = tag_manager.get_or_create("  New Medicine", description="5mg daily")

        assert tag.id is not None
        assert tag.name == "new medicine"
        assert tag.display_name == "  New Medicine"
        assert tag.description == "5mg daily"
        assert tag.usage_count == 0
        assert tag.created_at is not None

    def test_idempotent_by_normalized_name(self, tag_manager, db_session):
        first = tag_manager.get_or_create("Vacation")
        second = tag_manager.get_or_create("VACATION")
        third = tag_manager.get_or_create("vacation")

        assert first.id == second.id == third.id
        assert third.display_name == "Vacation"
        assert db_session.scalar(select(func.count(DayTag.id))) == 1

    def test_backfills_missing_description(self, tag_manager):
        tag_manager.get_or_create("Vacation")
        tag = tag_manager.get_or_create("vacation", description="Beach trip")
        assert tag.description == "Beach trip"

    def test_keeps_existing_description(self, tag_manager):
        tag_manager.get_or_create("Vacation", description="Beach trip")
        tag = tag_manager.get_or_create("vacation", description="Ski trip")
        assert tag.description == "Beach trip"

    @pytest.mark.parametrize("name", ["", "   ", "x" * 51, "New <Medicine>", "Vacation\n"])
    def test_invalid_name_creates_nothing(self, tag_manager, db_session, name):
        with pytest.raises(TagValidationError):
            tag_manager.get_or_create(name)

        assert db_session.scalar(select(func.count(DayTag.id))) == 0


class TestTagManagerListing:
    """Test get_all() and get_unused() ordering."""

    def test_get_all_empty(self, tag_manager):
        assert tag_manager.get_all() == []

    def test_get_all_orders_by_usage_then_name(self, tag_manager, db_session):
        for display_name, usage in (("Beta", 10), ("Alpha", 10), ("Zebra", 0)):
            db_session.add(
                DayTag(name=display_name.lower(), display_name=display_name, usage_count=usage)
            )
        db_session.flush()

        assert [t.display_name for t in tag_manager.get_all()] == ["Alpha", "Beta", "Zebra"]

    def test_get_all_most_used_first(self, tag_manager, day_tag_manager):
        rare = tag_manager.get_or_create("Aardvark")
        common = tag_manager.get_or_create("Vacation")
        day_tag_manager.add_to_day(common.id, "2025-10-25")
        day_tag_manager.add_to_day(common.id, "2025-10-26")
        day_tag_manager.add_to_day(rare.id, "2025-10-26")

        assert [t.id for t in tag_manager.get_all()] == [common.id, rare.id]

    def test_get_unused(self, tag_manager, day_tag_manager):
        used = tag_manager.get_or_create("Vacation")
        tag_manager.get_or_create("Stress")
        tag_manager.get_or_create("Dairy Free")
        day_tag_manager.add_to_day(used.id, "2025-10-25")

        assert [t.display_name for t in tag_manager.get_unused()] == ["Dairy Free", "Stress"]


class TestTagManagerUpdateAndDelete:
    """Test update_description() and delete()."""

    def test_update_description(self, tag_manager):
        tag = tag_manager.get_or_create("New Medicine")
        updated = tag_manager.update_description(tag.id, "10mg from 2025-10-20")
        assert updated.description == "10mg from 2025-10-20"

    def test_clear_description(self, tag_manager):
        tag = tag_manager.get_or_create("New Medicine", "5mg")
        assert tag_manager.update_description(tag.id, None).description is None

    def test_update_unknown_raises(self, tag_manager):
        with pytest.raises(TagNotFoundError):
            tag_manager.update_description(999, "text")

    def test_delete_cascades_to_associations(self, tag_manager, day_tag_manager, db_session):
        tag = tag_manager.get_or_create("Vacation")
        other = tag_manager.get_or_create("Stress")
        for day in ("2025-10-25", "2025-10-26", "2025-10-27"):
            day_tag_manager.add_to_day(tag.id, day)
        day_tag_manager.add_to_day(other.id, "2025-10-25")

        removed = tag_manager.delete(tag.id)

        assert removed == 3
        assert tag_manager.get("vacation") is None
        for day in ("2025-10-26", "2025-10-27"):
            assert day_tag_manager.tags_for_date(day) == []
        assert [t.display_name for t in day_tag_manager.tags_for_date("2025-10-25")] == ["Stress"]
        assert db_session.scalar(select(func.count(DayTagAssociation.id))) == 1

    def test_delete_unused_tag(self, tag_manager):
        tag = tag_manager.get_or_create("Vacation")
        assert tag_manager.delete(tag.id) == 0
        assert tag_manager.exists("Vacation") is False

    def test_delete_unknown_raises(self, tag_manager):
        with pytest.raises(TagNotFoundError):
            tag_manager.delete(999)
