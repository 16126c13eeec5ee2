"""Tests for the tracker exception hierarchy and messages."""
import pytest

from tracker.core.exceptions import (
    CapacityError,
    ConflictError,
    DatabaseError,
    DuplicateAssociationError,
    EntryNotFoundError,
    EntryValidationError,
    ExportError,
    MaxTagsExceededError,
    NotFoundError,
    TagNotFoundError,
    TagValidationError,
    TemporalFileError,
    TrackerError,
    ValidationError,
)


class TestHierarchy:
    """Every error is a TrackerError in the expected family."""

    @pytest.mark.parametrize(
        "error_class, parent",
        [
            (TagValidationError, ValidationError),
            (EntryValidationError, ValidationError),
            (TagNotFoundError, NotFoundError),
            (EntryNotFoundError, NotFoundError),
            (DuplicateAssociationError, ConflictError),
            (MaxTagsExceededError, CapacityError),
            (ExportError, DatabaseError),
            (TemporalFileError, TrackerError),
        ],
    )
    def test_subclass(self, error_class, parent):
        assert issubclass(error_class, parent)
        assert issubclass(error_class, TrackerError)


class TestMessages:
    """Messages are ready to show to a user."""

    def test_tag_not_found_by_id(self):
        assert str(TagNotFoundError(42)) == "Tag with ID 42 not found"

    def test_tag_not_found_by_name(self):
        error = TagNotFoundError("vacaton")
        assert str(error) == 'Tag "vacaton" not found'
        assert error.tag == "vacaton"

    def test_entry_not_found(self):
        assert str(EntryNotFoundError(7)) == "Entry with ID 7 not found"

    def test_duplicate_association(self):
        error = DuplicateAssociationError("Vacation", "2025-10-25")
        assert str(error) == 'Tag "Vacation" is already applied to 2025-10-25'

    def test_max_tags_exceeded(self):
        error = MaxTagsExceededError("2025-10-25", 10)
        assert str(error) == "Cannot add more than 10 tags to 2025-10-25"
        assert error.max_tags == 10

    def test_tag_validation_joins_messages(self):
        error = TagValidationError([
            {"field": "display_name", "message": "Tag cannot be empty", "code": "TAG_EMPTY"},
            {"field": "display_name", "message": "Tag contains invalid characters",
             "code": "TAG_FORBIDDEN_CHARS"},
        ])
        assert str(error) == (
            "Tag validation failed: Tag cannot be empty; Tag contains invalid characters"
        )
        assert [e["code"] for e in error.errors] == ["TAG_EMPTY", "TAG_FORBIDDEN_CHARS"]

    def test_validation_error_defaults_to_no_details(self):
        assert ValidationError("bad").errors == []
