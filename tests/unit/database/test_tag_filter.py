"""
Tests for TagFilter and TagFilterEngine.

Uses the ``tagged_october`` fixture:
    Vacation on 10-25 and 10-26, New Medicine on 10-26 and 10-27,
    one bowel movement per day 10-24..10-27 and a note on 10-26.
"""
from datetime import date

import pytest

from tracker.core.exceptions import TagNotFoundError, ValidationError
from tracker.database.models import MatchMode
from tracker.database.tag_filter import TagFilter, TagFilterEngine

OCT_START, OCT_END = "2025-10-01", "2025-10-31"


@pytest.fixture
def engine():
    return TagFilterEngine()


class TestTagFilter:

    def test_mode_from_string(self):
        assert TagFilter(["Vacation"], "ALL").match_mode is MatchMode.ALL

    def test_default_mode_is_any(self):
        assert TagFilter(["Vacation"]).match_mode is MatchMode.ANY

    def test_bad_mode_raises(self):
        with pytest.raises(ValidationError, match="'any' or 'all'"):
            TagFilter(["Vacation"], "either")

    def test_single_string_rejected(self):
        with pytest.raises(ValidationError, match="list of tag names"):
            TagFilter("vacation")

    def test_tuple_of_names_accepted(self):
        assert TagFilter(("Vacation", "Stress")).tags == ["Vacation", "Stress"]

    def test_normalized_tags_deduplicated(self):
        tag_filter = TagFilter([" Vacation", "VACATION", "New Medicine"])
        assert tag_filter.normalized_tags == ["vacation", "new medicine"]


class TestResolveDates:

    def test_any_is_union(self, engine, db_session, tagged_october):
        tag_filter = TagFilter(["Vacation", "New Medicine"], MatchMode.ANY)
        assert engine.resolve_dates(db_session, tag_filter, OCT_START, OCT_END) == {
            date(2025, 10, 25), date(2025, 10, 26), date(2025, 10, 27),
        }

    def test_all_is_intersection(self, engine, db_session, tagged_october):
        tag_filter = TagFilter(["vacation", "new medicine"], MatchMode.ALL)
        assert engine.resolve_dates(db_session, tag_filter, OCT_START, OCT_END) == {
            date(2025, 10, 26),
        }

    def test_all_with_repeated_name(self, engine, db_session, tagged_october):
        tag_filter = TagFilter(["Vacation", "vacation"], MatchMode.ALL)
        assert engine.resolve_dates(db_session, tag_filter, OCT_START, OCT_END) == {
            date(2025, 10, 25), date(2025, 10, 26),
        }

    def test_range_limits_dates(self, engine, db_session, tagged_october):
        tag_filter = TagFilter(["Vacation"])
        assert engine.resolve_dates(db_session, tag_filter, "2025-10-26", "2025-10-26") == {
            date(2025, 10, 26),
        }

    def test_unknown_tag_raises(self, engine, db_session, tagged_october):
        with pytest.raises(TagNotFoundError, match='"vacaton"'):
            engine.resolve_dates(db_session, TagFilter(["Vacation", "Vacaton"]), OCT_START, OCT_END)

    def test_empty_filter_raises(self, engine, db_session, tagged_october):
        with pytest.raises(ValidationError, match="at least one tag"):
            engine.resolve_dates(db_session, TagFilter([]), OCT_START, OCT_END)

    def test_reversed_range_raises(self, engine, db_session, tagged_october):
        with pytest.raises(ValidationError):
            engine.resolve_dates(db_session, TagFilter(["Vacation"]), OCT_END, OCT_START)


class TestEntriesByTags:

    def test_all_returns_only_entries_on_every_tag(self, engine, db_session, tagged_october):
        results = engine.entries_by_tags(
            db_session, TagFilter(["Vacation", "New Medicine"], "all"), OCT_START, OCT_END
        )

        assert {item.date for item in results} == {date(2025, 10, 26)}
        assert len(results) == 2

    def test_any_newest_first(self, engine, db_session, tagged_october):
        results = engine.entries_by_tags(
            db_session, TagFilter(["Vacation", "New Medicine"], "any"), OCT_START, OCT_END
        )

        timestamps = [item.timestamp for item in results]
        assert timestamps == sorted(timestamps, reverse=True)
        assert [item.date.isoformat() for item in results] == [
            "2025-10-27", "2025-10-26", "2025-10-26", "2025-10-25",
        ]

    def test_entries_carry_full_day_tags(self, engine, db_session, tagged_october):
        results = engine.entries_by_tag(db_session, "vacation", OCT_START, OCT_END)

        tags_by_date = {item.date.isoformat(): item.day_tag_names for item in results}
        assert tags_by_date == {
            "2025-10-25": ["Vacation"],
            "2025-10-26": ["New Medicine", "Vacation"],
        }

    def test_untagged_entries_excluded(self, engine, db_session, tagged_october):
        results = engine.entries_by_tags(
            db_session, TagFilter(["Vacation", "New Medicine"]), OCT_START, OCT_END
        )
        untagged_id = tagged_october["entries"]["2025-10-24"].id
        assert untagged_id not in {item.entry.id for item in results}

    def test_no_matching_dates(self, engine, db_session, tagged_october):
        assert engine.entries_by_tag(db_session, "Vacation", "2025-09-01", "2025-09-30") == []

    def test_to_dict(self, engine, db_session, tagged_october):
        item = engine.entries_by_tag(db_session, "Vacation", "2025-10-25", "2025-10-25")[0]
        data = item.to_dict()

        assert data["date"] == "2025-10-25"
        assert data["type"] == "bowel_movement"
        assert data["bowel_movement"]["consistency"] == 4
        assert data["day_tags"] == ["Vacation"]


class TestAttachDayTags:

    def test_untagged_entry_gets_empty_list(self, engine, db_session, entry_manager, tagged_october):
        entries = entry_manager.get_for_date("2025-10-24")
        [item] = engine.attach_day_tags(db_session, entries)
        assert item.day_tags == []

    def test_preserves_order(self, engine, db_session, entry_manager, tagged_october):
        entries = entry_manager.get_in_range(OCT_START, OCT_END)
        tagged = engine.attach_day_tags(db_session, entries)
        assert [item.entry for item in tagged] == entries
