#!/usr/bin/env python3
"""
End-to-end day tag workflow through the TrackerDB facade.

A vacation week overlaps with starting a new medicine; the tests follow
the data from tagging through filtering, the month view, statistics,
export and tag deletion.
"""
import csv
import io
from datetime import date
from pathlib import Path

import pytest

from tracker.core.exceptions import DuplicateAssociationError, TagNotFoundError
from tracker.database.models import MatchMode
from tracker.database.tag_filter import TagFilter


class TestVacationWeek:
    """Tagging a week and reading it back in every view."""

    def test_usage_counts(self, vacation_month):
        counts = {t.display_name: t.usage_count for t in vacation_month.get_all_tags()}
        assert counts == {"Vacation": 7, "New Medicine": 4}

    def test_tags_are_reused_case_insensitively(self, vacation_month):
        vacation_month.add_tag_to_day("2025-10-28", "VACATION")

        assert len(vacation_month.get_all_tags()) == 2
        assert vacation_month.get_tag("vacation").usage_count == 8

    def test_duplicate_application_rejected(self, vacation_month):
        with pytest.raises(DuplicateAssociationError):
            vacation_month.add_tag_to_day("2025-10-22", "vacation")
        assert vacation_month.get_tag("Vacation").usage_count == 7

    def test_filter_any(self, vacation_month, vacation_days):
        results = vacation_month.entries_by_tags(
            TagFilter(["Vacation", "New Medicine"], MatchMode.ANY), "2025-10-01", "2025-10-31"
        )

        assert [r.date for r in results] == sorted(vacation_days + [date(2025, 10, 27)], reverse=True)

    def test_filter_all(self, vacation_month):
        results = vacation_month.entries_by_tags(
            TagFilter(["Vacation", "New Medicine"], MatchMode.ALL), "2025-10-01", "2025-10-31"
        )

        assert [r.date for r in results] == [date(2025, 10, 26), date(2025, 10, 25), date(2025, 10, 24)]
        assert results[0].day_tag_names == ["New Medicine", "Vacation"]

    def test_filter_unknown_tag(self, vacation_month):
        with pytest.raises(TagNotFoundError):
            vacation_month.entries_by_tags(
                TagFilter(["Vacation", "Ski"], MatchMode.ANY), "2025-10-01", "2025-10-31"
            )

    def test_month_view(self, vacation_month, vacation_days, medicine_days):
        month = vacation_month.get_tagged_dates_in_month(2025, 10)

        assert sorted(month) == sorted(set(vacation_days) | set(medicine_days))
        assert month[date(2025, 10, 20)] == ["Vacation"]
        assert month[date(2025, 10, 25)] == ["New Medicine", "Vacation"]
        assert month[date(2025, 10, 27)] == ["New Medicine"]
        assert vacation_month.get_tagged_dates_in_month(2025, 11) == {}

    def test_month_view_follows_changes(self, vacation_month):
        vacation_month.get_tagged_dates_in_month(2025, 10)

        vacation_month.remove_tag_from_day("2025-10-20", "Vacation")
        vacation_month.set_tags_for_date("2025-10-27", ["Stress"])

        month = vacation_month.get_tagged_dates_in_month(2025, 10)
        assert date(2025, 10, 20) not in month
        assert month[date(2025, 10, 27)] == ["Stress"]

    def test_statistics(self, vacation_month):
        stats = vacation_month.statistics_for_tag(vacation_month.get_tag("Vacation").id)

        assert stats.total_days == 7
        assert stats.total_bowel_movements == 7
        assert stats.average_bowel_movements_per_day == pytest.approx(1.0)
        assert stats.average_consistency == pytest.approx(5.0)
        assert stats.consistency_distribution == {5: 7}
        assert stats.earliest_date == date(2025, 10, 20)
        assert stats.latest_date == date(2025, 10, 26)

    def test_statistics_mixed_days(self, vacation_month):
        stats = vacation_month.statistics_for_tag(vacation_month.get_tag("New Medicine").id)

        # three vacation days at 5, 10-27 at 3
        assert stats.average_consistency == pytest.approx(4.5)
        assert stats.consistency_distribution == {3: 1, 5: 3}

    def test_all_statistics_busiest_first(self, vacation_month):
        names = [s.tag_display_name for s in vacation_month.all_tag_statistics()]
        assert names == ["Vacation", "New Medicine"]

    def test_filtered_csv_export(self, vacation_month, tmp_path):
        result = vacation_month.export(
            "2025-10-01", "2025-10-31", "csv", tmp_path / "exports",
            TagFilter(["new medicine"], MatchMode.ANY),
        )

        assert result["entries"] == 4
        rows = list(csv.reader(io.StringIO(Path(result["output_path"]).read_text(encoding="utf-8"))))
        assert rows[0][-1] == "Day Tags"
        assert [row[0] for row in rows[1:]] == ["2025-10-27", "2025-10-26", "2025-10-25", "2025-10-24"]
        assert rows[1][-1] == "New Medicine"
        assert rows[2][-1] == "New Medicine, Vacation"

    def test_untagged_days_export_with_empty_day_tags(self, vacation_month, tmp_path):
        result = vacation_month.export("2025-10-28", "2025-10-28", "csv", tmp_path / "exports")

        rows = list(csv.reader(io.StringIO(Path(result["output_path"]).read_text(encoding="utf-8"))))
        assert len(rows) == 2
        assert rows[1][-1] == ""

    def test_delete_tag_clears_everything(self, vacation_month, medicine_days):
        vacation_month.get_tagged_dates_in_month(2025, 10)
        tag_id = vacation_month.get_tag("Vacation").id

        assert vacation_month.delete_tag(tag_id) == 7

        assert vacation_month.get_tag("Vacation") is None
        assert [t.display_name for t in vacation_month.get_tags_for_date("2025-10-25")] == [
            "New Medicine"
        ]
        month = vacation_month.get_tagged_dates_in_month(2025, 10)
        assert sorted(month) == medicine_days
        # entries are untouched
        with vacation_month.session_scope():
            assert len(vacation_month.entries.get_in_range("2025-10-01", "2025-10-31")) == 11
