"""Tests for per-tag bowel movement statistics."""
from datetime import date

import pytest

from tracker.database.tag_reports import (
    TagReports,
    bristol_scale_description,
    urgency_level_description,
)


@pytest.fixture
def reports():
    return TagReports()


class TestStatisticsForTag:

    def test_vacation_statistics(self, reports, db_session, tagged_october):
        stats = reports.statistics_for_tag(db_session, tagged_october["vacation"].id)

        assert stats.tag_name == "vacation"
        assert stats.tag_display_name == "Vacation"
        assert stats.total_days == 2
        assert stats.total_bowel_movements == 2
        assert stats.average_bowel_movements_per_day == 1.0
        assert stats.average_consistency == 5.0
        assert stats.average_urgency == 2.5
        assert stats.consistency_distribution == {4: 1, 6: 1}
        assert stats.urgency_distribution == {2: 1, 3: 1}
        assert (stats.earliest_date, stats.latest_date) == (date(2025, 10, 25), date(2025, 10, 26))

    def test_notes_are_not_counted(self, reports, db_session, tagged_october):
        stats = reports.statistics_for_tag(db_session, tagged_october["medicine"].id)
        assert stats.total_bowel_movements == 2
        assert stats.urgency_distribution == {3: 2}

    def test_unknown_tag(self, reports, db_session):
        assert reports.statistics_for_tag(db_session, 999) is None

    def test_unused_tag_has_zero_statistics(self, reports, db_session, tag_manager):
        tag = tag_manager.get_or_create("Stress")
        stats = reports.statistics_for_tag(db_session, tag.id)

        assert stats.total_days == 0
        assert stats.average_consistency == 0.0
        assert stats.consistency_distribution == {}
        assert stats.earliest_date is None

    def test_tagged_days_without_bowel_movements(
        self, reports, db_session, tag_manager, day_tag_manager
    ):
        tag = tag_manager.get_or_create("Fasting")
        day_tag_manager.add_to_day(tag.id, "2025-10-20")

        stats = reports.statistics_for_tag(db_session, tag.id)

        assert stats.total_days == 1
        assert stats.total_bowel_movements == 0
        assert stats.average_bowel_movements_per_day == 0.0

    def test_to_dict(self, reports, db_session, tagged_october):
        data = reports.statistics_for_tag(db_session, tagged_october["vacation"].id).to_dict()

        assert data["date_range"] == {"earliest": "2025-10-25", "latest": "2025-10-26"}
        assert data["average_consistency"] == 5.0


class TestAllTagStatistics:

    def test_only_tags_with_bowel_movements(self, reports, db_session, tagged_october, tag_manager):
        tag_manager.get_or_create("Stress")

        names = [s.tag_display_name for s in reports.all_tag_statistics(db_session)]

        assert sorted(names) == ["New Medicine", "Vacation"]

    def test_busiest_first(
        self, reports, db_session, tagged_october, tag_manager, day_tag_manager
    ):
        busy = tag_manager.get_or_create("Busy")
        for day in ("2025-10-24", "2025-10-25", "2025-10-26"):
            day_tag_manager.add_to_day(busy.id, day)

        statistics = reports.all_tag_statistics(db_session)

        assert statistics[0].tag_display_name == "Busy"
        assert statistics[0].total_bowel_movements == 3


class TestDescriptions:

    def test_bristol(self):
        assert bristol_scale_description(4) == "Smooth, soft sausage"
        assert bristol_scale_description(8) == "Unknown"

    def test_urgency(self):
        assert urgency_level_description(4) == "Urgent"
        assert urgency_level_description(0) == "Unknown"
