"""
Tests for ExportManager.

Content tests build TaggedEntry lists from the ``tagged_october`` data;
file tests write into a temporary directory.
"""
import csv
import io
from datetime import date
from pathlib import Path

import pytest

from tracker.core.exceptions import ExportError, TagNotFoundError
from tracker.database.export_manager import CSV_HEADERS, ExportManager
from tracker.database.tag_filter import TagFilter

OCT_START, OCT_END = "2025-10-01", "2025-10-31"


@pytest.fixture
def exporter():
    return ExportManager()


@pytest.fixture
def october_entries(exporter, db_session, tagged_october):
    return exporter.select_entries(db_session, OCT_START, OCT_END)


class TestCsv:

    def test_header_and_rows(self, exporter, october_entries):
        content = exporter.export_entries(october_entries, "csv")
        rows = list(csv.reader(io.StringIO(content)))

        assert rows[0] == CSV_HEADERS
        assert len(rows) == 1 + len(october_entries)

    def test_every_cell_quoted(self, exporter, october_entries):
        first_line = exporter.export_entries(october_entries, "csv").splitlines()[0]
        assert first_line.startswith('"Date","Time","Type"')

    def test_bowel_movement_row(self, exporter, october_entries):
        rows = list(csv.reader(io.StringIO(exporter.export_entries(october_entries, "csv"))))
        row = dict(zip(rows[0], rows[2]))

        assert row["Date"] == "2025-10-25"
        assert row["Type"] == "Bowel Movement"
        assert row["Consistency"] == "4"
        assert row["Urgency"] == "2"
        assert row["Category"] == ""
        assert row["Day Tags"] == "Vacation"

    def test_note_row_has_day_tags(self, exporter, october_entries):
        rows = list(csv.reader(io.StringIO(exporter.export_entries(october_entries, "csv"))))
        notes = [dict(zip(rows[0], r)) for r in rows[1:] if r[2] == "Note"]

        assert len(notes) == 1
        assert notes[0]["Category"] == "food"
        assert notes[0]["Content"] == "Seafood dinner"
        assert notes[0]["Day Tags"] == "New Medicine, Vacation"

    def test_untagged_day_has_empty_day_tags(self, exporter, october_entries):
        rows = list(csv.reader(io.StringIO(exporter.export_entries(october_entries, "csv"))))
        assert rows[1][0] == "2025-10-24"
        assert rows[1][-1] == ""


class TestTxt:

    def test_header(self, exporter, october_entries):
        content = exporter.export_entries(october_entries, "txt", exported_on=date(2025, 11, 1))
        lines = content.splitlines()

        assert lines[0] == "=" * 36
        assert lines[1] == "Crohn's Symptom Tracker Export"
        assert "Export Date: 2025-11-01" in lines
        assert f"Total Entries: {len(october_entries)}" in lines

    def test_grouped_by_date_with_day_tags(self, exporter, october_entries):
        content = exporter.export_entries(october_entries, "txt")

        assert "Date: Saturday, October 25, 2025\nDay Tags: Vacation\n" in content
        assert "Date: Sunday, October 26, 2025\nDay Tags: New Medicine, Vacation\n" in content
        assert "Date: Friday, October 24, 2025\n" + "-" * 36 in content

    def test_entry_details(self, exporter, october_entries):
        content = exporter.export_entries(october_entries, "txt")

        assert "  Consistency: 4 (Bristol Scale)" in content
        assert "  Urgency: 2/4" in content
        assert "  Category: food" in content
        assert "  Content: Seafood dinner" in content

    def test_dates_in_chronological_order(self, exporter, db_session, tagged_october):
        newest_first = exporter.select_entries(
            db_session, OCT_START, OCT_END, TagFilter(["Vacation"])
        )
        content = exporter.export_entries(newest_first, "txt")
        assert content.index("October 25") < content.index("October 26")


class TestFormats:

    @pytest.mark.parametrize("fmt", ["pdf", "", None])
    def test_unsupported_format(self, exporter, fmt):
        with pytest.raises(ExportError, match="Unsupported export format"):
            exporter.export_entries([], fmt)

    def test_format_case_insensitive(self, exporter):
        assert exporter.export_entries([], "CSV").startswith('"Date"')


class TestExportToFile:

    def test_writes_file(self, exporter, db_session, tagged_october, tmp_path):
        stats = exporter.export_to_file(db_session, OCT_START, OCT_END, "csv", tmp_path / "out")

        output = Path(stats["output_path"])
        assert output.parent == tmp_path / "out"
        assert output.exists()
        assert output.name.startswith("crohns-tracker-export-")
        assert output.suffix == ".csv"
        assert stats["entries"] == 5
        assert stats["format"] == "csv"
        assert stats["duration"] >= 0

    def test_no_staging_files_left(self, exporter, db_session, tagged_october, tmp_path):
        stats = exporter.export_to_file(db_session, OCT_START, OCT_END, "txt", tmp_path / "out")
        assert [p.name for p in (tmp_path / "out").iterdir()] == [Path(stats["output_path"]).name]

    def test_tag_filter_restricts_entries(self, exporter, db_session, tagged_october, tmp_path):
        stats = exporter.export_to_file(
            db_session, OCT_START, OCT_END, "csv", tmp_path,
            tag_filter=TagFilter(["Vacation", "New Medicine"], "all"),
        )

        assert stats["entries"] == 2
        with open(stats["output_path"], newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert {row[0] for row in rows[1:]} == {"2025-10-26"}

    def test_no_entries_raises(self, exporter, db_session, tagged_october, tmp_path):
        with pytest.raises(ExportError, match="No entries found"):
            exporter.export_to_file(db_session, "2025-09-01", "2025-09-30", "csv", tmp_path / "out")
        assert not (tmp_path / "out").exists()

    def test_unknown_filter_tag(self, exporter, db_session, tagged_october, tmp_path):
        with pytest.raises(TagNotFoundError):
            exporter.export_to_file(
                db_session, OCT_START, OCT_END, "csv", tmp_path, TagFilter(["Nope"])
            )


class TestPreview:

    def test_truncated_preview(self, exporter, db_session, tagged_october):
        content = exporter.preview(db_session, OCT_START, OCT_END, "csv", max_entries=2)
        lines = content.splitlines()

        assert len(lines) == 4
        assert lines[-1] == "..."

    def test_full_preview(self, exporter, db_session, tagged_october):
        content = exporter.preview(db_session, OCT_START, OCT_END, "csv")
        assert not content.endswith("...")
        assert len(content.splitlines()) == 6
