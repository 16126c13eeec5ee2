#!/usr/bin/env python3
"""
export_manager.py
-----------------
Export of entries, with their inherited day tags, to text files.

Export Formats:
    1. **CSV**: one row per entry, every cell quoted
       Date,Time,Type,Consistency,Urgency,Category,Content,Notes,Tags,Day Tags
    2. **TXT**: human-readable report grouped by date, each date headed by
       its day tags

Entry Selection:
    - Without a tag filter: every entry in the date range, oldest first
    - With a tag filter: entries on qualifying dates, newest first
      (see TagFilterEngine.entries_by_tags)

Usage:
    from tracker.database.export_manager import ExportManager

    exporter = ExportManager(logger=db.logger)

    with db.session_scope() as session:
        stats = exporter.export_to_file(
            session, "2025-10-01", "2025-10-31", "csv", Path("exports"),
            tag_filter=TagFilter(["vacation"]),
        )
        print(stats["output_path"], stats["entries"])

Export Statistics:
    export_to_file returns:
    {
        "entries": 42,
        "output_path": "/path/to/crohns-tracker-export-....csv",
        "format": "csv" | "txt",
        "duration": 0.05,  # seconds
    }
"""
import csv
import io
import shutil
from datetime import date, datetime
from itertools import groupby
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from sqlalchemy.orm import Session

from tracker.core.config import EXPORT_FORMATS
from tracker.core.exceptions import ExportError
from tracker.core.logging_manager import TrackerLogger, safe_logger
from tracker.core.temporal_files import TemporalFileManager

from .decorators import handle_db_errors, log_database_operation
from .managers import EntryManager
from .models import EntryType
from .tag_filter import TagFilter, TagFilterEngine, TaggedEntry

CSV_HEADERS = [
    "Date",
    "Time",
    "Type",
    "Consistency",
    "Urgency",
    "Category",
    "Content",
    "Notes",
    "Tags",
    "Day Tags",
]

RULE = "=" * 36
THIN_RULE = "-" * 36


class ExportManager:
    """
    Handles export of tagged entries to CSV and TXT.

    Content generation (export_entries) is separate from selection and
    file writing (export_to_file) so previews can reuse it.
    """

    def __init__(self, logger: Optional[TrackerLogger] = None) -> None:
        """
        Initialize export manager.

        Args:
            logger: Optional logger for export operations
        """
        self.logger = logger
        self.filter_engine = TagFilterEngine(logger)

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def export_entries(
        self,
        tagged_entries: Sequence[TaggedEntry],
        fmt: str,
        exported_on: Optional[date] = None,
    ) -> str:
        """
        Render entries as CSV or TXT text.

        Args:
            tagged_entries: Entries with their day tags
            fmt: "csv" or "txt"
            exported_on: Date printed in the TXT header (defaults to today)

        Returns:
            File content

        Raises:
            ExportError: If fmt is not a supported format
        """
        fmt = self._check_format(fmt)
        if fmt == "csv":
            return self._to_csv(tagged_entries)
        return self._to_txt(tagged_entries, exported_on or date.today())

    def _to_csv(self, tagged_entries: Sequence[TaggedEntry]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADERS)

        for item in tagged_entries:
            entry = item.entry
            day_tags = ", ".join(item.day_tag_names)

            if entry.type is EntryType.BOWEL_MOVEMENT and entry.bowel_movement:
                bm = entry.bowel_movement
                writer.writerow([
                    entry.date.isoformat(), entry.time, entry.type.label,
                    bm.consistency, bm.urgency, "", "", bm.notes or "", "", day_tags,
                ])
            elif entry.type is EntryType.NOTE and entry.note:
                note = entry.note
                writer.writerow([
                    entry.date.isoformat(), entry.time, entry.type.label,
                    "", "", note.category.value, note.content, "", note.tags or "",
                    day_tags,
                ])

        return buffer.getvalue()

    def _to_txt(self, tagged_entries: Sequence[TaggedEntry], exported_on: date) -> str:
        lines: List[str] = [
            RULE,
            "Crohn's Symptom Tracker Export",
            RULE,
            "",
            f"Export Date: {exported_on.isoformat()}",
            f"Total Entries: {len(tagged_entries)}",
            "",
            RULE,
            "",
        ]

        ordered = sorted(tagged_entries, key=lambda item: (item.date, item.timestamp))
        for day, group in groupby(ordered, key=lambda item: item.date):
            group = list(group)
            lines.append(f"Date: {day:%A}, {day:%B} {day.day}, {day.year}")
            if group[0].day_tags:
                lines.append(f"Day Tags: {', '.join(group[0].day_tag_names)}")
            lines.append(THIN_RULE)
            lines.append("")

            for item in group:
                lines.extend(self._txt_entry(item))
                lines.append("")
            lines.append("")

        return "\n".join(lines)

    @staticmethod
    def _txt_entry(item: TaggedEntry) -> List[str]:
        entry = item.entry
        lines = [f"Time: {entry.time}"]

        if entry.type is EntryType.BOWEL_MOVEMENT and entry.bowel_movement:
            bm = entry.bowel_movement
            lines.append("Type: Bowel Movement")
            lines.append(f"  Consistency: {bm.consistency} (Bristol Scale)")
            lines.append(f"  Urgency: {bm.urgency}/4")
            if bm.notes:
                lines.append(f"  Notes: {bm.notes}")
        elif entry.type is EntryType.NOTE and entry.note:
            note = entry.note
            lines.append("Type: Note")
            lines.append(f"  Category: {note.category.value}")
            lines.append(f"  Content: {note.content}")
            if note.tags:
                lines.append(f"  Tags: {note.tags}")

        return lines

    # -------------------------------------------------------------------------
    # Selection and files
    # -------------------------------------------------------------------------

    def select_entries(
        self,
        session: Session,
        start_date: Any,
        end_date: Any,
        tag_filter: Optional[TagFilter] = None,
    ) -> List[TaggedEntry]:
        """Entries to export, each with the day tags of its date."""
        if tag_filter is not None:
            return self.filter_engine.entries_by_tags(
                session, tag_filter, start_date, end_date
            )
        entries = EntryManager(session, self.logger).get_in_range(start_date, end_date)
        return self.filter_engine.attach_day_tags(session, entries)

    @handle_db_errors
    @log_database_operation("export_to_file")
    def export_to_file(
        self,
        session: Session,
        start_date: Any,
        end_date: Any,
        fmt: str,
        output_dir: Union[str, Path],
        tag_filter: Optional[TagFilter] = None,
    ) -> Dict[str, Any]:
        """
        Write an export file for a date range.

        The file is named ``crohns-tracker-export-<timestamp>.<ext>`` and is
        staged in a temporary file before being moved into place.

        Args:
            session: SQLAlchemy session
            start_date: Inclusive lower bound
            end_date: Inclusive upper bound
            fmt: "csv" or "txt"
            output_dir: Directory for the export file
            tag_filter: Optional filter restricting entries to tagged dates

        Returns:
            Export statistics

        Raises:
            ExportError: If the format is unsupported, no entries match, or
                the file cannot be written
            ValidationError: If the date range is invalid
            TagNotFoundError: If the filter names an unknown tag
        """
        fmt = self._check_format(fmt)
        started = datetime.now()

        tagged_entries = self.select_entries(session, start_date, end_date, tag_filter)
        if not tagged_entries:
            raise ExportError("No entries found for the selected date range")

        content = self.export_entries(tagged_entries, fmt)

        output_dir = Path(output_dir)
        stamp = started.strftime("%Y-%m-%dT%H-%M-%S-%f")
        final_file = output_dir / f"crohns-tracker-export-{stamp}.{fmt}"

        try:
            with TemporalFileManager(output_dir) as temp_manager:
                staging = temp_manager.create_temp_file(suffix=f".{fmt}")
                staging.write_text(content, encoding="utf-8")
                shutil.move(str(staging), str(final_file))
        except OSError as e:
            raise ExportError(f"Failed to write export file: {e}") from e

        stats = {
            "entries": len(tagged_entries),
            "output_path": str(final_file),
            "format": fmt,
            "duration": (datetime.now() - started).total_seconds(),
        }
        safe_logger(self.logger).log_info("Export written", stats)
        return stats

    def preview(
        self,
        session: Session,
        start_date: Any,
        end_date: Any,
        fmt: str,
        max_entries: int = 10,
        tag_filter: Optional[TagFilter] = None,
    ) -> str:
        """
        First few entries of an export, without writing a file.

        A trailing ``...`` line marks a preview that was cut short.
        """
        tagged_entries = self.select_entries(session, start_date, end_date, tag_filter)
        content = self.export_entries(tagged_entries[:max_entries], fmt)
        if len(tagged_entries) > max_entries:
            content = content.rstrip("\n") + "\n..."
        return content

    @staticmethod
    def _check_format(fmt: str) -> str:
        fmt = (fmt or "").lower()
        if fmt not in EXPORT_FORMATS:
            raise ExportError(f"Unsupported export format: {fmt}")
        return fmt
