#!/usr/bin/env python3
"""
tag_reports.py
--------------
Per-tag statistics over bowel movements recorded on tagged days.

A tag marks an experiment ("new medicine", "dairy free"); its report
answers how bowel movements looked on the days it was applied. Reports
are read-only.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

# --- Third party imports ---
from sqlalchemy import select
from sqlalchemy.orm import Session

# --- Local imports ---
from tracker.core.logging_manager import TrackerLogger
from tracker.database.decorators import handle_db_errors, log_database_operation
from tracker.database.managers import DayTagManager, EntryManager
from tracker.database.models import DayTag, EntryType

BRISTOL_SCALE_DESCRIPTIONS = {
    1: "Separate hard lumps",
    2: "Lumpy and sausage-like",
    3: "Sausage with cracks",
    4: "Smooth, soft sausage",
    5: "Soft blobs with clear edges",
    6: "Mushy consistency",
    7: "Liquid consistency",
}

URGENCY_LEVEL_DESCRIPTIONS = {
    1: "None",
    2: "Mild",
    3: "Moderate",
    4: "Urgent",
}


def bristol_scale_description(scale: int) -> str:
    """Short description of a Bristol stool scale value."""
    return BRISTOL_SCALE_DESCRIPTIONS.get(scale, "Unknown")


def urgency_level_description(level: int) -> str:
    """Short description of an urgency level."""
    return URGENCY_LEVEL_DESCRIPTIONS.get(level, "Unknown")


@dataclass
class TagStatistics:
    """
    Bowel movement statistics for the days carrying one tag.

    Averages are 0 when there is nothing to average. Distributions map a
    scale value to how many bowel movements had it.
    """

    tag_id: int
    tag_name: str
    tag_display_name: str
    total_days: int = 0
    total_bowel_movements: int = 0
    average_bowel_movements_per_day: float = 0.0
    average_consistency: float = 0.0
    average_urgency: float = 0.0
    consistency_distribution: Dict[int, int] = field(default_factory=dict)
    urgency_distribution: Dict[int, int] = field(default_factory=dict)
    earliest_date: Optional[date] = None
    latest_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tag_id": self.tag_id,
            "tag_name": self.tag_name,
            "tag_display_name": self.tag_display_name,
            "total_days": self.total_days,
            "total_bowel_movements": self.total_bowel_movements,
            "average_bowel_movements_per_day": self.average_bowel_movements_per_day,
            "average_consistency": self.average_consistency,
            "average_urgency": self.average_urgency,
            "consistency_distribution": dict(self.consistency_distribution),
            "urgency_distribution": dict(self.urgency_distribution),
            "date_range": {
                "earliest": self.earliest_date.isoformat() if self.earliest_date else None,
                "latest": self.latest_date.isoformat() if self.latest_date else None,
            },
        }


class TagReports:
    """
    Computes TagStatistics.

    Provides per-tag and all-tag reports over the full history of each
    tag's dates.
    """

    def __init__(self, logger: Optional[TrackerLogger] = None) -> None:
        """
        Initialize the report generator.

        Args:
            logger: Optional logger for report operations
        """
        self.logger = logger

    @handle_db_errors
    @log_database_operation("get_tag_statistics")
    def statistics_for_tag(self, session: Session, tag_id: int) -> Optional[TagStatistics]:
        """
        Statistics for one tag.

        Args:
            session: SQLAlchemy session
            tag_id: Tag to report on

        Returns:
            TagStatistics, or None if the tag does not exist
        """
        tag = session.get(DayTag, tag_id)
        if tag is None:
            return None

        stats = TagStatistics(
            tag_id=tag.id, tag_name=tag.name, tag_display_name=tag.display_name
        )

        dates = DayTagManager(session, self.logger).dates_for_tag(tag.id)
        if not dates:
            return stats

        bowel_movements = [
            entry.bowel_movement
            for entry in EntryManager(session, self.logger).get_for_dates(
                dates, newest_first=False, entry_type=EntryType.BOWEL_MOVEMENT
            )
            if entry.bowel_movement is not None
        ]

        stats.total_days = len(dates)
        stats.total_bowel_movements = len(bowel_movements)
        stats.average_bowel_movements_per_day = len(bowel_movements) / len(dates)
        stats.earliest_date = dates[0]
        stats.latest_date = dates[-1]

        if bowel_movements:
            consistencies = [bm.consistency for bm in bowel_movements]
            urgencies = [bm.urgency for bm in bowel_movements]
            stats.average_consistency = sum(consistencies) / len(consistencies)
            stats.average_urgency = sum(urgencies) / len(urgencies)
            stats.consistency_distribution = dict(sorted(Counter(consistencies).items()))
            stats.urgency_distribution = dict(sorted(Counter(urgencies).items()))

        return stats

    @handle_db_errors
    @log_database_operation("get_all_tag_statistics")
    def all_tag_statistics(self, session: Session) -> List[TagStatistics]:
        """
        Statistics for every tag that has at least one bowel movement.

        Returns:
            List of TagStatistics, most bowel movements first
        """
        tag_ids = session.scalars(select(DayTag.id).order_by(DayTag.display_name)).all()

        statistics = []
        for tag_id in tag_ids:
            stats = self.statistics_for_tag(session, tag_id)
            if stats is not None and stats.total_bowel_movements > 0:
                statistics.append(stats)

        return sorted(statistics, key=lambda s: s.total_bowel_movements, reverse=True)
