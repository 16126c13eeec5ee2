#!/usr/bin/env python3
"""
Tracker Database Package
------------------------
Storage, day tag logic and reporting for the health tracker.

Modules:
- manager: TrackerDB, the entry point to the SQLite store
- managers: Tag, day tag association and entry managers
- tag_filter: AND/OR tag filtering of entries
- calendar_projector: Cached month views of tagged dates
- tag_reports: Per-tag bowel movement statistics
- export_manager: CSV and TXT export
"""

from .manager import TrackerDB
from tracker.core.exceptions import (
    DatabaseError,
    ExportError,
    ValidationError,
)
from .calendar_projector import CalendarProjector
from .export_manager import ExportManager
from .tag_filter import TagFilter, TagFilterEngine, TaggedEntry
from .tag_reports import TagReports, TagStatistics
from .decorators import (
    DatabaseOperation,
    handle_db_errors,
    log_database_operation,
)

__all__ = [
    # Main manager
    "TrackerDB",
    # Exceptions
    "DatabaseError",
    "ExportError",
    "ValidationError",
    # Services
    "CalendarProjector",
    "ExportManager",
    "TagFilter",
    "TagFilterEngine",
    "TaggedEntry",
    "TagReports",
    "TagStatistics",
    # Decorators
    "DatabaseOperation",
    "handle_db_errors",
    "log_database_operation",
]
