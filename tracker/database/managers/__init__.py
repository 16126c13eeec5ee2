#!/usr/bin/env python3
"""
managers package
--------------------
Entity managers for the tracker database.

Each manager handles the operations of one entity type and inherits
from BaseManager.

Available Managers:
    BaseManager: Abstract base class with common utilities
    TagManager: Day tags (get-or-create, listing, description, delete)
    DayTagManager: Tag-date associations and usage counters
    EntryManager: Bowel movement and note entries

Usage:
    from tracker.database.managers import TagManager, DayTagManager

    tag_mgr = TagManager(session, logger)
    day_mgr = DayTagManager(session, logger)
"""
from .base_manager import BaseManager
from .tag_manager import TagManager
from .day_tag_manager import DayTagManager
from .entry_manager import EntryManager

__all__ = [
    "BaseManager",
    "TagManager",
    "DayTagManager",
    "EntryManager",
]
