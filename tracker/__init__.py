"""
Crohn's Tracker
===============

Local, single-user tracking of bowel movements and notes, with reusable
day tags for marking experiments (a new medicine, a diet, a vacation)
and comparing how the tagged days went.

Main Components:
    - database: SQLAlchemy ORM, entity managers, tag filtering and reports
    - core: Logging, validation, configuration, paths
    - utils: Tag name and date helpers

Primary Interfaces:
    - tracker.database.cli: Command line (``trackdb``)
    - tracker.database.manager.TrackerDB: Main database interface

Example Usage:
    >>> from tracker.database import TrackerDB
    >>> from tracker.core.paths import DB_PATH, ALEMBIC_DIR, LOG_DIR
    >>> db = TrackerDB(db_path=DB_PATH, alembic_dir=ALEMBIC_DIR, log_dir=LOG_DIR)
    >>> db.add_tag_to_day("2025-10-25", "Vacation")
"""

__version__ = "1.0.0"
