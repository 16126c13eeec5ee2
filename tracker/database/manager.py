#!/usr/bin/env python3
"""
manager.py
--------------------
Database manager for the tracker.

Provides the TrackerDB class, the single entry point to the SQLite store.
Handles:
    - Initialization of the database engine and sessionmaker
    - Transactional session scopes with per-session entity managers
    - Schema creation and versioning via Alembic
    - Day tag service calls (each runs in its own transaction)
    - Tag filtering, month views, statistics and export

Key Features:
    - Transaction management with automatic rollback
    - SQLite connections configured for SAVEPOINTs and foreign keys
    - Month view caching, invalidated on every tag change
    - Structured logging with rotation

Core Operations:
    Tags:
        - get_all_tags, get_tag, create_tag, update_tag_description, delete_tag
    Days:
        - get_tags_for_date, add_tag_to_day, remove_tag_from_day,
          set_tags_for_date, get_tagged_dates_in_month
    Queries and reports:
        - entries_by_tags, entries_by_tag, statistics_for_tag,
          all_tag_statistics, export
    Maintenance:
        - initialize_schema, upgrade_database, get_migration_history,
          recount_usage

Usage:
    db = TrackerDB("data/tracker.db", "tracker/migrations", log_dir="logs")

    db.add_tag_to_day("2025-10-25", "Vacation")
    db.get_tagged_dates_in_month(2025, 10)

    with db.session_scope() as session:
        entry = db.entries.create_note({...})
        tags = db.day_tags.tags_for_date(entry.date)

Notes
==============
- Objects returned by the service calls stay readable after their session
  closes (expire_on_commit is off); relationships not loaded by the call
  are not available on them.
- There is no module-level database handle. Build a TrackerDB and pass it
  to whatever needs it.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from contextlib import contextmanager
from datetime import date, datetime
from itertools import chain
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set, Union

# --- Third party ---
from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy import Engine, create_engine, event, inspect
from sqlalchemy.orm import Session, UOWTransaction, sessionmaker

# --- Local imports ---
from tracker.core.exceptions import DatabaseError
from tracker.core.logging_manager import TrackerLogger, safe_logger
from tracker.core.paths import ALEMBIC_INI
from tracker.utils.dates import parse_date
from tracker.utils.tags import deduplicate_tags, normalize_tag_name

from .calendar_projector import CalendarProjector, MonthView
from .decorators import handle_db_errors, log_database_operation
from .export_manager import ExportManager
from .managers import DayTagManager, EntryManager, TagManager
from .models import Base, DayTag, DayTagAssociation
from .tag_filter import TagFilter, TagFilterEngine, TaggedEntry
from .tag_reports import TagReports, TagStatistics


# ----- Main Database Manager -----
class TrackerDB:
    """
    Main database manager for the tracker.

    Attributes:
        - db_path (Path): Filesystem path to the SQLite database file.
        - alembic_dir (Path): Filesystem path to the Alembic directory.
        - engine (Engine): SQLAlchemy engine instance.
        - SessionLocal (sessionmaker): SQLAlchemy session factory.
        - logger (TrackerLogger | None): Operation logger.
    """

    # ---- Initialization ----
    def __init__(
        self,
        db_path: Union[str, Path],
        alembic_dir: Union[str, Path],
        log_dir: Optional[Union[str, Path]] = None,
        log_max_bytes: int = 5 * 1024 * 1024,
        log_backup_count: int = 3,
    ) -> None:
        """
        Initialize database engine and session factory.

        A database file that does not exist yet is created with the full
        schema and stamped at the latest Alembic revision.

        Args:
            db_path: Path to the SQLite file
            alembic_dir: Path to the Alembic script directory
            log_dir: Directory for log files (optional)
            log_max_bytes: Log size before rotation
            log_backup_count: Rotated log files to keep
        """
        self.db_path = Path(db_path).expanduser().resolve()
        self.alembic_dir = Path(alembic_dir).expanduser().resolve()

        # --- Logging ---
        if log_dir:
            self.log_dir: Optional[Path] = Path(log_dir).expanduser().resolve()
            self.logger: Optional[TrackerLogger] = TrackerLogger(
                self.log_dir,
                component_name="database",
                max_bytes=log_max_bytes,
                backup_count=log_backup_count,
            )
        else:
            self.log_dir = None
            self.logger = None

        # --- Service components ---
        self.calendar = CalendarProjector(self.logger)
        self.filter_engine = TagFilterEngine(self.logger)
        self.reports = TagReports(self.logger)
        self.export_manager = ExportManager(self.logger)

        # --- Per-session managers (bound in session_scope) ---
        self._tag_manager: Optional[TagManager] = None
        self._day_tag_manager: Optional[DayTagManager] = None
        self._entry_manager: Optional[EntryManager] = None

        self._setup_engine()

    def _setup_engine(self) -> None:
        """Initialize database engine and session factory."""
        logger = safe_logger(self.logger)
        try:
            logger.log_operation(
                "database_init_start",
                {"db_path": str(self.db_path), "alembic_dir": str(self.alembic_dir)},
            )

            is_new = not self.db_path.exists()
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self.engine: Engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                pool_pre_ping=True,
            )
            self._configure_sqlite(self.engine)

            self.SessionLocal: sessionmaker = sessionmaker(
                bind=self.engine,
                autoflush=True,
                expire_on_commit=False,
            )

            self.alembic_cfg: Config = self._setup_alembic()

            if is_new:
                self.initialize_schema()

            logger.log_operation("database_init_complete", {"success": True})

        except Exception as e:
            logger.log_error(e, {"operation": "database_init"})
            raise DatabaseError(f"Database initialization failed: {e}") from e

    @staticmethod
    def _configure_sqlite(engine: Engine) -> None:
        """
        Make pysqlite honour SAVEPOINTs and foreign keys.

        The driver's own transaction handling is switched off and BEGIN is
        emitted by SQLAlchemy instead, so nested transactions work. Foreign
        keys are per connection in SQLite and must be enabled on each.
        """

        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN")

    # ---- Session Management ----
    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Provide a transactional scope around operations with logging.

        Binds the entity managers to the session for its duration; they are
        reachable as db.tags, db.day_tags and db.entries.

        Usage:
            with db.session_scope() as session:
                tag = db.tags.get_or_create("Vacation")
                db.day_tags.add_to_day(tag.id, "2025-10-25")
        """
        session = self.SessionLocal()
        session_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        logger = safe_logger(self.logger)
        touched_dates = self._watch_day_tag_writes(session)

        self._tag_manager = TagManager(session, self.logger)
        self._day_tag_manager = DayTagManager(session, self.logger)
        self._entry_manager = EntryManager(session, self.logger)

        logger.log_debug("session_start", {"session_id": session_id})

        try:
            yield session
            session.commit()
            logger.log_debug("session_commit", {"session_id": session_id})
        except Exception as e:
            session.rollback()
            logger.log_error(e, {"operation": "session_rollback", "session_id": session_id})
            raise
        finally:
            self._tag_manager = None
            self._day_tag_manager = None
            self._entry_manager = None

            session.close()
            logger.log_debug("session_close", {"session_id": session_id})
            self._invalidate_months(touched_dates)

    @staticmethod
    def _watch_day_tag_writes(session: Session) -> Set[Optional[date]]:
        """
        Collect the dates whose associations ``session`` inserts or deletes.

        Filled on every flush, so writes made through db.day_tags inside
        a session_scope are seen as well as those of the facade helpers.
        ``None`` stands for "any month": a tag was deleted or an
        association was modified in place.
        """
        touched: Set[Optional[date]] = set()

        @event.listens_for(session, "after_flush")
        def _collect(flushed: Session, flush_context: UOWTransaction) -> None:
            for obj in chain(flushed.new, flushed.deleted):
                if isinstance(obj, DayTagAssociation):
                    touched.add(inspect(obj).dict.get("date"))
                elif isinstance(obj, DayTag) and obj in flushed.deleted:
                    touched.add(None)
            if any(isinstance(obj, DayTagAssociation) for obj in flushed.dirty):
                touched.add(None)

        return touched

    def _invalidate_months(self, touched_dates: Set[Optional[date]]) -> None:
        if None in touched_dates:
            self.calendar.invalidate()
            return
        for day in touched_dates:
            self.calendar.invalidate(day)

    # -------------------------------------------------------------------------
    # Entity Manager Properties
    # -------------------------------------------------------------------------

    @property
    def tags(self) -> TagManager:
        """
        Access TagManager for tag operations.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        if self._tag_manager is None:
            raise DatabaseError(
                "TagManager requires active session. "
                "Use within session_scope: "
                "with db.session_scope() as session: db.tags.get_or_create(...)"
            )
        return self._tag_manager

    @property
    def day_tags(self) -> DayTagManager:
        """
        Access DayTagManager for tag-date associations.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        if self._day_tag_manager is None:
            raise DatabaseError(
                "DayTagManager requires active session. Use within session_scope."
            )
        return self._day_tag_manager

    @property
    def entries(self) -> EntryManager:
        """
        Access EntryManager for bowel movement and note entries.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        if self._entry_manager is None:
            raise DatabaseError(
                "EntryManager requires active session. Use within session_scope."
            )
        return self._entry_manager

    # ---- Alembic setup ----
    def _setup_alembic(self) -> Config:
        """Setup Alembic configuration."""
        try:
            safe_logger(self.logger).log_debug("Setting up Alembic configuration...")

            alembic_cfg: Config = Config(str(ALEMBIC_INI))
            alembic_cfg.set_main_option("script_location", str(self.alembic_dir))
            alembic_cfg.set_main_option("sqlalchemy.url", f"sqlite:///{self.db_path}")
            alembic_cfg.attributes["configure_logger"] = False
            return alembic_cfg
        except Exception as e:
            safe_logger(self.logger).log_error(e, {"operation": "setup_alembic"})
            raise DatabaseError(f"Alembic configuration failed: {e}") from e

    @handle_db_errors
    @log_database_operation("initialize_schema")
    def initialize_schema(self) -> None:
        """
        Create tables if needed, otherwise run migrations.

        Actions:
            If the database has no tables,
                creates all tables from the ORM models
                stamps the Alembic revision to head
            If not,
                runs pending migrations to update schema
        """
        logger = safe_logger(self.logger)
        try:
            with self.engine.connect() as conn:
                tables = self.engine.dialect.get_table_names(conn)

            if not tables:
                Base.metadata.create_all(bind=self.engine)
                try:
                    command.stamp(self.alembic_cfg, "head")
                except Exception as e:
                    logger.log_error(e, {"operation": "stamp_database"})
                logger.log_operation(
                    "fresh_database_created",
                    {"tables_created": len(Base.metadata.tables)},
                )
            else:
                self.upgrade_database()
                logger.log_operation(
                    "existing_database_migrated", {"table_count": len(tables)}
                )
        except DatabaseError:
            raise
        except Exception as e:
            raise DatabaseError(f"Could not initialize database: {e}") from e

    @handle_db_errors
    @log_database_operation("upgrade_database")
    def upgrade_database(self, revision: str = "head") -> None:
        """
        Upgrade the database schema to the specified Alembic revision.

        Args:
            revision: Target revision (default: latest)
        """
        try:
            command.upgrade(self.alembic_cfg, revision)
        except Exception as e:
            raise DatabaseError(f"Database upgrade failed: {e}") from e

    def get_migration_history(self) -> Dict[str, Optional[str]]:
        """
        Get the current migration status of the database.

        Returns:
            Dictionary with 'current_revision' and 'status'
            ('up_to_date' or 'needs_migration'), or 'error'
        """
        try:
            with self.engine.connect() as conn:
                current_rev = MigrationContext.configure(conn).get_current_revision()
            return {
                "current_revision": current_rev,
                "status": "up_to_date" if current_rev else "needs_migration",
            }
        except Exception as e:
            safe_logger(self.logger).log_error(e, {"operation": "get_migration_history"})
            return {"error": str(e)}

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    def get_all_tags(self) -> List[DayTag]:
        """All tags, most used first, ties alphabetical."""
        with self.session_scope():
            return self.tags.get_all()

    def get_tag(self, tag_name: str) -> Optional[DayTag]:
        """Tag by name in any casing, or None."""
        with self.session_scope():
            return self.tags.get(tag_name)

    def create_tag(self, display_name: str, description: Optional[str] = None) -> DayTag:
        """Get or create a tag by name (see TagManager.get_or_create)."""
        with self.session_scope():
            return self.tags.get_or_create(display_name, description)

    def update_tag_description(self, tag_id: int, description: Optional[str]) -> DayTag:
        """Overwrite a tag's description."""
        with self.session_scope():
            return self.tags.update_description(tag_id, description)

    def delete_tag(self, tag_id: int) -> int:
        """
        Delete a tag and all its date associations.

        Returns:
            Number of associations removed
        """
        with self.session_scope():
            return self.tags.delete(tag_id)

    def get_unused_tags(self) -> List[DayTag]:
        """Tags not applied to any date."""
        with self.session_scope():
            return self.tags.get_unused()

    def recount_usage(self) -> Dict[int, int]:
        """Repair usage counters; returns the corrections made."""
        with self.session_scope():
            return self.day_tags.recount_usage()

    # -------------------------------------------------------------------------
    # Days
    # -------------------------------------------------------------------------

    def get_tags_for_date(self, day: Any) -> List[DayTag]:
        """Tags applied to a date, by display name."""
        with self.session_scope():
            return self.day_tags.tags_for_date(day)

    def add_tag_to_day(self, day: Any, tag_name: str) -> DayTagAssociation:
        """
        Apply a tag to a date, creating the tag on first use.

        Raises:
            ValidationError: If the date or tag name is malformed
            DuplicateAssociationError: If the tag is already on the date
            MaxTagsExceededError: If the date is full
        """
        day = parse_date(day)
        with self.session_scope():
            tag = self.tags.get_or_create(tag_name)
            return self.day_tags.add_to_day(tag.id, day)

    def remove_tag_from_day(self, day: Any, tag_name: str) -> bool:
        """
        Remove a tag from a date.

        An unknown tag, or a tag not on the date, is a no-op.

        Returns:
            True if an association was removed
        """
        day = parse_date(day)
        with self.session_scope():
            tag = self.tags.get(tag_name)
            return tag is not None and self.day_tags.remove_from_day(tag.id, day)

    def set_tags_for_date(self, day: Any, tag_names: Sequence[str]) -> List[str]:
        """
        Make a date carry exactly the given tags.

        Tags on the date but not in ``tag_names`` are removed, missing ones
        are added (created if new). The whole reconciliation is one
        transaction: if any step fails, the date keeps its old tags.

        Args:
            day: Date to update
            tag_names: Desired tag names; duplicates by normalized name
                are collapsed

        Returns:
            Display names of the date's tags afterwards

        Raises:
            TagValidationError: If a name is malformed
            MaxTagsExceededError: If more than MAX_TAGS_PER_DAY tags are asked for
        """
        day = parse_date(day)
        desired = deduplicate_tags(tag_names)
        desired_keys = {normalize_tag_name(name) for name in desired}

        with self.session_scope():
            current = self.day_tags.tags_for_date(day)
            current_keys = {tag.name for tag in current}

            for tag in current:
                if tag.name not in desired_keys:
                    self.day_tags.remove_from_day(tag.id, day)

            for name in desired:
                if normalize_tag_name(name) not in current_keys:
                    tag = self.tags.get_or_create(name)
                    self.day_tags.add_to_day(tag.id, day)

            return [tag.display_name for tag in self.day_tags.tags_for_date(day)]

    def get_tagged_dates_in_month(self, year: int, month: int) -> MonthView:
        """Tagged dates of a month with their tag display names (cached)."""
        with self.session_scope() as session:
            return self.calendar.get_month(session, year, month)

    # -------------------------------------------------------------------------
    # Queries and reports
    # -------------------------------------------------------------------------

    def entries_by_tags(
        self, tag_filter: TagFilter, start_date: Any, end_date: Any
    ) -> List[TaggedEntry]:
        """Entries on dates matching a tag filter, newest first."""
        with self.session_scope() as session:
            return self.filter_engine.entries_by_tags(session, tag_filter, start_date, end_date)

    def entries_by_tag(self, tag_name: str, start_date: Any, end_date: Any) -> List[TaggedEntry]:
        """Entries on dates carrying one tag, newest first."""
        with self.session_scope() as session:
            return self.filter_engine.entries_by_tag(session, tag_name, start_date, end_date)

    def statistics_for_tag(self, tag_id: int) -> Optional[TagStatistics]:
        """Bowel movement statistics for a tag's days, or None."""
        with self.session_scope() as session:
            return self.reports.statistics_for_tag(session, tag_id)

    def all_tag_statistics(self) -> List[TagStatistics]:
        """Statistics for every tag with bowel movements, busiest first."""
        with self.session_scope() as session:
            return self.reports.all_tag_statistics(session)

    def export(
        self,
        start_date: Any,
        end_date: Any,
        fmt: str,
        output_dir: Union[str, Path],
        tag_filter: Optional[TagFilter] = None,
    ) -> Dict[str, Any]:
        """Write an export file; returns export statistics."""
        with self.session_scope() as session:
            return self.export_manager.export_to_file(
                session, start_date, end_date, fmt, output_dir, tag_filter
            )

    # ----- Context Manager Support -----
    def close(self) -> None:
        """Dispose of the engine and release log handlers."""
        self.engine.dispose()
        if self.logger:
            self.logger.close()

    def __enter__(self) -> "TrackerDB":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        del exc_type, exc_val, exc_tb
        self.close()
