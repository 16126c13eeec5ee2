#!/usr/bin/env python3
"""
base_manager.py
--------------------
Shared plumbing for the tracker's managers.

A manager wraps one SQLAlchemy session (owned by TrackerDB.session_scope)
and never commits; it flushes, and groups related writes in a SAVEPOINT
with ``_atomic()`` so that, for example, an association row and its tag's
usage counter are written or rolled back together.

Usage:
    class TagManager(BaseManager):
        def get_by_id(self, tag_id: int) -> Optional[DayTag]:
            return self._get_by_id(DayTag, tag_id)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import time
from abc import ABC
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, Protocol, Type, TypeVar

# --- Third party imports ---
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Mapped, Session, SessionTransaction

# --- Local imports ---
from tracker.core.exceptions import DatabaseError
from tracker.core.logging_manager import TrackerLogger, safe_logger

# SQLite reports contention as an OperationalError mentioning one of these
LOCK_MARKERS = ("locked", "busy")


class HasId(Protocol):
    id: Mapped[int]


T = TypeVar("T", bound=HasId)


def _is_lock_error(error: OperationalError) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in LOCK_MARKERS)


class BaseManager(ABC):
    """
    Base class for TagManager, DayTagManager and EntryManager.

    Attributes:
        session: Session of the surrounding ``session_scope``
        logger: Optional TrackerLogger (None disables logging)
    """

    def __init__(self, session: Session, logger: Optional[TrackerLogger] = None):
        self.session = session
        self.logger = logger

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @contextmanager
    def _atomic(self) -> Iterator[SessionTransaction]:
        """
        SAVEPOINT around a group of writes.

        Pending changes are flushed before the savepoint is released, so
        constraint violations surface inside the block. If the block
        raises, only its own writes are undone and the session stays
        usable for the caller.
        """
        with self.session.begin_nested() as savepoint:
            yield savepoint
            self.session.flush()

    def _execute_with_retry(
        self,
        operation: Callable[[], Any],
        max_retries: int = 3,
        retry_delay: float = 0.1,
    ) -> Any:
        """
        Call ``operation``, retrying while SQLite reports the file locked.

        Waits ``retry_delay``, then twice that, and so on between attempts.
        Any other OperationalError, or a lock that outlasts the retries,
        propagates.
        """
        log = safe_logger(self.logger)
        for attempt in range(1, max_retries + 1):
            try:
                return operation()
            except OperationalError as e:
                if attempt == max_retries or not _is_lock_error(e):
                    raise
                wait = retry_delay * 2 ** (attempt - 1)
                log.log_debug(
                    "Database locked, retrying",
                    {"attempt": attempt, "max_retries": max_retries, "wait": wait},
                )
                time.sleep(wait)

        raise DatabaseError(f"Operation failed after {max_retries} attempts")

    def _get_or_create(
        self,
        model_class: Type[T],
        lookup_fields: Dict[str, Any],
        extra_fields: Optional[Dict[str, Any]] = None,
    ) -> tuple[T, bool]:
        """
        Fetch the row matching ``lookup_fields`` or insert it.

        ``extra_fields`` are only used for the insert. When a concurrent
        writer inserts the same unique key first, the IntegrityError rolls
        back our SAVEPOINT and the winner's row is returned instead.

        Returns:
            (instance, created)
        """
        existing = self._find_one(model_class, lookup_fields)
        if existing is not None:
            return existing, False

        try:
            with self._atomic():
                obj = model_class(**lookup_fields, **(extra_fields or {}))
                self.session.add(obj)
            return obj, True
        except IntegrityError:
            existing = self._find_one(model_class, lookup_fields)
            if existing is None:
                raise DatabaseError(
                    f"Could not create or find {model_class.__name__} {lookup_fields}"
                )
            return existing, False

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def _find_one(self, model_class: Type[T], fields: Dict[str, Any]) -> Optional[T]:
        return self.session.scalars(
            select(model_class).filter_by(**fields).limit(1)
        ).first()

    def _get_by_id(self, model_class: Type[T], entity_id: int) -> Optional[T]:
        return self.session.get(model_class, entity_id)

    def _count(self, model_class: Type[T], **filters: Any) -> int:
        """Number of rows, optionally restricted by column equality."""
        stmt = select(func.count()).select_from(model_class).where(
            *(getattr(model_class, name) == value for name, value in filters.items())
        )
        return self.session.scalar(stmt) or 0
