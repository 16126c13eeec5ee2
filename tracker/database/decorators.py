#!/usr/bin/env python3
"""
decorators.py
--------------------
Shared decorators and context managers for database operations.

- log_database_operation: log start, completion, duration and errors
- handle_db_errors: translate SQLAlchemy failures into DatabaseError
- DatabaseOperation: both of the above as a ``with`` block
"""
from datetime import datetime
from functools import wraps
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from tracker.core.exceptions import DatabaseError
from tracker.core.logging_manager import TrackerLogger, safe_logger


def log_database_operation(operation_name: str):
    """
    Decorator to log database operations with timing and context.

    The wrapped method's instance must expose a ``logger`` attribute
    (a TrackerLogger or None).

    Args:
        operation_name: Name of the operation being logged

    Returns:
        Decorator function
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            start_time = datetime.now()
            operation_id = f"{operation_name}_{start_time.strftime('%Y%m%d_%H%M%S_%f')}"
            logger = safe_logger(getattr(self, "logger", None))

            logger.log_debug(
                f"Starting {operation_name}",
                {
                    "operation_id": operation_id,
                    "args_count": len(args),
                    "kwargs_keys": list(kwargs.keys()),
                },
            )

            try:
                result = function(self, *args, **kwargs)
            except Exception as e:
                logger.log_error(
                    e,
                    {
                        "operation": operation_name,
                        "operation_id": operation_id,
                        "duration_seconds": (datetime.now() - start_time).total_seconds(),
                    },
                )
                raise

            logger.log_operation(
                f"{operation_name}_completed",
                {
                    "operation_id": operation_id,
                    "duration_seconds": (datetime.now() - start_time).total_seconds(),
                    "success": True,
                },
            )
            return result

        return wrapper

    return decorator


def handle_db_errors(function: Callable) -> Callable:
    """
    Decorator to translate storage failures.

    IntegrityError and other SQLAlchemyError become DatabaseError;
    every other exception (including the tracker's own domain errors)
    propagates unchanged.
    """

    @wraps(function)
    def wrapper(*args, **kwargs):
        try:
            return function(*args, **kwargs)
        except IntegrityError as e:
            raise DatabaseError(f"Data integrity violation: {e}") from e
        except SQLAlchemyError as e:
            raise DatabaseError(f"Database operation failed: {e}") from e

    return wrapper


class DatabaseOperation:
    """
    Context manager combining operation logging and error translation.

    Usage:
        with DatabaseOperation(self.logger, "recount_usage"):
            ...

    Args:
        logger: TrackerLogger or None
        operation_name: Name used in log records
        log_start: Also log a debug record when the block starts
    """

    def __init__(
        self,
        logger: Optional[TrackerLogger],
        operation_name: str,
        log_start: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.logger = safe_logger(logger)
        self.operation_name = operation_name
        self.log_start = log_start
        self.details = details or {}
        self.start_time: Optional[datetime] = None

    def __enter__(self) -> "DatabaseOperation":
        self.start_time = datetime.now()
        if self.log_start:
            self.logger.log_debug(f"Starting {self.operation_name}", self.details)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        duration = (datetime.now() - self.start_time).total_seconds()

        if exc_val is None:
            self.logger.log_operation(
                f"{self.operation_name}_completed",
                {**self.details, "duration_seconds": duration, "success": True},
            )
            return False

        self.logger.log_error(
            exc_val,
            {**self.details, "operation": self.operation_name, "duration_seconds": duration},
        )
        if isinstance(exc_val, IntegrityError):
            raise DatabaseError(f"Data integrity violation: {exc_val}") from exc_val
        if isinstance(exc_val, SQLAlchemyError):
            raise DatabaseError(f"Database operation failed: {exc_val}") from exc_val
        return False
