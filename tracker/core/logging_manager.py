#!/usr/bin/env python3
"""
logging_manager.py
--------------------
Logging for the tracker database, exports and CLI.

TrackerLogger writes rotating log files; NullLogger and safe_logger let
every component treat the logger as optional; handle_cli_error is the one
place CLI commands turn an exception into an exit status.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import logging
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, NoReturn, Optional

# --- Third party imports ---
import click


# Log line layouts
FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(funcName)s:%(lineno)d] %(message)s"
CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 3


def _with_details(label: str, message: str, details: Optional[Dict[str, Any]]) -> str:
    """``LABEL - message`` with the details dict appended as JSON."""
    line = f"{label} - {message}"
    if details:
        line += f": {json.dumps(details, default=str)}"
    return line


class TrackerLogger:
    """
    File-backed logger for one tracker component.

    Two rotating files live in ``log_dir``: ``<component>.log`` receives
    everything from DEBUG up, ``errors.log`` receives errors with their
    context and traceback. Warnings are echoed to stderr.

    Detail dicts are written as JSON so log lines stay greppable
    (``grep '"tag_id": 3' database.log``).
    """

    def __init__(
        self,
        log_dir: Path,
        component_name: str = "tracker",
        max_bytes: int = DEFAULT_MAX_BYTES,
        backup_count: int = DEFAULT_BACKUP_COUNT,
        console_level: int = logging.WARNING,
    ) -> None:
        self.log_dir = Path(log_dir)
        self.component_name = component_name
        self.log_dir.mkdir(parents=True, exist_ok=True)

        rotation = {"maxBytes": max_bytes, "backupCount": backup_count, "encoding": "utf-8"}

        self.main_logger = self._fresh_logger(f"tracker.{component_name}", logging.DEBUG)
        self.main_logger.addHandler(
            self._file_handler(self.log_dir / f"{component_name}.log", logging.DEBUG, rotation)
        )
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(console_level)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        self.main_logger.addHandler(console)

        self.error_logger = self._fresh_logger(f"tracker.{component_name}.errors", logging.ERROR)
        self.error_logger.addHandler(
            self._file_handler(self.log_dir / "errors.log", logging.ERROR, rotation)
        )

    @staticmethod
    def _fresh_logger(name: str, level: int) -> logging.Logger:
        # Loggers are process-wide; a second TrackerDB must not double the handlers
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(level)
        logger.propagate = False
        return logger

    @staticmethod
    def _file_handler(path: Path, level: int, rotation: Dict[str, Any]) -> RotatingFileHandler:
        handler = RotatingFileHandler(path, **rotation)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        return handler

    def close(self) -> None:
        """Flush and detach every handler owned by this logger."""
        for logger in (self.main_logger, self.error_logger):
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    # ----- Writers -----
    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Record a finished operation (tag created, day tagged, export written...)."""
        self.main_logger.info(_with_details("OPERATION", operation, details or {}))

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.main_logger.debug(_with_details("DEBUG", message, details))

    def log_info(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.main_logger.info(_with_details("INFO", message, details))

    def log_warning(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.main_logger.warning(_with_details("WARNING", message, details))

    def log_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Write an exception to errors.log.

        Args:
            error: The exception being handled
            context: Where it happened, e.g. ``{"operation": "add_to_day", "date": ...}``
        """
        lines = [f"ERROR - {type(error).__name__}: {error}"]
        if context:
            lines.append("Context: " + ", ".join(f"{k}={v}" for k, v in context.items()))
        lines.append(f"Traceback:\n{traceback.format_exc()}")
        self.error_logger.error("\n".join(lines))

    def log_cli_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        """
        Log ``error`` to errors.log and return the line shown to the user.

        Examples:
            >>> logger.log_cli_error(TagNotFoundError("vacaton"))
            '❌ TagNotFoundError: Tag "vacaton" not found'
        """
        self.log_error(error, context or {"source": "cli"})
        return format_cli_error(error, show_traceback)


def format_cli_error(error: Exception, show_traceback: bool = False) -> str:
    message = f"❌ {type(error).__name__}: {error}"
    if show_traceback:
        message += f"\n\n{traceback.format_exc()}"
    return message


class NullLogger:
    """Stand-in used when a TrackerDB is built without a log directory."""

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_info(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_warning(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_cli_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        return format_cli_error(error, show_traceback)


_null_logger = NullLogger()


def safe_logger(logger: Optional[TrackerLogger]) -> TrackerLogger:
    """
    ``logger`` itself, or a shared NullLogger when it is None.

    Managers and services take ``logger=None`` and always write through
    ``safe_logger(self.logger).log_...``.
    """
    return logger if logger is not None else _null_logger  # type: ignore[return-value]


def handle_cli_error(
    ctx: "click.Context",
    error: Exception,
    operation: str,
    additional_context: Optional[Dict[str, Any]] = None,
    exit_code: int = 1,
) -> NoReturn:
    """
    Report a failed command and exit.

    The error goes to errors.log through the logger on ``ctx.obj`` (if the
    command got as far as opening the database) and a single ``❌`` line
    goes to stderr. With ``--verbose`` the traceback is printed too.

    Args:
        ctx: Click context; ``ctx.obj`` holds ``logger`` and ``verbose``
        error: The exception raised by the command
        operation: Command name recorded in the log context
        additional_context: Command arguments worth logging (date, tag...)
        exit_code: Process exit status
    """
    context: Dict[str, Any] = {"operation": operation, **(additional_context or {})}
    logger = safe_logger(ctx.obj.get("logger"))

    click.echo(
        logger.log_cli_error(error, context, show_traceback=ctx.obj.get("verbose", False)),
        err=True,
    )
    sys.exit(exit_code)
