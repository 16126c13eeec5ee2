#!/usr/bin/env python3
"""
config.py
-------------------
YAML configuration for the tracker.

A config file is optional. When present it may set any of the keys of
TrackerConfig; relative paths are resolved against the directory holding
the file. Missing keys fall back to the defaults in paths.py.

Example tracker.yaml:
    db_path: ~/health/tracker.db
    log_dir: ~/health/logs
    export_dir: ~/health/exports
    export_format: txt
    log_max_bytes: 1048576
    log_backup_count: 2

Usage:
    from tracker.core.config import load_config

    config = load_config("tracker.yaml")
    db = TrackerDB(config.db_path, config.alembic_dir, log_dir=config.log_dir)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

# --- Third party imports ---
import yaml

# --- Local imports ---
from .exceptions import ValidationError
from .paths import ALEMBIC_DIR, CONFIG_ENV_VAR, DB_PATH, EXPORT_DIR, LOG_DIR

EXPORT_FORMATS = ("csv", "txt")

_PATH_KEYS = ("db_path", "log_dir", "export_dir", "alembic_dir")
_INT_KEYS = ("log_max_bytes", "log_backup_count")


@dataclass
class TrackerConfig:
    """
    Runtime settings for the database, logs and exports.

    Attributes:
        db_path: SQLite database file
        log_dir: Directory for rotating log files
        export_dir: Default directory for export files
        alembic_dir: Alembic script directory
        log_max_bytes: Size at which log files rotate
        log_backup_count: Number of rotated log files kept
        export_format: Default export format ("csv" or "txt")
    """

    db_path: Path = field(default_factory=lambda: DB_PATH)
    log_dir: Path = field(default_factory=lambda: LOG_DIR)
    export_dir: Path = field(default_factory=lambda: EXPORT_DIR)
    alembic_dir: Path = field(default_factory=lambda: ALEMBIC_DIR)
    log_max_bytes: int = 5 * 1024 * 1024
    log_backup_count: int = 3
    export_format: str = "csv"

    def with_overrides(self, **overrides: Any) -> "TrackerConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        for key in _PATH_KEYS:
            if key in changes:
                changes[key] = Path(changes[key]).expanduser()
        return replace(self, **changes)


def _coerce(data: Dict[str, Any], base_dir: Path) -> Dict[str, Any]:
    """Validate raw YAML values and convert them to TrackerConfig types."""
    known = {f.name for f in fields(TrackerConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValidationError(f"Unknown config keys: {', '.join(unknown)}")

    values: Dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            continue
        if key in _PATH_KEYS:
            path = Path(str(value)).expanduser()
            values[key] = path if path.is_absolute() else base_dir / path
        elif key in _INT_KEYS:
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValidationError(f"Config key '{key}' must be a non-negative integer")
            values[key] = value
        elif key == "export_format":
            fmt = str(value).lower()
            if fmt not in EXPORT_FORMATS:
                raise ValidationError(
                    f"Config key 'export_format' must be one of {', '.join(EXPORT_FORMATS)}"
                )
            values[key] = fmt
    return values


def load_config(path: Optional[Union[str, Path]] = None) -> TrackerConfig:
    """
    Load settings from a YAML file.

    Args:
        path: Config file. When None, the file named by the TRACKER_CONFIG
            environment variable is used if set; otherwise defaults apply.

    Returns:
        TrackerConfig with file values layered over defaults

    Raises:
        ValidationError: If the file is missing, is not a mapping,
            or holds unknown keys or bad values
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if not env_path:
            return TrackerConfig()
        path = env_path

    config_path = Path(path).expanduser()
    if not config_path.is_file():
        raise ValidationError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValidationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return TrackerConfig()
    if not isinstance(data, dict):
        raise ValidationError(f"Config file must contain a mapping: {config_path}")

    return TrackerConfig(**_coerce(data, config_path.resolve().parent))
