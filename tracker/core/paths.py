#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants for the tracker.

The project structure:
    ROOT/
    ├── tracker/       # Package code (and Alembic scripts)
    ├── data/          # Local database and exports (private)
    └── logs/          # Application logs

All paths are resolved at import time. They are defaults only: every one
of them can be overridden from a YAML config file or a CLI option.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from pathlib import Path


def _get_project_root() -> Path:
    """
    Determine project root directory.

    Assumes this file is at ROOT/tracker/core/paths.py.

    Returns:
        Path object for project root

    Raises:
        RuntimeError: If the package directory cannot be found under ROOT
    """
    current_file = Path(__file__).resolve()
    root = current_file.parent.parent.parent

    if not (root / "tracker").is_dir():
        raise RuntimeError(
            f"Cannot determine valid project root. "
            f"Expected {root / 'tracker'} to exist. "
            f"Current file: {current_file}"
        )

    return root


# ----- Project directory -----
ROOT: Path = _get_project_root()
PACKAGE_DIR = ROOT / "tracker"

# --- Database ---
DATA_DIR = ROOT / "data"
DB_PATH = DATA_DIR / "tracker.db"
ALEMBIC_DIR = PACKAGE_DIR / "migrations"
ALEMBIC_INI = ROOT / "alembic.ini"

# --- Outputs ---
EXPORT_DIR = DATA_DIR / "exports"
LOG_DIR = ROOT / "logs"

# --- Configuration ---
CONFIG_ENV_VAR = "TRACKER_CONFIG"
