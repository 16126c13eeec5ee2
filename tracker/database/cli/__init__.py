#!/usr/bin/env python3
"""
Tracker Database CLI
--------------------

Command-line interface for the tracker database.

This module provides the main CLI group and shared context setup
for all commands.

Command Structure:
    - Setup & Migrations (init, upgrade, status)
    - Day Tags (tags)
    - Tagged Days (days)
    - Entries (entries)
    - Reports & Export (reports)

Settings come from an optional YAML config file (--config or the
TRACKER_CONFIG environment variable); the path options below override it.

Usage:
    # Get general help
    trackdb --help

    # Tag a day and look at the month
    trackdb days add 2025-10-25 Vacation
    trackdb days calendar 2025 10

    # Entries on days with both tags
    trackdb reports filter -t vacation -t "new medicine" --mode all \\
        --start 2025-10-01 --end 2025-10-31
"""
import logging
from pathlib import Path

import click

from tracker.core.config import load_config
from tracker.core.exceptions import ValidationError
from tracker.database import TrackerDB


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to YAML config file",
)
@click.option(
    "--db-path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to database file",
)
@click.option(
    "--alembic-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Path to Alembic directory",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Path to log directory",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show detailed errors and tracebacks",
)
@click.pass_context
def cli(ctx, config_path, db_path, alembic_dir, log_dir, verbose):
    """Crohn's Tracker database CLI"""

    # Suppress Alembic INFO logging by default
    logging.getLogger("alembic").setLevel(logging.WARNING)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    try:
        config = load_config(config_path)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="--config") from e

    ctx.obj["config"] = config.with_overrides(
        db_path=db_path, alembic_dir=alembic_dir, log_dir=log_dir
    )


def get_db(ctx) -> TrackerDB:
    """Get or create database instance from context."""
    if "db" not in ctx.obj:
        config = ctx.obj["config"]
        db = TrackerDB(
            db_path=config.db_path,
            alembic_dir=config.alembic_dir,
            log_dir=config.log_dir,
            log_max_bytes=config.log_max_bytes,
            log_backup_count=config.log_backup_count,
        )
        ctx.obj["db"] = db
        ctx.obj["logger"] = db.logger
        ctx.call_on_close(db.close)
    return ctx.obj["db"]


def get_export_dir(ctx) -> Path:
    """Default export directory from the active config."""
    return Path(ctx.obj["config"].export_dir)


# Import and register command modules
# These imports must come after CLI group definition
from .setup import init, upgrade, status  # noqa: E402
from .tags import tags  # noqa: E402
from .days import days  # noqa: E402
from .entries import entries  # noqa: E402
from .reports import reports  # noqa: E402

# Register top-level commands
cli.add_command(init)
cli.add_command(upgrade)
cli.add_command(status)

# Register command groups
cli.add_command(tags)
cli.add_command(days)
cli.add_command(entries)
cli.add_command(reports)


if __name__ == "__main__":
    cli(obj={})
