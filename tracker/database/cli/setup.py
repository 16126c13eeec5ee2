"""
Setup & Migration Commands
--------------------------

Database initialization and schema versioning.

Commands:
    - init: Create the database (or migrate an existing one)
    - upgrade: Apply pending Alembic migrations
    - status: Show the current schema revision
"""
import click

from tracker.core.logging_manager import handle_cli_error
from tracker.core.exceptions import DatabaseError
from . import get_db


@click.command()
@click.pass_context
def init(ctx):
    """Initialize the database schema."""
    try:
        click.echo("🚀 Initializing tracker database...")
        db = get_db(ctx)
        db.initialize_schema()
        click.echo(f"✅ Database ready: {db.db_path}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "init")


@click.command()
@click.option("--revision", default="head", show_default=True, help="Target revision")
@click.pass_context
def upgrade(ctx, revision):
    """Upgrade the database schema."""
    try:
        db = get_db(ctx)
        click.echo(f"⬆️  Upgrading database to {revision}...")
        db.upgrade_database(revision)
        click.echo("✅ Database upgraded!")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "upgrade", additional_context={"revision": revision})


@click.command()
@click.pass_context
def status(ctx):
    """Show the database schema revision."""
    db = get_db(ctx)
    history = db.get_migration_history()

    if "error" in history:
        handle_cli_error(ctx, DatabaseError(history["error"]), "status")

    click.echo(f"🗄️  Database: {db.db_path}")
    click.echo(f"📌 Revision: {history['current_revision'] or '(none)'}")
    click.echo(f"📊 Status:   {history['status']}")
