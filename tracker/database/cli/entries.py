"""
Entry Commands
--------------

Record and browse bowel movements and notes.

Commands:
    - add-bm: Record a bowel movement
    - add-note: Record a note
    - list: Entries in a date range with their day tags
    - delete: Delete an entry
"""
from datetime import datetime

import click

from tracker.core.logging_manager import handle_cli_error
from tracker.core.exceptions import TrackerError
from tracker.core.validators import NOTE_CATEGORIES
from tracker.database.tag_reports import bristol_scale_description, urgency_level_description
from . import get_db


def _now_time() -> str:
    return datetime.now().strftime("%H:%M")


@click.group()
@click.pass_context
def entries(ctx: click.Context) -> None:
    """Record and browse entries."""
    pass


@entries.command("add-bm")
@click.argument("day")
@click.option("--time", "time_", default=None, help="HH:MM (default: now)")
@click.option("--consistency", "-c", type=int, required=True, help="Bristol scale 1-7")
@click.option("--urgency", "-u", type=int, required=True, help="Urgency 1-4")
@click.option("--notes", "-n", default=None, help="Optional notes")
@click.pass_context
def add_bm(ctx, day, time_, consistency, urgency, notes):
    """Record a bowel movement on DAY (YYYY-MM-DD)."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            entry = db.entries.create_bowel_movement({
                "date": day,
                "time": time_ or _now_time(),
                "consistency": consistency,
                "urgency": urgency,
                "notes": notes,
            })
            click.echo(
                f"✅ Entry #{entry.id}: {entry.date.isoformat()} {entry.time} "
                f"({bristol_scale_description(consistency)}, "
                f"{urgency_level_description(urgency).lower()} urgency)"
            )

    except TrackerError as e:
        handle_cli_error(ctx, e, "add_bowel_movement", additional_context={"date": day})


@entries.command("add-note")
@click.argument("day")
@click.argument("content")
@click.option("--time", "time_", default=None, help="HH:MM (default: now)")
@click.option(
    "--category",
    type=click.Choice(NOTE_CATEGORIES),
    default="other",
    show_default=True,
)
@click.option("--tags", default=None, help="Comma-separated note tags")
@click.pass_context
def add_note(ctx, day, content, time_, category, tags):
    """Record a note with CONTENT on DAY (YYYY-MM-DD)."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            entry = db.entries.create_note({
                "date": day,
                "time": time_ or _now_time(),
                "category": category,
                "content": content,
                "tags": tags,
            })
            click.echo(f"✅ Entry #{entry.id}: {entry.date.isoformat()} {entry.time} ({category})")

    except TrackerError as e:
        handle_cli_error(ctx, e, "add_note", additional_context={"date": day})


@entries.command("list")
@click.option("--start", required=True, help="First date (YYYY-MM-DD)")
@click.option("--end", required=True, help="Last date (YYYY-MM-DD)")
@click.pass_context
def list_entries(ctx, start, end):
    """List entries between two dates with their day tags."""
    try:
        db = get_db(ctx)
        with db.session_scope() as session:
            tagged = db.filter_engine.attach_day_tags(
                session, db.entries.get_in_range(start, end)
            )

            if not tagged:
                click.echo("No entries in range")
                return

            click.echo(f"\n📝 Entries ({len(tagged)}):\n")
            for item in tagged:
                entry = item.entry
                kind = entry.type.label
                tags = f"  [{', '.join(item.day_tag_names)}]" if item.day_tags else ""
                click.echo(f"  {entry.date.isoformat()} {entry.time}  #{entry.id} {kind}{tags}")

    except TrackerError as e:
        handle_cli_error(ctx, e, "list_entries", additional_context={"start": start, "end": end})


@entries.command("delete")
@click.argument("entry_id", type=int)
@click.confirmation_option(prompt="⚠️  Delete this entry?")
@click.pass_context
def delete(ctx, entry_id):
    """Delete entry ENTRY_ID."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            db.entries.delete(entry_id)
        click.echo(f"🗑️  Deleted entry #{entry_id}")

    except TrackerError as e:
        handle_cli_error(ctx, e, "delete_entry", additional_context={"entry_id": entry_id})
