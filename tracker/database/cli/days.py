"""
Tagged Day Commands
-------------------

Apply day tags to dates and browse tagged dates.

Commands:
    - add: Apply one or more tags to a date
    - remove: Remove one or more tags from a date
    - set: Make a date carry exactly the given tags
    - show: Tags and entries of a date
    - calendar: Tagged dates of a month
"""
import calendar as calendar_module

import click

from tracker.core.logging_manager import handle_cli_error
from tracker.core.exceptions import ConflictError, TrackerError
from tracker.utils.dates import parse_date
from . import get_db


@click.group()
@click.pass_context
def days(ctx: click.Context) -> None:
    """Tag days and browse tagged days."""
    pass


@days.command("add")
@click.argument("day")
@click.argument("tag_names", nargs=-1, required=True)
@click.pass_context
def add(ctx, day, tag_names):
    """Apply TAG_NAMES to DAY (YYYY-MM-DD). New tags are created."""
    try:
        db = get_db(ctx)
        for name in tag_names:
            try:
                db.add_tag_to_day(day, name)
                click.echo(f"🏷️  {day}: + {name}")
            except ConflictError as e:
                click.echo(f"⚠️  {e}", err=True)

    except TrackerError as e:
        handle_cli_error(ctx, e, "add_tag_to_day", additional_context={"date": day})


@days.command("remove")
@click.argument("day")
@click.argument("tag_names", nargs=-1, required=True)
@click.pass_context
def remove(ctx, day, tag_names):
    """Remove TAG_NAMES from DAY. Tags not on the day are skipped."""
    try:
        db = get_db(ctx)
        for name in tag_names:
            if db.remove_tag_from_day(day, name):
                click.echo(f"🏷️  {day}: - {name}")
            else:
                click.echo(f"  {name} was not on {day}")

    except TrackerError as e:
        handle_cli_error(ctx, e, "remove_tag_from_day", additional_context={"date": day})


@days.command("set")
@click.argument("day")
@click.argument("tag_names", nargs=-1)
@click.pass_context
def set_tags(ctx, day, tag_names):
    """Make DAY carry exactly TAG_NAMES (none clears the day)."""
    try:
        final = get_db(ctx).set_tags_for_date(day, list(tag_names))
        click.echo(f"✅ {day}: {', '.join(final) if final else '(no tags)'}")

    except TrackerError as e:
        handle_cli_error(ctx, e, "set_tags_for_date", additional_context={"date": day})


@days.command("show")
@click.argument("day")
@click.pass_context
def show(ctx, day):
    """Show the tags and entries of DAY."""
    try:
        db = get_db(ctx)

        with db.session_scope():
            day_tags = db.day_tags.tags_for_date(day)
            day_entries = db.entries.get_for_date(day)

            click.echo(f"\n📅 {parse_date(day).isoformat()}")
            if day_tags:
                click.echo(f"🏷️  {', '.join(t.display_name for t in day_tags)}")

            if not day_entries:
                click.echo("\n  No entries")
                return

            click.echo(f"\n📝 Entries ({len(day_entries)}):\n")
            for entry in day_entries:
                if entry.bowel_movement:
                    bm = entry.bowel_movement
                    click.echo(
                        f"  {entry.time}  #{entry.id} Bowel Movement  "
                        f"consistency {bm.consistency}, urgency {bm.urgency}"
                    )
                elif entry.note:
                    click.echo(
                        f"  {entry.time}  #{entry.id} Note ({entry.note.category.value})  "
                        f"{entry.note.content}"
                    )

    except TrackerError as e:
        handle_cli_error(ctx, e, "show_day", additional_context={"date": day})


@days.command("calendar")
@click.argument("year", type=int)
@click.argument("month", type=int)
@click.pass_context
def calendar(ctx, year, month):
    """List the tagged dates of a month."""
    try:
        month_view = get_db(ctx).get_tagged_dates_in_month(year, month)

        click.echo(f"\n📅 {calendar_module.month_name[month]} {year}\n")
        if not month_view:
            click.echo("  No tagged days")
            return

        for day, names in month_view.items():
            click.echo(f"  {day.isoformat()}  {', '.join(names)}")

    except TrackerError as e:
        handle_cli_error(
            ctx, e, "calendar", additional_context={"year": year, "month": month}
        )
