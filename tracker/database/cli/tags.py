"""
Day Tag Commands
----------------

Manage the set of reusable day tags.

Commands:
    - list: All tags, most used first
    - create: Create a tag (or fill in the description of an existing one)
    - describe: Set or clear a tag's description
    - delete: Delete a tag and remove it from every date
    - unused: Tags not applied to any date
    - recount: Repair usage counters
"""
import click

from tracker.core.logging_manager import handle_cli_error
from tracker.core.exceptions import TagNotFoundError, TrackerError
from tracker.utils.tags import truncate_tag_name
from . import get_db


def _echo_tag_row(tag) -> None:
    line = f"  {truncate_tag_name(tag.display_name, 30):<30} {tag.usage_count:4d} days"
    if tag.description:
        line += f"  · {tag.description}"
    click.echo(line)


@click.group()
@click.pass_context
def tags(ctx: click.Context) -> None:
    """Manage day tags."""
    pass


@tags.command("list")
@click.pass_context
def list_tags(ctx):
    """List all tags, most used first."""
    try:
        all_tags = get_db(ctx).get_all_tags()

        if not all_tags:
            click.echo("No tags yet. Add one with: trackdb days add <date> <tag>")
            return

        click.echo(f"\n🏷️  Day Tags ({len(all_tags)}):\n")
        for tag in all_tags:
            _echo_tag_row(tag)

    except TrackerError as e:
        handle_cli_error(ctx, e, "list_tags")


@tags.command("create")
@click.argument("name")
@click.option("--description", "-d", default=None, help="Optional description")
@click.pass_context
def create(ctx, name, description):
    """Create a tag named NAME."""
    try:
        tag = get_db(ctx).create_tag(name, description)
        click.echo(f"✅ Tag: {tag.display_name} (id {tag.id})")

    except TrackerError as e:
        handle_cli_error(ctx, e, "create_tag", additional_context={"tag": name})


@tags.command("describe")
@click.argument("name")
@click.argument("description", required=False)
@click.option("--clear", is_flag=True, help="Remove the description")
@click.pass_context
def describe(ctx, name, description, clear):
    """Set the description of tag NAME."""
    try:
        if not clear and description is None:
            raise click.UsageError("Give a DESCRIPTION or use --clear")

        db = get_db(ctx)
        tag = db.get_tag(name)
        if tag is None:
            raise TagNotFoundError(name)

        tag = db.update_tag_description(tag.id, None if clear else description)
        if tag.description:
            click.echo(f"✅ {tag.display_name}: {tag.description}")
        else:
            click.echo(f"✅ Cleared description of {tag.display_name}")

    except TrackerError as e:
        handle_cli_error(ctx, e, "describe_tag", additional_context={"tag": name})


@tags.command("delete")
@click.argument("name")
@click.confirmation_option(prompt="⚠️  This removes the tag from every date. Are you sure?")
@click.pass_context
def delete(ctx, name):
    """Delete tag NAME and all of its date associations."""
    try:
        db = get_db(ctx)
        tag = db.get_tag(name)
        if tag is None:
            raise TagNotFoundError(name)

        removed = db.delete_tag(tag.id)
        click.echo(f"🗑️  Deleted {tag.display_name} (removed from {removed} days)")

    except TrackerError as e:
        handle_cli_error(ctx, e, "delete_tag", additional_context={"tag": name})


@tags.command("unused")
@click.pass_context
def unused(ctx):
    """List tags that are not applied to any date."""
    try:
        unused_tags = get_db(ctx).get_unused_tags()

        if not unused_tags:
            click.echo("✅ Every tag is in use")
            return

        click.echo(f"\n🏷️  Unused tags ({len(unused_tags)}):\n")
        for tag in unused_tags:
            _echo_tag_row(tag)

    except TrackerError as e:
        handle_cli_error(ctx, e, "unused_tags")


@tags.command("recount")
@click.pass_context
def recount(ctx):
    """Recompute usage counts from the stored associations."""
    try:
        corrections = get_db(ctx).recount_usage()

        if not corrections:
            click.echo("✅ All usage counts are correct")
            return

        click.echo(f"🔧 Corrected {len(corrections)} tag(s):")
        for tag_id, count in sorted(corrections.items()):
            click.echo(f"  tag {tag_id}: {count} days")

    except TrackerError as e:
        handle_cli_error(ctx, e, "recount_usage")
