"""
Reports & Export Commands
-------------------------

Statistics per tag, tag filtering and file export.

Commands:
    - stats: Bowel movement statistics for one tag or all tags
    - filter: Entries on days matching tags (any/all)
    - export: Write a CSV or TXT export file
    - preview: Print the start of an export without writing a file
"""
import click

from tracker.core.logging_manager import handle_cli_error
from tracker.core.config import EXPORT_FORMATS
from tracker.core.exceptions import TagNotFoundError, TrackerError
from tracker.database.models import MatchMode
from tracker.database.tag_filter import TagFilter
from tracker.database.tag_reports import (
    TagStatistics,
    bristol_scale_description,
    urgency_level_description,
)
from . import get_db, get_export_dir

_tag_option = click.option(
    "--tag", "-t", "tag_names", multiple=True, help="Day tag (repeatable)"
)
_mode_option = click.option(
    "--mode",
    type=click.Choice([m.value for m in MatchMode]),
    default=MatchMode.ANY.value,
    show_default=True,
    help="any = days with any tag, all = days with every tag",
)


def _tag_filter(tag_names, mode):
    return TagFilter(list(tag_names), mode) if tag_names else None


def _echo_statistics(stats: TagStatistics) -> None:
    click.echo(f"\n🏷️  {stats.tag_display_name}")
    click.echo(f"  Days tagged:          {stats.total_days}")
    click.echo(f"  Bowel movements:      {stats.total_bowel_movements}")
    click.echo(f"  Per day:              {stats.average_bowel_movements_per_day:.1f}")

    if stats.total_bowel_movements:
        click.echo(
            f"  Average consistency:  {stats.average_consistency:.1f} "
            f"({bristol_scale_description(round(stats.average_consistency))})"
        )
        click.echo(
            f"  Average urgency:      {stats.average_urgency:.1f} "
            f"({urgency_level_description(round(stats.average_urgency))})"
        )
        for value, count in stats.consistency_distribution.items():
            click.echo(f"    Bristol {value}: {count}")

    if stats.earliest_date:
        click.echo(f"  Date range:           {stats.earliest_date} → {stats.latest_date}")


@click.group()
@click.pass_context
def reports(ctx: click.Context) -> None:
    """Tag statistics, filtering and export."""
    pass


@reports.command("stats")
@click.argument("tag_name", required=False)
@click.pass_context
def stats(ctx, tag_name):
    """Statistics for TAG_NAME, or for every tag with data."""
    try:
        db = get_db(ctx)

        if tag_name is None:
            all_stats = db.all_tag_statistics()
            if not all_stats:
                click.echo("No tagged days with bowel movements yet")
                return
            for tag_stats in all_stats:
                _echo_statistics(tag_stats)
            return

        tag = db.get_tag(tag_name)
        if tag is None:
            raise TagNotFoundError(tag_name)
        _echo_statistics(db.statistics_for_tag(tag.id))

    except TrackerError as e:
        handle_cli_error(ctx, e, "tag_statistics", additional_context={"tag": tag_name})


@reports.command("filter")
@_tag_option
@_mode_option
@click.option("--start", required=True, help="First date (YYYY-MM-DD)")
@click.option("--end", required=True, help="Last date (YYYY-MM-DD)")
@click.pass_context
def filter_entries(ctx, tag_names, mode, start, end):
    """Entries on days matching the given tags, newest first."""
    try:
        if not tag_names:
            raise click.UsageError("Give at least one --tag")

        tagged = get_db(ctx).entries_by_tags(TagFilter(list(tag_names), mode), start, end)

        if not tagged:
            click.echo("No matching entries")
            return

        click.echo(f"\n🔎 {len(tagged)} entries ({mode}: {', '.join(tag_names)})\n")
        for item in tagged:
            entry = item.entry
            click.echo(
                f"  {entry.date.isoformat()} {entry.time}  #{entry.id} "
                f"{entry.type.label}  [{', '.join(item.day_tag_names)}]"
            )

    except TrackerError as e:
        handle_cli_error(
            ctx, e, "filter_entries", additional_context={"tags": list(tag_names), "mode": mode}
        )


@reports.command("export")
@click.option("--start", required=True, help="First date (YYYY-MM-DD)")
@click.option("--end", required=True, help="Last date (YYYY-MM-DD)")
@click.option("--format", "fmt", type=click.Choice(EXPORT_FORMATS), default=None,
              help="Export format (default from config)")
@click.option("--output-dir", "-o", type=click.Path(file_okay=False), default=None,
              help="Directory for the export file (default from config)")
@_tag_option
@_mode_option
@click.pass_context
def export(ctx, start, end, fmt, output_dir, tag_names, mode):
    """Export entries between two dates to a file."""
    try:
        db = get_db(ctx)
        fmt = fmt or ctx.obj["config"].export_format
        result = db.export(
            start, end, fmt, output_dir or get_export_dir(ctx), _tag_filter(tag_names, mode)
        )
        click.echo(f"✅ Exported {result['entries']} entries to {result['output_path']}")

    except TrackerError as e:
        handle_cli_error(ctx, e, "export", additional_context={"start": start, "end": end})


@reports.command("preview")
@click.option("--start", required=True, help="First date (YYYY-MM-DD)")
@click.option("--end", required=True, help="Last date (YYYY-MM-DD)")
@click.option("--format", "fmt", type=click.Choice(EXPORT_FORMATS), default="csv",
              show_default=True)
@click.option("--limit", type=int, default=10, show_default=True, help="Entries to show")
@_tag_option
@_mode_option
@click.pass_context
def preview(ctx, start, end, fmt, limit, tag_names, mode):
    """Print the first entries of an export."""
    try:
        db = get_db(ctx)
        with db.session_scope() as session:
            content = db.export_manager.preview(
                session, start, end, fmt, limit, _tag_filter(tag_names, mode)
            )
        click.echo(content)

    except TrackerError as e:
        handle_cli_error(ctx, e, "preview", additional_context={"start": start, "end": end})
