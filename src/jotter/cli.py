"""Jotter CLI - terminal journal."""

import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

import click

from . import __version__
from .app import App
from .config import CONFIG_FILE, load_config
from .core.entries import EntryDraft, normalize_tags, parse_date
from .core.filter import Filter
from .core.sorter import SortDirection, Sorter, SortKey
from .errors import JotterError
from .workflows import export_to_file, import_from_file, load_app


def _open_app(ctx: click.Context) -> App:
    """Load the journal, exiting with an error when storage can't be opened."""
    try:
        return asyncio.run(load_app(ctx.obj["settings"]))
    except (OSError, JotterError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _run(coro):
    try:
        return asyncio.run(coro)
    except JotterError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _entry_line(entry, current: bool = False) -> str:
    marker = ">" if current else " "
    tags = f" [{', '.join(entry.tags)}]" if entry.tags else ""
    return f"{marker} {entry.id:4} {entry.date.strftime('%Y-%m-%d')}  {entry.title}{tags}"


@click.group()
@click.version_option(__version__)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Config file (default: {CONFIG_FILE})",
)
@click.pass_context
def main(ctx, debug: bool, config_path: Path | None):
    """Jotter - a terminal journal."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )

    ctx.ensure_object(dict)
    ctx.obj["settings"] = load_config(config_path)


@main.command("list")
@click.option("--tag", "tags", multiple=True, help="Only entries with one of these tags")
@click.option("--search", default="", help="Text to look for in title or content")
@click.option(
    "--sort-by",
    type=click.Choice([k.value for k in SortKey]),
    default=None,
    help="Sort key (default: saved sort order)",
)
@click.option("--asc/--desc", "ascending", default=None, help="Sort direction")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_entries(ctx, tags: tuple[str, ...], search: str, sort_by: str | None, ascending: bool | None, as_json: bool):
    """List journal entries."""
    app = _open_app(ctx)
    app.apply_filter(Filter(tags=frozenset(tags), text=search))

    sorter = app.state.sorter
    if sort_by is not None:
        sorter = Sorter(SortKey(sort_by), sorter.direction)
    if ascending is not None:
        direction = SortDirection.ASCENDING if ascending else SortDirection.DESCENDING
        sorter = Sorter(sorter.key, direction)
    app.state.sorter = sorter

    entries = list(app.active_entries())

    if as_json:
        click.echo(json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False))
        return

    if not entries:
        click.echo("No entries.")
        return

    for entry in entries:
        click.echo(_entry_line(entry))


@main.command()
@click.argument("entry_id", type=int)
@click.pass_context
def show(ctx, entry_id: int):
    """Show a journal entry."""
    app = _open_app(ctx)
    entry = app.get_entry(entry_id)
    if entry is None:
        click.echo(f"Error: No entry with id {entry_id}", err=True)
        sys.exit(1)

    click.echo(f"# {entry.title}")
    click.echo(f"{entry.date.strftime('%A, %B %d, %Y')}")
    if entry.tags:
        click.echo(f"Tags: {', '.join(entry.tags)}")
    click.echo()
    click.echo(entry.content.strip())


@main.command()
@click.option("--title", "-t", prompt=True, help="Entry title")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option("--date", "-d", "entry_date", default=None, help="Entry date (YYYY-MM-DD), defaults to now")
@click.option("--content", "-c", default="", help="Entry content")
@click.option("--edit", is_flag=True, help="Write the content in the external editor")
@click.pass_context
def add(ctx, title: str, tags: tuple[str, ...], entry_date: str | None, content: str, edit: bool):
    """Add a journal entry."""
    from .adapters.external_editor import edit_text

    settings = ctx.obj["settings"]
    app = _open_app(ctx)

    if entry_date:
        try:
            date = parse_date(entry_date)
        except ValueError:
            click.echo(f"Error: Invalid date '{entry_date}', expected YYYY-MM-DD", err=True)
            sys.exit(1)
    else:
        date = datetime.now(timezone.utc)

    async def run():
        body = content
        if edit:
            body = await edit_text(content, settings) or ""
        tag_list = normalize_tags(list(tags) or settings.default_tags)
        draft = EntryDraft(date=date, title=title, content=body, tags=tag_list)
        return await app.add_entry(draft)

    entry = _run(run())
    click.echo(f"✓ Added entry {entry.id}: {entry.title}")


@main.command()
@click.argument("entry_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Don't ask for confirmation")
@click.pass_context
def delete(ctx, entry_id: int, yes: bool):
    """Delete a journal entry."""
    app = _open_app(ctx)
    entry = app.get_entry(entry_id)
    if entry is None:
        click.echo(f"Error: No entry with id {entry_id}", err=True)
        sys.exit(1)

    if not yes and not click.confirm(f"Remove '{entry.title}'?"):
        return

    _run(app.delete_entry(entry_id))
    click.echo(f"✓ Removed entry {entry_id}")


@main.command()
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--id", "entry_ids", type=int, multiple=True, help="Entry to export (repeatable, default: all)")
@click.pass_context
def export(ctx, output: Path, entry_ids: tuple[int, ...]):
    """Export entries to a transfer file."""
    app = _open_app(ctx)
    dto = _run(export_to_file(app, output, list(entry_ids)))
    click.echo(f"✓ Exported {len(dto.entries)} entries to {output}")


@main.command("import")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--allow-version-mismatch",
    is_flag=True,
    help="Import files written with another transfer version",
)
@click.pass_context
def import_entries(ctx, input_file: Path, allow_version_mismatch: bool):
    """Import entries from a transfer file."""
    app = _open_app(ctx)
    count = _run(import_from_file(app, input_file, allow_version_mismatch))
    click.echo(f"✓ Imported {count} entries from {input_file}")


@main.command()
@click.pass_context
def session(ctx):
    """Browse and edit the journal interactively."""
    from .ui.interactive import run_session

    app = _open_app(ctx)
    try:
        asyncio.run(run_session(app))
    except (KeyboardInterrupt, click.Abort):
        click.echo("\nBye.")


if __name__ == "__main__":
    main()
