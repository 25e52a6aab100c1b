"""Line-based interactive session: single-key commands driving the Session."""

import click

from jotter.app import App
from jotter.core.filter import Filter
from jotter.core.sorter import SortDirection, Sorter, SortKey

from . import commands
from .popups import (
    ALLOWED_RESULTS,
    EntryPopup,
    ExportPopup,
    FilterPopup,
    FuzzyFindPopup,
    MsgBox,
    MsgBoxResult,
    SortPopup,
)
from .session import Session
from .states import UICommand

KEYMAP = {
    "j": UICommand.SELECT_NEXT_ENTRY,
    "k": UICommand.SELECT_PREV_ENTRY,
    "g": UICommand.GO_TO_TOP_ENTRY,
    "G": UICommand.GO_TO_BOTTOM_ENTRY,
    "u": UICommand.PAGE_UP_ENTRIES,
    "d": UICommand.PAGE_DOWN_ENTRIES,
    "n": UICommand.CREATE_ENTRY,
    "e": UICommand.EDIT_CURRENT_ENTRY,
    "D": UICommand.DELETE_CURRENT_ENTRY,
    "o": UICommand.EXPORT_ENTRY_CONTENT,
    "x": UICommand.EDIT_IN_EXTERNAL_EDITOR,
    "f": UICommand.SHOW_FILTER,
    "r": UICommand.RESET_FILTER,
    "t": UICommand.CYCLE_TAG_FILTER,
    "/": UICommand.SHOW_FUZZY_FIND,
    "s": UICommand.SHOW_SORT_OPTIONS,
    "F": UICommand.TOGGLE_FULL_SCREEN,
    "w": UICommand.SAVE_ENTRY_CONTENT,
    "R": UICommand.DISCARD_CHANGES,
}

HELP = (
    "j/k next/prev  g/G top/bottom  u/d page  n new  e edit  c change content  "
    "x external editor  D delete  o export  f filter  r reset filter  t cycle tag  "
    "/ find  s sort  F full screen  w save  R discard  q quit"
)

RESULT_KEYS = {
    MsgBoxResult.YES: "y",
    MsgBoxResult.NO: "n",
    MsgBoxResult.OK: "o",
    MsgBoxResult.CANCEL: "c",
}


def render(session: Session) -> None:
    app = session.app
    click.echo()
    if not app.state.full_screen:
        entries = list(app.active_entries())
        if not entries:
            click.echo("  (no entries)")
        for entry in entries:
            marker = ">" if entry.id == app.current_entry_id else " "
            tags = f" [{', '.join(entry.tags)}]" if entry.tags else ""
            click.echo(f"{marker} {entry.date.strftime('%Y-%m-%d')}  {entry.title}{tags}")
        if app.filter is not None:
            click.echo(f"  filter: tags={sorted(app.filter.tags)} text={app.filter.text!r}")
        click.echo()

    entry = app.get_current_entry()
    if entry is not None:
        unsaved = " *unsaved*" if session.has_unsaved() else ""
        click.echo(f"--- {entry.title}{unsaved} ---")
        click.echo(session.current_content())


async def prompt_msg_box(session: Session, box: MsgBox) -> None:
    allowed = [r for r in MsgBoxResult if r in ALLOWED_RESULTS[box.actions]]
    keys = {RESULT_KEYS[r]: r for r in allowed}
    click.echo(f"[{box.kind.name.lower()}] {box.text}")
    choice = click.prompt(
        " / ".join(f"{k}={r.name.lower()}" for k, r in keys.items()),
        type=click.Choice(list(keys)),
        show_choices=False,
    )
    await session.resolve_msg_box(keys[choice])


async def prompt_entry_popup(session: Session, popup: EntryPopup) -> None:
    label = "Edit entry" if popup.is_edit else "New entry"
    click.echo(f"[{label}]")
    title = click.prompt("Title", default=popup.draft.title or "", show_default=bool(popup.draft.title))
    tags = click.prompt("Tags (comma-separated)", default=", ".join(popup.draft.tags), show_default=False)
    session.update_entry_popup(title=title, tags=tags.split(","))

    action = click.prompt("s=save / x=external editor / c=cancel", type=click.Choice(["s", "x", "c"]), show_choices=False)
    match action:
        case "s":
            await session.submit_entry_popup()
        case "x":
            await session.edit_popup_in_external_editor()
        case "c":
            session.close_popup()


def prompt_filter_popup(session: Session, popup: FilterPopup) -> None:
    click.echo(f"[Filter] known tags: {', '.join(popup.all_tags) or '(none)'}")
    current = popup.filter or Filter()
    tags = click.prompt("Tags (comma-separated)", default=", ".join(sorted(current.tags)), show_default=False)
    text = click.prompt("Text", default=current.text, show_default=False)
    new_filter = Filter(tags=frozenset(t.strip() for t in tags.split(",") if t.strip()), text=text)
    session.submit_filter(new_filter)


def prompt_sort_popup(session: Session, popup: SortPopup) -> None:
    click.echo("[Sort]")
    key = click.prompt("Sort by", type=click.Choice([k.value for k in SortKey]), default=popup.sorter.key.value)
    direction = click.prompt(
        "Direction",
        type=click.Choice([d.value for d in SortDirection]),
        default=popup.sorter.direction.value,
    )
    session.submit_sort(Sorter(SortKey(key), SortDirection(direction)))


def prompt_fuzzy_find(session: Session, popup: FuzzyFindPopup) -> None:
    popup.query = click.prompt("Find", default="", show_default=False)
    matches = popup.matches()
    if not matches:
        click.echo("No matches.")
        session.close_popup()
        return

    for number, entry_id in enumerate(matches[:10], start=1):
        click.echo(f"  {number}. {popup.entries[entry_id]}")
    choice = click.prompt("Go to", type=click.IntRange(0, min(len(matches), 10)), default=1)
    if choice == 0:
        session.close_popup()
    else:
        session.submit_fuzzy_find(matches[choice - 1])


async def prompt_export(session: Session, popup: ExportPopup) -> None:
    path = click.prompt("Export to", default=str(popup.path))
    await session.submit_export(path)


async def handle_popup(session: Session) -> None:
    """Route input to the top popup."""
    popup = session.popup_stack.top()
    match popup:
        case MsgBox():
            await prompt_msg_box(session, popup)
        case EntryPopup():
            await prompt_entry_popup(session, popup)
        case FilterPopup():
            prompt_filter_popup(session, popup)
        case SortPopup():
            prompt_sort_popup(session, popup)
        case FuzzyFindPopup():
            prompt_fuzzy_find(session, popup)
        case ExportPopup():
            await prompt_export(session, popup)


async def run_session(app: App) -> None:
    """Interactive loop until the user quits."""
    session = Session(app)
    click.echo(HELP)

    while True:
        if not session.popup_stack.is_empty():
            await handle_popup(session)
            continue

        render(session)
        key = click.prompt("jotter", default="", show_default=False, prompt_suffix="> ")

        if key == "q":
            if session.has_unsaved() and click.confirm("Save changes before quitting?", default=True):
                await commands.save_entry_content(session)
                if session.has_unsaved():
                    continue
            return
        if key == "?":
            click.echo(HELP)
        elif key == "c":
            if app.get_current_entry() is not None:
                session.set_entry_content(click.edit(session.current_content()) or session.current_content())
        elif key in KEYMAP:
            await session.handle_command(KEYMAP[key])
        elif key:
            click.echo(f"Unknown command {key!r}, press ? for help")
