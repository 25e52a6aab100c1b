"""
Command engine.

Guarded commands are plain async effects registered in GUARDED_EFFECTS.
`exec_command` runs the effect right away when nothing is unsaved, otherwise
it parks the command behind a Yes/No/Cancel message box. Once the box is
resolved `continue_command` replays it: Yes saves then runs the effect, No
discards then runs the effect, Ok/Cancel drops it.
"""

import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from jotter.adapters import external_editor
from jotter.core.entries import Entry
from jotter.errors import DataError, JotterError, ValidationError

from .popups import (
    EntryPopup,
    ExportPopup,
    FilterPopup,
    FuzzyFindPopup,
    MsgBoxActions,
    MsgBoxResult,
    MsgBoxType,
    SortPopup,
)
from .states import InputResult, UICommand

if TYPE_CHECKING:
    from .session import Session

logger = logging.getLogger(__name__)

Effect = Callable[["Session"], Awaitable[None]]

UNSAVED_QUESTION = "Do you want to save the changes on the current journal?"
DELETE_QUESTION = "Do you want to remove the current journal?"


# ============== Save / Discard ==============


async def save_entry_content(session: "Session") -> bool:
    """Save the edit buffer. On failure the error is shown and the buffer kept."""
    buffer = session.edit_buffer
    if buffer is None:
        return True

    try:
        await session.app.update_entry(Entry.from_draft(buffer.entry_id, buffer.draft))
    except ValidationError as e:
        session.show_err_msg(f"Entry couldn't be saved: {e}")
        return False
    except DataError as e:
        logger.error(f"Saving entry {buffer.entry_id} failed: {e}")
        session.show_err_msg(f"Error while saving entry.\nErr: {e}")
        return False

    session.edit_buffer = None
    return True


def discard_current_content(session: "Session") -> None:
    if session.edit_buffer is not None:
        logger.debug(f"Discarding unsaved changes of entry {session.edit_buffer.entry_id}")
    session.edit_buffer = None


# ============== Guarded effects ==============


async def select_prev_entry(session: "Session", step: int = 1) -> None:
    prev_id = session.app.prev_entry_id(step)
    if prev_id is not None:
        session.app.set_current_entry(prev_id)


async def select_next_entry(session: "Session", step: int = 1) -> None:
    next_id = session.app.next_entry_id(step)
    if next_id is not None:
        session.app.set_current_entry(next_id)


async def go_to_top_entry(session: "Session") -> None:
    top_id = session.app.first_entry_id()
    if top_id is not None:
        session.app.set_current_entry(top_id)


async def go_to_bottom_entry(session: "Session") -> None:
    bottom_id = session.app.last_entry_id()
    if bottom_id is not None:
        session.app.set_current_entry(bottom_id)


async def page_up_entries(session: "Session") -> None:
    await select_prev_entry(session, session.app.settings.scroll_per_page)


async def page_down_entries(session: "Session") -> None:
    await select_next_entry(session, session.app.settings.scroll_per_page)


async def create_entry(session: "Session") -> None:
    session.popup_stack.push(EntryPopup.new_entry(session.app.settings.default_tags))


async def edit_current_entry(session: "Session") -> None:
    entry = session.app.get_current_entry()
    if entry is not None:
        session.popup_stack.push(EntryPopup.from_entry(entry))


async def export_entry_content(session: "Session") -> None:
    entry = session.app.get_current_entry()
    if entry is not None:
        export_dir = session.app.settings.get_export_dir()
        session.popup_stack.push(ExportPopup.create_entry_content(entry, export_dir))


async def edit_in_external_editor(session: "Session") -> None:
    """Round-trip the current entry through the external editor into the edit buffer."""
    entry = session.app.get_current_entry()
    if entry is None:
        return

    settings = session.app.settings
    new_content = await external_editor.edit_text(entry.content, settings)
    if new_content is None:
        return

    session.set_entry_content(new_content)
    if settings.external_editor_auto_save:
        await save_entry_content(session)


async def show_filter(session: "Session") -> None:
    session.popup_stack.push(FilterPopup(session.app.get_all_tags(), session.app.filter))


async def cycle_tag_filter(session: "Session") -> None:
    session.app.cycle_tags_in_filter()


async def show_fuzzy_find(session: "Session") -> None:
    entries = {entry.id: entry.title for entry in session.app.active_entries()}
    session.popup_stack.push(FuzzyFindPopup(entries))


async def show_sort_options(session: "Session") -> None:
    session.popup_stack.push(SortPopup(session.app.state.sorter))


GUARDED_EFFECTS: dict[UICommand, Effect] = {
    UICommand.SELECT_PREV_ENTRY: select_prev_entry,
    UICommand.SELECT_NEXT_ENTRY: select_next_entry,
    UICommand.GO_TO_TOP_ENTRY: go_to_top_entry,
    UICommand.GO_TO_BOTTOM_ENTRY: go_to_bottom_entry,
    UICommand.PAGE_UP_ENTRIES: page_up_entries,
    UICommand.PAGE_DOWN_ENTRIES: page_down_entries,
    UICommand.CREATE_ENTRY: create_entry,
    UICommand.EDIT_CURRENT_ENTRY: edit_current_entry,
    UICommand.EXPORT_ENTRY_CONTENT: export_entry_content,
    UICommand.EDIT_IN_EXTERNAL_EDITOR: edit_in_external_editor,
    UICommand.SHOW_FILTER: show_filter,
    UICommand.CYCLE_TAG_FILTER: cycle_tag_filter,
    UICommand.SHOW_FUZZY_FIND: show_fuzzy_find,
    UICommand.SHOW_SORT_OPTIONS: show_sort_options,
}


# ============== Unguarded commands ==============


async def reset_filter(session: "Session") -> None:
    session.app.apply_filter(None)


async def toggle_full_screen(session: "Session") -> None:
    session.app.toggle_full_screen()


async def save_changes(session: "Session") -> None:
    await save_entry_content(session)


async def discard_changes(session: "Session") -> None:
    discard_current_content(session)


UNGUARDED_COMMANDS: dict[UICommand, Effect] = {
    UICommand.RESET_FILTER: reset_filter,
    UICommand.TOGGLE_FULL_SCREEN: toggle_full_screen,
    UICommand.SAVE_ENTRY_CONTENT: save_changes,
    UICommand.DISCARD_CHANGES: discard_changes,
}


# ============== Delete (destructive confirmation) ==============


def exec_delete_current_entry(session: "Session") -> None:
    if session.app.current_entry_id is not None:
        session.show_msg_box(
            MsgBoxType.QUESTION,
            DELETE_QUESTION,
            MsgBoxActions.YES_NO,
            origin=UICommand.DELETE_CURRENT_ENTRY,
        )


async def continue_delete_current_entry(session: "Session", result: MsgBoxResult) -> None:
    entry_id = session.app.current_entry_id
    if result != MsgBoxResult.YES or entry_id is None:
        return

    await session.app.delete_entry(entry_id)
    if session.edit_buffer is not None and session.edit_buffer.entry_id == entry_id:
        session.edit_buffer = None


# ============== Engine ==============


async def _run(session: "Session", effect: Effect) -> None:
    """Run an effect, showing storage and editor failures in an error box."""
    try:
        await effect(session)
    except JotterError as e:
        logger.error(f"Command {effect.__name__} failed: {e}")
        session.show_err_msg(str(e))


async def exec_command(session: "Session", command: UICommand) -> InputResult:
    """Execute a command, parking guarded ones behind a confirmation when there are unsaved changes."""
    if command in GUARDED_EFFECTS:
        if session.has_unsaved():
            session.show_msg_box(
                MsgBoxType.QUESTION,
                UNSAVED_QUESTION,
                MsgBoxActions.YES_NO_CANCEL,
                origin=command,
            )
        else:
            await _run(session, GUARDED_EFFECTS[command])
        return InputResult.HANDLED

    if command == UICommand.DELETE_CURRENT_ENTRY:
        exec_delete_current_entry(session)
        return InputResult.HANDLED

    if command in UNGUARDED_COMMANDS:
        await _run(session, UNGUARDED_COMMANDS[command])
        return InputResult.HANDLED

    return InputResult.NOT_HANDLED


async def continue_command(session: "Session", origin: UICommand, result: MsgBoxResult) -> InputResult:
    """Resume the command that opened the message box."""
    if origin == UICommand.DELETE_CURRENT_ENTRY:
        await _run(session, lambda s: continue_delete_current_entry(s, result))
        return InputResult.HANDLED

    effect = GUARDED_EFFECTS.get(origin)
    if effect is None:
        logger.warning(f"No continuation registered for {origin}")
        return InputResult.NOT_HANDLED

    match result:
        case MsgBoxResult.OK | MsgBoxResult.CANCEL:
            pass
        case MsgBoxResult.YES:
            if await save_entry_content(session):
                await _run(session, effect)
        case MsgBoxResult.NO:
            discard_current_content(session)
            await _run(session, effect)

    return InputResult.HANDLED
