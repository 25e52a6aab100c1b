"""UI session: popup stack, edit buffer and the pending confirmation slot."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path

from jotter.adapters import external_editor
from jotter.app import App
from jotter.core.entries import Entry, EntryDraft, normalize_tags
from jotter.core.filter import Filter
from jotter.core.sorter import Sorter
from jotter.errors import DataError, JotterError, ValidationError

from . import commands
from .popups import (
    EntryPopup,
    ExportPopup,
    FilterPopup,
    FuzzyFindPopup,
    MsgBox,
    MsgBoxActions,
    MsgBoxResult,
    MsgBoxType,
    PopupStack,
    SortPopup,
)
from .states import EngineState, InputResult, UICommand

logger = logging.getLogger(__name__)


@dataclass
class EditBuffer:
    """Unsaved content of an existing entry."""

    entry_id: int
    draft: EntryDraft


class Session:
    """
    Mutable UI state driven by one event loop.

    At most one edit buffer and one pending confirmation exist at a time.
    Commands are refused while a popup owns input or another command is
    still awaiting storage.
    """

    def __init__(self, app: App):
        self.app = app
        self.popup_stack = PopupStack()
        self.edit_buffer: EditBuffer | None = None
        self.pending_command: UICommand | None = None
        self._busy = False

    # ---- state ----

    @property
    def engine_state(self) -> EngineState:
        if self.pending_command is None:
            return EngineState.IDLE
        return EngineState.AWAITING_CONFIRMATION

    def has_unsaved(self) -> bool:
        return self.edit_buffer is not None

    def current_content(self) -> str:
        """Content shown in the editor: the buffer when there is one, else the stored entry."""
        if self.edit_buffer is not None:
            return self.edit_buffer.draft.content
        entry = self.app.get_current_entry()
        return entry.content if entry else ""

    def set_entry_content(self, content: str) -> None:
        """Put new editor content for the current entry in the edit buffer."""
        entry = self.app.get_current_entry()
        if entry is None:
            return

        if content == entry.content:
            self.edit_buffer = None
            return

        self.edit_buffer = EditBuffer(entry.id, EntryDraft.from_entry(entry).with_content(content))

    # ---- message boxes ----

    def show_msg_box(
        self,
        kind: MsgBoxType,
        text: str,
        actions: MsgBoxActions = MsgBoxActions.OK,
        origin: UICommand | None = None,
    ) -> None:
        self.popup_stack.push(MsgBox(kind, text, actions, origin))
        if origin is not None:
            self.pending_command = origin

    def show_err_msg(self, text: str) -> None:
        self.show_msg_box(MsgBoxType.ERROR, text)

    # ---- input ----

    async def handle_command(self, command: UICommand) -> InputResult:
        """Run a command from the entries list. Refused while a popup is open."""
        if self._busy or not self.popup_stack.is_empty():
            return InputResult.NOT_HANDLED

        self._busy = True
        try:
            return await commands.exec_command(self, command)
        finally:
            self._busy = False

    async def resolve_msg_box(self, result: MsgBoxResult) -> InputResult:
        """Close the top message box and resume the command that opened it."""
        top = self.popup_stack.top()
        if self._busy or not isinstance(top, MsgBox) or not top.accepts(result):
            return InputResult.NOT_HANDLED

        self.popup_stack.pop()
        origin, self.pending_command = top.origin, None
        if origin is None:
            return InputResult.HANDLED

        self._busy = True
        try:
            return await commands.continue_command(self, origin, result)
        finally:
            self._busy = False

    def close_popup(self) -> None:
        """Dismiss the top popup without applying it."""
        top = self.popup_stack.pop()
        if isinstance(top, MsgBox) and top.origin is not None:
            # Closing a confirmation is a cancel
            self.pending_command = None

    # ---- popup submissions ----

    def _top(self, popup_type):
        top = self.popup_stack.top()
        if not isinstance(top, popup_type):
            raise RuntimeError(f"Top popup is {type(top).__name__}, expected {popup_type.__name__}")
        return top

    def update_entry_popup(
        self,
        title: str | None = None,
        date: datetime | None = None,
        tags: list[str] | None = None,
    ) -> EntryPopup:
        popup = self._top(EntryPopup)
        changes = {}
        if title is not None:
            changes["title"] = title.strip()
        if date is not None:
            changes["date"] = date
        if tags is not None:
            changes["tags"] = normalize_tags(tags)
        popup.draft = replace(popup.draft, **changes)
        return popup

    async def submit_entry_popup(self, **fields) -> bool:
        """Store the entry popup's draft. On failure the popup stays open for a retry."""
        popup = self.update_entry_popup(**fields)

        try:
            if popup.is_edit:
                entry = await self.app.update_entry(Entry.from_draft(popup.entry_id, popup.draft))
            else:
                entry = await self.app.add_entry(popup.draft)
        except ValidationError as e:
            self.show_err_msg(str(e))
            return False
        except DataError as e:
            logger.error(f"Storing entry failed: {e}")
            self.show_err_msg(f"Error while storing entry.\nErr: {e}")
            return False

        self.popup_stack.pop()
        self.app.set_current_entry(entry.id)
        return True

    async def edit_popup_in_external_editor(self) -> bool:
        """Round-trip the entry popup's draft content; auto-save submits the popup."""
        popup = self._top(EntryPopup)
        settings = self.app.settings

        try:
            new_content = await external_editor.edit_text(popup.draft.content, settings)
        except JotterError as e:
            logger.error(f"External editor failed: {e}")
            self.show_err_msg(str(e))
            return False

        if new_content is not None:
            popup.draft = popup.draft.with_content(new_content)
            if settings.external_editor_auto_save:
                return await self.submit_entry_popup()
        return True

    def submit_filter(self, new_filter: Filter | None) -> None:
        self._top(FilterPopup)
        self.popup_stack.pop()
        self.app.apply_filter(new_filter)

    def submit_sort(self, sorter: Sorter) -> None:
        self._top(SortPopup)
        self.popup_stack.pop()
        self.app.apply_sort(sorter)

    def submit_fuzzy_find(self, entry_id: int) -> None:
        self._top(FuzzyFindPopup)
        self.popup_stack.pop()
        self.app.set_current_entry(entry_id)

    async def submit_export(self, path: Path | str | None = None) -> bool:
        popup = self._top(ExportPopup)
        target = Path(path).expanduser() if path else popup.path

        try:
            await self.app.export_entry_content(popup.entry_id, target)
        except DataError as e:
            self.show_err_msg(f"Error while exporting journal content.\nErr: {e}")
            return False

        self.popup_stack.pop()
        self.show_msg_box(MsgBoxType.INFO, f"Journal content exported to {target}")
        return True
