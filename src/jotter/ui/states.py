"""Command identifiers and engine states for the UI."""

from enum import Enum, auto


class UICommand(Enum):
    """Every user command the engine knows about."""

    SELECT_PREV_ENTRY = auto()
    SELECT_NEXT_ENTRY = auto()
    GO_TO_TOP_ENTRY = auto()
    GO_TO_BOTTOM_ENTRY = auto()
    PAGE_UP_ENTRIES = auto()
    PAGE_DOWN_ENTRIES = auto()
    CREATE_ENTRY = auto()
    EDIT_CURRENT_ENTRY = auto()
    DELETE_CURRENT_ENTRY = auto()
    EXPORT_ENTRY_CONTENT = auto()
    EDIT_IN_EXTERNAL_EDITOR = auto()
    SHOW_FILTER = auto()
    RESET_FILTER = auto()
    CYCLE_TAG_FILTER = auto()
    SHOW_FUZZY_FIND = auto()
    SHOW_SORT_OPTIONS = auto()
    TOGGLE_FULL_SCREEN = auto()
    SAVE_ENTRY_CONTENT = auto()
    DISCARD_CHANGES = auto()


class EngineState(Enum):
    """Confirmation slot of the command engine."""

    IDLE = auto()
    AWAITING_CONFIRMATION = auto()


class InputResult(Enum):
    HANDLED = auto()
    NOT_HANDLED = auto()
