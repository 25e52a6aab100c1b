"""UI layer - popups, command engine and session state."""

from .popups import MsgBoxActions, MsgBoxResult, MsgBoxType, PopupStack
from .session import EditBuffer, Session
from .states import EngineState, InputResult, UICommand

__all__ = [
    "EditBuffer",
    "EngineState",
    "InputResult",
    "MsgBoxActions",
    "MsgBoxResult",
    "MsgBoxType",
    "PopupStack",
    "Session",
    "UICommand",
]
