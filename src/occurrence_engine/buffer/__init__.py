"""Host buffer model: document, cursor state, registers, undo, edit events."""

from .buffer import DESTROY_EVENT, EDIT_EVENT, Buffer, BufferEdit, BufferView, Transaction
from .document import BufferDocument
from .registers import RegisterBank, RegisterValue
from .state import BufferState
from .undo import UndoEntry, UndoTimeline
from .validation import clamp_position, clamp_range, ensure_position

__all__ = [
    "Buffer",
    "BufferDocument",
    "BufferEdit",
    "BufferState",
    "BufferView",
    "DESTROY_EVENT",
    "EDIT_EVENT",
    "RegisterBank",
    "RegisterValue",
    "Transaction",
    "UndoEntry",
    "UndoTimeline",
    "clamp_position",
    "clamp_range",
    "ensure_position",
]
