"""Cursor, selection, and register selection state for buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from occurrence_engine.text.location import Position, Range


@dataclass(slots=True)
class BufferState:
    """Mutable cursor + selection info tied to a buffer."""

    cursor: Position = Position(0, 0)
    selection: Optional[Range] = None
    active_register: str = '"'
    last_change_tick: int = 0

    def set_cursor(self, position: Position) -> None:
        self.cursor = position

    def clear_selection(self) -> None:
        self.selection = None

    def set_selection(self, selection: Range) -> None:
        self.selection = selection
