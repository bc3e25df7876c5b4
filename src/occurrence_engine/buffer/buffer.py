"""High-level buffer façade combining document, state, registers, and undo."""

from __future__ import annotations

import itertools
import re
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, Iterable, List, Optional, Sequence

from occurrence_engine.errors import BufferDestroyedError
from occurrence_engine.runtime import telemetry
from occurrence_engine.runtime.events import EventBus
from occurrence_engine.text.location import Position, Range, RangeKind

from .document import BufferDocument
from .registers import RegisterBank
from .state import BufferState
from .undo import UndoEntry, UndoTimeline
from .validation import RawPosition, clamp_position, clamp_range, ensure_position

EDIT_EVENT = "buffer.edit"
DESTROY_EVENT = "buffer.destroy"

_WORD = re.compile(r"\w+")
_BUFFER_IDS = itertools.count(1)


@dataclass(frozen=True, slots=True)
class BufferView:
    version: int
    text: str
    cursor: Position
    selection: Optional[Range]


@dataclass(frozen=True, slots=True)
class BufferEdit:
    """Position delta published after every text change.

    ``[start, old_end)`` is the replaced span in the old text and
    ``[start, new_end)`` the span now occupied by the inserted text.
    """

    start: Position
    old_end: Position
    new_end: Position
    version: int
    label: str = "edit"

    @property
    def is_insertion(self) -> bool:
        return self.start == self.old_end


class Buffer:
    def __init__(
        self,
        *,
        name: str = "default",
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        registers: Optional[RegisterBank] = None,
        undo: Optional[UndoTimeline] = None,
    ) -> None:
        self.id = next(_BUFFER_IDS)
        self.name = name
        self.document = document or BufferDocument()
        self.state = state or BufferState()
        self.registers = registers or RegisterBank()
        self.undo_timeline = undo or UndoTimeline()
        self.events = EventBus()
        self._valid = True
        self._transaction: Optional[Transaction] = None

    @classmethod
    def from_text(cls, text: str, *, name: str = "default") -> "Buffer":
        return cls(name=name, document=BufferDocument.from_text(text))

    @classmethod
    def from_lines(cls, lines: Iterable[str], *, name: str = "default") -> "Buffer":
        return cls(name=name, document=BufferDocument.from_lines(lines))

    def __repr__(self) -> str:
        return f"Buffer(id={self.id}, name={self.name!r}, version={self.version})"

    @property
    def is_valid(self) -> bool:
        return self._valid

    @property
    def version(self) -> int:
        return self.document.version

    @property
    def lines(self) -> Sequence[str]:
        return self.document.snapshot()

    @property
    def text(self) -> str:
        return self.document.text

    def snapshot(self) -> BufferView:
        return BufferView(
            version=self.document.version,
            text=self.document.text,
            cursor=self.state.cursor,
            selection=self.state.selection,
        )

    def destroy(self) -> None:
        """Invalidate the buffer and notify listeners (host buffer deletion)."""

        if not self._valid:
            return
        self._valid = False
        telemetry.record_event("buffer.destroy", data={"buffer": self.id})
        self.events.emit(DESTROY_EVENT, self)

    def require_valid(self) -> None:
        if not self._valid:
            raise BufferDestroyedError(self.id)

    # -- positions -----------------------------------------------------------

    def clamp(self, position: RawPosition) -> Position:
        return clamp_position(self.document, position)

    def clamp_range(self, target: Range) -> Range:
        return clamp_range(self.document, target)

    def offset_of(self, position: Position) -> int:
        return self.document.offset_of(clamp_position(self.document, position))

    def position_of(self, offset: int) -> Position:
        return self.document.position_of(offset)

    def set_cursor(self, position: RawPosition) -> Position:
        cursor = clamp_position(self.document, position)
        self.state.set_cursor(cursor)
        return cursor

    def line_range(self, first: int, last: Optional[int] = None) -> Range:
        """Line-wise range covering ``first..last`` inclusive."""

        last = first if last is None else last
        return clamp_range(
            self.document,
            Range(Position(first, 0), Position(last, 0), RangeKind.LINE),
        )

    # -- reading -------------------------------------------------------------

    def get_text_range(self, start: RawPosition, end: RawPosition) -> str:
        self.require_valid()
        first = ensure_position(self.document, start)
        second = ensure_position(self.document, end)
        if second < first:
            first, second = second, first
        return self.text[self.document.offset_of(first) : self.document.offset_of(second)]

    def get_lines_in(self, target: Range) -> List[str]:
        """Text covered by ``target`` split into lines."""

        target = clamp_range(self.document, target)
        if target.kind is RangeKind.BLOCK:
            return [
                self.get_text_range(self.clamp(part.start), self.clamp(part.end))
                for part in target.block_parts()
            ]
        return self.get_text_range(target.start, target.end).split("\n")

    def word_at(self, position: RawPosition) -> Optional[Range]:
        """Range of the keyword under (or right after) ``position``."""

        cursor = clamp_position(self.document, position)
        line = self.document.get_line(cursor.line)
        for found in _WORD.finditer(line):
            if found.end() > cursor.column:
                return Range(
                    Position(cursor.line, found.start()),
                    Position(cursor.line, found.end()),
                )
        return None

    # -- editing -------------------------------------------------------------

    def replace_range(
        self,
        start: RawPosition,
        end: RawPosition,
        text: str | Sequence[str],
        *,
        label: str = "replace_range",
    ) -> BufferEdit:
        self.require_valid()
        first = ensure_position(self.document, start)
        second = ensure_position(self.document, end)
        if second < first:
            first, second = second, first
        replacement = text if isinstance(text, str) else "\n".join(text)

        with self.transaction(label):
            start_offset = self.document.offset_of(first)
            end_offset = self.document.offset_of(second)
            self.document = self.document.replace_text(
                start_offset, end_offset, replacement
            )
            new_end = self.document.position_of(start_offset + len(replacement))
            self.state.set_cursor(clamp_position(self.document, self.state.cursor))
            self.state.last_change_tick = self.document.version
            edit = BufferEdit(
                start=first,
                old_end=second,
                new_end=new_end,
                version=self.document.version,
                label=label,
            )
            self._publish(edit)
        return edit

    def insert_text(self, text: str, *, at: Optional[RawPosition] = None) -> BufferEdit:
        position = self.state.cursor if at is None else at
        return self.replace_range(position, position, text, label="insert_text")

    def delete_range(self, start: RawPosition, end: RawPosition) -> BufferEdit:
        return self.replace_range(start, end, "", label="delete_range")

    def insert_lines(self, before: int, lines: Sequence[str]) -> BufferEdit:
        """Insert whole ``lines`` ahead of line ``before`` (or at the end)."""

        if before >= self.document.line_count:
            end = self.document.end_position()
            return self.replace_range(end, end, "\n" + "\n".join(lines), label="insert_lines")
        at = Position(before, 0)
        return self.replace_range(at, at, "\n".join(lines) + "\n", label="insert_lines")

    def delete_lines(self, first: int, last: int) -> BufferEdit:
        """Delete lines ``first..last`` inclusive, newline included."""

        if last + 1 < self.document.line_count:
            return self.replace_range(
                Position(first, 0), Position(last + 1, 0), "", label="delete_lines"
            )
        if first == 0:
            return self.replace_range(
                Position(0, 0), self.document.end_position(), "", label="delete_lines"
            )
        previous = first - 1
        return self.replace_range(
            Position(previous, len(self.document.get_line(previous))),
            self.document.end_position(),
            "",
            label="delete_lines",
        )

    def transaction(self, label: str) -> "Transaction":
        """Group edits into one undo step; nested transactions join the outer one."""

        return Transaction(self, label)

    def undo(self) -> Optional[BufferEdit]:
        entry = self.undo_timeline.undo()
        if entry is None:
            return None
        edit = self._restore(entry.after_text, entry.before_text, label=f"undo::{entry.label}")
        self.set_cursor(entry.cursor_before)
        return edit

    def redo(self) -> Optional[BufferEdit]:
        entry = self.undo_timeline.redo()
        if entry is None:
            return None
        edit = self._restore(entry.before_text, entry.after_text, label=f"redo::{entry.label}")
        self.set_cursor(entry.cursor_after)
        return edit

    def _restore(self, current: str, target: str, *, label: str) -> BufferEdit:
        self.require_valid()
        prefix = _common_prefix(current, target)
        suffix = _common_suffix(current[prefix:], target[prefix:])
        old_start = self.document.position_of(prefix)
        old_end = self.document.position_of(len(current) - suffix)
        self.document = self.document.replace_text(
            prefix, len(current) - suffix, target[prefix : len(target) - suffix]
        )
        edit = BufferEdit(
            start=old_start,
            old_end=old_end,
            new_end=self.document.position_of(len(target) - suffix),
            version=self.document.version,
            label=label,
        )
        self._publish(edit)
        return edit

    def _publish(self, edit: BufferEdit) -> None:
        if self._transaction is not None:
            self._transaction.edits += 1
        self.events.emit(EDIT_EVENT, edit)


class Transaction(AbstractContextManager["Transaction"]):
    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self.edits = 0
        self._outermost = False
        self._span_cm: Optional[ContextManager[object]] = None
        self._before_text = ""
        self._before_cursor = buffer.state.cursor

    def __enter__(self) -> "Transaction":
        if self.buffer._transaction is not None:
            return self.buffer._transaction
        self._outermost = True
        self.buffer._transaction = self
        self._before_text = self.buffer.text
        self._before_cursor = self.buffer.state.cursor
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component=True,
            metadata={"buffer": self.buffer.id},
        )
        self._span_cm.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if not self._outermost:
            return False
        self.buffer._transaction = None
        try:
            if exc_type is None and self.edits:
                self.buffer.undo_timeline.push(
                    UndoEntry(
                        label=self.label,
                        before_text=self._before_text,
                        after_text=self.buffer.text,
                        cursor_before=self._before_cursor,
                        cursor_after=self.buffer.state.cursor,
                        edits=self.edits,
                    )
                )
        finally:
            if self._span_cm is not None:
                self._span_cm.__exit__(exc_type, exc, tb)
        return False


def _common_prefix(left: str, right: str) -> int:
    limit = min(len(left), len(right))
    index = 0
    while index < limit and left[index] == right[index]:
        index += 1
    return index


def _common_suffix(left: str, right: str) -> int:
    limit = min(len(left), len(right))
    index = 0
    while index < limit and left[-1 - index] == right[-1 - index]:
        index += 1
    return index
