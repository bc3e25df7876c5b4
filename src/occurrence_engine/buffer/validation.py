"""Bounds checks shared by buffer services and the mark store."""

from __future__ import annotations

from typing import Sequence, Union

from occurrence_engine.errors import InvalidRangeError
from occurrence_engine.text.location import Position, Range, RangeKind

from .document import BufferDocument

RawPosition = Union[Position, Sequence[int]]


def ensure_position(document: BufferDocument, position: RawPosition) -> Position:
    row, col = (position.line, position.column) if isinstance(position, Position) else position
    if row < 0 or row >= document.line_count:
        raise InvalidRangeError("Line out of range", start=position)
    if col < 0 or col > len(document.get_line(row)):
        raise InvalidRangeError("Column out of range", start=position)
    return Position(row, col)


def clamp_position(document: BufferDocument, position: RawPosition) -> Position:
    row, col = (position.line, position.column) if isinstance(position, Position) else position
    if row < 0:
        return Position(0, 0)
    if row >= document.line_count:
        return document.end_position()
    col = max(0, min(col, len(document.get_line(row))))
    return Position(row, col)


def clamp_range(document: BufferDocument, target: Range) -> Range:
    """Clamp ``target`` into the document; line ranges cover whole lines.

    Block ranges keep their columns; each line part is clamped where it is read.
    """

    if target.kind is RangeKind.BLOCK:
        last = document.line_count - 1
        return Range.between(
            Position(min(max(target.start.line, 0), last), target.start.column),
            Position(min(max(target.end.line, 0), last), target.end.column),
            RangeKind.BLOCK,
        )
    start = clamp_position(document, target.start)
    end = clamp_position(document, target.end)
    if end < start:
        start, end = end, start
    if target.kind is RangeKind.LINE:
        start = Position(start.line, 0)
        end = Position(end.line, len(document.get_line(end.line)))
    return Range(start, end, target.kind)
