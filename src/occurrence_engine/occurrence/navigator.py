"""Cursor-relative navigation over an ordered set of ranges."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from occurrence_engine.text.location import Position, Range

DistanceFn = Callable[[Position, Position], int]


class Direction(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


@dataclass(frozen=True, slots=True)
class CursorLocation:
    """Where a cursor sits relative to an ordered set of ranges."""

    index: int  # first range ending after the cursor; == total when past the end
    total: int
    exact: bool


class Navigator:
    """Bisect-based lookups over sorted, non-overlapping ranges.

    The start/end indexes are rebuilt only when a different entries
    sequence is passed in, so callers that hand over the same cached tuple
    pay ``O(log n)`` per lookup.
    """

    def __init__(self, distance: Optional[DistanceFn] = None) -> None:
        self._distance = distance or _line_column_distance
        self._source: Optional[Sequence[Range]] = None
        self._starts: List[Position] = []
        self._ends: List[Position] = []

    def next(
        self,
        entries: Sequence[Range],
        cursor: Position,
        *,
        direction: Optional[Direction | str] = None,
        wrap: bool = False,
    ) -> Optional[Range]:
        if not entries:
            return None
        starts, _ = self._index(entries)
        if direction is None:
            return self._nearest(entries, cursor)

        direction = Direction(direction)
        if direction is Direction.FORWARD:
            index = bisect_right(starts, cursor)
            if index < len(entries):
                return entries[index]
            return entries[0] if wrap else None

        index = bisect_left(starts, cursor) - 1
        if index >= 0:
            return entries[index]
        return entries[-1] if wrap else None

    def locate(self, entries: Sequence[Range], cursor: Position) -> CursorLocation:
        if not entries:
            return CursorLocation(index=0, total=0, exact=False)
        _, ends = self._index(entries)
        index = bisect_right(ends, cursor)
        exact = index < len(entries) and entries[index].contains(cursor)
        return CursorLocation(index=index, total=len(entries), exact=exact)

    def _nearest(self, entries: Sequence[Range], cursor: Position) -> Range:
        starts, _ = self._index(entries)
        index = bisect_right(starts, cursor) - 1
        previous = entries[index] if index >= 0 else None
        following = entries[index + 1] if index + 1 < len(entries) else None
        if previous is not None and previous.contains(cursor):
            return previous
        if previous is None or following is None:
            return following or previous  # type: ignore[return-value]
        before = min(self._distance(cursor, previous.start), self._distance(cursor, previous.end))
        after = min(self._distance(cursor, following.start), self._distance(cursor, following.end))
        return previous if before < after else following

    def _index(self, entries: Sequence[Range]) -> Tuple[List[Position], List[Position]]:
        if entries is not self._source:
            self._source = entries
            self._starts = [entry.start for entry in entries]
            self._ends = [entry.end for entry in entries]
        return self._starts, self._ends


def _line_column_distance(a: Position, b: Position) -> int:
    # Fallback when no buffer offsets are available: a line outweighs any column.
    return abs(a.line - b.line) * 1_000_000 + abs(a.column - b.column)


__all__ = ["CursorLocation", "Direction", "Navigator"]
