"""Edit-resilient mark storage.

Marks live in an arena keyed by a stable ``MarkId``. Each entry stores its
current range, which is recomputed from every ``BufferEdit`` the buffer
publishes:

* an edit that ends at or before a mark's start shifts the mark by the
  edit's position delta (an insertion exactly at the start pushes it too);
* an edit that starts at or after a mark's end leaves it untouched;
* an edit that deletes the whole mark removes it;
* an edit that overlaps one boundary clamps the mark to the surviving text.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from occurrence_engine.buffer import EDIT_EVENT, Buffer, BufferEdit
from occurrence_engine.runtime import telemetry
from occurrence_engine.text.location import Position, Range
from occurrence_engine.text.matcher import Match

MarkId = int


@dataclass(frozen=True, slots=True)
class Mark:
    """Snapshot of a mark: its current match plus the range it was created at."""

    id: MarkId
    match: Match
    origin: Range

    @property
    def range(self) -> Range:
        return self.match.range


@dataclass(slots=True)
class _Entry:
    range: Range
    pattern: int
    origin: Range
    order: int


def shift_position(position: Position, edit: BufferEdit, *, right_gravity: bool) -> Position:
    """Map ``position`` through ``edit``.

    Positions inside the replaced span collapse to the start of the edit
    (left gravity) or to the end of the inserted text (right gravity).
    """

    if position < edit.start:
        return position
    if edit.is_insertion and position == edit.start:
        return edit.new_end if right_gravity else position
    if position < edit.old_end:
        return edit.new_end if right_gravity else edit.start
    if position.line == edit.old_end.line:
        return Position(edit.new_end.line, edit.new_end.column + position.column - edit.old_end.column)
    return Position(position.line + edit.new_end.line - edit.old_end.line, position.column)


def transform_range(target: Range, edit: BufferEdit) -> Optional[Range]:
    """Return ``target`` adjusted for ``edit``, or ``None`` if it was deleted."""

    if not edit.is_insertion and edit.start <= target.start and target.end <= edit.old_end:
        return None
    start = shift_position(target.start, edit, right_gravity=True)
    end = shift_position(target.end, edit, right_gravity=False)
    if end <= start:
        return None if not target.is_empty else Range(start, start, target.kind)
    return Range(start, end, target.kind)


class MarkStore:
    """Buffer-scoped set of marks kept in sync with buffer edits."""

    def __init__(self, buffer: Buffer, *, logger_name: str | None = None) -> None:
        self.buffer = buffer
        self._entries: Dict[MarkId, _Entry] = {}
        self._by_range: Dict[Range, MarkId] = {}
        self._ids = itertools.count(1)
        self._order = itertools.count()
        self._revision = 0
        self._sorted: Optional[Tuple[int, List[MarkId]]] = None
        self._logger_name = logger_name
        self._detach: Optional[Callable[[], None]] = buffer.events.subscribe(
            EDIT_EVENT, self._on_edit
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __contains__(self, target: object) -> bool:
        return isinstance(target, Range) and self.contains(target)

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def attached(self) -> bool:
        return self._detach is not None

    def mark(self, match: Match) -> MarkId:
        existing = self._by_range.get(match.range)
        if existing is not None:
            return existing
        with telemetry.span(
            "marks::mark",
            logger_name=self._logger_name,
            component="marks",
            metadata={"buffer": self.buffer.id, "range": str(match.range)},
        ):
            mark_id = next(self._ids)
            self._entries[mark_id] = _Entry(
                range=match.range,
                pattern=match.pattern,
                origin=match.range,
                order=next(self._order),
            )
            self._by_range[match.range] = mark_id
            self._touch()
            return mark_id

    def unmark(self, mark_id: MarkId) -> bool:
        entry = self._entries.pop(mark_id, None)
        if entry is None:
            return False
        if self._by_range.get(entry.range) == mark_id:
            del self._by_range[entry.range]
        self._touch()
        return True

    def unmark_at(self, target: Range) -> bool:
        mark_id = self._by_range.get(target)
        if mark_id is None:
            return False
        return self.unmark(mark_id)

    def unmark_within(self, target: Range) -> int:
        """Remove every mark contained in ``target``; returns how many."""

        doomed = [
            mark_id
            for mark_id, entry in self._entries.items()
            if target.contains(entry.range)
        ]
        for mark_id in doomed:
            self.unmark(mark_id)
        return len(doomed)

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        self._by_range.clear()
        if count:
            self._touch()
        return count

    def contains(self, target: Range) -> bool:
        return target in self._by_range

    def get(self, mark_id: MarkId) -> Optional[Mark]:
        entry = self._entries.get(mark_id)
        if entry is None:
            return None
        return self._snapshot(mark_id, entry)

    def id_at(self, target: Range) -> Optional[MarkId]:
        return self._by_range.get(target)

    def iter(
        self, within: Optional[Range] = None, *, reverse: bool = False
    ) -> Iterator[Mark]:
        """Yield marks ordered by current position.

        The returned iterator is single-use; call ``iter`` again to restart.
        Marks removed while iterating are skipped.
        """

        order = self._ordered_ids()
        if reverse:
            order = list(reversed(order))
        for mark_id in order:
            entry = self._entries.get(mark_id)
            if entry is None:
                continue
            if within is not None and not within.intersects(entry.range):
                continue
            yield self._snapshot(mark_id, entry)

    def ranges(self) -> List[Range]:
        return [self._entries[mark_id].range for mark_id in self._ordered_ids()]

    def detach(self) -> None:
        if self._detach is not None:
            self._detach()
            self._detach = None

    def dispose(self) -> None:
        self.detach()
        self.clear()

    def _snapshot(self, mark_id: MarkId, entry: _Entry) -> Mark:
        return Mark(
            id=mark_id,
            match=Match(range=entry.range, pattern=entry.pattern),
            origin=entry.origin,
        )

    def _ordered_ids(self) -> List[MarkId]:
        if self._sorted is None or self._sorted[0] != self._revision:
            ordered = sorted(
                self._entries,
                key=lambda mark_id: (
                    self._entries[mark_id].range.start,
                    self._entries[mark_id].range.end,
                    self._entries[mark_id].order,
                ),
            )
            self._sorted = (self._revision, ordered)
        return self._sorted[1]

    def _touch(self) -> None:
        self._revision += 1

    def _on_edit(self, payload: object) -> None:
        if not isinstance(payload, BufferEdit) or not self._entries:
            return
        edit = _sanitize(self.buffer, payload)
        removed = 0
        moved = 0
        by_range: Dict[Range, MarkId] = {}
        for mark_id in list(self._entries):
            entry = self._entries[mark_id]
            updated = transform_range(entry.range, edit)
            if updated is not None:
                updated = self.buffer.clamp_range(updated)
                if updated.is_empty and not entry.range.is_empty:
                    updated = None
            if updated is None:
                del self._entries[mark_id]
                removed += 1
                continue
            if updated != entry.range:
                entry.range = updated
                moved += 1
            # Two marks squeezed onto the same span keep the older one.
            if updated in by_range:
                del self._entries[mark_id]
                removed += 1
                continue
            by_range[updated] = mark_id
        self._by_range = by_range
        if removed or moved:
            self._touch()
            telemetry.record_event(
                "marks.adjust",
                level="debug",
                data={"buffer": self.buffer.id, "moved": moved, "removed": removed},
                logger_name=self._logger_name,
            )


def _sanitize(buffer: Buffer, edit: BufferEdit) -> BufferEdit:
    """Coerce malformed edits into something the gravity rules can use."""

    start, old_end, new_end = edit.start, edit.old_end, edit.new_end
    if old_end < start:
        start, old_end = old_end, start
    if new_end < start:
        new_end = start
    new_end = buffer.clamp(new_end)
    if (start, old_end, new_end) == (edit.start, edit.old_end, edit.new_end):
        return edit
    return BufferEdit(start=start, old_end=old_end, new_end=new_end, version=edit.version, label=edit.label)


__all__ = ["Mark", "MarkId", "MarkStore", "shift_position", "transform_range"]
