"""Line storage backing a buffer."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from occurrence_engine.text.location import Position


@dataclass(slots=True)
class BufferDocument:
    """List-of-lines document with a monotonically increasing version.

    Documents are treated as values: edits return a new document with a
    bumped version. The flattened text and line-start table are computed
    lazily and cached per instance.
    """

    _lines: List[str] = field(default_factory=lambda: [""])
    version: int = 0
    _text: Optional[str] = field(default=None, repr=False, compare=False)
    _starts: Optional[List[int]] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_text(cls, text: str, *, version: int = 0) -> "BufferDocument":
        return cls(_lines=text.split("\n"), version=version)

    @classmethod
    def from_lines(cls, lines: Iterable[str], *, version: int = 0) -> "BufferDocument":
        materialized = list(lines) or [""]
        return cls(_lines=materialized, version=version)

    def snapshot(self) -> Sequence[str]:
        """Return the current lines without exposing internal mutability."""

        return tuple(self._lines)

    def replace_text(self, start: int, end: int, text: str) -> "BufferDocument":
        """Return a document with ``text[start:end]`` replaced, version bumped.

        Only the touched lines are rebuilt; the flattened text of the new
        document is joined lazily on first use.
        """

        first = self.position_of(start)
        last = self.position_of(end)
        head = self._lines[first.line][: first.column]
        tail = self._lines[last.line][last.column :]
        lines = list(self._lines)
        lines[first.line : last.line + 1] = (head + text + tail).split("\n")
        return BufferDocument(_lines=lines, version=self.version + 1)

    @property
    def text(self) -> str:
        if self._text is None:
            self._text = "\n".join(self._lines)
        return self._text

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, index: int) -> str:
        return self._lines[index]

    def end_position(self) -> Position:
        last = len(self._lines) - 1
        return Position(last, len(self._lines[last]))

    def offset_of(self, position: Position) -> int:
        starts = self._line_starts()
        return starts[position.line] + position.column

    def position_of(self, offset: int) -> Position:
        starts = self._line_starts()
        offset = max(0, min(offset, starts[-1] + len(self._lines[-1])))
        line = bisect_right(starts, offset) - 1
        return Position(line, offset - starts[line])

    def _line_starts(self) -> List[int]:
        if self._starts is None:
            starts = []
            running = 0
            for line in self._lines:
                starts.append(running)
                running += len(line) + 1  # newline
            self._starts = starts
        return self._starts
