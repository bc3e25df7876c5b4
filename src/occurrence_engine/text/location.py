"""Positions and ranges over a line-oriented buffer.

Positions are 0-based ``(line, column)`` pairs ordered lexicographically.
Ranges are end-exclusive: ``end`` is the first position *not* covered.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Sequence, Union

from occurrence_engine.errors import InvalidRangeError


class RangeKind(str, Enum):
    CHARACTER = "character"
    LINE = "line"
    BLOCK = "block"


@dataclass(frozen=True, slots=True, order=True)
class Position:
    line: int
    column: int

    def __post_init__(self) -> None:
        if self.line < 0 or self.column < 0:
            raise InvalidRangeError(
                f"Position({self.line}, {self.column}) is negative", start=self
            )

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"

    @classmethod
    def of(cls, value: "PositionLike") -> "Position":
        if isinstance(value, Position):
            return value
        line, column = value
        return cls(int(line), int(column))


PositionLike = Union[Position, Sequence[int]]


@dataclass(frozen=True, slots=True)
class Range:
    start: Position
    end: Position
    kind: RangeKind = RangeKind.CHARACTER

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise InvalidRangeError(
                f"Range start {self.start} is after end {self.end}",
                start=self.start,
                end=self.end,
            )
        if not isinstance(self.kind, RangeKind):
            object.__setattr__(self, "kind", RangeKind(self.kind))

    def __str__(self) -> str:
        return f"Range({self.start}, {self.end}, {self.kind.value})"

    @classmethod
    def of(
        cls,
        start: PositionLike,
        end: PositionLike,
        kind: RangeKind | str = RangeKind.CHARACTER,
    ) -> "Range":
        return cls(Position.of(start), Position.of(end), RangeKind(kind))

    @classmethod
    def between(
        cls, a: PositionLike, b: PositionLike, kind: RangeKind | str = RangeKind.CHARACTER
    ) -> "Range":
        """Like ``of`` but accepts the endpoints in either order."""

        first, second = Position.of(a), Position.of(b)
        if second < first:
            first, second = second, first
        return cls(first, second, RangeKind(kind))

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    @property
    def line_span(self) -> range:
        return range(self.start.line, self.end.line + 1)

    def contains(self, other: Union["Range", Position]) -> bool:
        """Whether a position or range lies inside this range.

        For block ranges every covered line is bounded by the start and end
        columns, so a range is only contained when it stays on one line and
        within those columns.
        """

        if isinstance(other, Position):
            if self.kind is RangeKind.BLOCK:
                left, right = self._block_columns()
                return (
                    self.start.line <= other.line <= self.end.line
                    and left <= other.column < right
                )
            return self.start <= other < self.end
        if self.kind is RangeKind.BLOCK:
            left, right = self._block_columns()
            return (
                other.start.line == other.end.line
                and self.start.line <= other.start.line <= self.end.line
                and left <= other.start.column
                and other.end.column <= right
            )
        return self.start <= other.start and other.end <= self.end

    def intersects(self, other: "Range") -> bool:
        if self.kind is RangeKind.BLOCK:
            return any(part.intersects(other) for part in self.block_parts())
        if other.kind is RangeKind.BLOCK:
            return other.intersects(self)
        if self.is_empty or other.is_empty:
            return self.contains(other.start) or other.contains(self.start)
        return self.start < other.end and other.start < self.end

    def block_parts(self) -> Iterator["Range"]:
        """Per-line character sub-ranges of a block range."""

        left, right = self._block_columns()
        for line in self.line_span:
            yield Range(Position(line, left), Position(line, right))

    def move(self, start: PositionLike) -> "Range":
        """Transpose this range so that it begins at ``start``."""

        target = Position.of(start)
        line_delta = target.line - self.start.line
        if self.start.line == self.end.line:
            end = Position(target.line, target.column + (self.end.column - self.start.column))
        else:
            end = Position(self.end.line + line_delta, self.end.column)
        return Range(target, end, self.kind)

    def _block_columns(self) -> tuple[int, int]:
        left = min(self.start.column, self.end.column)
        right = max(self.start.column, self.end.column)
        return left, right


__all__ = ["Position", "PositionLike", "Range", "RangeKind"]
