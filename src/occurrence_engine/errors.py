"""Error hierarchy shared by the occurrence engine."""

from __future__ import annotations

from typing import Optional


class OccurrenceError(RuntimeError):
    """Base class for engine errors."""


class EmptyPatternError(OccurrenceError, ValueError):
    """Raised when a pattern is empty after normalization."""

    def __init__(self, raw: str, *, kind: Optional[str] = None) -> None:
        super().__init__(f"Pattern {raw!r} is empty")
        self.raw = raw
        self.kind = kind


class InvalidPatternError(OccurrenceError, ValueError):
    """Raised when a regex pattern does not compile."""

    def __init__(self, raw: str, reason: str) -> None:
        super().__init__(f"Invalid pattern {raw!r}: {reason}")
        self.raw = raw
        self.reason = reason


class InvalidRangeError(OccurrenceError, ValueError):
    """Raised for malformed ranges or positions."""

    def __init__(self, message: str, *, start: object = None, end: object = None) -> None:
        super().__init__(message)
        self.start = start
        self.end = end


class BufferDestroyedError(OccurrenceError):
    """Raised when a destroyed buffer is read or edited."""

    def __init__(self, buffer_id: int) -> None:
        super().__init__(f"Buffer {buffer_id} has been destroyed")
        self.buffer_id = buffer_id


class DisposedError(OccurrenceError):
    """Raised when an operation targets a disposed Occurrence."""

    def __init__(self, buffer_id: int) -> None:
        super().__init__(f"Occurrence for buffer {buffer_id} has been disposed")
        self.buffer_id = buffer_id


class NoActiveOccurrenceError(OccurrenceError):
    """No Occurrence exists for the buffer.

    Registry lookups and ``status`` report this condition as ``None``; the
    exception exists for callers that opt into strict lookups.
    """

    def __init__(self, buffer_id: int) -> None:
        super().__init__(f"No occurrence for buffer {buffer_id}")
        self.buffer_id = buffer_id


class OperatorCancelled(OccurrenceError):
    """Raised by an interactive operator or hook when the user aborts."""

    def __init__(self, reason: Optional[str] = None) -> None:
        super().__init__(reason or "operator cancelled")
        self.reason = reason


class UnknownOperatorError(OccurrenceError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Operator '{name}' is not registered")
        self.name = name

    def __str__(self) -> str:
        return str(self.args[0])


__all__ = [
    "OccurrenceError",
    "EmptyPatternError",
    "InvalidPatternError",
    "InvalidRangeError",
    "BufferDestroyedError",
    "DisposedError",
    "NoActiveOccurrenceError",
    "OperatorCancelled",
    "UnknownOperatorError",
]
