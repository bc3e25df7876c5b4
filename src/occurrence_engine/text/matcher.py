"""Non-overlapping match computation over buffer text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Optional, Tuple

from occurrence_engine.runtime import telemetry

from .location import Range, RangeKind
from .patterns import PatternId, PatternSet, SearchPredicate

if TYPE_CHECKING:
    from occurrence_engine.buffer import Buffer


@dataclass(frozen=True, slots=True)
class Match:
    range: Range
    pattern: PatternId


class MatchStream:
    """Lazy, restartable sequence of matches.

    Every ``iter()`` rescans the buffer as it is at that moment, so the
    stream stays valid across edits.
    """

    def __init__(
        self, buffer: Buffer, predicate: SearchPredicate, within: Optional[Range] = None
    ) -> None:
        self.buffer = buffer
        self.predicate = predicate
        self.within = within

    def __iter__(self) -> Iterator[Match]:
        if not self.predicate:
            return
        self.buffer.require_valid()
        text = self.buffer.document.text
        if self.within is None:
            yield from self._scan(text, 0, len(text))
            return
        within = self.buffer.clamp_range(self.within)
        # A block is scanned line by line between its columns.
        parts = within.block_parts() if within.kind is RangeKind.BLOCK else (within,)
        for part in parts:
            start = self.buffer.offset_of(part.start)
            stop = self.buffer.offset_of(part.end)
            yield from self._scan(text, start, stop)

    def _scan(self, text: str, start: int, stop: int) -> Iterator[Match]:
        document = self.buffer.document
        for begin, end, pattern_id in self.predicate.scan(text, start):
            if begin >= stop:
                return
            if end <= stop:
                found = Range(document.position_of(begin), document.position_of(end))
                yield Match(range=found, pattern=pattern_id)

    def first(self) -> Optional[Match]:
        return next(iter(self), None)


def find_all(
    buffer: Buffer, predicate: SearchPredicate, within: Optional[Range] = None
) -> MatchStream:
    return MatchStream(buffer, predicate, within)


def has_match(
    buffer: Buffer, predicate: SearchPredicate, within: Optional[Range] = None
) -> bool:
    return MatchStream(buffer, predicate, within).first() is not None


class Matcher:
    """Per-Occurrence matcher that caches the whole-buffer match list.

    The cache is keyed by the buffer version and the pattern-set revision,
    so repeated navigation within one generation never rescans.
    """

    def __init__(
        self, buffer: Buffer, patterns: PatternSet, *, tie_break: str = "insertion"
    ) -> None:
        self.buffer = buffer
        self.patterns = patterns
        self.tie_break = tie_break
        self._cache: Optional[Tuple[Tuple[int, int], Tuple[Match, ...]]] = None

    @property
    def generation(self) -> Tuple[int, int]:
        return (self.buffer.version, self.patterns.revision)

    def predicate(self, pattern: Optional[PatternId] = None) -> SearchPredicate:
        if pattern is not None:
            return self.patterns.only(pattern)
        return self.patterns.combined(tie_break=self.tie_break)

    def stream(
        self, within: Optional[Range] = None, *, pattern: Optional[PatternId] = None
    ) -> MatchStream:
        return find_all(self.buffer, self.predicate(pattern), within)

    def has_match(self, within: Optional[Range] = None) -> bool:
        cached = self._cache
        if cached is not None and cached[0] == self.generation and within is None:
            return bool(cached[1])
        return has_match(self.buffer, self.predicate(), within)

    def all(self) -> Tuple[Match, ...]:
        generation = self.generation
        if self._cache is None or self._cache[0] != generation:
            with telemetry.span(
                "matcher::find_all",
                component="matcher",
                metadata={"buffer": self.buffer.id, "patterns": len(self.patterns)},
            ) as handle:
                matches = tuple(self.stream())
                handle.add_metadata("matches", len(matches))
            self._cache = (generation, matches)
        return self._cache[1]

    def invalidate(self) -> None:
        self._cache = None


__all__ = ["Match", "MatchStream", "Matcher", "find_all", "has_match"]
