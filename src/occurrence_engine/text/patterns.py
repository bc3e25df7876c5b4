"""Pattern compilation and the combined search predicate."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from occurrence_engine.errors import EmptyPatternError, InvalidPatternError

PatternId = int
RawMatch = Tuple[int, int, PatternId]  # (start offset, end offset, pattern id)

TIE_BREAK_INSERTION = "insertion"
TIE_BREAK_LONGEST = "longest"
TIE_BREAKS = (TIE_BREAK_INSERTION, TIE_BREAK_LONGEST)


class PatternKind(str, Enum):
    WORD = "word"
    LITERAL = "literal"
    REGEX = "regex"


def _source_for(raw: str, kind: PatternKind) -> str:
    if kind is PatternKind.WORD:
        return rf"(?<!\w){re.escape(raw)}(?!\w)"
    if kind is PatternKind.LITERAL:
        return re.escape(raw)
    return raw


@dataclass(frozen=True, slots=True)
class Pattern:
    id: PatternId
    raw: str
    kind: PatternKind
    regex: re.Pattern = field(repr=False, compare=False)

    @property
    def source(self) -> str:
        return self.regex.pattern


class PatternSet:
    """Accumulates patterns for one Occurrence; there is no removal."""

    def __init__(self, *, ignore_case: bool = False) -> None:
        self._patterns: List[Pattern] = []
        self._flags = re.MULTILINE | (re.IGNORECASE if ignore_case else 0)
        self._predicates: Dict[str, SearchPredicate] = {}

    def __len__(self) -> int:
        return len(self._patterns)

    def __iter__(self) -> Iterator[Pattern]:
        return iter(tuple(self._patterns))

    def __bool__(self) -> bool:
        return bool(self._patterns)

    @property
    def revision(self) -> int:
        return len(self._patterns)

    def get(self, pattern_id: PatternId) -> Pattern:
        return self._patterns[pattern_id]

    def add(self, raw: str, kind: PatternKind | str = PatternKind.LITERAL) -> PatternId:
        kind = PatternKind(kind)
        normalized = raw.strip() if kind is PatternKind.WORD else raw
        if not normalized:
            raise EmptyPatternError(raw, kind=kind.value)
        try:
            regex = re.compile(_source_for(normalized, kind), self._flags)
        except re.error as exc:
            raise InvalidPatternError(raw, str(exc)) from exc
        pattern = Pattern(id=len(self._patterns), raw=normalized, kind=kind, regex=regex)
        self._patterns.append(pattern)
        self._predicates.clear()
        return pattern.id

    def combined(self, *, tie_break: str = TIE_BREAK_INSERTION) -> "SearchPredicate":
        predicate = self._predicates.get(tie_break)
        if predicate is None:
            predicate = SearchPredicate(tuple(self._patterns), tie_break=tie_break)
            self._predicates[tie_break] = predicate
        return predicate

    def only(self, pattern_id: PatternId) -> "SearchPredicate":
        return SearchPredicate((self.get(pattern_id),))


class SearchPredicate:
    """Alternation of patterns, evaluated leftmost-first.

    When several patterns match at the same start offset the earliest
    inserted pattern wins (``"insertion"``); with ``"longest"`` the longer
    match wins and insertion order only breaks equal lengths.
    """

    def __init__(
        self, patterns: Tuple[Pattern, ...], *, tie_break: str = TIE_BREAK_INSERTION
    ) -> None:
        if tie_break not in TIE_BREAKS:
            raise ValueError(f"Unknown tie_break '{tie_break}'")
        self.patterns = patterns
        self.tie_break = tie_break

    def __bool__(self) -> bool:
        return bool(self.patterns)

    @property
    def regex(self) -> str:
        return "|".join(f"(?:{pattern.source})" for pattern in self.patterns)

    def search(self, text: str, pos: int = 0) -> Optional[RawMatch]:
        return next(self.scan(text, pos), None)

    def scan(self, text: str, pos: int = 0) -> Iterator[RawMatch]:
        """Yield non-overlapping matches at or after ``pos`` in offset order."""

        heads: Dict[PatternId, Optional[Tuple[int, int]]] = {}
        limit = len(text)
        while pos <= limit:
            best: Optional[RawMatch] = None
            for pattern in self.patterns:
                head = heads.get(pattern.id, (-1, -1))
                if head is not None and head[0] < pos:
                    head = _next_match(pattern.regex, text, pos)
                    heads[pattern.id] = head
                if head is None:
                    continue
                if best is None or self._prefer(head, best):
                    best = (head[0], head[1], pattern.id)
            if best is None:
                return
            yield best
            pos = best[1]

    def _prefer(self, candidate: Tuple[int, int], best: RawMatch) -> bool:
        if candidate[0] != best[0]:
            return candidate[0] < best[0]
        if self.tie_break == TIE_BREAK_LONGEST:
            return candidate[1] > best[1]
        return False


def _next_match(regex: re.Pattern, text: str, pos: int) -> Optional[Tuple[int, int]]:
    # Zero-width matches are never occurrences.
    while pos <= len(text):
        found = regex.search(text, pos)
        if found is None:
            return None
        if found.end() > found.start():
            return found.start(), found.end()
        pos = found.start() + 1
    return None


__all__ = [
    "Pattern",
    "PatternId",
    "PatternKind",
    "PatternSet",
    "RawMatch",
    "SearchPredicate",
    "TIE_BREAKS",
    "TIE_BREAK_INSERTION",
    "TIE_BREAK_LONGEST",
]
