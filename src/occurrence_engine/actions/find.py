"""Actions that add patterns: word under cursor, selection, last search."""

from __future__ import annotations

from typing import Callable, Optional

from occurrence_engine.occurrence import Occurrence
from occurrence_engine.runtime import telemetry
from occurrence_engine.text.patterns import PatternId, PatternKind

from .models import ActionResult, done, noop

Finder = Callable[[Occurrence], ActionResult]


def find_word(occurrence: Occurrence) -> ActionResult:
    buffer = occurrence.buffer
    word = buffer.word_at(buffer.state.cursor)
    if word is None:
        telemetry.record_event("actions.no_word", level="warning", data={"buffer": buffer.id})
        return noop("No word under cursor")
    occurrence.add_pattern(buffer.get_text_range(word.start, word.end), PatternKind.WORD)
    return done("find_word")


def find_selection(occurrence: Occurrence) -> ActionResult:
    buffer = occurrence.buffer
    selection = buffer.state.selection
    if selection is None:
        return noop("No selection")
    text = "\n".join(buffer.get_lines_in(selection))
    if not text:
        return noop("Empty selection")
    occurrence.add_pattern(text, PatternKind.LITERAL)
    buffer.state.clear_selection()
    return done("find_selection")


def find_last_search(occurrence: Occurrence) -> ActionResult:
    pattern = occurrence.buffer.registers.last_search()
    if not pattern:
        return noop("No search pattern available")
    occurrence.add_pattern(pattern, PatternKind.REGEX)
    return done("find_last_search")


def find_search_or_word(occurrence: Occurrence) -> ActionResult:
    if occurrence.buffer.registers.last_search():
        return find_last_search(occurrence)
    return find_word(occurrence)


def mark_word(occurrence: Occurrence) -> ActionResult:
    return _find_and_mark(occurrence, find_word)


def mark_selection(occurrence: Occurrence) -> ActionResult:
    return _find_and_mark(occurrence, find_selection)


def mark_last_search(occurrence: Occurrence) -> ActionResult:
    return _find_and_mark(occurrence, find_last_search)


def mark_search_or_word(occurrence: Occurrence) -> ActionResult:
    return _find_and_mark(occurrence, find_search_or_word)


def _find_and_mark(occurrence: Occurrence, finder: Finder) -> ActionResult:
    """Run ``finder`` and mark every match of the pattern it added."""

    before = len(occurrence.patterns)
    result = finder(occurrence)
    newest = _newest_pattern(occurrence, before)
    if newest is None:
        return result
    # The combined stream keeps marks disjoint when patterns overlap.
    for match in list(occurrence.matches()):
        if match.pattern == newest:
            occurrence.mark(match)
    return result


def _newest_pattern(occurrence: Occurrence, before: int) -> Optional[PatternId]:
    if len(occurrence.patterns) <= before:
        return None
    return len(occurrence.patterns) - 1


__all__ = [
    "find_last_search",
    "find_search_or_word",
    "find_selection",
    "find_word",
    "mark_last_search",
    "mark_search_or_word",
    "mark_selection",
    "mark_word",
]
