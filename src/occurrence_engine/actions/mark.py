"""Mark/unmark/toggle actions around the cursor and the selection."""

from __future__ import annotations

from occurrence_engine.occurrence import Occurrence

from .find import mark_selection, mark_word
from .models import ActionResult, done, noop


def mark(occurrence: Occurrence) -> ActionResult:
    found = occurrence.match_cursor()
    if found is None:
        return noop("No occurrence near cursor")
    occurrence.mark(found)
    return done("mark")


def unmark(occurrence: Occurrence) -> ActionResult:
    found = occurrence.match_cursor()
    if found is None:
        return noop("No occurrence near cursor")
    occurrence.unmark(found)
    return done("unmark")


def toggle_mark(occurrence: Occurrence) -> ActionResult:
    found = occurrence.match_cursor()
    if found is None:
        return noop("No occurrence near cursor")
    if not occurrence.mark(found):
        occurrence.unmark(found)
    return done("toggle_mark")


def mark_word_or_toggle_mark(occurrence: Occurrence) -> ActionResult:
    """Toggle the occurrence under the cursor, or start marking the word there."""

    if not occurrence.patterns:
        return mark_word(occurrence)
    cursor = occurrence.buffer.state.cursor
    found = occurrence.match_cursor()
    if found is not None and found.contains(cursor):
        return toggle_mark(occurrence)
    occurrence.buffer.set_cursor(cursor)
    return mark_word(occurrence)


def mark_all(occurrence: Occurrence) -> ActionResult:
    occurrence.mark()
    return done("mark_all")


def unmark_all(occurrence: Occurrence) -> ActionResult:
    occurrence.unmark()
    return done("unmark_all")


def mark_in_selection(occurrence: Occurrence) -> ActionResult:
    selection = occurrence.buffer.state.selection
    if selection is None:
        return noop("No selection")
    occurrence.mark(selection)
    return done("mark_in_selection")


def unmark_in_selection(occurrence: Occurrence) -> ActionResult:
    selection = occurrence.buffer.state.selection
    if selection is None:
        return noop("No selection")
    for marked in list(occurrence.marked(selection)):
        occurrence.unmark(marked.range)
    return done("unmark_in_selection")


def toggle_marks_in_selection(occurrence: Occurrence) -> ActionResult:
    selection = occurrence.buffer.state.selection
    if selection is None:
        return noop("No selection")
    for match in list(occurrence.matches(selection)):
        if not occurrence.mark(match):
            occurrence.unmark(match)
    return done("toggle_marks_in_selection")


def toggle_selection(occurrence: Occurrence) -> ActionResult:
    selection = occurrence.buffer.state.selection
    if not occurrence.patterns or selection is None or not occurrence.has_matches(selection):
        return mark_selection(occurrence)
    return toggle_marks_in_selection(occurrence)


__all__ = [
    "mark",
    "mark_all",
    "mark_in_selection",
    "mark_word_or_toggle_mark",
    "toggle_mark",
    "toggle_marks_in_selection",
    "toggle_selection",
    "unmark",
    "unmark_all",
    "unmark_in_selection",
]
