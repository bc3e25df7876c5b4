"""Navigation, teardown, and operator-modifier actions."""

from __future__ import annotations

from typing import Optional

from occurrence_engine.occurrence import Direction, Occurrence
from occurrence_engine.operators import STATUS_CANCELLED, STATUS_PENDING
from occurrence_engine.runtime import telemetry
from occurrence_engine.text.location import Range

from .find import find_word
from .models import ActionResult, done, noop


def _goto(occurrence: Occurrence, direction: Direction, *, marked: bool) -> ActionResult:
    found = occurrence.match_cursor(direction, wrap=True, marked=marked)
    if found is None:
        return noop("No occurrence to move to")
    return done(f"goto_{direction.value}")


def goto_next(occurrence: Occurrence) -> ActionResult:
    return _goto(occurrence, Direction.FORWARD, marked=False)


def goto_previous(occurrence: Occurrence) -> ActionResult:
    return _goto(occurrence, Direction.BACKWARD, marked=False)


def goto_next_mark(occurrence: Occurrence) -> ActionResult:
    return _goto(occurrence, Direction.FORWARD, marked=True)


def goto_previous_mark(occurrence: Occurrence) -> ActionResult:
    return _goto(occurrence, Direction.BACKWARD, marked=True)


def deactivate(occurrence: Occurrence) -> ActionResult:
    if occurrence.marks:
        telemetry.record_event(
            "actions.deactivate_with_marks",
            level="debug",
            data={"buffer": occurrence.buffer.id, "marks": len(occurrence.marks)},
        )
    occurrence.dispose()
    return done("deactivate")


def modify_operator(
    occurrence: Occurrence,
    operator: str,
    range: Optional[Range] = None,
    *,
    count: Optional[int] = None,
    register: Optional[str] = None,
    input: Optional[str] = None,
) -> ActionResult:
    """Run a pending operator over the occurrences of the word under the cursor.

    Every match inside ``range`` is a target, marked or not. The Occurrence is
    disposed afterwards unless marks remain.
    """

    if not occurrence.patterns:
        found = find_word(occurrence)
        if not found.consumed:
            return found
    if not occurrence.has_matches(range):
        return noop("No occurrences in range")
    result = occurrence.apply_operator(
        operator,
        range,
        marked=False,
        count=count,
        register=register,
        input=input,
    )
    if result.status == STATUS_CANCELLED:
        return ActionResult(consumed=False, status="cancelled", message=result.message, operator=result)
    if result.status != STATUS_PENDING and not occurrence.is_disposed and not occurrence.marks:
        occurrence.dispose()
    return ActionResult(consumed=True, status=result.status, operator=result)


__all__ = [
    "deactivate",
    "goto_next",
    "goto_next_mark",
    "goto_previous",
    "goto_previous_mark",
    "modify_operator",
]
