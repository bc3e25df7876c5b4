from __future__ import annotations

import pytest

from occurrence_engine.actions import (
    DEFAULT_PRESETS,
    PRESETS,
    Preset,
    find_last_search,
    find_search_or_word,
    find_selection,
    find_word,
    get_preset,
    goto_next,
    goto_next_mark,
    goto_previous,
    goto_previous_mark,
    mark,
    mark_all,
    mark_in_selection,
    mark_last_search,
    mark_search_or_word,
    mark_selection,
    mark_word,
    mark_word_or_toggle_mark,
    modify_operator,
    run_preset,
    toggle_mark,
    toggle_marks_in_selection,
    toggle_selection,
    unmark,
    unmark_all,
    unmark_in_selection,
)
from occurrence_engine.actions.models import OPERATOR_MODIFIER
from occurrence_engine.buffer import Buffer
from occurrence_engine.occurrence import Occurrence, OccurrenceRegistry
from occurrence_engine.runtime import EventBus
from occurrence_engine.text import PatternKind, Position, Range


def make_occurrence(lines: list[str], cursor: tuple[int, int] = (0, 0)) -> Occurrence:
    buffer = Buffer.from_lines(lines)
    buffer.set_cursor(cursor)
    return Occurrence(buffer)


def select(occurrence: Occurrence, start: tuple[int, int], end: tuple[int, int]) -> None:
    occurrence.buffer.state.set_selection(Range.of(start, end))


def test_every_preset_is_registered() -> None:
    assert len(DEFAULT_PRESETS) == 24
    assert set(PRESETS) == {preset.id for preset in DEFAULT_PRESETS}
    assert get_preset("modify_operator").type == OPERATOR_MODIFIER
    with pytest.raises(KeyError):
        get_preset("missing")
    with pytest.raises(ValueError):
        Preset(id="", handler=mark)


def test_find_word_adds_a_word_pattern() -> None:
    occurrence = make_occurrence(["foo food foo"])

    result = find_word(occurrence)

    assert result.consumed
    assert [pattern.kind for pattern in occurrence.patterns] == [PatternKind.WORD]
    assert len(list(occurrence.matches())) == 2
    assert len(occurrence.marks) == 0


def test_find_word_without_a_word() -> None:
    occurrence = make_occurrence(["   "])

    result = find_word(occurrence)

    assert not result.consumed
    assert result.message == "No word under cursor"
    assert len(occurrence.patterns) == 0


def test_mark_word_marks_every_match() -> None:
    occurrence = make_occurrence(["foo bar foo"])

    mark_word(occurrence)

    assert occurrence.marks.ranges() == [Range.of((0, 0), (0, 3)), Range.of((0, 8), (0, 11))]


def test_selection_finders_clear_the_selection() -> None:
    occurrence = make_occurrence(["a.b x a.b"])
    select(occurrence, (0, 0), (0, 3))

    assert find_selection(occurrence).consumed
    assert occurrence.buffer.state.selection is None
    assert len(list(occurrence.matches())) == 2

    select(occurrence, (0, 4), (0, 5))
    mark_selection(occurrence)

    assert occurrence.marks.ranges() == [Range.of((0, 4), (0, 5))]
    assert not find_selection(occurrence).consumed


def test_last_search_finders() -> None:
    occurrence = make_occurrence(["foo bar baz"])

    assert not find_last_search(occurrence).consumed

    occurrence.buffer.registers.set_search("ba.")
    mark_last_search(occurrence)

    assert occurrence.patterns.get(0).kind is PatternKind.REGEX
    assert len(occurrence.marks) == 2


def test_search_or_word_prefers_the_search() -> None:
    occurrence = make_occurrence(["foo bar foo"])
    occurrence.buffer.registers.set_search("bar")

    find_search_or_word(occurrence)
    assert [pattern.raw for pattern in occurrence.patterns] == ["bar"]

    other = make_occurrence(["foo bar foo"])
    mark_search_or_word(other)
    assert [pattern.raw for pattern in other.patterns] == ["foo"]
    assert len(other.marks) == 2


def test_goto_wraps_over_matches_and_marks() -> None:
    occurrence = make_occurrence(["foo bar foo", "foo"])
    occurrence.add_pattern("foo")

    assert goto_next(occurrence).consumed
    assert occurrence.buffer.state.cursor == Position(0, 8)
    goto_previous(occurrence)
    goto_previous(occurrence)
    assert occurrence.buffer.state.cursor == Position(1, 0)

    occurrence.mark(Range.of((0, 8), (0, 11)))
    assert goto_next_mark(occurrence).consumed
    assert occurrence.buffer.state.cursor == Position(0, 8)
    assert goto_previous_mark(occurrence).consumed
    assert occurrence.buffer.state.cursor == Position(0, 8)


def test_goto_without_marks_is_a_noop() -> None:
    occurrence = make_occurrence(["foo"])
    occurrence.add_pattern("foo")

    assert not goto_next_mark(occurrence).consumed


def test_mark_unmark_and_toggle_nearest() -> None:
    occurrence = make_occurrence(["foo bar foo"], cursor=(0, 9))
    occurrence.add_pattern("foo")

    mark(occurrence)
    assert occurrence.marks.ranges() == [Range.of((0, 8), (0, 11))]

    unmark(occurrence)
    assert len(occurrence.marks) == 0

    toggle_mark(occurrence)
    assert len(occurrence.marks) == 1
    toggle_mark(occurrence)
    assert len(occurrence.marks) == 0


def test_mark_without_patterns_is_a_noop() -> None:
    occurrence = make_occurrence(["foo"])

    assert not mark(occurrence).consumed
    assert not toggle_mark(occurrence).consumed


def test_mark_word_or_toggle_mark() -> None:
    occurrence = make_occurrence(["foo bar foo bar"])

    mark_word_or_toggle_mark(occurrence)
    assert len(occurrence.marks) == 2

    mark_word_or_toggle_mark(occurrence)
    assert occurrence.marks.ranges() == [Range.of((0, 8), (0, 11))]

    occurrence.buffer.set_cursor((0, 4))
    mark_word_or_toggle_mark(occurrence)
    assert [pattern.raw for pattern in occurrence.patterns] == ["foo", "bar"]
    assert len(occurrence.marks) == 3


def test_mark_all_and_unmark_all() -> None:
    occurrence = make_occurrence(["foo bar foo"])
    occurrence.add_pattern("foo")

    mark_all(occurrence)
    assert len(occurrence.marks) == 2

    unmark_all(occurrence)
    assert len(occurrence.marks) == 0


def test_selection_mark_actions() -> None:
    occurrence = make_occurrence(["foo foo", "foo foo"])
    occurrence.add_pattern("foo")

    assert not mark_in_selection(occurrence).consumed

    select(occurrence, (0, 0), (1, 3))
    mark_in_selection(occurrence)
    assert len(occurrence.marks) == 3

    select(occurrence, (0, 4), (1, 7))
    unmark_in_selection(occurrence)
    assert occurrence.marks.ranges() == [Range.of((0, 0), (0, 3))]

    select(occurrence, (0, 0), (0, 7))
    toggle_marks_in_selection(occurrence)
    assert occurrence.marks.ranges() == [Range.of((0, 4), (0, 7))]


def test_toggle_selection_adds_a_pattern_when_nothing_matches() -> None:
    occurrence = make_occurrence(["foo bar foo bar"])
    select(occurrence, (0, 4), (0, 7))

    toggle_selection(occurrence)
    assert [pattern.raw for pattern in occurrence.patterns] == ["bar"]
    assert len(occurrence.marks) == 2

    select(occurrence, (0, 0), (0, 7))
    toggle_selection(occurrence)
    assert occurrence.marks.ranges() == [Range.of((0, 12), (0, 15))]


def test_modify_operator_deletes_word_and_disposes() -> None:
    occurrence = make_occurrence(["foo bar foo"])

    result = modify_operator(occurrence, "d")

    assert result.consumed
    assert result.operator is not None
    assert result.operator.edited == 2
    assert occurrence.buffer.text == " bar "
    assert occurrence.is_disposed


def test_modify_operator_keeps_occurrence_with_remaining_marks() -> None:
    occurrence = make_occurrence(["foo bar", "foo"])
    occurrence.add_pattern("foo")
    occurrence.mark(Range.of((1, 0), (1, 3)))

    modify_operator(occurrence, "gU", occurrence.buffer.line_range(0))

    assert occurrence.buffer.lines == ("FOO bar", "foo")
    assert not occurrence.is_disposed


def test_modify_operator_cancelled_change() -> None:
    occurrence = make_occurrence(["foo bar foo"])

    result = modify_operator(occurrence, "c")

    assert not result.consumed
    assert result.status == "cancelled"
    assert occurrence.buffer.text == "foo bar foo"


def test_deactivate_disposes() -> None:
    occurrence = make_occurrence(["foo"])
    occurrence.add_pattern("foo")
    occurrence.mark()

    assert get_preset("deactivate")(occurrence).consumed
    assert occurrence.is_disposed


def test_run_preset_creates_on_demand() -> None:
    registry = OccurrenceRegistry(bus=EventBus())
    buffer = Buffer.from_lines(["foo bar foo"])

    assert not run_preset("deactivate", buffer, registry=registry).consumed
    assert len(registry) == 0

    assert run_preset("mark_word", buffer, registry=registry).consumed
    occurrence = registry.get(buffer)
    assert occurrence is not None
    assert len(occurrence.marks) == 2

    run_preset("deactivate", buffer, registry=registry)
    assert registry.get(buffer) is None


def test_run_preset_passes_operator_arguments() -> None:
    registry = OccurrenceRegistry(bus=EventBus())
    buffer = Buffer.from_lines(["foo bar foo"])

    result = run_preset("modify_operator", buffer, "c", registry=registry, input="baz")

    assert result.consumed
    assert buffer.text == "baz bar baz"
    assert registry.get(buffer) is None


def test_yank_then_distribute_between_lines() -> None:
    buffer = Buffer.from_lines(["alpha beta gamma", "foo dest bar dest bat dest"])
    occurrence = Occurrence(buffer)
    occurrence.add_pattern("alpha|beta|gamma", PatternKind.REGEX)
    occurrence.mark()
    occurrence.apply_operator("y")

    occurrence.add_pattern("foo|bar|bat", PatternKind.REGEX)
    occurrence.mark(buffer.line_range(1))
    occurrence.apply_operator("gp")

    assert buffer.lines == ("alpha beta gamma", "alpha dest beta dest gamma dest")


def test_presets_dispatch_to_the_action_functions() -> None:
    assert get_preset("mark").handler is mark
    assert get_preset("find_word").handler is find_word
    assert get_preset("goto_next").handler is goto_next

    occurrence = make_occurrence(["foo bar foo"], cursor=(0, 9))
    occurrence.add_pattern("foo")

    assert get_preset("mark")(occurrence).consumed
    assert occurrence.marks.ranges() == [Range.of((0, 8), (0, 11))]


def test_marking_a_new_pattern_keeps_marks_disjoint() -> None:
    occurrence = make_occurrence(["foobar bar"])
    occurrence.add_pattern("foobar")
    select(occurrence, (0, 7), (0, 10))

    mark_selection(occurrence)

    assert occurrence.marks.ranges() == [Range.of((0, 7), (0, 10))]
