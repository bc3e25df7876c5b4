import pytest

from occurrence_engine.buffer import DESTROY_EVENT, EDIT_EVENT, Buffer, BufferEdit
from occurrence_engine.errors import BufferDestroyedError, InvalidRangeError
from occurrence_engine.text import Position, Range


def make_buffer(*lines: str) -> Buffer:
    return Buffer.from_lines(lines or ("foo bar foo",))


def test_replace_range_publishes_position_delta() -> None:
    buffer = make_buffer("foo bar", "baz")
    edits: list[BufferEdit] = []
    buffer.events.subscribe(EDIT_EVENT, edits.append)

    buffer.replace_range((0, 4), (1, 1), ["X", "Y"])

    assert buffer.lines == ("foo X", "Yaz")
    assert edits == [
        BufferEdit(
            start=Position(0, 4),
            old_end=Position(1, 1),
            new_end=Position(1, 1),
            version=edits[0].version,
            label="replace_range",
        )
    ]


def test_out_of_range_edit_is_rejected() -> None:
    buffer = make_buffer("foo")

    with pytest.raises(InvalidRangeError):
        buffer.replace_range((0, 0), (0, 9), "")
    with pytest.raises(InvalidRangeError):
        buffer.get_text_range((3, 0), (3, 1))


def test_transaction_is_a_single_undo_step() -> None:
    buffer = make_buffer("foo bar foo")

    with buffer.transaction("pair"):
        buffer.delete_range((0, 8), (0, 11))
        buffer.delete_range((0, 0), (0, 3))

    assert buffer.text == " bar "
    assert len(buffer.undo_timeline) == 1

    buffer.undo()
    assert buffer.text == "foo bar foo"

    buffer.redo()
    assert buffer.text == " bar "


def test_failed_transaction_is_not_recorded() -> None:
    buffer = make_buffer("foo")

    with pytest.raises(RuntimeError):
        with buffer.transaction("broken"):
            buffer.insert_text("x", at=(0, 0))
            raise RuntimeError("boom")

    assert len(buffer.undo_timeline) == 0


def test_line_helpers() -> None:
    buffer = make_buffer("one", "two", "three")

    buffer.insert_lines(1, ["new"])
    assert buffer.lines == ("one", "new", "two", "three")

    buffer.delete_lines(2, 3)
    assert buffer.lines == ("one", "new")

    buffer.delete_lines(1, 1)
    assert buffer.lines == ("one",)

    assert buffer.line_range(0) == Range.of((0, 0), (0, 3), "line")


def test_word_at_and_lines_in() -> None:
    buffer = make_buffer("  foo.bar", "baz")

    assert buffer.word_at((0, 0)) == Range.of((0, 2), (0, 5))
    assert buffer.word_at((0, 5)) == Range.of((0, 6), (0, 9))
    assert buffer.word_at((1, 3)) is None
    assert buffer.get_lines_in(Range.of((0, 6), (1, 2))) == ["bar", "ba"]


def test_cursor_is_clamped() -> None:
    buffer = make_buffer("foo", "ba")

    assert buffer.set_cursor((1, 10)) == Position(1, 2)
    assert buffer.set_cursor((9, 0)) == Position(1, 2)
    assert buffer.set_cursor((-1, 4)) == Position(0, 0)


def test_destroy_invalidates_and_notifies() -> None:
    buffer = make_buffer()
    seen: list[object] = []
    buffer.events.subscribe(DESTROY_EVENT, seen.append)

    buffer.destroy()
    buffer.destroy()

    assert not buffer.is_valid
    assert seen == [buffer]
    with pytest.raises(BufferDestroyedError):
        buffer.insert_text("x")


def test_snapshot_captures_cursor_and_selection() -> None:
    buffer = make_buffer("foo bar")
    buffer.set_cursor((0, 4))
    buffer.state.set_selection(Range.of((0, 0), (0, 3)))

    view = buffer.snapshot()
    buffer.insert_text("x", at=(0, 0))

    assert view.text == "foo bar"
    assert view.cursor == Position(0, 4)
    assert view.selection == Range.of((0, 0), (0, 3))
    assert view.version < buffer.version


def test_edits_splice_only_the_touched_lines() -> None:
    buffer = make_buffer("alpha", "beta", "gamma", "delta")

    buffer.replace_range((1, 2), (2, 3), "X\nY")
    assert buffer.lines == ("alpha", "beX", "Yma", "delta")

    buffer.replace_range((0, 5), (1, 0), "")
    assert buffer.lines == ("alphabeX", "Yma", "delta")

    buffer.insert_text("!", at=(2, 5))
    assert buffer.text == "alphabeX\nYma\ndelta!"
    assert buffer.document.position_of(100) == Position(2, 6)

    buffer.undo()
    assert buffer.lines == ("alphabeX", "Yma", "delta")
