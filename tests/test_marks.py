from occurrence_engine.buffer import Buffer
from occurrence_engine.marks import MarkStore
from occurrence_engine.text import Match, Position, Range


def make_match(line: int, start: int, end: int, pattern: int = 0) -> Match:
    return Match(range=Range(Position(line, start), Position(line, end)), pattern=pattern)


def make_store(lines: list[str]) -> MarkStore:
    return MarkStore(Buffer.from_lines(lines))


def test_mark_then_unmark_leaves_store_empty() -> None:
    store = make_store(["foo bar foo"])
    match = make_match(0, 0, 3)

    store.mark(match)
    assert store.unmark_at(match.range)

    assert len(store) == 0
    assert list(store.iter()) == []


def test_mark_is_idempotent() -> None:
    store = make_store(["foo bar foo"])
    match = make_match(0, 0, 3)

    first = store.mark(match)
    second = store.mark(match)

    assert first == second
    assert len(store) == 1


def test_unmark_missing_is_a_noop() -> None:
    store = make_store(["foo"])

    assert store.unmark(42) is False
    assert store.unmark_at(Range.of((0, 0), (0, 1))) is False


def test_iter_is_ordered_by_position() -> None:
    store = make_store(["foo bar foo", "baz foo bar"])
    for match in (make_match(1, 4, 7), make_match(0, 8, 11), make_match(0, 0, 3)):
        store.mark(match)

    assert [mark.range.start for mark in store.iter()] == [
        Position(0, 0),
        Position(0, 8),
        Position(1, 4),
    ]
    assert [mark.range.start for mark in store.iter(reverse=True)][0] == Position(1, 4)
    assert [mark.range for mark in store.iter(Range.of((0, 4), (0, 11)))] == [
        Range.of((0, 8), (0, 11))
    ]


def test_inserted_lines_shift_marks_down() -> None:
    store = make_store(["alpha"] * 15)
    store.mark(make_match(5, 0, 5))
    store.mark(make_match(10, 0, 5))

    store.buffer.insert_lines(3, ["x", "y", "z"])

    assert [mark.range.start.line for mark in store.iter()] == [8, 13]
    assert [mark.range.end for mark in store.iter()] == [Position(8, 5), Position(13, 5)]


def test_deleting_lines_removes_contained_marks() -> None:
    store = make_store(["alpha"] * 15)
    store.mark(make_match(5, 0, 5))
    store.mark(make_match(10, 0, 5))

    store.buffer.delete_lines(4, 12)

    assert len(store) == 0


def test_insertion_at_mark_start_pushes_the_mark() -> None:
    store = make_store(["foo bar baz"])
    mark_id = store.mark(make_match(0, 4, 7))

    store.buffer.insert_text("XX", at=(0, 4))

    mark = store.get(mark_id)
    assert mark is not None
    assert mark.range == Range.of((0, 6), (0, 9))
    assert store.buffer.get_text_range(mark.range.start, mark.range.end) == "bar"
    assert mark.origin == Range.of((0, 4), (0, 7))


def test_edits_after_the_mark_leave_it_untouched() -> None:
    store = make_store(["foo bar baz"])
    mark_id = store.mark(make_match(0, 4, 7))

    store.buffer.insert_text("!", at=(0, 7))
    store.buffer.insert_text("??", at=(0, 10))

    mark = store.get(mark_id)
    assert mark is not None
    assert mark.range == Range.of((0, 4), (0, 7))


def test_partial_overlap_clamps_to_surviving_text() -> None:
    store = make_store(["foo bar baz"])
    mark_id = store.mark(make_match(0, 4, 7))

    store.buffer.delete_range((0, 2), (0, 5))

    mark = store.get(mark_id)
    assert mark is not None
    assert store.buffer.text == "foar baz"
    assert mark.range == Range.of((0, 2), (0, 4))
    assert store.buffer.get_text_range(mark.range.start, mark.range.end) == "ar"


def test_undo_moves_marks_back() -> None:
    store = make_store(["foo bar"])
    mark_id = store.mark(make_match(0, 4, 7))

    store.buffer.insert_text("123 ", at=(0, 0))
    store.buffer.undo()

    mark = store.get(mark_id)
    assert mark is not None
    assert mark.range == Range.of((0, 4), (0, 7))


def test_unmark_within_removes_every_contained_mark() -> None:
    store = make_store(["foo bar foo", "baz foo bar"])
    for match in (make_match(0, 0, 3), make_match(0, 8, 11), make_match(1, 4, 7)):
        store.mark(match)

    removed = store.unmark_within(Range.of((0, 0), (0, 11)))

    assert removed == 2
    assert store.ranges() == [Range.of((1, 4), (1, 7))]


def test_detached_store_ignores_edits() -> None:
    store = make_store(["foo bar"])
    mark_id = store.mark(make_match(0, 4, 7))
    store.detach()

    store.buffer.insert_text("xx", at=(0, 0))

    mark = store.get(mark_id)
    assert mark is not None
    assert mark.range == Range.of((0, 4), (0, 7))
    assert not store.attached
