import pytest

from occurrence_engine.errors import InvalidRangeError
from occurrence_engine.text import Position, Range, RangeKind


def test_positions_order_lexicographically() -> None:
    assert Position(0, 9) < Position(1, 0)
    assert Position(2, 3) < Position(2, 4)
    assert sorted([Position(1, 0), Position(0, 5), Position(0, 1)]) == [
        Position(0, 1),
        Position(0, 5),
        Position(1, 0),
    ]


def test_negative_position_is_rejected() -> None:
    with pytest.raises(InvalidRangeError):
        Position(-1, 0)


def test_range_rejects_reversed_endpoints() -> None:
    with pytest.raises(InvalidRangeError):
        Range(Position(1, 0), Position(0, 0))


def test_between_accepts_either_order() -> None:
    assert Range.between((1, 2), (0, 4)) == Range(Position(0, 4), Position(1, 2))


def test_contains_is_end_exclusive() -> None:
    target = Range.of((0, 2), (0, 5))

    assert target.contains(Position(0, 2))
    assert target.contains(Position(0, 4))
    assert not target.contains(Position(0, 5))
    assert target.contains(Range.of((0, 2), (0, 5)))
    assert not target.contains(Range.of((0, 1), (0, 3)))


def test_block_range_bounds_every_line_by_columns() -> None:
    block = Range.of((0, 2), (3, 6), RangeKind.BLOCK)

    assert block.contains(Position(2, 3))
    assert not block.contains(Position(2, 7))
    assert block.contains(Range.of((1, 2), (1, 6)))
    assert not block.contains(Range.of((1, 2), (2, 3)))
    assert [part.start.line for part in block.block_parts()] == [0, 1, 2, 3]


def test_intersects_ignores_touching_ranges() -> None:
    left = Range.of((0, 0), (0, 3))

    assert left.intersects(Range.of((0, 2), (0, 4)))
    assert not left.intersects(Range.of((0, 3), (0, 6)))


def test_move_keeps_the_span_shape() -> None:
    moved = Range.of((0, 4), (0, 7)).move((2, 1))

    assert moved == Range.of((2, 1), (2, 4))
