import pytest

from occurrence_engine.errors import EmptyPatternError, InvalidPatternError
from occurrence_engine.text import PatternKind, PatternSet


def starts(patterns: PatternSet, text: str, **kwargs: str) -> list[tuple[int, int, int]]:
    return list(patterns.combined(**kwargs).scan(text))


def test_empty_pattern_is_rejected() -> None:
    patterns = PatternSet()

    with pytest.raises(EmptyPatternError):
        patterns.add("")
    with pytest.raises(EmptyPatternError):
        patterns.add("   ", PatternKind.WORD)
    assert len(patterns) == 0


def test_invalid_regex_is_reported() -> None:
    with pytest.raises(InvalidPatternError):
        PatternSet().add("(", PatternKind.REGEX)


def test_ids_follow_insertion_order() -> None:
    patterns = PatternSet()

    assert patterns.add("foo") == 0
    assert patterns.add("bar", "word") == 1
    assert [pattern.raw for pattern in patterns] == ["foo", "bar"]
    assert patterns.revision == 2


def test_literal_escapes_metacharacters() -> None:
    patterns = PatternSet()
    patterns.add("a.b")

    assert starts(patterns, "axb a.b") == [(4, 7, 0)]


def test_word_requires_boundaries() -> None:
    patterns = PatternSet()
    patterns.add("foo", PatternKind.WORD)

    found = starts(patterns, "foo food foo_bar xfoo foo")

    assert [begin for begin, _, _ in found] == [0, 22]


def test_same_start_prefers_first_inserted_pattern() -> None:
    patterns = PatternSet()
    patterns.add("foo")
    patterns.add("foobar")

    assert starts(patterns, "foobar") == [(0, 3, 0)]


def test_longest_tie_break_is_configurable() -> None:
    patterns = PatternSet()
    patterns.add("foo")
    patterns.add("foobar")

    assert starts(patterns, "foobar", tie_break="longest") == [(0, 6, 1)]


def test_scan_never_overlaps() -> None:
    patterns = PatternSet()
    patterns.add("aa")

    assert starts(patterns, "aaaaa") == [(0, 2, 0), (2, 4, 0)]


def test_zero_width_matches_are_skipped() -> None:
    patterns = PatternSet()
    patterns.add("x*", PatternKind.REGEX)

    assert starts(patterns, "axxb") == [(1, 3, 0)]


def test_ignore_case() -> None:
    patterns = PatternSet(ignore_case=True)
    patterns.add("foo")

    assert [begin for begin, _, _ in starts(patterns, "FOO foo Foo")] == [0, 4, 8]


def test_combined_regex_is_an_alternation() -> None:
    patterns = PatternSet()
    patterns.add("a+", PatternKind.REGEX)
    patterns.add("b", PatternKind.LITERAL)

    assert patterns.combined().regex == "(?:a+)|(?:b)"
