"""Positions, ranges, pattern compilation, and match computation."""

from .location import Position, Range, RangeKind
from .matcher import Match, Matcher, MatchStream, find_all, has_match
from .patterns import Pattern, PatternId, PatternKind, PatternSet, SearchPredicate

__all__ = [
    "Match",
    "MatchStream",
    "Matcher",
    "Pattern",
    "PatternId",
    "PatternKind",
    "PatternSet",
    "Position",
    "Range",
    "RangeKind",
    "SearchPredicate",
    "find_all",
    "has_match",
]
