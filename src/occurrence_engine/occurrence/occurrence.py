"""Per-buffer facade composing patterns, matches, marks, and operators."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Optional, Tuple, Union

from occurrence_engine.buffer import DESTROY_EVENT, Buffer
from occurrence_engine.config import OccurrenceConfig
from occurrence_engine.errors import DisposedError
from occurrence_engine.marks import Mark, MarkStore
from occurrence_engine.operators import (
    OperatorApplier,
    OperatorRegistry,
    OperatorResult,
    OperatorScope,
    load_default_operators,
)
from occurrence_engine.operators.applier import InputProvider
from occurrence_engine.runtime import EventBus, telemetry
from occurrence_engine.text.location import Position, PositionLike, Range
from occurrence_engine.text.matcher import Match, Matcher, MatchStream
from occurrence_engine.text.patterns import PatternId, PatternKind, PatternSet

from .navigator import Direction, Navigator

if TYPE_CHECKING:
    from .registry import OccurrenceRegistry

CREATE_EVENT = "occurrence.create"
UPDATE_EVENT = "occurrence.update"
ACTIVATE_EVENT = "occurrence.activate"
DISPOSE_EVENT = "occurrence.dispose"

Target = Union[Range, Match]


class OccurrenceState(str, Enum):
    EMPTY = "empty"
    HAS_MATCHES = "has_matches"
    ACTIVE = "active"
    DISPOSED = "disposed"


@dataclass(frozen=True, slots=True)
class OccurrenceStatus:
    current: int
    total: int
    exact_match: int
    marked_only: bool


class Occurrence:
    """Patterns, matches, and marks for one buffer.

    Lifecycle notifications go out on ``bus`` with a ``{"buffer": id}``
    payload: create, update (pattern or mark set changed), activate (first
    marking or navigation), and dispose (exactly once).
    """

    def __init__(
        self,
        buffer: Buffer,
        *,
        config: Optional[OccurrenceConfig] = None,
        operators: Optional[OperatorRegistry] = None,
        bus: Optional[EventBus] = None,
        input_provider: Optional[InputProvider] = None,
        logger_name: str | None = None,
    ) -> None:
        buffer.require_valid()
        self.buffer = buffer
        self.config = config or OccurrenceConfig()
        self.bus = bus or EventBus()
        self.patterns = PatternSet(ignore_case=self.config.ignore_case)
        self.matcher = Matcher(buffer, self.patterns, tie_break=self.config.tie_break)
        self.marks = MarkStore(buffer, logger_name=logger_name)
        self.navigator = Navigator(distance=self._distance)
        self.operators = operators or load_default_operators(
            OperatorRegistry(config=self.config, logger_name=logger_name)
        )
        self.applier = OperatorApplier(
            buffer,
            self.marks,
            self.matcher,
            registry=self.operators,
            config=self.config,
            input_provider=input_provider,
            on_applied=self._on_applied,
            logger_name=logger_name,
        )
        self.cursor_cache: Optional[Position] = None
        self._logger_name = logger_name
        self._activated = False
        self._disposed = False
        self._match_ranges: Optional[Tuple[Tuple[int, int], Tuple[Range, ...]]] = None
        self._mark_ranges: Optional[Tuple[int, Tuple[Range, ...]]] = None
        self._unsubscribe = buffer.events.subscribe(DESTROY_EVENT, self._on_buffer_destroyed)
        self._notify(CREATE_EVENT)

    # -- registry shortcuts ----------------------------------------------------

    @classmethod
    def get(cls, buffer: Union[Buffer, int], create: bool = False) -> Optional["Occurrence"]:
        return _registry().get(buffer, create=create)

    @classmethod
    def delete(cls, buffer: Union[Buffer, int]) -> bool:
        return _registry().delete(buffer)

    # -- state -----------------------------------------------------------------

    def __repr__(self) -> str:
        return f"Occurrence(buffer={self.buffer.id}, state={self.state.value})"

    @property
    def state(self) -> OccurrenceState:
        if self._disposed:
            return OccurrenceState.DISPOSED
        if self._activated:
            return OccurrenceState.ACTIVE
        if self.patterns and self.buffer.is_valid and self.matcher.has_match():
            return OccurrenceState.HAS_MATCHES
        return OccurrenceState.EMPTY

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    # -- patterns and matches --------------------------------------------------

    def add_pattern(self, raw: str, kind: PatternKind | str = PatternKind.LITERAL) -> PatternId:
        self._require_live()
        pattern_id = self.patterns.add(raw, kind)
        telemetry.record_event(
            "occurrence.pattern",
            level="debug",
            data={"buffer": self.buffer.id, "pattern": pattern_id, "kind": PatternKind(kind).value},
            logger_name=self._logger_name,
        )
        self._notify(UPDATE_EVENT)
        return pattern_id

    def matches(
        self, range: Optional[Range] = None, *, pattern: Optional[PatternId] = None
    ) -> MatchStream:
        self._require_live()
        return self.matcher.stream(range, pattern=pattern)

    def has_matches(self, range: Optional[Range] = None) -> bool:
        self._require_live()
        return self.matcher.has_match(range)

    # -- marks -----------------------------------------------------------------

    def mark(self, target: Optional[Target] = None) -> bool:
        """Mark a match, or every match inside a range; ``None`` marks all.

        Returns whether any new mark was added.
        """

        self._require_live()
        if isinstance(target, Match):
            candidates: Iterator[Match] = iter((target,))
        else:
            candidates = iter(self.matcher.stream(target))
        added = 0
        for match in candidates:
            if not self.marks.contains(match.range):
                self.marks.mark(match)
                added += 1
        if added:
            self._activate()
            self._notify(UPDATE_EVENT, marked=added)
        return bool(added)

    def unmark(self, target: Optional[Target] = None) -> bool:
        """Remove the exact mark at ``target``, else every mark inside it.

        With no target every mark is cleared.
        """

        self._require_live()
        if target is None:
            removed = self.marks.clear()
        else:
            scope = target.range if isinstance(target, Match) else target
            removed = 1 if self.marks.unmark_at(scope) else self.marks.unmark_within(scope)
        if removed:
            self._notify(UPDATE_EVENT, unmarked=removed)
        return bool(removed)

    def is_marked(self, target: Target) -> bool:
        self._require_live()
        scope = target.range if isinstance(target, Match) else target
        return self.marks.contains(scope)

    def marked(self, range: Optional[Range] = None) -> Iterator[Mark]:
        self._require_live()
        return self.marks.iter(range)

    # -- navigation ------------------------------------------------------------

    def match_cursor(
        self,
        direction: Optional[Direction | str] = None,
        *,
        wrap: bool = False,
        marked: bool = False,
        cursor: Optional[PositionLike] = None,
    ) -> Optional[Range]:
        """Move the cursor to the next/previous (or nearest) occurrence.

        Without a direction the nearest occurrence wins, preferring one that
        contains the cursor. Returns the range moved to, or ``None``.
        """

        self._require_live()
        origin = self._cursor(cursor)
        found = self.navigator.next(
            self._entries(marked), origin, direction=direction, wrap=wrap
        )
        if found is None:
            return None
        self.cursor_cache = self.buffer.set_cursor(found.start)
        self._activate()
        return found

    def status(
        self, *, marked: bool = False, position: Optional[PositionLike] = None
    ) -> OccurrenceStatus:
        self._require_live()
        location = self.navigator.locate(self._entries(marked), self._cursor(position))
        if not location.total:
            return OccurrenceStatus(current=0, total=0, exact_match=0, marked_only=marked)
        return OccurrenceStatus(
            current=min(location.index + 1, location.total),
            total=location.total,
            exact_match=1 if location.exact else 0,
            marked_only=marked,
        )

    # -- operators -------------------------------------------------------------

    def apply_operator(
        self,
        name: str,
        range: Optional[Range] = None,
        *,
        marked: bool = True,
        register: Optional[str] = None,
        count: Optional[int] = None,
        inner: bool = True,
        input: Optional[str] = None,
    ) -> OperatorResult:
        self._require_live()
        return self.applier.apply(
            name,
            OperatorScope(range=range, marked=marked),
            register=register,
            count=count,
            inner=inner,
            input=input,
        )

    def repeat_operator(self, range: Optional[Range] = None, *, marked: bool = True) -> OperatorResult:
        self._require_live()
        scope = OperatorScope(range=range, marked=marked) if range is not None else None
        return self.applier.repeat(scope)

    # -- teardown --------------------------------------------------------------

    def dispose(self) -> None:
        if self._disposed:
            return
        with telemetry.span(
            "occurrence::dispose",
            logger_name=self._logger_name,
            component="occurrence",
            metadata={"buffer": self.buffer.id},
        ) as handle:
            self._disposed = True
            handle.add_metadata("marks", len(self.marks))
            self._unsubscribe()
            handle.add_metadata("cancelled", self.applier.cancel_pending("disposed"))
            self.marks.dispose()
            self.matcher.invalidate()
            self.cursor_cache = None
        self._notify(DISPOSE_EVENT)

    # -- internals -------------------------------------------------------------

    def _require_live(self) -> None:
        if not self._disposed and not self.buffer.is_valid:
            self.dispose()
        if self._disposed:
            raise DisposedError(self.buffer.id)

    def _cursor(self, position: Optional[PositionLike]) -> Position:
        if position is None:
            return self.buffer.state.cursor
        return self.buffer.clamp(Position.of(position))

    def _entries(self, marked: bool) -> Tuple[Range, ...]:
        # Stable tuples let the navigator reuse its bisect index between calls.
        if marked:
            revision = self.marks.revision
            if self._mark_ranges is None or self._mark_ranges[0] != revision:
                self._mark_ranges = (revision, tuple(self.marks.ranges()))
            return self._mark_ranges[1]
        generation = self.matcher.generation
        if self._match_ranges is None or self._match_ranges[0] != generation:
            ranges = tuple(match.range for match in self.matcher.all())
            self._match_ranges = (generation, ranges)
        return self._match_ranges[1]

    def _distance(self, a: Position, b: Position) -> int:
        return abs(self.buffer.offset_of(a) - self.buffer.offset_of(b))

    def _activate(self) -> None:
        if not self._activated:
            self._activated = True
            self._notify(ACTIVATE_EVENT)

    def _on_applied(self, result: OperatorResult) -> None:
        self._notify(UPDATE_EVENT, operator=result.operator)
        if self.config.auto_dispose and not self.marks:
            self.dispose()

    def _on_buffer_destroyed(self, payload: object) -> None:
        del payload
        self.dispose()

    def _notify(self, event: str, **extra: object) -> None:
        payload = {"buffer": self.buffer.id}
        telemetry.record_event(
            event,
            level="debug" if event == UPDATE_EVENT else "info",
            data={**payload, **extra},
            logger_name=self._logger_name,
        )
        self.bus.emit(event, payload)


def _registry() -> "OccurrenceRegistry":
    from .registry import REGISTRY

    return REGISTRY


__all__ = [
    "ACTIVATE_EVENT",
    "CREATE_EVENT",
    "DISPOSE_EVENT",
    "Occurrence",
    "OccurrenceState",
    "OccurrenceStatus",
    "UPDATE_EVENT",
]
