"""Process-wide BufferId → Occurrence cache."""

from __future__ import annotations

from typing import Callable, Dict, Iterator, Optional, Union

from occurrence_engine.buffer import Buffer
from occurrence_engine.config import OccurrenceConfig
from occurrence_engine.errors import NoActiveOccurrenceError
from occurrence_engine.runtime import EventBus
from occurrence_engine.text.location import PositionLike

from .occurrence import DISPOSE_EVENT, Occurrence, OccurrenceStatus

BufferRef = Union[Buffer, int]
OccurrenceFactory = Callable[[Buffer, EventBus], Occurrence]


class OccurrenceRegistry:
    """At most one live Occurrence per buffer.

    ``get(..., create=True)`` builds one lazily; ``delete`` disposes it. A
    disposed Occurrence (explicitly, through an operator, or because its
    buffer was destroyed) drops out of the cache on its own dispose
    notification, so the next ``get(..., create=True)`` starts fresh.
    """

    def __init__(
        self,
        *,
        config: Optional[OccurrenceConfig] = None,
        factory: Optional[OccurrenceFactory] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.config = config
        self.bus = bus or EventBus()
        self._factory = factory
        self._occurrences: Dict[int, Occurrence] = {}
        self.bus.subscribe(DISPOSE_EVENT, self._on_dispose)

    def __len__(self) -> int:
        return len(self._occurrences)

    def __contains__(self, buffer: object) -> bool:
        if isinstance(buffer, (Buffer, int)):
            return _buffer_id(buffer) in self._occurrences
        return False

    def __iter__(self) -> Iterator[Occurrence]:
        return iter(tuple(self._occurrences.values()))

    def get(self, buffer: BufferRef, *, create: bool = False) -> Optional[Occurrence]:
        buffer_id = _buffer_id(buffer)
        occurrence = self._occurrences.get(buffer_id)
        if occurrence is not None and not occurrence.is_disposed:
            return occurrence
        if not create:
            return None
        if not isinstance(buffer, Buffer):
            raise TypeError("creating an Occurrence requires a Buffer, not an id")
        if not buffer.is_valid:
            return None
        occurrence = self._create(buffer)
        self._occurrences[buffer_id] = occurrence
        return occurrence

    def require(self, buffer: BufferRef) -> Occurrence:
        """Like ``get`` but raise :class:`NoActiveOccurrenceError` when absent."""

        occurrence = self.get(buffer)
        if occurrence is None:
            raise NoActiveOccurrenceError(_buffer_id(buffer))
        return occurrence

    def delete(self, buffer: BufferRef) -> bool:
        occurrence = self._occurrences.pop(_buffer_id(buffer), None)
        if occurrence is None:
            return False
        occurrence.dispose()
        return True

    def status(
        self,
        buffer: BufferRef,
        *,
        marked: bool = False,
        position: Optional[PositionLike] = None,
    ) -> Optional[OccurrenceStatus]:
        """Status for ``buffer``; ``None`` when there is nothing to report."""

        occurrence = self.get(buffer)
        if occurrence is None or not occurrence.buffer.is_valid:
            return None
        if not occurrence.patterns or not occurrence.has_matches():
            return None
        return occurrence.status(marked=marked, position=position)

    def clear(self) -> None:
        for occurrence in list(self._occurrences.values()):
            occurrence.dispose()
        self._occurrences.clear()

    def _create(self, buffer: Buffer) -> Occurrence:
        if self._factory is not None:
            return self._factory(buffer, self.bus)
        return Occurrence(buffer, config=self.config, bus=self.bus)

    def _on_dispose(self, payload: object) -> None:
        if not isinstance(payload, dict):
            return
        buffer_id = payload.get("buffer")
        occurrence = self._occurrences.get(buffer_id)  # type: ignore[arg-type]
        if occurrence is not None and occurrence.is_disposed:
            del self._occurrences[buffer_id]  # type: ignore[arg-type]


def _buffer_id(buffer: BufferRef) -> int:
    return buffer.id if isinstance(buffer, Buffer) else int(buffer)


REGISTRY = OccurrenceRegistry()


def status(
    buffer: BufferRef, *, marked: bool = False, position: Optional[PositionLike] = None
) -> Optional[OccurrenceStatus]:
    return REGISTRY.status(buffer, marked=marked, position=position)


__all__ = ["BufferRef", "OccurrenceRegistry", "REGISTRY", "status"]
