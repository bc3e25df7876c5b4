"""Minimal synchronous event bus for buffer edits and lifecycle notifications."""

from __future__ import annotations

from typing import Callable, Dict

Listener = Callable[[object], None]


class EventBus:
    """Fire-and-observe bus: listeners run in subscription order."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Listener]] = {}

    def subscribe(self, event: str, callback: Listener) -> Callable[[], None]:
        """Register ``callback`` and return a function that removes it."""

        self._subscribers.setdefault(event, []).append(callback)

        def unsubscribe() -> None:
            self.unsubscribe(event, callback)

        return unsubscribe

    def unsubscribe(self, event: str, callback: Listener) -> None:
        listeners = self._subscribers.get(event)
        if not listeners:
            return
        try:
            listeners.remove(callback)
        except ValueError:
            return
        if not listeners:
            self._subscribers.pop(event, None)

    def emit(self, event: str, payload: object | None = None) -> None:
        # Copy so listeners may unsubscribe while being notified.
        for callback in list(self._subscribers.get(event, ())):
            callback(payload)

    def listener_count(self, event: str) -> int:
        return len(self._subscribers.get(event, ()))


__all__ = ["EventBus", "Listener"]
