"""Suspend-point token used by interactive operator hooks."""

from __future__ import annotations

from enum import Enum
from typing import Callable, List, Optional


class PendingState(str, Enum):
    PENDING = "pending"
    COMMIT = "commit"
    CANCEL = "cancel"


class Pending:
    """Result of a hook that cannot answer synchronously.

    The owner resolves the token exactly once with :meth:`commit` or
    :meth:`cancel`; callbacks registered with :meth:`add_done_callback`
    run at that moment (or immediately if the token is already resolved).
    """

    def __init__(self) -> None:
        self.state = PendingState.PENDING
        self.value: object = None
        self.reason: Optional[str] = None
        self._callbacks: List[Callable[["Pending"], None]] = []

    def __repr__(self) -> str:
        return f"Pending(state={self.state.value!r}, value={self.value!r})"

    @classmethod
    def committed(cls, value: object = None) -> "Pending":
        token = cls()
        token.commit(value)
        return token

    @classmethod
    def cancelled(cls, reason: Optional[str] = None) -> "Pending":
        token = cls()
        token.cancel(reason)
        return token

    @property
    def done(self) -> bool:
        return self.state is not PendingState.PENDING

    @property
    def is_cancelled(self) -> bool:
        return self.state is PendingState.CANCEL

    def commit(self, value: object = None) -> None:
        self._resolve(PendingState.COMMIT, value=value)

    def cancel(self, reason: Optional[str] = None) -> None:
        self._resolve(PendingState.CANCEL, reason=reason)

    def add_done_callback(self, callback: Callable[["Pending"], None]) -> None:
        if self.done:
            callback(self)
            return
        self._callbacks.append(callback)

    def _resolve(
        self, state: PendingState, *, value: object = None, reason: Optional[str] = None
    ) -> None:
        if self.done:
            raise RuntimeError(f"Pending token already resolved ({self.state.value})")
        self.state = state
        self.value = value
        self.reason = reason
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self)


__all__ = ["Pending", "PendingState"]
