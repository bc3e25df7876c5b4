"""Dataclasses describing operators and a single operator run."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence, Tuple, Union

from occurrence_engine.buffer import Buffer, RegisterValue
from occurrence_engine.config import OccurrenceConfig
from occurrence_engine.text.location import Position, Range

from .pending import Pending

Replacement = Union[Sequence[str], str, bool, None]
OperatorFn = Callable[["OperatorCurrent", "OperatorContext"], Replacement]

STATUS_APPLIED = "applied"
STATUS_PENDING = "pending"
STATUS_CANCELLED = "cancelled"
STATUS_NOOP = "noop"


@dataclass(frozen=True, slots=True)
class OperatorRef:
    """Registered operator: a transform plus the metadata the applier needs.

    ``handler(current, context)`` returns the replacement text (a string or
    a sequence of lines), ``True`` when the occurrence was handled without
    an edit, or ``None``/``False`` to leave that occurrence alone.
    """

    id: str
    handler: OperatorFn
    description: str = ""
    yanks: bool = False
    reads_register: bool = False
    linewise: bool = False
    prompt: str | None = None
    metadata: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("OperatorRef id cannot be empty")
        if not callable(self.handler):
            raise TypeError("handler must be callable")
        if self.prompt is not None and not self.prompt:
            raise ValueError("prompt cannot be empty; use None for no prompt")
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def __call__(self, current: "OperatorCurrent", context: "OperatorContext") -> Replacement:
        return self.handler(current, context)


@dataclass(frozen=True, slots=True)
class OperatorCurrent:
    """The occurrence being transformed, with its pre-edit text."""

    index: int
    mark_id: Optional[int]
    range: Range
    text: Tuple[str, ...]


@dataclass(slots=True)
class OperatorContext:
    buffer: Buffer
    config: OccurrenceConfig
    operator: str
    register_name: str
    register: RegisterValue
    input: Optional[str] = None
    count: Optional[int] = None
    total: int = 0
    metadata: dict[str, object] = field(default_factory=dict)


@dataclass(slots=True)
class OperatorResult:
    status: str
    operator: str
    edited: int = 0
    handled: int = 0
    cursor: Optional[Position] = None
    message: Optional[str] = None
    completion: Optional[Pending] = None

    @property
    def applied(self) -> bool:
        return self.status == STATUS_APPLIED


__all__ = [
    "OperatorContext",
    "OperatorCurrent",
    "OperatorFn",
    "OperatorRef",
    "OperatorResult",
    "Replacement",
    "STATUS_APPLIED",
    "STATUS_CANCELLED",
    "STATUS_NOOP",
    "STATUS_PENDING",
]
