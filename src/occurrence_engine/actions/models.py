"""Result and metadata types shared by the preset actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable, Mapping, Optional

if TYPE_CHECKING:
    from occurrence_engine.occurrence import Occurrence
    from occurrence_engine.operators import OperatorResult

PRESET = "preset"
OPERATOR_MODIFIER = "operator-modifier"


@dataclass(slots=True)
class ActionResult:
    """Result returned from a preset action."""

    consumed: bool
    status: str = "ok"
    message: Optional[str] = None
    operator: Optional["OperatorResult"] = None


@dataclass(frozen=True, slots=True)
class Preset:
    """Named action exposed to the key-binding layer."""

    id: str
    handler: Callable[..., ActionResult]
    description: str = ""
    type: str = PRESET
    metadata: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Preset id cannot be empty")
        if not callable(self.handler):
            raise TypeError("handler must be callable")
        if self.type not in (PRESET, OPERATOR_MODIFIER):
            raise ValueError(f"Unknown preset type '{self.type}'")
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def __call__(self, occurrence: "Occurrence", *args: object, **kwargs: object) -> ActionResult:
        return self.handler(occurrence, *args, **kwargs)


def done(message: Optional[str] = None) -> ActionResult:
    return ActionResult(consumed=True, message=message)


def noop(message: Optional[str] = None) -> ActionResult:
    return ActionResult(consumed=False, status="noop", message=message)


__all__ = ["ActionResult", "OPERATOR_MODIFIER", "PRESET", "Preset", "done", "noop"]
