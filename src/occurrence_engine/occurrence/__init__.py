"""Occurrence facade, navigation, and the per-buffer registry."""

from .navigator import CursorLocation, Direction, Navigator
from .occurrence import (
    ACTIVATE_EVENT,
    CREATE_EVENT,
    DISPOSE_EVENT,
    UPDATE_EVENT,
    Occurrence,
    OccurrenceState,
    OccurrenceStatus,
)
from .registry import REGISTRY, OccurrenceRegistry, status

__all__ = [
    "ACTIVATE_EVENT",
    "CREATE_EVENT",
    "CursorLocation",
    "DISPOSE_EVENT",
    "Direction",
    "Navigator",
    "Occurrence",
    "OccurrenceRegistry",
    "OccurrenceState",
    "OccurrenceStatus",
    "REGISTRY",
    "UPDATE_EVENT",
    "status",
]
