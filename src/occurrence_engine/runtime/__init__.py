"""Runtime services: telemetry and the event bus."""

from . import telemetry
from .events import EventBus

__all__ = ["EventBus", "telemetry"]
