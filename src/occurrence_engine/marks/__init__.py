"""Persistent, edit-resilient marks over buffer matches."""

from .store import Mark, MarkId, MarkStore, shift_position, transform_range

__all__ = ["Mark", "MarkId", "MarkStore", "shift_position", "transform_range"]
