"""Operators: named transforms applied across occurrences."""

from .applier import OperatorApplier, OperatorRequest, OperatorScope
from .builtins import DEFAULT_OPERATORS, load_default_operators
from .models import (
    STATUS_APPLIED,
    STATUS_CANCELLED,
    STATUS_NOOP,
    STATUS_PENDING,
    OperatorContext,
    OperatorCurrent,
    OperatorRef,
    OperatorResult,
)
from .pending import Pending, PendingState
from .registry import OperatorRegistry

__all__ = [
    "DEFAULT_OPERATORS",
    "OperatorApplier",
    "OperatorContext",
    "OperatorCurrent",
    "OperatorRef",
    "OperatorRegistry",
    "OperatorRequest",
    "OperatorResult",
    "OperatorScope",
    "Pending",
    "PendingState",
    "STATUS_APPLIED",
    "STATUS_CANCELLED",
    "STATUS_NOOP",
    "STATUS_PENDING",
    "load_default_operators",
]
