"""Built-in operators and the loader that seeds a registry with them."""

from __future__ import annotations

import codecs
import re
from typing import Iterable, List, Optional, Sequence

from .models import OperatorContext, OperatorCurrent, OperatorRef, Replacement
from .registry import OperatorRegistry

CHANGE_PROMPT = "Change to: "

_LEADING = re.compile(r"^[ \t]*")


def change(current: OperatorCurrent, context: OperatorContext) -> Replacement:
    del current
    return context.input or ""


def delete(current: OperatorCurrent, context: OperatorContext) -> Replacement:
    del current, context
    return ""


def yank(current: OperatorCurrent, context: OperatorContext) -> Replacement:
    del current, context
    return True


def put(current: OperatorCurrent, context: OperatorContext) -> Replacement:
    del current
    if not context.register:
        return None
    return list(context.register.lines)


def distribute(current: OperatorCurrent, context: OperatorContext) -> Replacement:
    lines = context.register.lines
    if not lines:
        return None
    return lines[current.index % len(lines)]


def uppercase(current: OperatorCurrent, context: OperatorContext) -> Replacement:
    del context
    return [line.upper() for line in current.text]


def lowercase(current: OperatorCurrent, context: OperatorContext) -> Replacement:
    del context
    return [line.lower() for line in current.text]


def swap_case(current: OperatorCurrent, context: OperatorContext) -> Replacement:
    del context
    return [line.swapcase() for line in current.text]


def rot13(current: OperatorCurrent, context: OperatorContext) -> Replacement:
    del context
    return [codecs.encode(line, "rot13") for line in current.text]


def indent_right(current: OperatorCurrent, context: OperatorContext) -> Replacement:
    unit = context.config.indent_unit
    return [unit + line if line.strip() else line for line in current.text]


def indent_left(current: OperatorCurrent, context: OperatorContext) -> Replacement:
    width = context.config.shiftwidth
    return [_set_indent(line, max(_indent_width(line, width) - width, 0), context) for line in current.text]


def indent_format(current: OperatorCurrent, context: OperatorContext) -> Replacement:
    """Round each line's indent down to a whole number of shiftwidths."""

    width = context.config.shiftwidth
    return [
        _set_indent(line, (_indent_width(line, width) // width) * width, context)
        for line in current.text
    ]


def _indent_width(line: str, tabstop: int) -> int:
    column = 0
    for char in _LEADING.match(line).group(0):  # type: ignore[union-attr]
        column = (column // tabstop + 1) * tabstop if char == "\t" else column + 1
    return column


def _set_indent(line: str, columns: int, context: OperatorContext) -> str:
    body = line.lstrip(" \t")
    if not body:
        return line
    if context.config.expand_tab:
        return " " * columns + body
    tabs, spaces = divmod(columns, context.config.shiftwidth)
    return "\t" * tabs + " " * spaces + body


DEFAULT_OPERATORS: tuple[OperatorRef, ...] = (
    OperatorRef(
        id="change",
        handler=change,
        description="Replace each occurrence with prompted text",
        yanks=True,
        prompt=CHANGE_PROMPT,
    ),
    OperatorRef(id="delete", handler=delete, description="Delete each occurrence", yanks=True),
    OperatorRef(id="yank", handler=yank, description="Yank each occurrence", yanks=True),
    OperatorRef(
        id="put",
        handler=put,
        description="Replace each occurrence with the register contents",
        reads_register=True,
    ),
    OperatorRef(
        id="distribute",
        handler=distribute,
        description="Replace occurrences with successive register lines",
        reads_register=True,
    ),
    OperatorRef(
        id="indent_left", handler=indent_left, description="Shift lines left", linewise=True
    ),
    OperatorRef(
        id="indent_right", handler=indent_right, description="Shift lines right", linewise=True
    ),
    OperatorRef(
        id="indent_format",
        handler=indent_format,
        description="Normalize line indentation",
        linewise=True,
    ),
    OperatorRef(id="uppercase", handler=uppercase, description="Make uppercase"),
    OperatorRef(id="lowercase", handler=lowercase, description="Make lowercase"),
    OperatorRef(id="swap_case", handler=swap_case, description="Swap case"),
    OperatorRef(id="rot13", handler=rot13, description="ROT13 encode"),
)


def load_default_operators(
    registry: OperatorRegistry,
    *,
    include: Optional[Iterable[str]] = None,
    exclude: Optional[Iterable[str]] = None,
    replace: bool = False,
) -> OperatorRegistry:
    """Register the built-in operators and the configured aliases."""

    include_set = set(include) if include is not None else None
    exclude_set = set(exclude or ())
    for operator in _filter(DEFAULT_OPERATORS, include_set, exclude_set):
        registry.register(operator, replace=replace)

    for key, target in registry.config.operators.items():
        if target is not False and target not in registry:
            continue
        registry.alias(key, target)
    return registry


def _filter(
    operators: Sequence[OperatorRef], include: Optional[set[str]], exclude: set[str]
) -> List[OperatorRef]:
    return [
        operator
        for operator in operators
        if (include is None or operator.id in include) and operator.id not in exclude
    ]


__all__ = [
    "CHANGE_PROMPT",
    "DEFAULT_OPERATORS",
    "change",
    "delete",
    "distribute",
    "indent_format",
    "indent_left",
    "indent_right",
    "load_default_operators",
    "lowercase",
    "put",
    "rot13",
    "swap_case",
    "uppercase",
    "yank",
]
