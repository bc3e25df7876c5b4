"""Register storage used by yank/delete/put style operators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Tuple

UNNAMED = '"'
SEARCH = "/"


@dataclass(frozen=True, slots=True)
class RegisterValue:
    lines: Tuple[str, ...] = ()
    type: str = "character"  # character, line, or block

    @classmethod
    def from_text(cls, text: str, *, type: str = "character") -> "RegisterValue":
        return cls(lines=tuple(text.split("\n")) if text else (), type=type)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def __bool__(self) -> bool:
        return bool(self.lines)


class RegisterBank:
    """Tracks the unnamed, named, and search registers."""

    def __init__(self) -> None:
        self._registers: Dict[str, RegisterValue] = {UNNAMED: RegisterValue()}

    def get(self, name: str) -> RegisterValue:
        return self._registers.get(name, RegisterValue())

    def set(self, name: str, value: RegisterValue) -> None:
        self._registers[name] = value
        if name not in (UNNAMED, SEARCH):
            self._registers[UNNAMED] = value

    def yank_to(
        self, name: str, lines: Iterable[str], *, register_type: str = "character"
    ) -> RegisterValue:
        value = RegisterValue(lines=tuple(lines), type=register_type)
        self.set(name, value)
        return value

    def set_search(self, pattern: str) -> None:
        self.set(SEARCH, RegisterValue.from_text(pattern))

    def last_search(self) -> str:
        return self.get(SEARCH).text
