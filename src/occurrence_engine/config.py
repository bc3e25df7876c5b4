"""Engine configuration with ``OCCURRENCE_*`` environment overrides."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional, Union

from occurrence_engine.runtime.telemetry import env, env_flag
from occurrence_engine.text.patterns import TIE_BREAK_INSERTION, TIE_BREAKS

OperatorEntry = Union[str, bool]

DEFAULT_OPERATORS: Mapping[str, OperatorEntry] = MappingProxyType(
    {
        "c": "change",
        "d": "delete",
        "y": "yank",
        "p": "put",
        "gp": "distribute",
        "<": "indent_left",
        ">": "indent_right",
        "=": "indent_format",
        "gu": "lowercase",
        "gU": "uppercase",
        "g~": "swap_case",
        "g?": "rot13",
    }
)


@dataclass(frozen=True, slots=True)
class OccurrenceConfig:
    tie_break: str = TIE_BREAK_INSERTION
    ignore_case: bool = False
    shiftwidth: int = 4
    expand_tab: bool = True
    default_register: str = '"'
    auto_dispose: bool = False
    operators: Mapping[str, OperatorEntry] = field(default_factory=lambda: DEFAULT_OPERATORS)

    def __post_init__(self) -> None:
        object.__setattr__(self, "operators", MappingProxyType(dict(self.operators)))
        self.validate()

    def validate(self) -> None:
        if self.tie_break not in TIE_BREAKS:
            raise ValueError(
                f"tie_break must be one of {TIE_BREAKS}, got '{self.tie_break}'"
            )
        if self.shiftwidth <= 0:
            raise ValueError("shiftwidth must be positive")
        if not self.default_register:
            raise ValueError("default_register cannot be empty")
        for alias, target in self.operators.items():
            if not alias:
                raise ValueError("operator alias cannot be empty")
            if target is True or not isinstance(target, (str, bool)):
                raise ValueError(
                    f"operator alias '{alias}' must map to a name or False"
                )

    @property
    def indent_unit(self) -> str:
        return " " * self.shiftwidth if self.expand_tab else "\t"

    def operator_name(self, key: str) -> Optional[str]:
        """Resolve an alias (``"d"``) or a name (``"delete"``); ``None`` if disabled."""

        target = self.operators.get(key, key)
        if target is False:
            return None
        return str(target)

    def with_overrides(self, **changes: object) -> "OccurrenceConfig":
        return replace(self, **changes)

    @classmethod
    def from_env(cls, **overrides: object) -> "OccurrenceConfig":
        values: dict[str, object] = {
            "tie_break": env("TIE_BREAK") or TIE_BREAK_INSERTION,
            "ignore_case": env_flag("IGNORE_CASE", False),
            "expand_tab": env_flag("EXPAND_TAB", True),
            "auto_dispose": env_flag("AUTO_DISPOSE", False),
        }
        shiftwidth = env("SHIFTWIDTH")
        if shiftwidth:
            values["shiftwidth"] = int(shiftwidth)
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]


__all__ = ["DEFAULT_OPERATORS", "OccurrenceConfig", "OperatorEntry"]
