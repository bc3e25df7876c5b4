"""Operator registry: name → transform, validated when entries are added."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional

from occurrence_engine.config import OccurrenceConfig, OperatorEntry
from occurrence_engine.errors import UnknownOperatorError
from occurrence_engine.runtime.telemetry import span

from .models import OperatorRef


@dataclass(slots=True)
class RegistryStats:
    operator_count: int
    alias_count: int
    names: tuple[str, ...]


class OperatorRegistry:
    """Owns operator references and the key aliases that reach them."""

    def __init__(
        self,
        *,
        config: Optional[OccurrenceConfig] = None,
        logger_name: str | None = None,
    ) -> None:
        self.config = config or OccurrenceConfig()
        self._operators: Dict[str, OperatorRef] = {}
        self._aliases: Dict[str, OperatorEntry] = {}
        self._logger_name = logger_name

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve_name(name) in self._operators

    def __iter__(self) -> Iterator[OperatorRef]:
        return iter(tuple(self._operators.values()))

    def __len__(self) -> int:
        return len(self._operators)

    def register(self, operator: OperatorRef, *, replace: bool = False) -> OperatorRef:
        with span(
            "operators::register",
            logger_name=self._logger_name,
            component="operators",
            metadata={"operator": operator.id},
        ):
            if not replace and operator.id in self._operators:
                raise ValueError(f"Operator '{operator.id}' already registered")
            if operator.id in self._aliases:
                raise ValueError(f"Operator '{operator.id}' shadows an alias")
            self._operators[operator.id] = operator
            return operator

    def unregister(self, name: str) -> Optional[OperatorRef]:
        return self._operators.pop(name, None)

    def alias(self, key: str, target: OperatorEntry) -> None:
        """Bind ``key`` to an operator name, or disable it with ``False``."""

        with span(
            "operators::alias",
            logger_name=self._logger_name,
            component="operators",
            metadata={"alias": key},
        ) as handle:
            if not key:
                raise ValueError("alias cannot be empty")
            if target is not False:
                if not isinstance(target, str) or target not in self._operators:
                    handle.add_metadata("missing_operator", str(target))
                    raise KeyError(f"Alias '{key}' references unknown operator '{target}'")
            self._aliases[key] = target

    def load_aliases(self, aliases: Mapping[str, OperatorEntry]) -> None:
        for key, target in aliases.items():
            self.alias(key, target)

    def resolve_name(self, key: str) -> Optional[str]:
        target = self._aliases.get(key)
        if target is None:
            return self.config.operator_name(key)
        if target is False:
            return None
        return str(target)

    def get(self, key: str) -> OperatorRef:
        name = self.resolve_name(key)
        if name is None:
            raise UnknownOperatorError(key)
        try:
            return self._operators[name]
        except KeyError as exc:
            raise UnknownOperatorError(key) from exc

    def stats(self) -> RegistryStats:
        return RegistryStats(
            operator_count=len(self._operators),
            alias_count=len(self._aliases),
            names=tuple(sorted(self._operators)),
        )


__all__ = ["OperatorRegistry", "RegistryStats"]
