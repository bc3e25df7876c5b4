"""Apply a registered operator to every occurrence in a scope.

A run goes through three phases:

1. resolve the targets (marks, or raw matches for an unmarked scope);
2. walk the suspend points (the operator's prompt, then the before-hooks),
   any of which may hand back a :class:`Pending` token and park the run;
3. commit: compute every replacement from the pre-edit text, then apply
   them back-to-front inside a single buffer transaction.

Nothing touches the buffer, the marks, or the registers before phase 3, so
a cancelled run leaves all of them exactly as they were.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from functools import partial
from typing import Callable, Iterator, List, Optional, Sequence, Tuple, Union

from occurrence_engine.buffer import Buffer
from occurrence_engine.config import OccurrenceConfig
from occurrence_engine.errors import OperatorCancelled
from occurrence_engine.marks import MarkStore
from occurrence_engine.runtime import telemetry
from occurrence_engine.text.location import Position, Range
from occurrence_engine.text.matcher import Matcher

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
from .pending import Pending
from .registry import OperatorRegistry

InputProvider = Callable[[str], Union[Pending, str, None]]
BeforeHook = Callable[["OperatorRequest"], object]
AfterHook = Callable[["OperatorRequest", OperatorResult], None]

_BLANKS = " \t"


@dataclass(frozen=True, slots=True)
class OperatorScope:
    """Where an operator applies.

    ``range=None`` covers the whole buffer. With ``marked=False`` every match
    in the range is a target, marked or not.
    """

    range: Optional[Range] = None
    marked: bool = True


@dataclass(frozen=True, slots=True)
class OperatorRequest:
    operator: str
    scope: OperatorScope
    register: str
    count: Optional[int] = None
    inner: bool = True
    input: Optional[str] = None


@dataclass(slots=True)
class _Target:
    range: Range
    mark_ids: Tuple[int, ...] = ()


@dataclass(slots=True, eq=False)
class _Run:
    operator: OperatorRef
    request: OperatorRequest
    completion: Pending = field(default_factory=Pending)
    input: Optional[str] = None


_Stage = Tuple[Callable[[], object], Callable[[_Run, object], bool]]


class OperatorApplier:
    def __init__(
        self,
        buffer: Buffer,
        marks: MarkStore,
        matcher: Matcher,
        *,
        registry: OperatorRegistry,
        config: Optional[OccurrenceConfig] = None,
        input_provider: Optional[InputProvider] = None,
        on_applied: Optional[Callable[[OperatorResult], None]] = None,
        logger_name: str | None = None,
    ) -> None:
        self.buffer = buffer
        self.marks = marks
        self.matcher = matcher
        self.registry = registry
        self.config = config or registry.config
        self.input_provider = input_provider
        self.on_applied = on_applied
        self.before_hooks: List[BeforeHook] = []
        self.after_hooks: List[AfterHook] = []
        self.last_request: Optional[OperatorRequest] = None
        self._logger_name = logger_name
        self._parked: List[_Run] = []

    def add_before_hook(self, hook: BeforeHook) -> None:
        """Run ``hook(request)`` before committing.

        Returning ``False`` (or raising :class:`OperatorCancelled`) cancels the
        run; returning a :class:`Pending` suspends it until the token resolves.
        """

        self.before_hooks.append(hook)

    def add_after_hook(self, hook: AfterHook) -> None:
        self.after_hooks.append(hook)

    @property
    def pending(self) -> int:
        return len(self._parked)

    def cancel_pending(self, reason: str = "disposed") -> int:
        """Cancel every run still waiting on a pending token; returns the count."""

        parked, self._parked = self._parked, []
        for run in parked:
            self._cancelled(run, reason)
        return len(parked)

    def apply(
        self,
        name: str,
        scope: Optional[OperatorScope] = None,
        *,
        register: Optional[str] = None,
        count: Optional[int] = None,
        inner: bool = True,
        input: Optional[str] = None,
    ) -> OperatorResult:
        operator = self.registry.get(name)
        if count is not None and count <= 0:
            raise ValueError("count must be positive")
        request = OperatorRequest(
            operator=operator.id,
            scope=scope or OperatorScope(),
            register=register or self.config.default_register,
            count=count,
            inner=inner,
            input=input,
        )
        return self._start(operator, request)

    def repeat(self, scope: Optional[OperatorScope] = None) -> OperatorResult:
        """Re-run the last committed operator, reusing its captured input."""

        if self.last_request is None:
            return OperatorResult(status=STATUS_NOOP, operator="", message="nothing to repeat")
        request = self.last_request
        if scope is not None:
            request = replace(request, scope=scope)
        return self._start(self.registry.get(request.operator), request)

    # -- phases ----------------------------------------------------------------

    def _start(self, operator: OperatorRef, request: OperatorRequest) -> OperatorResult:
        with telemetry.span(
            "operator::apply",
            logger_name=self._logger_name,
            component="operators",
            metadata={"buffer": self.buffer.id, "operator": operator.id},
        ) as handle:
            self.buffer.require_valid()
            targets = self._resolve(operator, request)
            handle.add_metadata("targets", len(targets))
            run = _Run(operator=operator, request=request, input=request.input)
            if not targets:
                return self._finish(
                    run,
                    OperatorResult(
                        status=STATUS_NOOP,
                        operator=operator.id,
                        message="no occurrences in scope",
                    ),
                )
            result = self._advance(run, self._stages(run))
            handle.add_metadata("status", result.status)
            return result

    def _stages(self, run: _Run) -> Iterator[_Stage]:
        prompt = run.operator.prompt
        if prompt is not None:
            yield (partial(self._ask, run, prompt), _accept_input)
        for hook in list(self.before_hooks):
            yield (partial(hook, run.request), _accept_hook)

    def _advance(self, run: _Run, stages: Iterator[_Stage]) -> OperatorResult:
        for start, accept in stages:
            try:
                token = _as_pending(start())
            except OperatorCancelled as exc:
                return self._cancelled(run, exc.reason)
            if not token.done:
                self._parked.append(run)
                token.add_done_callback(
                    partial(self._resume, run, stages, accept)
                )
                return OperatorResult(
                    status=STATUS_PENDING,
                    operator=run.operator.id,
                    completion=run.completion,
                )
            if token.is_cancelled or not accept(run, token.value):
                return self._cancelled(run, token.reason)
        return self._commit(run)

    def _resume(
        self,
        run: _Run,
        stages: Iterator[_Stage],
        accept: Callable[[_Run, object], bool],
        token: Pending,
    ) -> None:
        if run not in self._parked:
            return
        self._parked.remove(run)
        if token.is_cancelled or not accept(run, token.value):
            self._cancelled(run, token.reason)
            return
        self._advance(run, stages)

    def _ask(self, run: _Run, prompt: str) -> object:
        if run.input is not None:
            return run.input
        if self.input_provider is None:
            return Pending.cancelled("no input provider")
        return self.input_provider(prompt)

    def _commit(self, run: _Run) -> OperatorResult:
        operator, request = run.operator, run.request
        with telemetry.span(
            "operator::commit",
            logger_name=self._logger_name,
            component="operators",
            metadata={"buffer": self.buffer.id, "operator": operator.id},
        ) as handle:
            if not self.buffer.is_valid:
                return self._cancelled(run, "buffer destroyed")
            # Targets are re-read here because a suspended run may resume after edits.
            targets = self._resolve(operator, request)
            register = self.buffer.registers.get(request.register)
            context = OperatorContext(
                buffer=self.buffer,
                config=self.config,
                operator=operator.id,
                register_name=request.register,
                register=register,
                input=run.input,
                count=request.count,
                total=len(targets),
            )

            edits: List[Tuple[_Target, List[str]]] = []
            handled: List[_Target] = []
            captured: List[str] = []
            try:
                for index, target in enumerate(targets):
                    current = OperatorCurrent(
                        index=index,
                        mark_id=target.mark_ids[0] if target.mark_ids else None,
                        range=target.range,
                        text=tuple(self.buffer.get_lines_in(target.range)),
                    )
                    outcome = operator(current, context)
                    if outcome is None or outcome is False:
                        continue
                    if operator.yanks:
                        captured.extend(current.text)
                    if outcome is True:
                        handled.append(target)
                    else:
                        edits.append((target, _lines(outcome, operator.id)))
            except OperatorCancelled as exc:
                return self._cancelled(run, exc.reason)

            if not edits and not handled:
                return self._finish(
                    run,
                    OperatorResult(
                        status=STATUS_NOOP,
                        operator=operator.id,
                        message="operator skipped every occurrence",
                    ),
                )

            if edits:
                with self.buffer.transaction(f"operator::{operator.id}"):
                    for target, lines in reversed(edits):
                        self.buffer.replace_range(
                            target.range.start,
                            target.range.end,
                            lines,
                            label=f"operator::{operator.id}",
                        )
                self.buffer.set_cursor(edits[0][0].range.start)

            for target in handled + [target for target, _ in edits]:
                for mark_id in target.mark_ids:
                    self.marks.unmark(mark_id)

            if operator.yanks:
                self.buffer.registers.yank_to(
                    request.register,
                    captured,
                    register_type="line" if operator.linewise else "character",
                )

            handle.add_metadata("edited", len(edits))
            handle.add_metadata("handled", len(handled))
            self.last_request = replace(request, input=run.input)
            result = OperatorResult(
                status=STATUS_APPLIED,
                operator=operator.id,
                edited=len(edits),
                handled=len(handled),
                cursor=self.buffer.state.cursor,
            )
            return self._finish(run, result)

    def _cancelled(self, run: _Run, reason: Optional[str]) -> OperatorResult:
        telemetry.record_event(
            "operator.cancelled",
            level="debug",
            data={"buffer": self.buffer.id, "operator": run.operator.id, "reason": reason or ""},
            logger_name=self._logger_name,
        )
        result = OperatorResult(
            status=STATUS_CANCELLED,
            operator=run.operator.id,
            message=reason,
            completion=run.completion,
        )
        if not run.completion.done:
            run.completion.cancel(reason)
        return result

    def _finish(self, run: _Run, result: OperatorResult) -> OperatorResult:
        result.completion = run.completion
        if result.status == STATUS_APPLIED:
            for hook in list(self.after_hooks):
                hook(run.request, result)
            if self.on_applied is not None:
                self.on_applied(result)
        if not run.completion.done:
            run.completion.commit(result)
        return result

    # -- targets ---------------------------------------------------------------

    def _resolve(self, operator: OperatorRef, request: OperatorRequest) -> List[_Target]:
        scope = request.scope
        within = self.buffer.clamp_range(scope.range) if scope.range is not None else None
        if scope.marked:
            targets = [_Target(mark.range, (mark.id,)) for mark in self.marks.iter(within)]
        else:
            targets = []
            for match in self.matcher.stream(within):
                mark_id = self.marks.id_at(match.range)
                targets.append(_Target(match.range, (mark_id,) if mark_id is not None else ()))
        if request.count is not None:
            targets = targets[: request.count]
        if operator.linewise:
            return self._whole_lines(targets)
        if not request.inner:
            return self._with_blanks(targets)
        return targets

    def _whole_lines(self, targets: Sequence[_Target]) -> List[_Target]:
        spans: List[Tuple[int, int, Tuple[int, ...]]] = []
        for target in targets:
            first, last = target.range.start.line, target.range.end.line
            if spans and first <= spans[-1][1]:
                prev_first, prev_last, prev_ids = spans[-1]
                spans[-1] = (prev_first, max(prev_last, last), prev_ids + target.mark_ids)
            else:
                spans.append((first, last, target.mark_ids))
        document = self.buffer.document
        return [
            _Target(
                Range(Position(first, 0), Position(last, len(document.get_line(last)))),
                ids,
            )
            for first, last, ids in spans
        ]

    def _with_blanks(self, targets: Sequence[_Target]) -> List[_Target]:
        """Widen each target over trailing blanks, or leading ones at end of line."""

        document = self.buffer.document
        floor = Position(0, 0)
        widened: List[_Target] = []
        for target in targets:
            start, end = target.range.start, target.range.end
            line = document.get_line(end.line)
            stop = end.column
            while stop < len(line) and line[stop] in _BLANKS:
                stop += 1
            if end.column < stop < len(line):
                end = Position(end.line, stop)
            else:
                lead = document.get_line(start.line)
                begin = start.column
                while begin > 0 and lead[begin - 1] in _BLANKS:
                    begin -= 1
                start = Position(start.line, begin)
            start = max(start, floor)
            if start >= end:
                start, end = target.range.start, target.range.end
            widened.append(_Target(Range(start, end), target.mark_ids))
            floor = end
        return widened


def _as_pending(outcome: object) -> Pending:
    if isinstance(outcome, Pending):
        return outcome
    if outcome is False:
        return Pending.cancelled()
    return Pending.committed(outcome)


def _accept_input(run: _Run, value: object) -> bool:
    if value is None or value == "":
        return False
    run.input = str(value)
    return True


def _accept_hook(run: _Run, value: object) -> bool:
    del run
    return value is not False


def _lines(outcome: object, operator: str) -> List[str]:
    if isinstance(outcome, str):
        return outcome.split("\n")
    if isinstance(outcome, (list, tuple)):
        return [str(line) for line in outcome]
    raise TypeError(f"Operator '{operator}' returned {type(outcome).__name__}")


__all__ = [
    "AfterHook",
    "BeforeHook",
    "InputProvider",
    "OperatorApplier",
    "OperatorRequest",
    "OperatorScope",
]
