"""Named preset table and the entry point the binding layer calls."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from occurrence_engine.buffer import Buffer
from occurrence_engine.occurrence import REGISTRY, OccurrenceRegistry
from occurrence_engine.runtime.telemetry import span

from .find import (
    find_last_search,
    find_search_or_word,
    find_selection,
    find_word,
    mark_last_search,
    mark_search_or_word,
    mark_selection,
    mark_word,
)
from .mark import (
    mark,
    mark_all,
    mark_in_selection,
    mark_word_or_toggle_mark,
    toggle_mark,
    toggle_marks_in_selection,
    toggle_selection,
    unmark,
    unmark_all,
    unmark_in_selection,
)
from .models import OPERATOR_MODIFIER, ActionResult, Preset, noop
from .navigate import (
    deactivate,
    goto_next,
    goto_next_mark,
    goto_previous,
    goto_previous_mark,
    modify_operator,
)

DEFAULT_PRESETS: tuple[Preset, ...] = (
    Preset(id="find_word", handler=find_word, description="Find occurrences of word"),
    Preset(id="mark_word", handler=mark_word, description="Mark occurrences of word"),
    Preset(
        id="find_selection",
        handler=find_selection,
        description="Find occurrences of selection",
    ),
    Preset(
        id="mark_selection",
        handler=mark_selection,
        description="Mark occurrences of selection",
    ),
    Preset(
        id="find_last_search",
        handler=find_last_search,
        description="Find occurrences of last search",
    ),
    Preset(
        id="mark_last_search",
        handler=mark_last_search,
        description="Mark occurrences of last search",
    ),
    Preset(
        id="find_search_or_word",
        handler=find_search_or_word,
        description="Find occurrences of search or word",
    ),
    Preset(
        id="mark_search_or_word",
        handler=mark_search_or_word,
        description="Mark occurrences of search or word",
    ),
    Preset(id="goto_next", handler=goto_next, description="Next occurrence"),
    Preset(id="goto_previous", handler=goto_previous, description="Previous occurrence"),
    Preset(
        id="goto_next_mark",
        handler=goto_next_mark,
        description="Next marked occurrence",
    ),
    Preset(
        id="goto_previous_mark",
        handler=goto_previous_mark,
        description="Previous marked occurrence",
    ),
    Preset(id="mark", handler=mark, description="Mark occurrence"),
    Preset(id="unmark", handler=unmark, description="Unmark occurrence"),
    Preset(id="toggle_mark", handler=toggle_mark, description="Toggle occurrence mark"),
    Preset(
        id="mark_word_or_toggle_mark",
        handler=mark_word_or_toggle_mark,
        description="Add/Toggle occurrence mark",
    ),
    Preset(id="mark_all", handler=mark_all, description="Mark occurrences"),
    Preset(id="unmark_all", handler=unmark_all, description="Unmark occurrences"),
    Preset(
        id="mark_in_selection",
        handler=mark_in_selection,
        description="Mark occurrences in selection",
    ),
    Preset(
        id="unmark_in_selection",
        handler=unmark_in_selection,
        description="Unmark occurrences in selection",
    ),
    Preset(
        id="toggle_marks_in_selection",
        handler=toggle_marks_in_selection,
        description="Toggle occurrence marks in selection",
    ),
    Preset(
        id="toggle_selection",
        handler=toggle_selection,
        description="Add/Toggle occurrence marks",
    ),
    Preset(
        id="modify_operator",
        handler=modify_operator,
        description="Modify operator to act on occurrences",
        type=OPERATOR_MODIFIER,
    ),
    Preset(id="deactivate", handler=deactivate, description="Clear occurrence"),
)

PRESETS: Mapping[str, Preset] = MappingProxyType({preset.id: preset for preset in DEFAULT_PRESETS})


def get_preset(name: str) -> Preset:
    try:
        return PRESETS[name]
    except KeyError as exc:
        raise KeyError(f"Preset '{name}' is not defined") from exc


def run_preset(
    name: str,
    buffer: Buffer,
    *args: object,
    registry: Optional[OccurrenceRegistry] = None,
    **kwargs: object,
) -> ActionResult:
    """Look up (or create) the buffer's Occurrence and run preset ``name`` on it."""

    preset = get_preset(name)
    registry = registry or REGISTRY
    with span(
        f"actions::{name}",
        component="actions",
        metadata={"buffer": buffer.id, "preset": name},
    ) as handle:
        occurrence = registry.get(buffer, create=name != "deactivate")
        if occurrence is None:
            handle.add_metadata("occurrence", "missing")
            return noop("No occurrence for buffer")
        result = preset(occurrence, *args, **kwargs)
        handle.add_metadata("status", result.status)
        return result


__all__ = ["DEFAULT_PRESETS", "PRESETS", "get_preset", "run_preset"]
