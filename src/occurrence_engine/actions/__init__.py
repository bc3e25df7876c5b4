"""Preset actions mirroring the host command surface."""

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
from .models import ActionResult, Preset
from .navigate import (
    deactivate,
    goto_next,
    goto_next_mark,
    goto_previous,
    goto_previous_mark,
    modify_operator,
)
from .presets import DEFAULT_PRESETS, PRESETS, get_preset, run_preset

__all__ = [
    "ActionResult",
    "DEFAULT_PRESETS",
    "PRESETS",
    "Preset",
    "deactivate",
    "find_last_search",
    "find_search_or_word",
    "find_selection",
    "find_word",
    "get_preset",
    "goto_next",
    "goto_next_mark",
    "goto_previous",
    "goto_previous_mark",
    "mark",
    "mark_all",
    "mark_in_selection",
    "mark_last_search",
    "mark_search_or_word",
    "mark_selection",
    "mark_word",
    "mark_word_or_toggle_mark",
    "modify_operator",
    "run_preset",
    "toggle_mark",
    "toggle_marks_in_selection",
    "toggle_selection",
    "unmark",
    "unmark_all",
    "unmark_in_selection",
]
