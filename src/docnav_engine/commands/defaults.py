"""Built-in commands and key bindings for the browse mode."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Sequence

from docnav_engine.search import CATEGORIES

from .models import Binding, KeySequence, KeyStroke
from .registry import CommandRegistry
from .user_commands import DEFAULT_COMMANDS

BROWSE_MODE = "browse"
TABLE_FLAG = "table_mode"

DEFAULT_PREFIX: tuple[str, ...] = ("ctrl", "alt")

# (binding suffix, key, extra modifiers, command id, when)
_SINGLE_KEYS: tuple[tuple[str, str, tuple[str, ...], str, tuple[str, ...]], ...] = (
    ("forward", "down", (), "forward", ()),
    ("backward", "up", (), "backward", ()),
    ("previous_granularity", "left", (), "previous_granularity", ()),
    ("next_granularity", "right", (), "next_granularity", ()),
    ("speak_current_position", "c", (), "speak_current_position", ()),
    ("force_sync", "s", (), "force_sync", ()),
    ("act_on_current_item", "space", (), "act_on_current_item", ()),
    ("enter_table", "t", (), "enter_table", ("!" + TABLE_FLAG,)),
    ("exit_table", "t", (), "exit_table", (TABLE_FLAG,)),
    ("previous_row", "up", ("shift",), "previous_row", (TABLE_FLAG,)),
    ("next_row", "down", ("shift",), "next_row", (TABLE_FLAG,)),
    ("previous_col", "left", ("shift",), "previous_col", (TABLE_FLAG,)),
    ("next_col", "right", ("shift",), "next_col", (TABLE_FLAG,)),
    ("announce_headers", "h", (), "announce_headers", (TABLE_FLAG,)),
    ("speak_table_location", "l", (), "speak_table_location", (TABLE_FLAG,)),
    ("guess_row_header", "r", ("shift",), "guess_row_header", (TABLE_FLAG,)),
    ("guess_col_header", "c", ("shift",), "guess_col_header", (TABLE_FLAG,)),
    ("skip_to_beginning", "home", (), "skip_to_beginning", (TABLE_FLAG,)),
    ("skip_to_end", "end", (), "skip_to_end", (TABLE_FLAG,)),
    ("skip_to_row_beginning", "home", ("shift",), "skip_to_row_beginning", (TABLE_FLAG,)),
    ("skip_to_row_end", "end", ("shift",), "skip_to_row_end", (TABLE_FLAG,)),
    ("skip_to_col_beginning", "pageup", (), "skip_to_col_beginning", (TABLE_FLAG,)),
    ("skip_to_col_end", "pagedown", (), "skip_to_col_end", (TABLE_FLAG,)),
)

# second stroke of the "next"/"previous" jump sequences
JUMP_KEYS = {
    "heading": "h",
    "link": "l",
    "not_link": "n",
    "checkbox": "x",
    "radio": "r",
    "slider": "s",
    "graphic": "g",
    "button": "b",
    "combo_box": "c",
    "edit_text": "e",
    "table": "t",
    "list": "o",
    "list_item": "i",
    "blockquote": "q",
    "form_field": "f",
    "landmark": ";",
    "jump": "j",
    **{f"heading{level}": str(level) for level in range(1, 7)},
}


def default_bindings(
    prefix: Sequence[str] = DEFAULT_PREFIX, *, timeout_ms: int = 1000
) -> tuple[Binding, ...]:
    """Build the browse-mode bindings with ``prefix`` as the command modifier."""

    prefix = tuple(prefix)
    bindings: List[Binding] = []
    for suffix, key, extra, command_id, when in _SINGLE_KEYS:
        bindings.append(
            Binding(
                id=f"{BROWSE_MODE}.{suffix}",
                mode=BROWSE_MODE,
                sequence=KeySequence((KeyStroke(key, prefix + extra),), timeout_ms),
                command_id=command_id,
                when=when,
            )
        )
    for name in CATEGORIES:
        second = KeyStroke(JUMP_KEYS[name])
        for direction, leader in (("next", "n"), ("previous", "p")):
            bindings.append(
                Binding(
                    id=f"{BROWSE_MODE}.{direction}_{name}",
                    mode=BROWSE_MODE,
                    sequence=KeySequence((KeyStroke(leader, prefix), second), timeout_ms),
                    command_id=f"{direction}_{name}",
                )
            )
    return tuple(bindings)


DEFAULT_BINDINGS: tuple[Binding, ...] = default_bindings()


def load_default_keymap(
    registry: CommandRegistry,
    *,
    replace: bool = False,
    prefix: Sequence[str] = DEFAULT_PREFIX,
    extra_bindings: Iterable[Binding] | None = None,
    default_sequence_timeout_ms: int | None = None,
    exclude_bindings: Sequence[str] | None = None,
) -> None:
    """Register built-in commands and browse-mode bindings."""

    excluded = set(exclude_bindings or ())
    for command in DEFAULT_COMMANDS:
        registry.register_command(command, replace=replace)

    bindings = DEFAULT_BINDINGS if tuple(prefix) == DEFAULT_PREFIX else default_bindings(prefix)
    for binding in bindings:
        if binding.id in excluded:
            continue
        registry.register_binding(
            _binding_with_timeout(binding, default_sequence_timeout_ms), replace=replace
        )

    for binding in extra_bindings or ():
        registry.register_binding(binding, replace=replace)


def _binding_with_timeout(binding: Binding, timeout_ms: int | None) -> Binding:
    if timeout_ms is None:
        return binding
    return replace(binding, sequence=KeySequence(binding.sequence.strokes, timeout_ms))


__all__ = [
    "BROWSE_MODE",
    "DEFAULT_BINDINGS",
    "DEFAULT_PREFIX",
    "JUMP_KEYS",
    "TABLE_FLAG",
    "default_bindings",
    "load_default_keymap",
]
