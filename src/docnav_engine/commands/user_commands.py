"""User commands bound to keys: navigation, table mode and category jumps.

Every handler takes a :class:`CommandContext` and returns a
:class:`CommandResult`. Navigation handlers end in :func:`finish_nav_command`,
which schedules the focus deferral and speaks the new position.
"""

from __future__ import annotations

from functools import partial, wraps
from typing import Callable, Dict, Optional, Tuple

from docnav_engine.dom import Node, roles
from docnav_engine.errors import NavigationError
from docnav_engine.navigation import MoveStatus
from docnav_engine.runtime import telemetry
from docnav_engine.search import CATEGORIES, SearchCategory
from docnav_engine.walkers import speak_all

from .context import CommandContext, CommandResult
from .models import CommandRef

Handler = Callable[[CommandContext], CommandResult]


def navigation_command(func: Callable[..., CommandResult]) -> Callable[..., CommandResult]:
    """Mark the user-command guard before running ``func``."""

    @wraps(func)
    def wrapper(context: CommandContext, *args: object, **kwargs: object) -> CommandResult:
        context.guard.mark()
        return func(context, *args, **kwargs)

    return wrapper


def finish_nav_command(context: CommandContext, prefix: str = "") -> CommandResult:
    manager = context.manager
    descriptions = manager.get_current_description()
    context.scheduler.call_later(
        manager.config.focus_delay_ms, manager.set_focus, label="set_focus"
    )
    manager.document.scroll_to(manager.get_current_node())
    speech = prefix + speak_all(descriptions)
    braille = manager.get_current_braille()
    context.bus.emit("speech", speech)
    context.bus.emit("braille", braille)
    return CommandResult(speech=speech, braille=braille)


def speak(
    context: CommandContext,
    text: str,
    *,
    status: str = "ok",
    error: Optional[NavigationError] = None,
) -> CommandResult:
    context.bus.emit("speech", text)
    return CommandResult(speech=text, status=status, message=text, error=error)


# ----------------------------------------------------------------------
# navigation
def _directional(context: CommandContext, *, reversed: bool) -> CommandResult:
    manager = context.manager
    moved = manager.previous() if reversed else manager.next()
    if not moved and manager.last_move_status is MoveStatus.END_OF_CELL:
        return finish_nav_command(context, context.messages.get("end_of_cell"))
    result = finish_nav_command(context)
    # a failed move lets the key reach the host
    result.consumed = moved
    if not moved:
        result.status = manager.last_move_status.value
        result.error = manager.last_error
    return result


@navigation_command
def forward(context: CommandContext) -> CommandResult:
    return _directional(context, reversed=False)


@navigation_command
def backward(context: CommandContext) -> CommandResult:
    return _directional(context, reversed=True)


def previous_granularity(context: CommandContext) -> CommandResult:
    context.manager.up()
    return finish_nav_command(context, _granularity_prefix(context))


def next_granularity(context: CommandContext) -> CommandResult:
    context.manager.down()
    return finish_nav_command(context, _granularity_prefix(context))


def _granularity_prefix(context: CommandContext) -> str:
    return context.messages.get(context.manager.get_granularity_msg()) + " "


def speak_current_position(context: CommandContext) -> CommandResult:
    return finish_nav_command(context)


def nop(context: CommandContext) -> CommandResult:
    del context
    return CommandResult(status="nop")


@navigation_command
def force_sync(context: CommandContext) -> CommandResult:
    context.manager.force_sync()
    return finish_nav_command(context)


def act_on_current_item(context: CommandContext) -> CommandResult:
    """Activate the control, or link, that owns the current position."""

    manager = context.manager
    target = _actionable_ancestor(manager.get_current_node())
    if target is None:
        return speak(context, context.messages.get("no_actions"), status="no_action")
    href = target.get_attribute("href") or ""
    if href.startswith("#") and len(href) > 1:
        return follow_internal_link(context, href[1:])
    if roles.control_role(target) == "role_checkbox":
        target.checked = not target.checked
    elif roles.control_role(target) == "role_radio":
        target.checked = True
    manager.document.focus(target)
    telemetry.record_event(
        "commands.activate", level="debug", data={"node": repr(target)}
    )
    context.bus.emit("activate", target)
    return CommandResult(status="activated")


def _actionable_ancestor(node: Node) -> Optional[Node]:
    for candidate in reversed(node.ancestors(include_self=True)):
        if roles.is_link(candidate) or roles.is_control(candidate):
            return candidate
    return None


@navigation_command
def follow_internal_link(context: CommandContext, fragment: str) -> CommandResult:
    """Move to the element a ``#fragment`` link points at (by id, then name)."""

    document = context.manager.document
    target = document.get_element_by_id(fragment)
    if target is None:
        target = next(
            (
                node
                for node in document.root.depth_first()
                if node.get_attribute("name") == fragment
            ),
            None,
        )
    if target is None:
        return CommandResult(consumed=False, status="missing_target")
    context.manager.sync_to_node(target)
    return finish_nav_command(context)


# ----------------------------------------------------------------------
# table mode
def _not_inside_table(context: CommandContext) -> CommandResult:
    return speak(context, context.messages.get("not_inside_table"), status="not_in_table")


@navigation_command
def enter_table(context: CommandContext) -> CommandResult:
    if context.manager.enter_table():
        return finish_nav_command(context, context.messages.get("inside_table"))
    return speak(context, context.messages.get("no_table_found"), status="no_table")


@navigation_command
def exit_table(context: CommandContext) -> CommandResult:
    context.manager.exit_table()
    return finish_nav_command(context, context.messages.get("leaving_table"))


def _cell_move(name: str, edge_key: str) -> Handler:
    @navigation_command
    def handler(context: CommandContext) -> CommandResult:
        manager = context.manager
        if not manager.in_table_mode():
            return _not_inside_table(context)
        if getattr(manager, name)():
            return finish_nav_command(context)
        return speak(context, context.messages.get(edge_key), status="edge")

    handler.__name__ = name
    handler.__qualname__ = name
    return handler


previous_row = _cell_move("previous_row", "no_cell_above")
next_row = _cell_move("next_row", "no_cell_below")
previous_col = _cell_move("previous_col", "no_cell_left")
next_col = _cell_move("next_col", "no_cell_right")


def announce_headers(context: CommandContext) -> CommandResult:
    manager = context.manager
    if not manager.in_table_mode():
        return _not_inside_table(context)
    parts = []
    row_header = manager.get_row_header_text()
    col_header = manager.get_col_header_text()
    if row_header:
        parts.append(context.messages.get("row_header") + row_header)
    if col_header:
        parts.append(context.messages.get("col_header") + col_header)
    if not parts:
        return speak(context, context.messages.get("no_headers"), status="no_headers")
    return speak(context, " ".join(parts))


def speak_table_location(context: CommandContext) -> CommandResult:
    manager = context.manager
    if not manager.in_table_mode():
        return _not_inside_table(context)
    text = context.messages.get(
        "table_location",
        manager.get_row_index(),
        manager.get_row_count(),
        manager.get_col_index(),
        manager.get_col_count(),
    )
    return speak(context, text)


def guess_row_header(context: CommandContext) -> CommandResult:
    manager = context.manager
    if not manager.in_table_mode():
        return _not_inside_table(context)
    header = manager.get_row_header_text() or manager.guess_row_header_text() or ""
    return speak(context, context.messages.get("row_header") + header)


def guess_col_header(context: CommandContext) -> CommandResult:
    manager = context.manager
    if not manager.in_table_mode():
        return _not_inside_table(context)
    header = manager.get_col_header_text() or manager.guess_col_header_text() or ""
    return speak(context, context.messages.get("col_header") + header)


def _skip(name: str, method: str) -> Handler:
    @navigation_command
    def handler(context: CommandContext) -> CommandResult:
        if getattr(context.manager, method)():
            return finish_nav_command(context)
        return _not_inside_table(context)

    handler.__name__ = name
    handler.__qualname__ = name
    return handler


skip_to_beginning = _skip("skip_to_beginning", "go_to_first_cell")
skip_to_end = _skip("skip_to_end", "go_to_last_cell")
skip_to_row_beginning = _skip("skip_to_row_beginning", "go_to_row_first_cell")
skip_to_row_end = _skip("skip_to_row_end", "go_to_row_last_cell")
skip_to_col_beginning = _skip("skip_to_col_beginning", "go_to_col_first_cell")
skip_to_col_end = _skip("skip_to_col_end", "go_to_col_last_cell")


# ----------------------------------------------------------------------
# category jumps
@navigation_command
def find_and_speak(
    context: CommandContext, category: SearchCategory, reversed: bool
) -> CommandResult:
    manager = context.manager
    failure = context.messages.get(category.failure_key(reversed), *category.message_args)
    match = manager.find_next_matching(
        category.predicate, reversed=reversed, message=failure
    )
    if match is None:
        return speak(context, failure, status="no_match", error=manager.last_error)
    return finish_nav_command(context)


def _jump_commands() -> Dict[str, Tuple[Callable[..., CommandResult], str]]:
    commands: Dict[str, Tuple[Callable[..., CommandResult], str]] = {}
    for name, category in CATEGORIES.items():
        commands[f"next_{name}"] = (
            partial(find_and_speak, category=category, reversed=False),
            f"Jump to the next {name.replace('_', ' ')}",
        )
        commands[f"previous_{name}"] = (
            partial(find_and_speak, category=category, reversed=True),
            f"Jump to the previous {name.replace('_', ' ')}",
        )
    return commands


_CORE_COMMANDS: Tuple[Tuple[str, Callable[..., CommandResult], str], ...] = (
    ("forward", forward, "Move forward by the current granularity"),
    ("backward", backward, "Move backward by the current granularity"),
    ("previous_granularity", previous_granularity, "Switch to a coarser granularity"),
    ("next_granularity", next_granularity, "Switch to a finer granularity"),
    ("speak_current_position", speak_current_position, "Repeat the current item"),
    ("nop", nop, "Swallow the key"),
    ("force_sync", force_sync, "Re-sync to the focused element"),
    ("act_on_current_item", act_on_current_item, "Activate the current item"),
    ("enter_table", enter_table, "Enter table mode"),
    ("exit_table", exit_table, "Leave table mode"),
    ("previous_row", previous_row, "Move to the cell above"),
    ("next_row", next_row, "Move to the cell below"),
    ("previous_col", previous_col, "Move to the cell on the left"),
    ("next_col", next_col, "Move to the cell on the right"),
    ("announce_headers", announce_headers, "Speak row and column headers"),
    ("speak_table_location", speak_table_location, "Speak the cell position"),
    ("guess_row_header", guess_row_header, "Speak the row header or a guess"),
    ("guess_col_header", guess_col_header, "Speak the column header or a guess"),
    ("skip_to_beginning", skip_to_beginning, "Jump to the first cell"),
    ("skip_to_end", skip_to_end, "Jump to the last cell"),
    ("skip_to_row_beginning", skip_to_row_beginning, "Jump to the row's first cell"),
    ("skip_to_row_end", skip_to_row_end, "Jump to the row's last cell"),
    ("skip_to_col_beginning", skip_to_col_beginning, "Jump to the column's first cell"),
    ("skip_to_col_end", skip_to_col_end, "Jump to the column's last cell"),
)

DEFAULT_COMMANDS: Tuple[CommandRef, ...] = tuple(
    CommandRef(id=command_id, handler=handler, description=description)
    for command_id, handler, description in _CORE_COMMANDS
) + tuple(
    CommandRef(
        id=command_id,
        handler=handler,
        description=description,
        metadata={"kind": "jump"},
    )
    for command_id, (handler, description) in _jump_commands().items()
)


__all__ = [
    "DEFAULT_COMMANDS",
    "act_on_current_item",
    "announce_headers",
    "backward",
    "enter_table",
    "exit_table",
    "find_and_speak",
    "finish_nav_command",
    "follow_internal_link",
    "force_sync",
    "forward",
    "guess_col_header",
    "guess_row_header",
    "navigation_command",
    "next_col",
    "next_granularity",
    "next_row",
    "nop",
    "previous_col",
    "previous_granularity",
    "previous_row",
    "skip_to_beginning",
    "skip_to_col_beginning",
    "skip_to_col_end",
    "skip_to_end",
    "skip_to_row_beginning",
    "skip_to_row_end",
    "speak",
    "speak_current_position",
    "speak_table_location",
]
