"""User commands, key bindings and the keyboard handler."""

from .context import CommandContext, CommandResult, EventBus
from .defaults import (
    BROWSE_MODE,
    DEFAULT_BINDINGS,
    DEFAULT_PREFIX,
    TABLE_FLAG,
    default_bindings,
    load_default_keymap,
)
from .handler import KeyboardHandler, PendingTimeout
from .models import Binding, CommandRef, KeySequence, KeyStroke, WhenClause
from .registry import BindingConflictError, CommandRegistry, RegistryStats
from .resolver import KeymapResolver, ResolutionMatch, ResolutionResult
from .user_commands import DEFAULT_COMMANDS, finish_nav_command

__all__ = [
    "BROWSE_MODE",
    "Binding",
    "BindingConflictError",
    "CommandContext",
    "CommandRef",
    "CommandRegistry",
    "CommandResult",
    "DEFAULT_BINDINGS",
    "DEFAULT_COMMANDS",
    "DEFAULT_PREFIX",
    "EventBus",
    "KeySequence",
    "KeyStroke",
    "KeyboardHandler",
    "KeymapResolver",
    "PendingTimeout",
    "RegistryStats",
    "ResolutionMatch",
    "ResolutionResult",
    "TABLE_FLAG",
    "WhenClause",
    "default_bindings",
    "load_default_keymap",
    "finish_nav_command",
]
