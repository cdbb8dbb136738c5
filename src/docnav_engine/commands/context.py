"""Shared services and result type for user commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from docnav_engine.errors import NavigationError
from docnav_engine.messages import DefaultMessages, MessageTable
from docnav_engine.runtime import DeferredQueue, UserCommandGuard
from docnav_engine.walkers import BrailleLine

if TYPE_CHECKING:
    from docnav_engine.navigation import NavigationManager


class EventBus:
    """Minimal publish/subscribe hub for speech, braille and status output."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)


@dataclass(slots=True)
class CommandContext:
    manager: "NavigationManager"
    guard: UserCommandGuard = field(default_factory=UserCommandGuard)
    scheduler: DeferredQueue = field(default_factory=DeferredQueue)
    messages: MessageTable = field(default_factory=DefaultMessages)
    bus: EventBus = field(default_factory=EventBus)


@dataclass(slots=True)
class CommandResult:
    """What a command produced.

    ``consumed`` is false when the key should reach the host untouched.
    ``speech`` is the full utterance; ``error`` carries a reported
    :class:`NavigationError` such as ``NoMatchFound``.
    """

    consumed: bool = True
    status: str = "ok"
    speech: str = ""
    braille: Optional[BrailleLine] = None
    message: Optional[str] = None
    error: Optional[NavigationError] = None
    timeout_ms: Optional[int] = None


__all__ = ["CommandContext", "CommandResult", "EventBus"]
