"""Keyboard handler: turns key strokes into user commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from docnav_engine.dom import Node
from docnav_engine.runtime import monotonic_ms, telemetry

from .context import CommandContext, CommandResult
from .defaults import BROWSE_MODE, DEFAULT_PREFIX, TABLE_FLAG, load_default_keymap
from .models import KeyStroke
from .registry import CommandRegistry
from .resolver import KeymapResolver, ResolutionMatch
from .user_commands import act_on_current_item, follow_internal_link

_ENTER_KEYS = frozenset({"enter", "return"})
_PASS_ENTER_TAGS = frozenset({"input", "select", "button", "textarea"})


@dataclass
class PendingTimeout:
    deadline: float
    timeout_ms: int
    generation: int


def internal_link_target(node: Optional[Node]) -> Optional[str]:
    """The fragment of an ``a href="#id"`` link, else ``None``."""

    if node is None or node.tag != "a":
        return None
    href = node.get_attribute("href") or ""
    if href.startswith("#") and len(href) > 1:
        return href[1:]
    return None


def must_pass_enter_key(node: Optional[Node]) -> bool:
    """Whether the focused element handles Enter itself."""

    if node is None:
        return False
    if node.get_attribute("contenteditable", "false").lower() in ("", "true"):
        return True
    if node.role == "textbox" or node.tag in _PASS_ENTER_TAGS:
        return True
    return node.tag == "a" and internal_link_target(node) is None


class KeyboardHandler:
    """Resolves keys against the browse keymap and runs the matched command.

    Multi-stroke sequences stay pending until the next key or until
    ``process_timeouts`` sees their deadline pass.
    """

    def __init__(
        self,
        context: CommandContext,
        *,
        registry: CommandRegistry | None = None,
        resolver: KeymapResolver | None = None,
        mode: str = BROWSE_MODE,
        load_defaults: bool = True,
        prefix: Iterable[str] = DEFAULT_PREFIX,
        clock: Callable[[], float] = monotonic_ms,
    ) -> None:
        self.context = context
        self.mode = mode
        self.logger = telemetry.get_logger("docnav_engine.commands")
        self.registry = registry or CommandRegistry(logger_name="docnav_engine.commands")
        if load_defaults and registry is None:
            load_default_keymap(
                self.registry,
                prefix=tuple(prefix),
                default_sequence_timeout_ms=context.manager.config.key_timeout_ms,
            )
        self.resolver = resolver or KeymapResolver(
            self.registry, logger_name="docnav_engine.commands"
        )
        self._clock = clock
        self._pending: List[str] = []
        self._timeout: Optional[PendingTimeout] = None
        self._generation = 0

    @property
    def flags(self) -> Dict[str, bool]:
        return {TABLE_FLAG: self.context.manager.in_table_mode()}

    @property
    def pending_tokens(self) -> tuple[str, ...]:
        return tuple(self._pending)

    def handle_key(self, key: str, modifiers: Iterable[str] = ()) -> CommandResult:
        stroke = KeyStroke(key, tuple(modifiers))
        with telemetry.span(
            "commands::handle_key",
            component="commands",
            logger=self.logger,
            metadata={"key": stroke.token, "mode": self.mode},
        ) as handle:
            if stroke.key in _ENTER_KEYS and not stroke.modifiers and not self._pending:
                handle.add_metadata("enter", True)
                return self._handle_enter()

            self._pending.append(stroke.token)
            result = self.resolver.resolve(
                self.mode, tuple(self._pending), flags=self.flags
            )
            if result.status == "match" and result.match:
                self._reset_pending()
                return self._execute(result.match)

            if result.status == "pending":
                timeout_ms = result.timeout_ms or self.context.manager.config.key_timeout_ms
                self._arm_timeout(timeout_ms)
                telemetry.emit(
                    self.logger,
                    "debug",
                    "commands::pending",
                    {"tokens": " ".join(self._pending), "timeout_ms": timeout_ms},
                )
                return CommandResult(
                    consumed=True,
                    status="pending",
                    message="awaiting_sequence",
                    timeout_ms=timeout_ms,
                )

            sequencing = len(self._pending) > 1
            self._reset_pending()
            handle.miss("unbound")
            # a broken sequence still swallows its last key
            return CommandResult(consumed=sequencing, status="miss")

    def process_timeouts(self) -> Optional[CommandResult]:
        timer = self._timeout
        if timer is None or timer.deadline > self._clock():
            return None
        return self._trigger_timeout(timer.generation)

    def force_timeout(self) -> Optional[CommandResult]:
        if self._timeout is None:
            return None
        return self._trigger_timeout(self._timeout.generation)

    def _arm_timeout(self, timeout_ms: int) -> None:
        self._generation += 1
        self._timeout = PendingTimeout(
            deadline=self._clock() + timeout_ms,
            timeout_ms=timeout_ms,
            generation=self._generation,
        )

    def _reset_pending(self) -> None:
        self._pending.clear()
        self._timeout = None

    def _trigger_timeout(self, generation: int) -> CommandResult:
        timer = self._timeout
        if timer is None or timer.generation != generation:
            return CommandResult(consumed=False, status="timeout")
        tokens = tuple(self._pending)
        self._reset_pending()
        with telemetry.span(
            "commands::timeout",
            logger=self.logger,
            metadata={"tokens": " ".join(tokens)},
        ):
            result = self.resolver.resolve(self.mode, tokens, flags=self.flags)
        if result.status == "match" and result.match:
            return self._execute(result.match)
        return CommandResult(consumed=False, status="timeout", message="pending_timeout")

    def _execute(self, match: ResolutionMatch) -> CommandResult:
        with telemetry.span(
            "commands::execute",
            component="commands",
            logger=self.logger,
            metadata={"binding_id": match.binding.id, "command": match.command.id},
        ) as handle:
            outcome = match.command(self.context)
            if isinstance(outcome, CommandResult):
                handle.add_metadata("status", outcome.status)
                return outcome
        return CommandResult()

    def _handle_enter(self) -> CommandResult:
        active = self.context.manager.document.active_element
        fragment = internal_link_target(active)
        if fragment is not None:
            result = follow_internal_link(self.context, fragment)
            if result.status != "missing_target":
                return result
        if must_pass_enter_key(active):
            return CommandResult(consumed=False, status="pass_through")
        return act_on_current_item(self.context)


__all__ = [
    "KeyboardHandler",
    "PendingTimeout",
    "internal_link_target",
    "must_pass_enter_key",
]
