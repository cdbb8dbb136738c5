"""Textual adapter that wires the keyboard handler into UI callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Tuple

from docnav_engine.commands import CommandResult, KeyboardHandler
from docnav_engine.cursor import Cursor, Selection
from docnav_engine.dom import Document
from docnav_engine.walkers import BrailleLine


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(frozen=True, slots=True)
class DocumentView:
    """Plain-text rendering of the document plus the highlighted range."""

    text: str
    highlight: Optional[Tuple[int, int]] = None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_document: Callable[[DocumentView], None]
    update_status: Callable[[str], None] = _noop
    show_speech: Callable[[str], None] = _noop
    show_braille: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    log: Callable[[str], None] = _noop


def render_document(document: Document, selection: Selection) -> DocumentView:
    """One line per text run; ``highlight`` spans ``selection`` when visible."""

    lines = []
    start_at: Optional[int] = None
    end_at: Optional[int] = None
    base = 0
    for run in document.runs():
        start_offset = run.offset_of(selection.start)
        if start_at is None and start_offset is not None:
            start_at = base + start_offset
        end_offset = run.offset_of(selection.end)
        if end_offset is not None:
            end_at = base + end_offset
        lines.append(run.text)
        base += len(run.text) + 1
    text = "\n".join(lines)
    if start_at is None:
        return DocumentView(text)
    if end_at is None or end_at < start_at:
        end_at = start_at
    return DocumentView(text, (start_at, max(end_at, start_at + 1)))


class TextualNavAdapter:
    """Bridges the keyboard handler and command bus to a Textual surface."""

    def __init__(self, handler: KeyboardHandler, hooks: TextualUIHooks) -> None:
        self.handler = handler
        self.hooks = hooks
        self._subscribe_events()
        self._refresh_document()

    @property
    def manager(self):
        return self.handler.context.manager

    def handle_textual_key(
        self, key: str, *, modifiers: Iterable[str] = ()
    ) -> CommandResult:
        """Dispatch one normalized key event."""

        normalized_modifiers = tuple(str(mod).lower() for mod in modifiers)
        self._log_state("key ->", key=key, mods=normalized_modifiers)
        result = self.handler.handle_key(key, normalized_modifiers)
        self._after_result(result)
        self._log_state(
            "result <-",
            consumed=result.consumed,
            status=result.status,
            message=result.message,
            timeout_ms=result.timeout_ms,
        )
        return result

    def process_timeouts(self) -> Dict[str, CommandResult]:
        """Expire pending key sequences and run due deferrals."""

        results: Dict[str, CommandResult] = {}
        outcome = self.handler.process_timeouts()
        if outcome is not None:
            results["keys"] = outcome
            self.hooks.update_status(f"keys:{outcome.status}")
            self._log_state("timeout ->", status=outcome.status)
        if self.handler.context.scheduler.run_due():
            self._refresh_document()
        return results

    def resize(self, width: int) -> None:
        resize = getattr(self.manager.geometry, "resize", None)
        if resize is not None:
            resize(width)

    def _after_result(self, result: CommandResult) -> None:
        status = result.message or result.status
        if status:
            self.hooks.update_status(status)
        self._refresh_document()

    def _subscribe_events(self) -> None:
        bus = self.handler.context.bus
        for event in ("speech", "braille", "activate"):
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        self._log_state("event ->", event=name, payload=payload)
        if name == "speech" and isinstance(payload, str):
            self.hooks.show_speech(payload)
        elif name == "braille" and isinstance(payload, BrailleLine):
            self.hooks.show_braille(payload.text)
        self.hooks.handle_event(name, payload)

    def _refresh_document(self) -> None:
        self.hooks.update_document(
            render_document(self.manager.document, self.manager.current)
        )

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        manager = self.manager
        start: Cursor = manager.current.start
        return {
            "granularity": manager.granularity.value,
            "node": start.node.tag,
            "index": start.index,
            "table": manager.in_table_mode(),
            "pending": " ".join(self.handler.pending_tokens),
            "busy": self.handler.context.guard.is_busy(),
        }


__all__ = ["DocumentView", "TextualNavAdapter", "TextualUIHooks", "render_document"]
