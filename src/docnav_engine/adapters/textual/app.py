"""Executable Textual app that reads an HTML page with the navigation engine."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence, Tuple

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Footer, Header, Static

from docnav_engine.commands import CommandContext, KeyboardHandler
from docnav_engine.commands.models import MODIFIER_NAMES
from docnav_engine.config import ENV_PREFIX, NavigationConfig
from docnav_engine.dom import FlowGeometry
from docnav_engine.dom.html import load_html_file
from docnav_engine.navigation import NavigationManager
from docnav_engine.runtime import UserCommandGuard, telemetry

from .controller import DocumentView, TextualNavAdapter, TextualUIHooks

# terminals rarely report ctrl+alt, so the demo binds commands to ctrl alone
TERMINAL_PREFIX: Tuple[str, ...] = ("ctrl",)


def create_default_handler(
    path: Path,
    *,
    config: Optional[NavigationConfig] = None,
    prefix: Sequence[str] = TERMINAL_PREFIX,
) -> KeyboardHandler:
    """Load ``path`` and build a keyboard handler over a fresh session."""

    config = config or NavigationConfig.from_env()
    document = load_html_file(path)
    geometry = FlowGeometry(document, config.flow_width)
    manager = NavigationManager(document, geometry=geometry, config=config)
    context = CommandContext(
        manager=manager,
        guard=UserCommandGuard(window_ms=config.guard_window_ms),
        messages=manager.messages,
    )
    return KeyboardHandler(context, prefix=prefix)


@dataclass
class UIState:
    status_text: str = ""
    speech_text: str = ""
    braille_text: str = ""


class DocNavApp(App[None]):
    """Minimal Textual UI that speaks and brailles an HTML page as text."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#document-area {
		height: 1fr;
		border: round $accent;
		padding: 0 1;
	}

	#speech-line, #braille-line, #status-line {
		height: 1;
		padding: 0 1;
	}

	#speech-line {
		background: $surface-darken-1;
	}

	#braille-line {
		background: $surface-darken-2;
	}

	#status-line {
		background: $surface-darken-3;
	}
	"""

    BINDINGS = [("ctrl+q", "quit", "Quit")]

    def __init__(self, path: Path, *, prefix: Sequence[str] = TERMINAL_PREFIX) -> None:
        super().__init__()
        self._path = path
        self._prefix = tuple(prefix)
        self._state = UIState()
        self.handler: KeyboardHandler | None = None
        self.adapter: TextualNavAdapter | None = None
        self._document_widget: Static | None = None
        self._speech_widget: Static | None = None
        self._braille_widget: Static | None = None
        self._status_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with VerticalScroll(id="document-area"):
            self._document_widget = Static("", id="document-view")
            yield self._document_widget
        self._speech_widget = Static("", id="speech-line")
        self._braille_widget = Static("", id="braille-line")
        self._status_widget = Static("", id="status-line")
        yield self._speech_widget
        yield self._braille_widget
        yield self._status_widget
        yield Footer()

    async def on_mount(self) -> None:
        self.handler = create_default_handler(self._path, prefix=self._prefix)
        self.title = self.handler.context.manager.document.title or self._path.name
        hooks = TextualUIHooks(
            update_document=self._update_document,
            update_status=self._update_status,
            show_speech=self._show_speech,
            show_braille=self._show_braille,
            handle_event=self._handle_event,
            log=self._log_line,
        )
        self.adapter = TextualNavAdapter(self.handler, hooks)
        self.adapter.resize(max(self.size.width - 4, 20))
        self.set_interval(0.05, self._process_timeouts)

    def on_resize(self, event: events.Resize) -> None:
        if self.adapter:
            self.adapter.resize(max(event.size.width - 4, 20))

    def _process_timeouts(self) -> None:
        if self.adapter:
            self.adapter.process_timeouts()

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        normalized = self._normalize_key(event)
        if normalized is None:
            return
        key, modifiers = normalized
        result = self.adapter.handle_textual_key(key, modifiers=modifiers)
        if result.consumed:
            event.stop()

    def _update_document(self, view: DocumentView) -> None:
        if not self._document_widget:
            return
        rendered = Text(view.text)
        if view.highlight is not None:
            start, end = view.highlight
            rendered.stylize("reverse", start, end)
        self._document_widget.update(rendered)

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(Text(status))

    def _show_speech(self, speech: str) -> None:
        self._state.speech_text = speech
        if self._speech_widget:
            self._speech_widget.update(Text(speech))

    def _show_braille(self, braille: str) -> None:
        self._state.braille_text = braille
        if self._braille_widget:
            self._braille_widget.update(Text(braille))

    def _handle_event(self, name: str, payload: Any | None) -> None:
        if name == "activate":
            self._update_status(f"activate:{payload!r}")

    def _log_line(self, line: str) -> None:
        self.log.debug(line)

    @staticmethod
    def _normalize_key(event: events.Key) -> Optional[Tuple[str, Tuple[str, ...]]]:
        if event.key == "ctrl+q":
            return None
        *parts, key = event.key.split("+") if event.key != "+" else ("+",)
        modifiers = tuple(part for part in parts if part in MODIFIER_NAMES)
        if not modifiers and event.character and len(event.character) == 1 and event.is_printable:
            key = event.character
        return key, modifiers


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Browse an HTML page with docnav-engine.")
    parser.add_argument("path", type=Path, help="HTML file to open")
    parser.add_argument(
        "--prefix",
        default=os.environ.get(f"{ENV_PREFIX}KEY_PREFIX", "+".join(TERMINAL_PREFIX)),
        help="Modifier chord for commands, e.g. 'ctrl' or 'ctrl+alt' (default: ctrl)",
    )
    parser.add_argument(
        "--log-preset",
        default=os.environ.get(f"{ENV_PREFIX}LOG_PRESET", "quiet"),
        choices=telemetry.PRESETS,
        help="Telemetry preset (default: quiet, so logs do not garble the screen)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    telemetry.configure(preset=args.log_preset)
    prefix = tuple(part for part in args.prefix.lower().split("+") if part)
    unknown = [part for part in prefix if part not in MODIFIER_NAMES]
    if unknown:
        raise SystemExit(f"unknown modifier(s): {', '.join(unknown)}")
    app = DocNavApp(args.path, prefix=prefix)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
