from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

from docnav_engine.adapters.textual import (
    DocumentView,
    TextualNavAdapter,
    TextualUIHooks,
    render_document,
)
from docnav_engine.adapters.textual.app import create_default_handler
from docnav_engine.commands import CommandContext, KeyboardHandler
from docnav_engine.config import NavigationConfig
from docnav_engine.cursor import Cursor, Selection
from docnav_engine.dom.html import load_html
from docnav_engine.navigation import NavigationManager
from docnav_engine.runtime import DeferredQueue

PAGE = "<p>First line</p><p>Second <a href='#top'>link</a></p>"
PREFIX = ("ctrl", "alt")


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def make_handler(
    markup: str = PAGE, clock: FakeClock | None = None
) -> KeyboardHandler:
    clock = clock or FakeClock()
    manager = NavigationManager(load_html(markup))
    context = CommandContext(manager=manager, scheduler=DeferredQueue(clock=clock))
    return KeyboardHandler(context, clock=clock)


def test_adapter_updates_document_and_status() -> None:
    handler = make_handler()
    views: List[DocumentView] = []
    statuses: List[str] = []
    hooks = TextualUIHooks(
        update_document=views.append,
        update_status=statuses.append,
    )
    adapter = TextualNavAdapter(handler, hooks)

    adapter.handle_textual_key("down", modifiers=PREFIX)

    assert views[-1].text == "First line\nSecond link"
    assert views[-1].highlight == (0, 10)
    assert statuses[-1] == "ok"


def test_adapter_relays_speech_and_braille() -> None:
    handler = make_handler()
    speech: List[str] = []
    braille: List[str] = []
    events: List[tuple[str, object | None]] = []
    hooks = TextualUIHooks(
        update_document=lambda view: None,
        show_speech=speech.append,
        show_braille=braille.append,
        handle_event=lambda name, payload: events.append((name, payload)),
    )
    adapter = TextualNavAdapter(handler, hooks)

    adapter.handle_textual_key("down", modifiers=PREFIX)
    adapter.handle_textual_key("down", modifiers=PREFIX)

    assert speech == ["First line", "Second link Link"]
    assert braille[-1] == "Second link lnk"
    assert [name for name, _ in events] == ["speech", "braille"] * 2


def test_adapter_surfaces_activation_events() -> None:
    handler = make_handler("<p><input type='checkbox' aria-label='Agree'></p>")
    events: List[Dict[str, Any]] = []
    hooks = TextualUIHooks(
        update_document=lambda view: None,
        handle_event=lambda name, payload: events.append({"name": name, "payload": payload}),
    )
    adapter = TextualNavAdapter(handler, hooks)

    adapter.handle_textual_key("down", modifiers=PREFIX)
    adapter.handle_textual_key("space", modifiers=PREFIX)

    activations = [event for event in events if event["name"] == "activate"]
    assert activations
    assert activations[-1]["payload"].checked is True


def test_process_timeouts_reports_expired_sequences() -> None:
    clock = FakeClock()
    handler = make_handler(clock=clock)
    statuses: List[str] = []
    views: List[DocumentView] = []
    hooks = TextualUIHooks(update_document=views.append, update_status=statuses.append)
    adapter = TextualNavAdapter(handler, hooks)

    pending = adapter.handle_textual_key("n", modifiers=PREFIX)
    assert pending.status == "pending"
    assert statuses[-1] == "awaiting_sequence"

    clock.now = 5000.0
    results = adapter.process_timeouts()

    assert results["keys"].status == "timeout"
    assert statuses[-1] == "keys:timeout"
    assert adapter.process_timeouts() == {}


def test_process_timeouts_runs_the_focus_deferral() -> None:
    handler = make_handler()
    views: List[DocumentView] = []
    adapter = TextualNavAdapter(handler, TextualUIHooks(update_document=views.append))
    adapter.handle_textual_key("down", modifiers=PREFIX)
    adapter.handle_textual_key("down", modifiers=PREFIX)
    refreshed = len(views)

    adapter.process_timeouts()

    assert handler.context.scheduler.pending() == 0
    assert len(views) == refreshed + 1


def test_adapter_emits_log_lines() -> None:
    handler = make_handler()
    logs: List[str] = []
    hooks = TextualUIHooks(update_document=lambda view: None, log=logs.append)
    adapter = TextualNavAdapter(handler, hooks)

    adapter.handle_textual_key("down", modifiers=("CTRL", "Alt"))

    assert any(line.startswith("key ->") for line in logs)
    assert any("granularity='structural_line'" in line for line in logs)
    assert any(line.startswith("result <-") for line in logs)


def test_render_document_without_visible_selection() -> None:
    document = load_html("<p>Only</p>")

    view = render_document(document, Selection.collapsed(Cursor(document.root, 0)))

    assert view == DocumentView("Only")


def test_resize_rewraps_flow_geometry() -> None:
    handler = make_handler()
    adapter = TextualNavAdapter(handler, TextualUIHooks(update_document=lambda view: None))

    adapter.resize(20)

    assert handler.context.manager.geometry.width == 20


def test_create_default_handler_loads_a_file(tmp_path: Path) -> None:
    page = tmp_path / "page.html"
    page.write_text("<html><head><title>Notes</title></head><body><p>Hi</p></body></html>")

    handler = create_default_handler(
        page, config=NavigationConfig(guard_window_ms=50), prefix=("ctrl",)
    )
    result = handler.handle_key("down", ("ctrl",))

    assert handler.context.manager.document.title == "Notes"
    assert handler.context.guard.window_ms == 50
    assert result.speech == "Hi"
