from __future__ import annotations

from docnav_engine.commands import CommandContext, KeyboardHandler
from docnav_engine.commands.handler import internal_link_target, must_pass_enter_key
from docnav_engine.dom import element
from docnav_engine.dom.html import load_html
from docnav_engine.errors import BoundaryReached
from docnav_engine.navigation import NavigationManager
from docnav_engine.runtime import DeferredQueue, UserCommandGuard

PAGE = "<p>One</p><p>Two</p><p>Three</p>"
PREFIX = ("ctrl", "alt")


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def make_handler(markup: str = PAGE) -> tuple[KeyboardHandler, FakeClock]:
    clock = FakeClock()
    manager = NavigationManager(load_html(markup))
    context = CommandContext(
        manager=manager,
        guard=UserCommandGuard(clock=clock),
        scheduler=DeferredQueue(clock=clock),
    )
    return KeyboardHandler(context, clock=clock), clock


def press(handler: KeyboardHandler, key: str, *extra: str):
    return handler.handle_key(key, PREFIX + extra)


def test_forward_speaks_the_next_line() -> None:
    handler, _ = make_handler()

    result = press(handler, "down")

    assert result.consumed
    assert result.status == "ok"
    assert result.speech == "One"
    assert result.braille is not None and result.braille.text == "One"


def test_navigation_marks_the_guard_and_defers_focus() -> None:
    handler, _ = make_handler()
    context = handler.context

    press(handler, "down")

    assert context.guard.is_busy()
    assert context.scheduler.pending() == 1
    assert context.scheduler.run_due() == 1


def test_granularity_change_does_not_mark_the_guard() -> None:
    handler, _ = make_handler()

    result = press(handler, "right")

    assert not handler.context.guard.is_busy()
    assert result.speech.startswith("Sentence ")
    assert handler.context.manager.granularity.value == "sentence"


def test_failed_move_lets_the_key_through() -> None:
    handler, _ = make_handler()
    for _ in range(3):
        press(handler, "down")

    result = press(handler, "down")

    assert result.consumed is False
    assert result.status == "boundary"
    assert isinstance(result.error, BoundaryReached)
    assert result.speech == "Three"


def test_jump_sequence_waits_for_second_key() -> None:
    handler, _ = make_handler("<p>Intro</p><h2>Topic</h2>")

    pending = press(handler, "n")

    assert pending.status == "pending"
    assert pending.message == "awaiting_sequence"
    assert pending.timeout_ms == 1000
    assert handler.pending_tokens == ("alt+ctrl+n",)

    result = handler.handle_key("h")

    assert result.speech == "Topic Heading 2"
    assert handler.pending_tokens == ()


def test_pending_sequence_times_out() -> None:
    handler, clock = make_handler()
    press(handler, "n")

    clock.now = 999.0
    assert handler.process_timeouts() is None

    clock.now = 1000.0
    outcome = handler.process_timeouts()

    assert outcome is not None
    assert outcome.status == "timeout"
    assert outcome.message == "pending_timeout"
    assert outcome.consumed is False
    assert handler.pending_tokens == ()
    assert handler.process_timeouts() is None


def test_force_timeout_without_pending_keys() -> None:
    handler, _ = make_handler()

    assert handler.force_timeout() is None
    press(handler, "p")
    assert handler.force_timeout().status == "timeout"


def test_broken_sequence_swallows_its_last_key() -> None:
    handler, _ = make_handler()
    press(handler, "n")

    result = handler.handle_key("z")

    assert result.status == "miss"
    assert result.consumed is True
    assert handler.pending_tokens == ()


def test_unbound_key_passes_through() -> None:
    handler, _ = make_handler()

    result = handler.handle_key("z")

    assert result.status == "miss"
    assert result.consumed is False


def test_failed_jump_reports_the_category_message() -> None:
    handler, _ = make_handler()
    press(handler, "n")

    result = handler.handle_key("t")

    assert result.status == "no_match"
    assert result.speech == "No next table."
    assert result.error is not None


def test_table_keys_are_gated_on_table_mode() -> None:
    handler, _ = make_handler(
        "<table><tr><td>A</td><td>B</td></tr><tr><td>C</td><td>D</td></tr></table>"
    )
    manager = handler.context.manager
    manager.next()

    assert press(handler, "down", "shift").consumed is False

    entered = press(handler, "t")
    assert manager.in_table_mode()
    assert entered.speech.startswith("Inside table ")

    moved = press(handler, "down", "shift")
    assert moved.speech == "C"

    left = press(handler, "t")
    assert not manager.in_table_mode()
    assert left.speech.startswith("Leaving table. ")


def test_enter_follows_internal_links() -> None:
    handler, _ = make_handler(
        "<p><a id='jump' href='#goal'>Skip</a></p><p>Filler</p><h2 id='goal'>Goal</h2>"
    )
    document = handler.context.manager.document
    document.focus(document.get_element_by_id("jump"))

    result = handler.handle_key("enter")

    assert result.consumed
    assert document.text_of(handler.context.manager.current) == "Goal"


def test_enter_follows_named_anchors() -> None:
    handler, _ = make_handler(
        "<p><a id='jump' href='#spot'>Skip</a></p><p><a name='spot'>Here</a></p>"
    )
    document = handler.context.manager.document
    document.focus(document.get_element_by_id("jump"))

    handler.handle_key("enter")

    assert document.text_of(handler.context.manager.current) == "Here"


def test_enter_passes_through_to_fields_and_external_links() -> None:
    handler, _ = make_handler(
        "<p><input id='field'><a id='out' href='https://example.org'>Out</a></p>"
    )
    document = handler.context.manager.document

    document.focus(document.get_element_by_id("field"))
    assert handler.handle_key("enter").status == "pass_through"

    document.focus(document.get_element_by_id("out"))
    assert handler.handle_key("enter").consumed is False


def test_enter_without_focus_acts_on_current_item() -> None:
    handler, _ = make_handler()
    press(handler, "down")

    result = handler.handle_key("enter")

    assert result.status == "no_action"
    assert result.speech == "No actions available."


def test_enter_helpers() -> None:
    assert internal_link_target(element("a", "x", href="#top")) == "top"
    assert internal_link_target(element("a", "x", href="#")) is None
    assert internal_link_target(element("div")) is None
    assert must_pass_enter_key(element("div", contenteditable="true"))
    assert must_pass_enter_key(element("div", role="textbox"))
    assert not must_pass_enter_key(element("div"))
    assert not must_pass_enter_key(None)
