from __future__ import annotations

from docnav_engine.config import NavigationConfig
from docnav_engine.cursor import Cursor, Selection
from docnav_engine.dom import OBJECT_CHAR, Document, element
from docnav_engine.dom.html import load_html
from docnav_engine.messages import DefaultMessages


def test_load_html_reads_title_and_skips_hidden_content() -> None:
    document = load_html(
        "<html><head><title> Demo </title><style>p {}</style></head>"
        "<body><p>Shown</p><p hidden>Gone</p><p aria-hidden='true'>Also gone</p>"
        "<script>var x;</script><!-- note --></body></html>"
    )

    assert document.title == "Demo"
    assert [run.text for run in document.runs()] == ["Shown"]


def test_load_html_keeps_form_state() -> None:
    document = load_html(
        "<p><input id='q' value='hello'><input id='c' type='checkbox' checked='checked'>"
        "<textarea id='t'>line one</textarea></p>"
    )
    field = document.get_element_by_id("q")
    box = document.get_element_by_id("c")
    area = document.get_element_by_id("t")
    assert field is not None and box is not None and area is not None

    assert field.value == "hello"
    assert field.selection_start == field.selection_end == 5
    assert box.checked is True
    assert area.value == "line one"
    assert area.children == []


def test_whitespace_collapses_outside_pre() -> None:
    document = load_html("<p>a\n   b</p><pre>x\n  y</pre>")

    assert [run.text for run in document.runs()] == ["a b", "x\n  y"]


def test_runs_split_at_blocks_and_breaks() -> None:
    document = Document(
        element(
            "div",
            element("p", "one ", element("b", "two")),
            element("p", "three", element("br"), "four"),
        )
    )

    assert [run.text for run in document.runs()] == ["one two", "three", "four"]


def test_atomic_leaves_render_as_object_characters() -> None:
    document = Document(
        element("p", "Name", element("input", type="text", value="x"), "end")
    )
    run = document.runs()[0]

    assert run.text == f"Name {OBJECT_CHAR} end"
    assert len(document.leaves()) == 3


def test_segments_and_text_of_cover_partial_leaves() -> None:
    root = element("p", "Hello ", element("i", "big"), " world")
    document = Document(root)
    hello, big, world = document.leaves()

    selection = Selection(Cursor(hello, 3), Cursor(world, 3))
    segments = document.segments(selection)

    assert [(s.start, s.end) for s in segments] == [(3, 6), (0, 3), (0, 3)]
    assert segments[0].is_partial and not segments[1].is_partial
    assert document.text_of(selection) == "lo big wo"


def test_invalidate_bumps_the_version() -> None:
    paragraph = element("p", "one")
    document = Document(element("div", paragraph))
    assert len(document.leaves()) == 1

    paragraph.append(element("span", "two"))
    document.invalidate()

    assert document.version == 1
    assert len(document.leaves()) == 2


def test_detached_nodes_are_not_contained() -> None:
    paragraph = element("p", "text")
    document = Document(element("div", paragraph))

    assert document.contains(paragraph)
    paragraph.parent.remove(paragraph)
    assert not document.contains(paragraph)


def test_config_reads_prefixed_environment() -> None:
    config = NavigationConfig.from_env(
        {
            "DOCNAV_ENGINE_INITIAL_GRANULARITY": "WORD",
            "DOCNAV_ENGINE_MAX_LINE_LENGTH": "0",
            "DOCNAV_ENGINE_GUARD_WINDOW_MS": "250",
            "DOCNAV_ENGINE_KEY_TIMEOUT_MS": "800",
            "DOCNAV_ENGINE_FLOW_WIDTH": "",
        }
    )

    assert config.initial_granularity == "word"
    assert config.max_line_length is None
    assert config.guard_window_ms == 250.0
    assert config.key_timeout_ms == 800
    assert config.flow_width == 80
    assert config.with_overrides(flow_width=40).flow_width == 40


def test_messages_format_and_fall_back_to_keys() -> None:
    messages = DefaultMessages({"no_headers": "Sin encabezados"})

    assert messages.get("table_location", 1, 3, 2, 4) == "Row 1 of 3, Column 2 of 4"
    assert messages.get("no_headers") == "Sin encabezados"
    assert messages.get("not_a_key") == "not_a_key"
    assert "end_of_cell" in messages
