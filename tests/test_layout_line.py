from __future__ import annotations

from typing import List, Tuple

from docnav_engine.config import NavigationConfig
from docnav_engine.cursor import Cursor, Selection
from docnav_engine.dom import Document, EMPTY_RECT, FlowGeometry, Rect, StaticGeometry, element
from docnav_engine.dom.html import load_html
from docnav_engine.messages import DefaultMessages
from docnav_engine.navigation import NavigationManager
from docnav_engine.walkers import FlowRowWalker, Granularity, LayoutLineWalker, speak_all


def make_document() -> Document:
    return Document(
        element(
            "div",
            element("div", "Alpha", id="a"),
            element("div", "Beta", id="b"),
            element("div", "Gamma", id="c"),
        )
    )


def make_walker(bottoms: Tuple[float, ...] = (10, 10, 20)) -> Tuple[Document, LayoutLineWalker]:
    document = make_document()
    geometry = StaticGeometry(document)
    for column, (ident, bottom) in enumerate(zip("abc", bottoms)):
        node = document.get_element_by_id(ident)
        assert node is not None
        geometry.set(node, Rect(top=bottom - 10, bottom=bottom, left=column, right=column + 1))
    return document, LayoutLineWalker(document, DefaultMessages(), geometry)


def walk(walker: LayoutLineWalker, document: Document) -> List[Selection]:
    units = []
    current = walker.next(Selection.collapsed(document.start_cursor()))
    while current is not None:
        units.append(current)
        current = walker.next(current)
    return units


def test_lines_sharing_a_bottom_merge() -> None:
    document, walker = make_walker()

    lines = walk(walker, document)

    assert [document.text_of(line) for line in lines] == ["AlphaBeta", "Gamma"]


def test_backward_move_merges_in_reverse() -> None:
    document, walker = make_walker()
    last = walk(walker, document)[-1]

    back = walker.next(last.set_reversed(True))

    assert back is not None
    assert back.reversed is True
    assert document.text_of(back) == "AlphaBeta"
    assert walker.next(back) is None


def test_sync_expands_both_ways() -> None:
    document, walker = make_walker()
    beta = document.get_element_by_id("b")
    assert beta is not None

    synced = walker.sync(Selection.collapsed(Cursor(beta.children[0], 2)))

    assert synced is not None
    assert document.text_of(synced) == "AlphaBeta"


def test_distinct_bottoms_keep_lines_apart() -> None:
    document, walker = make_walker((10, 20, 30))

    lines = walk(walker, document)

    assert [document.text_of(line) for line in lines] == ["Alpha", "Beta", "Gamma"]


def test_empty_rect_never_breaks_a_line() -> None:
    document, walker = make_walker((10, 20, 30))
    assert isinstance(walker.geometry, StaticGeometry)
    beta = document.get_element_by_id("b")
    assert beta is not None
    walker.geometry.set(beta, EMPTY_RECT)

    lines = walk(walker, document)

    assert [document.text_of(line) for line in lines] == ["AlphaBetaGamma"]


def test_merged_line_is_described_piece_by_piece() -> None:
    document, walker = make_walker()
    first = walk(walker, document)[0]

    speech = speak_all(walker.get_description(None, first))
    braille = walker.get_braille(None, first)

    assert speech == "Alpha Beta"
    assert braille.text == "Alpha Beta"
    assert braille.start_index == 0


def test_flow_geometry_wraps_long_runs() -> None:
    document = load_html("<p>one two three four</p>")
    geometry = FlowGeometry(document, width=8)
    run = document.runs()[0]

    first = geometry.bounding_rect(run.span(0, 3))
    last = geometry.bounding_rect(run.span(14, 18))

    assert first.bottom == 1.0
    assert last.top > first.top

    geometry.resize(80)
    assert geometry.bounding_rect(run.span(14, 18)).bottom == 1.0


def layout_lines(manager: NavigationManager) -> List[str]:
    manager.set_granularity(Granularity.LAYOUT_LINE)
    lines = [manager.document.text_of(manager.current)]
    while manager.next():
        lines.append(manager.document.text_of(manager.current))
    return lines


def test_soft_wrapped_paragraph_yields_one_line_per_row() -> None:
    document = load_html("<p>one two three four five six seven eight</p>")
    manager = NavigationManager(document, config=NavigationConfig(flow_width=10))

    assert layout_lines(manager) == ["one two", "three four", "five six", "seven", "eight"]


def test_structural_lines_ignore_the_flow_width() -> None:
    document = load_html("<p>one two three four five six seven eight</p>")
    manager = NavigationManager(document, config=NavigationConfig(flow_width=10))

    assert manager.next()
    assert document.text_of(manager.current) == "one two three four five six seven eight"
    assert not manager.next()


def test_row_walker_follows_resizes() -> None:
    document = load_html("<p>one two three four</p>")
    geometry = FlowGeometry(document, width=8)
    walker = LayoutLineWalker(document, DefaultMessages(), geometry)
    assert isinstance(walker.sub_walker, FlowRowWalker)

    assert [document.text_of(line) for line in walk(walker, document)] == [
        "one two",
        "three",
        "four",
    ]

    geometry.resize(80)
    assert [document.text_of(line) for line in walk(walker, document)] == [
        "one two three four"
    ]
