from __future__ import annotations

import pytest

from docnav_engine.cursor import Cursor, Selection, compare
from docnav_engine.dom import element
from docnav_engine.errors import InvalidSelection


def make_tree():
    first = element("p", "Hello")
    second = element("p", "World")
    root = element("div", first, second)
    return root, first.children[0], second.children[0]


def test_cursor_order_follows_document_position() -> None:
    _, hello, world = make_tree()

    assert compare(Cursor(hello, 0), Cursor(hello, 3)) == -1
    assert compare(Cursor(hello, 5), Cursor(world, 0)) == -1
    assert compare(Cursor(world, 2), Cursor(hello, 4)) == 1
    assert compare(Cursor(world, 2), Cursor(world, 2)) == 0


def test_cursor_rejects_negative_index() -> None:
    _, hello, _ = make_tree()

    with pytest.raises(InvalidSelection):
        Cursor(hello, -1)


def test_cursors_from_different_trees_do_not_compare() -> None:
    _, hello, _ = make_tree()
    _, other, _ = make_tree()

    with pytest.raises(InvalidSelection):
        Cursor(hello, 0).compare(Cursor(other, 0))


def test_selection_requires_ordered_endpoints() -> None:
    _, hello, world = make_tree()

    with pytest.raises(InvalidSelection):
        Selection(Cursor(world, 0), Cursor(hello, 0))

    spanning = Selection.spanning(Cursor(world, 0), Cursor(hello, 0))
    assert spanning.start.node is hello
    assert spanning.end.node is world


def test_reversed_flag_keeps_endpoints() -> None:
    _, hello, _ = make_tree()
    forward = Selection(Cursor(hello, 1), Cursor(hello, 4))

    backward = forward.set_reversed(True)

    assert backward.start == forward.start
    assert backward.end == forward.end
    assert backward.directed_start == forward.end
    assert forward.set_reversed(False) is forward
    assert backward.abs_equals(forward)
    assert not backward.equals(forward)


def test_collapse_follows_direction() -> None:
    _, hello, _ = make_tree()
    selection = Selection(Cursor(hello, 1), Cursor(hello, 4))

    assert selection.collapse_to_end().start.index == 4
    assert selection.collapse_to_end(True).start.index == 1
    assert selection.collapse_to_end(True).reversed is True
    assert selection.collapse_to_start().start.index == 1
    assert selection.collapse_to_start().is_collapsed


def test_single_node() -> None:
    _, hello, world = make_tree()

    assert Selection(Cursor(hello, 0), Cursor(hello, 5)).single_node() is hello
    assert Selection(Cursor(hello, 0), Cursor(world, 5)).single_node() is None
