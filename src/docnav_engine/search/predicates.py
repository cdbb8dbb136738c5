"""Category predicates over an ancestor delta.

Each predicate receives the nodes a move newly entered, outermost first, and
returns the first matching node or ``None``. Role-or-tag predicates scan
front to back; pure tag predicates scan back to front.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Sequence

from docnav_engine.dom import Node, roles

Predicate = Callable[[Sequence[Node]], Optional[Node]]


def _first(nodes: Iterable[Node], test: Callable[[Node], bool]) -> Optional[Node]:
    for node in nodes:
        if not node.is_text and test(node):
            return node
    return None


def contains_tag_name(nodes: Sequence[Node], tag: str) -> Optional[Node]:
    return _first(reversed(nodes), lambda node: node.tag == tag)


def _input_of(node: Node, *kinds: str) -> bool:
    return node.tag == "input" and roles.input_type(node) in kinds


def checkbox(nodes: Sequence[Node]) -> Optional[Node]:
    return _first(
        nodes, lambda n: n.role == "checkbox" or _input_of(n, "checkbox")
    )


def radio(nodes: Sequence[Node]) -> Optional[Node]:
    return _first(nodes, lambda n: n.role == "radio" or _input_of(n, "radio"))


def slider(nodes: Sequence[Node]) -> Optional[Node]:
    return _first(nodes, lambda n: n.role == "slider" or _input_of(n, "range"))


def graphic(nodes: Sequence[Node]) -> Optional[Node]:
    return _first(nodes, lambda n: n.tag == "img" or _input_of(n, "img", "image"))


def button(nodes: Sequence[Node]) -> Optional[Node]:
    return _first(
        nodes,
        lambda n: n.role == "button"
        or n.tag == "button"
        or _input_of(n, "submit", "button", "reset"),
    )


def combo_box(nodes: Sequence[Node]) -> Optional[Node]:
    return _first(nodes, lambda n: n.role == "combobox" or n.tag == "select")


def edit_text(nodes: Sequence[Node]) -> Optional[Node]:
    return _first(nodes, roles.is_editable_text)


def _is_heading(node: Node) -> bool:
    return node.role == "heading" or node.tag in roles.HEADING_TAGS


def heading(nodes: Sequence[Node]) -> Optional[Node]:
    return _first(nodes, _is_heading)


def heading_level(level: int) -> Predicate:
    """Predicate for ``<hN>``; scans back to front like other tag predicates."""

    if not 1 <= level <= 6:
        raise ValueError(f"heading level must be 1-6, got {level}")
    tag = f"h{level}"

    def predicate(nodes: Sequence[Node]) -> Optional[Node]:
        return contains_tag_name(nodes, tag)

    predicate.__name__ = f"heading{level}"
    return predicate


def link(nodes: Sequence[Node]) -> Optional[Node]:
    return _first(nodes, roles.is_link)


def not_link(nodes: Sequence[Node]) -> Optional[Node]:
    """First delta node when the delta holds no link; ``None`` otherwise."""

    if not nodes or link(nodes) is not None:
        return None
    return nodes[0]


def table(nodes: Sequence[Node]) -> Optional[Node]:
    return contains_tag_name(nodes, "table")


def list_(nodes: Sequence[Node]) -> Optional[Node]:
    return _first(nodes, roles.is_list)


def list_item(nodes: Sequence[Node]) -> Optional[Node]:
    return _first(nodes, roles.is_list_item)


def blockquote(nodes: Sequence[Node]) -> Optional[Node]:
    return contains_tag_name(nodes, "blockquote")


FORM_FIELD_ROLES = frozenset(
    {"button", "checkbox", "combobox", "radio", "slider", "spinbutton", "textbox"}
)


def form_field(nodes: Sequence[Node]) -> Optional[Node]:
    return _first(
        nodes,
        lambda n: n.role in FORM_FIELD_ROLES or n.tag in {"input", "select", "button", "textarea"},
    )


def landmark(nodes: Sequence[Node]) -> Optional[Node]:
    return _first(nodes, roles.is_landmark)


def jump(nodes: Sequence[Node]) -> Optional[Node]:
    """Jump points: the outermost node that is a landmark or a heading."""

    return _first(nodes, lambda n: roles.is_landmark(n) or _is_heading(n))


__all__ = [
    "FORM_FIELD_ROLES",
    "Predicate",
    "blockquote",
    "button",
    "checkbox",
    "combo_box",
    "contains_tag_name",
    "edit_text",
    "form_field",
    "graphic",
    "heading",
    "heading_level",
    "jump",
    "landmark",
    "link",
    "list_",
    "list_item",
    "not_link",
    "radio",
    "slider",
    "table",
]
