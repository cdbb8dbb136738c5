"""Document tree nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

TEXT_TAG = "#text"


@dataclass(eq=False)
class Node:
    """Element or text node.

    Nodes compare and hash by identity. ``value``, ``checked`` and the
    ``selection_*`` offsets model the live state of interactive elements.
    """

    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    text: str = ""
    children: List["Node"] = field(default_factory=list)
    parent: Optional["Node"] = field(default=None, repr=False)
    value: Optional[str] = None
    checked: bool = False
    selection_start: int = 0
    selection_end: int = 0

    def __post_init__(self) -> None:
        self.tag = self.tag if self.tag == TEXT_TAG else self.tag.lower()
        for child in self.children:
            child.parent = self

    @property
    def is_text(self) -> bool:
        return self.tag == TEXT_TAG

    @property
    def role(self) -> str:
        return self.attributes.get("role", "").strip().lower()

    def get_attribute(self, name: str, default: str | None = None) -> str | None:
        return self.attributes.get(name, default)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def append(self, child: "Node") -> "Node":
        if child.parent is not None:
            child.parent.children.remove(child)
        child.parent = self
        self.children.append(child)
        return child

    def remove(self, child: "Node") -> None:
        self.children.remove(child)
        child.parent = None

    def index_in_parent(self) -> int:
        if self.parent is None:
            return 0
        for index, sibling in enumerate(self.parent.children):
            if sibling is self:
                return index
        raise ValueError("node is not among its parent's children")

    def root(self) -> "Node":
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def ancestors(self, *, include_self: bool = False) -> List["Node"]:
        """Ancestors from the root down (outermost first)."""

        chain: List[Node] = []
        node = self if include_self else self.parent
        while node is not None:
            chain.append(node)
            node = node.parent
        chain.reverse()
        return chain

    def path(self) -> Tuple[int, ...]:
        """Child indices from the root; orders nodes by document position."""

        indices: List[int] = []
        node = self
        while node.parent is not None:
            indices.append(node.index_in_parent())
            node = node.parent
        indices.reverse()
        return tuple(indices)

    def contains(self, other: "Node") -> bool:
        node: Optional[Node] = other
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    def depth_first(self) -> Iterator["Node"]:
        yield self
        for child in self.children:
            yield from child.depth_first()

    def text_content(self) -> str:
        if self.is_text:
            return self.text
        return "".join(child.text_content() for child in self.children)

    def __repr__(self) -> str:
        if self.is_text:
            return f"Node(#text {self.text[:20]!r})"
        ident = self.attributes.get("id")
        suffix = f"#{ident}" if ident else ""
        return f"Node(<{self.tag}{suffix}>)"


Child = Union[Node, str]


def text(value: str) -> Node:
    return Node(TEXT_TAG, text=value)


def element(
    tag: str,
    *children: Child,
    attrs: Optional[Mapping[str, str]] = None,
    value: Optional[str] = None,
    checked: bool = False,
    **attributes: str,
) -> Node:
    """Build an element; plain strings become text children.

    Attribute names that are Python keywords (``class``, ``for``) go through
    ``attrs``; underscores in keyword names become dashes (``aria_level``).
    """

    merged: Dict[str, str] = {
        name.replace("_", "-"): str(val) for name, val in attributes.items()
    }
    if attrs:
        merged.update({name: str(val) for name, val in attrs.items()})
    nodes = [text(child) if isinstance(child, str) else child for child in children]
    node = Node(tag, attributes=merged, children=nodes, value=value, checked=checked)
    if value is not None:
        node.selection_start = node.selection_end = len(value)
    return node


__all__ = ["Node", "TEXT_TAG", "element", "text"]
