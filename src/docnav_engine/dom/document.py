"""Document wrapper: leaf order, inline runs and selection segments."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from docnav_engine.cursor import Cursor, Selection
from docnav_engine.runtime import telemetry

from . import roles
from .node import Node

OBJECT_CHAR = "\ufffc"


def leaf_length(node: Node) -> int:
    return len(node.text) if node.is_text else 1


@dataclass(frozen=True, slots=True)
class Piece:
    """A leaf placed inside a run's text."""

    leaf: Node
    offset: int
    length: int

    @property
    def stop(self) -> int:
        return self.offset + self.length


@dataclass(frozen=True, slots=True)
class Segment:
    """The part ``[start, end)`` of one leaf covered by a selection."""

    leaf: Node
    start: int
    end: int

    @property
    def is_partial(self) -> bool:
        return self.start > 0 or self.end < leaf_length(self.leaf)


@dataclass(frozen=True, slots=True)
class Run:
    """Leaves rendered on one structural line, between block boundaries."""

    block: Node
    pieces: Tuple[Piece, ...]
    text: str

    @property
    def first(self) -> Node:
        return self.pieces[0].leaf

    @property
    def last(self) -> Node:
        return self.pieces[-1].leaf

    def cursor_at_start(self, offset: int) -> Cursor:
        """Cursor for a unit starting at ``offset``; gaps snap forward."""

        for piece in self.pieces:
            if offset < piece.stop:
                return Cursor(piece.leaf, max(offset - piece.offset, 0))
        last = self.pieces[-1]
        return Cursor(last.leaf, last.length)

    def cursor_at_end(self, offset: int) -> Cursor:
        """Cursor for a unit ending at ``offset``; gaps snap backward."""

        for piece in reversed(self.pieces):
            if offset > piece.offset:
                return Cursor(piece.leaf, min(offset - piece.offset, piece.length))
        first = self.pieces[0]
        return Cursor(first.leaf, 0)

    def span(self, start: int, end: int) -> Selection:
        return Selection(self.cursor_at_start(start), self.cursor_at_end(end))

    def whole(self) -> Selection:
        return Selection(Cursor(self.first, 0), Cursor(self.last, self.pieces[-1].length))

    def offset_of(self, cursor: Cursor) -> Optional[int]:
        for piece in self.pieces:
            if piece.leaf is cursor.node:
                return piece.offset + min(cursor.index, piece.length)
        return None


class Document:
    """Read-mostly view over a node tree.

    Layout-independent structure (leaves, runs) is cached and rebuilt after
    ``invalidate()``; callers mutating the tree must invalidate. The only state
    the engine itself changes is focus and scroll position.
    """

    def __init__(self, root: Node, *, title: str = "") -> None:
        self.root = root
        self.title = title
        self.version = 0
        self.active_element: Optional[Node] = None
        self.scrolled_to: Optional[Node] = None
        self._leaves: Optional[List[Node]] = None
        self._leaf_keys: List[Tuple[int, ...]] = []
        self._runs: Optional[List[Run]] = None

    def invalidate(self) -> None:
        self.version += 1
        self._leaves = None
        self._leaf_keys = []
        self._runs = None

    def contains(self, node: Node) -> bool:
        return node.root() is self.root

    def start_cursor(self) -> Cursor:
        return Cursor(self.root, 0)

    def get_element_by_id(self, ident: str) -> Optional[Node]:
        for node in self.root.depth_first():
            if node.get_attribute("id") == ident:
                return node
        return None

    def focus(self, node: Optional[Node]) -> None:
        self.active_element = node
        telemetry.record_event(
            "document.focus", level="debug", data={"node": repr(node)}
        )

    def scroll_to(self, node: Node) -> None:
        self.scrolled_to = node

    def leaves(self) -> Sequence[Node]:
        if self._leaves is None:
            self._build()
        assert self._leaves is not None
        return self._leaves

    def runs(self) -> Sequence[Run]:
        if self._runs is None:
            self._build()
        assert self._runs is not None
        return self._runs

    def leaves_in(self, node: Node) -> List[Node]:
        return [leaf for leaf in self.leaves() if node.contains(leaf)]

    def segments(self, selection: Selection) -> List[Segment]:
        leaves = self.leaves()
        start, end = selection.start, selection.end
        first = max(bisect_right(self._leaf_keys, start.node.path()) - 1, 0)
        found: List[Segment] = []
        for leaf in leaves[first:]:
            length = leaf_length(leaf)
            if Cursor(leaf, 0).compare(end) > 0:
                break
            if Cursor(leaf, length).compare(start) < 0:
                continue
            lo = start.index if start.node is leaf else 0
            hi = end.index if end.node is leaf else length
            lo, hi = min(lo, length), min(hi, length)
            if lo < hi or (selection.is_collapsed and start.node is leaf):
                found.append(Segment(leaf, lo, hi))
        return found

    def text_of(self, selection: Selection) -> str:
        parts = []
        for segment in self.segments(selection):
            if segment.leaf.is_text:
                parts.append(segment.leaf.text[segment.start : segment.end])
            else:
                parts.append(roles.accessible_name(segment.leaf))
        return "".join(parts)

    def run_containing(self, cursor: Cursor) -> Optional[Run]:
        for run in self.runs():
            if run.offset_of(cursor) is not None:
                return run
        return None

    def _build(self) -> None:
        with telemetry.span(
            "document::build", component="document", metadata={"version": self.version}
        ):
            leaves: List[Node] = []
            runs: List[Run] = []
            builder = _RunBuilder()
            for kind, node in _stream(self.root):
                if kind == "break":
                    run = builder.flush()
                    if run is not None:
                        runs.append(run)
                    continue
                leaves.append(node)
                builder.add(node)
            run = builder.flush()
            if run is not None:
                runs.append(run)
            self._leaves = leaves
            self._leaf_keys = [leaf.path() for leaf in leaves]
            self._runs = runs


class _RunBuilder:
    def __init__(self) -> None:
        self._pieces: List[Piece] = []
        self._chunks: List[str] = []
        self._length = 0
        self._pending_space = False

    def add(self, leaf: Node) -> None:
        if leaf.is_text and not leaf.text.strip():
            self._pending_space = bool(self._pieces)
            return
        chunk = leaf.text if leaf.is_text else OBJECT_CHAR
        if self._pieces and self._needs_gap(leaf, chunk):
            self._chunks.append(" ")
            self._length += 1
        self._pieces.append(Piece(leaf, self._length, len(chunk)))
        self._chunks.append(chunk)
        self._length += len(chunk)
        self._pending_space = False

    def _needs_gap(self, leaf: Node, chunk: str) -> bool:
        previous = self._chunks[-1]
        if previous[-1:].isspace() or chunk[:1].isspace():
            return False
        return self._pending_space or not leaf.is_text or not self._pieces[-1].leaf.is_text

    def flush(self) -> Optional[Run]:
        run = None
        if self._pieces:
            block = _block_of(self._pieces[0].leaf)
            run = Run(block=block, pieces=tuple(self._pieces), text="".join(self._chunks))
        self._pieces = []
        self._chunks = []
        self._length = 0
        self._pending_space = False
        return run


def _block_of(node: Node) -> Node:
    for ancestor in reversed(node.ancestors()):
        if roles.is_block(ancestor):
            return ancestor
    return node.root()


def _stream(node: Node) -> Iterator[Tuple[str, Node]]:
    if roles.is_hidden(node):
        return
    if node.is_text:
        if node.text:
            yield ("leaf", node)
        return
    if node.tag == "br":
        yield ("break", node)
        return
    block = roles.is_block(node)
    if block:
        yield ("break", node)
    if roles.is_atomic(node):
        yield ("leaf", node)
    else:
        for child in node.children:
            yield from _stream(child)
    if block:
        yield ("break", node)


__all__ = [
    "Document",
    "OBJECT_CHAR",
    "Piece",
    "Run",
    "Segment",
    "leaf_length",
]
