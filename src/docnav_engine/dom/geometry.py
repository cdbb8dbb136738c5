"""Geometry oracles answering "where is this selection rendered?"."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Tuple

from docnav_engine.cursor import Selection

from .document import Document
from .node import Node


@dataclass(frozen=True, slots=True)
class Rect:
    top: float
    bottom: float
    left: float
    right: float

    @property
    def is_empty(self) -> bool:
        return self.bottom == self.top and self.right == self.left

    def union(self, other: "Rect") -> "Rect":
        if self.is_empty:
            return other
        if other.is_empty:
            return self
        return Rect(
            top=min(self.top, other.top),
            bottom=max(self.bottom, other.bottom),
            left=min(self.left, other.left),
            right=max(self.right, other.right),
        )


EMPTY_RECT = Rect(0, 0, 0, 0)


class GeometryOracle(Protocol):
    def bounding_rect(self, selection: Selection) -> Rect:
        ...


class StaticGeometry:
    """Fixed rectangles per node.

    A leaf without its own entry uses its nearest ancestor's rectangle; a
    selection's rectangle is the union over the leaves it covers.
    """

    def __init__(
        self, document: Document, rects: Optional[Mapping[Node, Rect]] = None
    ) -> None:
        self.document = document
        self._rects: Dict[Node, Rect] = dict(rects or {})

    def set(self, node: Node, rect: Rect) -> None:
        self._rects[node] = rect

    def rect_of(self, node: Node) -> Rect:
        for candidate in reversed(node.ancestors(include_self=True)):
            rect = self._rects.get(candidate)
            if rect is not None:
                return rect
        return EMPTY_RECT

    def bounding_rect(self, selection: Selection) -> Rect:
        total = EMPTY_RECT
        for segment in self.document.segments(selection):
            total = total.union(self.rect_of(segment.leaf))
        return total


_TOKEN = re.compile(r"\S+\s*|\s+")


class FlowGeometry:
    """Greedy word-wrap of every run into rows ``width`` columns wide.

    Each run starts on a fresh row, as block content would. Rows are
    ``line_height`` tall; columns are one unit wide.
    """

    def __init__(
        self, document: Document, width: int = 80, *, line_height: float = 1.0
    ) -> None:
        if width <= 0:
            raise ValueError("width must be positive")
        self.document = document
        self.width = width
        self.line_height = line_height
        self._version = -1
        self._positions: Dict[Node, Tuple[int, List[Tuple[int, int]]]] = {}
        self.row_count = 0

    def resize(self, width: int) -> None:
        if width > 0 and width != self.width:
            self.width = width
            self._version = -1

    def _layout(self) -> None:
        if self._version == self.document.version:
            return
        positions: Dict[Node, Tuple[int, List[Tuple[int, int]]]] = {}
        row = 0
        for run in self.document.runs():
            cells = list(self._wrap(run.text, row))
            for piece in run.pieces:
                positions[piece.leaf] = (piece.offset, cells)
            row = (cells[-1][0] if cells else row) + 1
        self._positions = positions
        self.row_count = row
        self._version = self.document.version

    def _wrap(self, text: str, row: int) -> Iterable[Tuple[int, int]]:
        column = 0
        for match in _TOKEN.finditer(text):
            token = match.group()
            visible = len(token.rstrip())
            if column and visible and column + visible > self.width:
                row += 1
                column = 0
            for _ in token:
                yield (row, column)
                column += 1

    def bounding_rect(self, selection: Selection) -> Rect:
        self._layout()
        rows: List[int] = []
        columns: List[int] = []
        for segment in self.document.segments(selection):
            placed = self._positions.get(segment.leaf)
            if placed is None:
                continue
            base, cells = placed
            stop = max(segment.end, segment.start + 1)
            for offset in range(base + segment.start, base + stop):
                if offset < len(cells):
                    row, column = cells[offset]
                    rows.append(row)
                    columns.append(column)
        if not rows:
            return EMPTY_RECT
        return Rect(
            top=min(rows) * self.line_height,
            bottom=(max(rows) + 1) * self.line_height,
            left=float(min(columns)),
            right=float(max(columns) + 1),
        )


__all__ = ["EMPTY_RECT", "FlowGeometry", "GeometryOracle", "Rect", "StaticGeometry"]
