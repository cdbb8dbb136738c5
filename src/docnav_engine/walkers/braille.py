"""Braille line model and builders."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from docnav_engine.cursor import Cursor, Selection
from docnav_engine.dom import Document, Node, roles
from docnav_engine.messages import MessageTable

from .description import control_name, control_value, group_segments

ITEM_SEPARATOR = " "
TEXT_SPAN = "text"
VALUE_SPAN = "value"
ANNOTATION_SPAN = "annotation"
ITEM_SPAN = "item"


@dataclass(frozen=True, slots=True)
class BrailleSpan:
    """``[start, end)`` of the line rendered from ``node``.

    ``source_start`` is the offset inside ``node`` the span's first cell
    corresponds to (text spans only).
    """

    start: int
    end: int
    node: Optional[Node]
    kind: str = TEXT_SPAN
    source_start: int = 0


@dataclass(slots=True)
class BrailleLine:
    """Compact text line with spans back to source nodes and an optional cursor.

    ``start_index``/``end_index`` are ``-1`` when no cursor is shown.
    """

    text: str = ""
    spans: List[BrailleSpan] = field(default_factory=list)
    start_index: int = -1
    end_index: int = -1

    def __len__(self) -> int:
        return len(self.text)

    @property
    def has_cursor(self) -> bool:
        return self.start_index >= 0

    def append(
        self,
        value: str,
        node: Optional[Node] = None,
        kind: str = TEXT_SPAN,
        *,
        source_start: int = 0,
    ) -> Optional[BrailleSpan]:
        if not value:
            return None
        start = len(self.text)
        self.text += value
        span = BrailleSpan(start, len(self.text), node, kind, source_start)
        self.spans.append(span)
        return span

    def append_separator(self) -> None:
        if self.text and not self.text.endswith(ITEM_SEPARATOR):
            self.text += ITEM_SEPARATOR

    def extend(self, other: "BrailleLine") -> int:
        """Append ``other`` after a separator; return where it starts.

        The cursor of ``other`` is not carried over.
        """

        self.append_separator()
        offset = len(self.text)
        self.text += other.text
        for span in other.spans:
            self.spans.append(
                BrailleSpan(
                    span.start + offset,
                    span.end + offset,
                    span.node,
                    span.kind,
                    span.source_start,
                )
            )
        return offset

    def set_cursor(self, start: int, end: Optional[int] = None) -> None:
        self.start_index = start
        self.end_index = start if end is None else end

    def get_span_start(self, kind: str, node: Optional[Node] = None) -> int:
        for span in self.spans:
            if span.kind == kind and (node is None or span.node is node):
                return span.start
        return -1

    def locate(self, cursor: Cursor) -> int:
        """Line offset of ``cursor``, or ``-1`` if no span renders it."""

        for span in self.spans:
            if span.node is not cursor.node or span.kind != TEXT_SPAN:
                continue
            offset = cursor.index - span.source_start
            if 0 <= offset <= span.end - span.start:
                return span.start + offset
        return -1


def braille_abbreviation(node: Node, messages: MessageTable) -> str:
    level = roles.heading_level(node)
    if level is not None:
        return messages.get("braille_heading", level)
    key = roles.control_role(node)
    if not key:
        return ""
    return messages.get(key.replace("role_", "braille_", 1))


def append_control(line: BrailleLine, node: Node, messages: MessageTable) -> None:
    """``name value abbrev``, with the value under ``VALUE_SPAN``."""

    name = control_name(node)
    if name:
        line.append(name, node, ANNOTATION_SPAN)
    value = control_value(node, messages)
    if roles.is_editable_text(node):
        line.append_separator()
        line.append(value or " ", node, VALUE_SPAN)
    elif value:
        line.append_separator()
        line.append(value, node, VALUE_SPAN)
    abbreviation = braille_abbreviation(node, messages)
    if abbreviation:
        line.append_separator()
        line.append(abbreviation, node, ANNOTATION_SPAN)


def braille_range(
    document: Document, messages: MessageTable, selection: Selection
) -> BrailleLine:
    """Braille every segment ``selection`` covers, items separated by a space."""

    line = BrailleLine()
    for owner, segments in group_segments(document, selection):
        if owner is not None and roles.is_atomic(owner):
            line.append_separator()
            append_control(line, owner, messages)
            continue
        if line.text:
            line.append_separator()
        for segment in segments:
            line.append(
                segment.leaf.text[segment.start : segment.end],
                segment.leaf,
                TEXT_SPAN,
                source_start=segment.start,
            )
        if owner is not None and roles.control_role(owner) is not None:
            abbreviation = braille_abbreviation(owner, messages)
            if abbreviation:
                line.append_separator()
                line.append(abbreviation, owner, ANNOTATION_SPAN)
    return line


def editable_caret(line: BrailleLine, node: Node) -> bool:
    """Place the cursor on ``node``'s live caret; ``False`` if not editable."""

    if not roles.is_editable_text(node):
        return False
    value_start = line.get_span_start(VALUE_SPAN, node)
    if value_start < 0:
        return False
    start = value_start + node.selection_start
    end = value_start + node.selection_end
    line.set_cursor(start, end if end > start else start + 1)
    return True


def braille_in_line(
    document: Document, messages: MessageTable, selection: Selection
) -> BrailleLine:
    """Braille the structural line around ``selection`` with the cursor on it."""

    run = document.run_containing(selection.start)
    if run is None:
        return braille_range(document, messages, selection)
    line = braille_range(document, messages, run.whole())
    start = line.locate(selection.start)
    if start < 0:
        start = line.get_span_start(ANNOTATION_SPAN, selection.start.node)
        if start < 0:
            start = line.get_span_start(VALUE_SPAN, selection.start.node)
        if start >= 0:
            line.set_cursor(start, start + 1)
        return line
    end = line.locate(selection.end)
    line.set_cursor(start, end if end > start else start + 1)
    return line


__all__ = [
    "ANNOTATION_SPAN",
    "BrailleLine",
    "BrailleSpan",
    "ITEM_SEPARATOR",
    "ITEM_SPAN",
    "TEXT_SPAN",
    "VALUE_SPAN",
    "append_control",
    "braille_abbreviation",
    "braille_in_line",
    "braille_range",
    "editable_caret",
]
