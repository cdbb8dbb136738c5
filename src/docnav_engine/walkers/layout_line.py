"""Layout lines: structural lines merged or split where rendering breaks them.

A layout line is the longest stretch of consecutive sub-walker units whose
bounding rectangles share one ``bottom``. Comparison is exact; an empty
rectangle never counts as a break. Under a :class:`FlowGeometry` the
sub-walker yields one unit per wrapped row, so a long run splits wherever
the flow breaks it.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Sequence

from docnav_engine.cursor import Selection
from docnav_engine.dom import Document, FlowGeometry, GeometryOracle, roles
from docnav_engine.messages import MessageTable
from docnav_engine.runtime import telemetry

from .base import Granularity, UnitWalker, Walker
from .braille import ITEM_SPAN, VALUE_SPAN, BrailleLine, BrailleSpan
from .description import NavDescription
from .structural_line import StructuralLineWalker


class FlowRowWalker(StructuralLineWalker):
    """Structural lines cut at the rows a :class:`FlowGeometry` wraps them into.

    Units follow the geometry's current width, so a resize re-cuts them.
    """

    def __init__(
        self, document: Document, messages: MessageTable, geometry: FlowGeometry
    ) -> None:
        super().__init__(document, messages, max_line_length=geometry.width)
        self.geometry = geometry

    def units(self) -> Sequence[Selection]:
        if self.max_line_length != self.geometry.width:
            self.max_line_length = self.geometry.width
            self._version = -1
        return super().units()


class LayoutLineWalker(Walker):
    granularity = Granularity.LAYOUT_LINE

    def __init__(
        self,
        document: Document,
        messages: MessageTable,
        geometry: GeometryOracle,
        *,
        sub_walker: Optional[UnitWalker] = None,
    ) -> None:
        super().__init__(document, messages)
        self.geometry = geometry
        if sub_walker is None:
            sub_walker = (
                FlowRowWalker(document, messages, geometry)
                if isinstance(geometry, FlowGeometry)
                else StructuralLineWalker(document, messages)
            )
        self.sub_walker = sub_walker

    def next(self, sel: Selection) -> Optional[Selection]:
        end_sel = sel.collapse_to_end()
        if self.sub_walker.sync(end_sel) is None:
            return None
        start = self.sub_walker.next(end_sel)
        if start is None:
            return None
        return self.extend(start.set_reversed(sel.reversed))

    def sync(self, sel: Selection) -> Optional[Selection]:
        line = self.sub_walker.sync(sel)
        if line is None:
            return None
        forward = self.extend(line.set_reversed(False))
        backward = self.extend(line.set_reversed(True))
        return Selection(backward.start, forward.end, sel.reversed)

    def extend(self, start: Selection) -> Selection:
        """Grow ``start`` in its own direction up to the next visual line break."""

        end = start
        candidate: Optional[Selection] = start
        steps = 0
        while candidate is not None:
            end = candidate
            candidate = self.sub_walker.next(end)
            if candidate is not None and self.is_visual_line_break(end, candidate):
                break
            steps += 1
        telemetry.record_event(
            "layout.extend",
            level="debug",
            data={"reversed": start.reversed, "merged": steps},
        )
        if start.reversed:
            return Selection(end.start, start.end, True)
        return Selection(start.start, end.end, False)

    def is_visual_line_break(self, left: Selection, right: Selection) -> bool:
        left_rect = self.geometry.bounding_rect(left.absolute())
        right_rect = self.geometry.bounding_rect(right.absolute())
        if left_rect.is_empty or right_rect.is_empty:
            return False
        return left_rect.bottom != right_rect.bottom

    def sub_units(self, line: Selection) -> Iterator[Selection]:
        """Sub-walker units from the start of ``line`` through its end."""

        absolute = line.absolute()
        cur = self.sub_walker.sync(Selection.collapsed(absolute.start))
        while cur is not None:
            yield cur
            if cur.end.compare(absolute.end) >= 0:
                return
            cur = self.sub_walker.next(cur.absolute())

    def get_description(
        self, prev: Optional[Selection], sel: Selection
    ) -> List[NavDescription]:
        if sel.single_node() is not None:
            return self.sub_walker.get_description(prev, sel)
        descriptions: List[NavDescription] = []
        for cur in self.sub_units(sel):
            descriptions.extend(self.sub_walker.get_description(prev, cur))
            prev = cur
        return descriptions

    def get_braille(self, prev: Optional[Selection], sel: Selection) -> BrailleLine:
        if sel.single_node() is not None:
            return self.sub_walker.get_braille(prev, sel)
        braille = BrailleLine()
        caret = self.sub_walker.sync(sel.absolute())
        layout = self.sync(sel)
        if caret is None or layout is None:
            return braille
        for cur in self.sub_units(layout):
            self._append_braille(prev, caret, cur, braille)
            prev = cur
        return braille

    def _append_braille(
        self,
        prev: Optional[Selection],
        caret: Selection,
        cur: Selection,
        braille: BrailleLine,
    ) -> None:
        item = self.sub_walker.get_braille(prev, cur)
        value_start = item.get_span_start(VALUE_SPAN)
        offset = braille.extend(item)
        braille.spans.append(
            BrailleSpan(offset, offset + len(item), cur.start.node, ITEM_SPAN)
        )
        if not cur.abs_equals(caret):
            return
        node = cur.start.node
        if value_start >= 0 and roles.is_editable_text(node):
            braille.set_cursor(
                offset + value_start + node.selection_start,
                offset + value_start + node.selection_end,
            )
        else:
            braille.set_cursor(offset, offset + 1)


__all__ = ["FlowRowWalker", "LayoutLineWalker"]
