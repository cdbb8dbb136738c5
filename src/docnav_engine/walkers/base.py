"""Walker contract and the unit-list walker most granularities build on."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from docnav_engine.cursor import Selection
from docnav_engine.dom import Document
from docnav_engine.messages import MessageTable

from .braille import BrailleLine, braille_range, editable_caret
from .description import NavDescription, describe_range


class Granularity(str, Enum):
    """Navigation unit sizes, declared from finest to coarsest."""

    CHARACTER = "character"
    WORD = "word"
    SENTENCE = "sentence"
    STRUCTURAL_LINE = "structural_line"
    LAYOUT_LINE = "layout_line"
    PARAGRAPH = "paragraph"
    OBJECT = "object"


class Walker:
    """Move, sync, describe and braille at one granularity.

    ``next`` and ``sync`` return ``None`` at the document boundary or when the
    selection no longer belongs to the document; they never wrap.
    """

    granularity: Granularity

    def __init__(self, document: Document, messages: MessageTable) -> None:
        self.document = document
        self.messages = messages

    def next(self, sel: Selection) -> Optional[Selection]:  # pragma: no cover - abstract
        raise NotImplementedError

    def sync(self, sel: Selection) -> Optional[Selection]:  # pragma: no cover - abstract
        raise NotImplementedError

    def get_description(
        self, prev: Optional[Selection], sel: Selection
    ) -> List[NavDescription]:
        return describe_range(self.document, self.messages, prev, sel)

    def get_braille(self, prev: Optional[Selection], sel: Selection) -> BrailleLine:
        del prev
        line = braille_range(self.document, self.messages, sel)
        node = sel.single_node()
        if node is not None:
            editable_caret(line, node)
        return line

    def get_granularity_msg(self) -> str:
        return self.granularity.value

    def attached(self, sel: Selection) -> bool:
        return self.document.contains(sel.start.node) and self.document.contains(
            sel.end.node
        )


Key = Tuple[int, ...]


class UnitWalker(Walker):
    """Walker over a precomputed, ordered, non-overlapping list of units.

    Subclasses implement ``build_units``; the list is rebuilt whenever the
    document is invalidated.
    """

    def __init__(self, document: Document, messages: MessageTable) -> None:
        super().__init__(document, messages)
        self._version = -1
        self._units: List[Selection] = []
        self._starts: List[Key] = []
        self._ends: List[Key] = []

    def build_units(self) -> List[Selection]:  # pragma: no cover - abstract
        raise NotImplementedError

    def units(self) -> Sequence[Selection]:
        if self._version != self.document.version:
            self._units = self.build_units()
            self._starts = [unit.start.key for unit in self._units]
            self._ends = [unit.end.key for unit in self._units]
            self._version = self.document.version
        return self._units

    def next(self, sel: Selection) -> Optional[Selection]:
        if not self.attached(sel):
            return None
        units = self.units()
        if sel.reversed:
            index = bisect_right(self._ends, sel.start.key) - 1
            return units[index].set_reversed(True) if index >= 0 else None
        index = bisect_left(self._starts, sel.end.key)
        return units[index] if index < len(units) else None

    def sync(self, sel: Selection) -> Optional[Selection]:
        if not self.attached(sel):
            return None
        index = self.index_at(sel)
        if index is None:
            return None
        return self.units()[index].set_reversed(sel.reversed)

    def index_at(self, sel: Selection) -> Optional[int]:
        """Unit containing ``sel.start``, else touching it, else the nearest."""

        units = self.units()
        if not units:
            return None
        key = sel.start.key
        index = bisect_right(self._starts, key) - 1
        if index >= 0 and key <= self._ends[index]:
            return index
        if index + 1 < len(units):
            return index + 1
        return index if index >= 0 else None


__all__ = ["Granularity", "Key", "UnitWalker", "Walker"]
