"""Character granularity."""

from __future__ import annotations

from typing import List, Optional

from docnav_engine.cursor import Cursor, Selection
from docnav_engine.dom import leaf_length

from .base import Granularity, UnitWalker
from .braille import BrailleLine, braille_in_line
from .description import NavDescription, describe_control, entered_context


class CharacterWalker(UnitWalker):
    granularity = Granularity.CHARACTER

    def build_units(self) -> List[Selection]:
        units: List[Selection] = []
        for leaf in self.document.leaves():
            for index in range(leaf_length(leaf)):
                units.append(Selection(Cursor(leaf, index), Cursor(leaf, index + 1)))
        return units

    def get_description(
        self, prev: Optional[Selection], sel: Selection
    ) -> List[NavDescription]:
        node = sel.start.node
        if not node.is_text:
            description = describe_control(node, self.messages)
        else:
            char = node.text[sel.start.index : sel.start.index + 1]
            if char.isspace() or not char:
                char = self.messages.get("space")
            description = NavDescription(text=char)
        return [description.with_context(entered_context(prev, sel, self.messages))]

    def get_braille(self, prev: Optional[Selection], sel: Selection) -> BrailleLine:
        del prev
        return braille_in_line(self.document, self.messages, sel)


__all__ = ["CharacterWalker"]
