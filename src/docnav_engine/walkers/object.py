"""Object granularity: one leaf (text node or atomic element) per step."""

from __future__ import annotations

from typing import List

from docnav_engine.cursor import Cursor, Selection
from docnav_engine.dom import leaf_length

from .base import Granularity, UnitWalker


class ObjectWalker(UnitWalker):
    granularity = Granularity.OBJECT

    def build_units(self) -> List[Selection]:
        units: List[Selection] = []
        for leaf in self.document.leaves():
            if leaf.is_text and not leaf.text.strip():
                continue
            units.append(Selection(Cursor(leaf, 0), Cursor(leaf, leaf_length(leaf))))
        return units


__all__ = ["ObjectWalker"]
