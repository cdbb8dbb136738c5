"""Paragraph granularity: consecutive runs inside the same block."""

from __future__ import annotations

from typing import List

from docnav_engine.cursor import Selection

from .base import Granularity, UnitWalker


class ParagraphWalker(UnitWalker):
    granularity = Granularity.PARAGRAPH

    def build_units(self) -> List[Selection]:
        units: List[Selection] = []
        block = None
        for run in self.document.runs():
            span = run.whole()
            if units and run.block is block:
                units[-1] = Selection(units[-1].start, span.end)
            else:
                units.append(span)
            block = run.block
        return units


__all__ = ["ParagraphWalker"]
