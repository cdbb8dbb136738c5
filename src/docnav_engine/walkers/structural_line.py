"""Structural lines: runs split at block boundaries and explicit breaks."""

from __future__ import annotations

import re
from typing import Iterator, List, Optional, Tuple

from docnav_engine.cursor import Selection
from docnav_engine.dom import Document
from docnav_engine.messages import MessageTable

from .base import Granularity, UnitWalker

_TOKEN = re.compile(r"\S+\s*")


def wrap_offsets(text: str, width: int) -> Iterator[Tuple[int, int]]:
    """Greedy word wrap; yields ``[start, end)`` without trailing spaces.

    A single word longer than ``width`` gets a line of its own.
    """

    start: Optional[int] = None
    end = 0
    for match in _TOKEN.finditer(text):
        word_end = match.start() + len(match.group().rstrip())
        if start is None:
            start, end = match.start(), word_end
        elif word_end - start > width:
            yield start, end
            start, end = match.start(), word_end
        else:
            end = word_end
    if start is not None:
        yield start, end


class StructuralLineWalker(UnitWalker):
    granularity = Granularity.STRUCTURAL_LINE

    def __init__(
        self,
        document: Document,
        messages: MessageTable,
        *,
        max_line_length: Optional[int] = None,
    ) -> None:
        super().__init__(document, messages)
        if max_line_length is not None and max_line_length <= 0:
            raise ValueError("max_line_length must be positive")
        self.max_line_length = max_line_length

    def build_units(self) -> List[Selection]:
        units: List[Selection] = []
        for run in self.document.runs():
            if self.max_line_length is None:
                units.append(run.whole())
                continue
            for start, end in wrap_offsets(run.text, self.max_line_length):
                units.append(run.span(start, end))
        return units


__all__ = ["StructuralLineWalker", "wrap_offsets"]
