"""Word and sentence granularities: regex units within each run."""

from __future__ import annotations

import re
from typing import List, Optional, Pattern

from docnav_engine.cursor import Selection
from docnav_engine.dom import OBJECT_CHAR

from .base import Granularity, UnitWalker
from .braille import BrailleLine, braille_in_line

WORD_PATTERN = re.compile(rf"{OBJECT_CHAR}|[^\s{OBJECT_CHAR}]+")
SENTENCE_PATTERN = re.compile(r"[^\s.!?][^.!?]*[.!?]*")


class RunPatternWalker(UnitWalker):
    """Units are the regex matches inside each run's text."""

    pattern: Pattern[str]

    def build_units(self) -> List[Selection]:
        units: List[Selection] = []
        for run in self.document.runs():
            for match in self.pattern.finditer(run.text):
                end = match.start() + len(match.group().rstrip())
                if end > match.start():
                    units.append(run.span(match.start(), end))
        return units


class WordWalker(RunPatternWalker):
    granularity = Granularity.WORD
    pattern = WORD_PATTERN

    def get_braille(self, prev: Optional[Selection], sel: Selection) -> BrailleLine:
        del prev
        return braille_in_line(self.document, self.messages, sel)


class SentenceWalker(RunPatternWalker):
    granularity = Granularity.SENTENCE
    pattern = SENTENCE_PATTERN


__all__ = ["SENTENCE_PATTERN", "SentenceWalker", "WORD_PATTERN", "WordWalker"]
