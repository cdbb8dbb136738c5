"""Ordered granularity registry."""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Tuple

from docnav_engine.dom import Document, FlowGeometry, GeometryOracle
from docnav_engine.messages import MessageTable

from .base import Granularity, Walker
from .character import CharacterWalker
from .layout_line import FlowRowWalker, LayoutLineWalker
from .object import ObjectWalker
from .paragraph import ParagraphWalker
from .structural_line import StructuralLineWalker
from .word import SentenceWalker, WordWalker

ORDER: Tuple[Granularity, ...] = tuple(Granularity)


class GranularityRegistry:
    """One walker per granularity, ordered fine to coarse.

    ``up``/``down`` clamp at both ends instead of wrapping.
    """

    def __init__(self, walkers: Dict[Granularity, Walker]) -> None:
        missing = [g for g in ORDER if g not in walkers]
        if missing:
            raise ValueError(f"no walker registered for {', '.join(g.value for g in missing)}")
        self._walkers = dict(walkers)

    @classmethod
    def standard(
        cls,
        document: Document,
        messages: MessageTable,
        geometry: GeometryOracle,
        *,
        max_line_length: Optional[int] = None,
    ) -> "GranularityRegistry":
        structural = StructuralLineWalker(
            document, messages, max_line_length=max_line_length
        )
        rows: StructuralLineWalker = structural
        if isinstance(geometry, FlowGeometry):
            rows = FlowRowWalker(document, messages, geometry)
        return cls(
            {
                Granularity.CHARACTER: CharacterWalker(document, messages),
                Granularity.WORD: WordWalker(document, messages),
                Granularity.SENTENCE: SentenceWalker(document, messages),
                Granularity.STRUCTURAL_LINE: structural,
                Granularity.LAYOUT_LINE: LayoutLineWalker(
                    document, messages, geometry, sub_walker=rows
                ),
                Granularity.PARAGRAPH: ParagraphWalker(document, messages),
                Granularity.OBJECT: ObjectWalker(document, messages),
            }
        )

    def walker(self, granularity: Granularity) -> Walker:
        return self._walkers[granularity]

    def up(self, granularity: Granularity) -> Granularity:
        index = ORDER.index(granularity)
        return ORDER[min(index + 1, len(ORDER) - 1)]

    def down(self, granularity: Granularity) -> Granularity:
        index = ORDER.index(granularity)
        return ORDER[max(index - 1, 0)]

    @property
    def finest(self) -> Granularity:
        return ORDER[0]

    @property
    def coarsest(self) -> Granularity:
        return ORDER[-1]

    def __iter__(self) -> Iterator[Granularity]:
        return iter(ORDER)


__all__ = ["GranularityRegistry", "ORDER"]
