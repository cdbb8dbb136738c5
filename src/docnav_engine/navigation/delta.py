"""Ancestor delta between two selections."""

from __future__ import annotations

from typing import List, Optional

from docnav_engine.cursor import Selection
from docnav_engine.dom import Document, Node


def ancestor_delta(
    document: Document, previous: Optional[Selection], current: Selection
) -> List[Node]:
    """Nodes ``current`` spans that ``previous`` was not already inside.

    Walks every leaf the new selection covers and collects its ancestors
    (outermost first, the leaf included) that are not ancestors of the
    previous selection's start. Each node appears once, in document order.
    """

    before = set()
    if previous is not None:
        before = {id(node) for node in previous.start.node.ancestors(include_self=True)}
    leaves = [segment.leaf for segment in document.segments(current)]
    if not leaves:
        leaves = [current.start.node]
    seen = set()
    delta: List[Node] = []
    for leaf in leaves:
        for node in leaf.ancestors(include_self=True):
            key = id(node)
            if key in before or key in seen:
                continue
            seen.add(key)
            delta.append(node)
    return delta


__all__ = ["ancestor_delta"]
