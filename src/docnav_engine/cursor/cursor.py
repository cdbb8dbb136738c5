"""Immutable cursor and selection primitives."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

from docnav_engine.errors import InvalidSelection

if TYPE_CHECKING:
    from docnav_engine.dom.node import Node


@dataclass(frozen=True, slots=True)
class Cursor:
    """A position ``index`` inside ``node``.

    For text nodes ``index`` is a character offset; for elements it counts
    children (``index == 1`` on an atomic element means "after it").
    """

    node: Node
    index: int = 0

    def __post_init__(self) -> None:
        if self.index < 0:
            raise InvalidSelection(f"negative cursor index {self.index}", cursor=self)

    @property
    def key(self) -> Tuple[int, ...]:
        return self.node.path() + (self.index,)

    def compare(self, other: "Cursor") -> int:
        if self.node is other.node:
            return (self.index > other.index) - (self.index < other.index)
        if self.node.root() is not other.node.root():
            raise InvalidSelection("cursors belong to different trees", cursor=other)
        mine, theirs = self.key, other.key
        return (mine > theirs) - (mine < theirs)

    def same_position(self, other: "Cursor") -> bool:
        return self.node is other.node and self.index == other.index

    def __repr__(self) -> str:
        return f"Cursor({self.node!r}, {self.index})"


def compare(a: Cursor, b: Cursor) -> int:
    return a.compare(b)


@dataclass(frozen=True, slots=True)
class Selection:
    """Range ``[start, end]`` with ``start <= end``.

    ``reversed`` records that the selection was produced by a backward move;
    it never flips the endpoints.
    """

    start: Cursor
    end: Cursor
    reversed: bool = False

    def __post_init__(self) -> None:
        if self.start.compare(self.end) > 0:
            raise InvalidSelection(
                f"selection start {self.start!r} is after end {self.end!r}",
                cursor=self.start,
            )

    @classmethod
    def collapsed(cls, cursor: Cursor, reversed: bool = False) -> "Selection":
        return cls(cursor, cursor, reversed)

    @classmethod
    def spanning(cls, a: Cursor, b: Cursor, reversed: bool = False) -> "Selection":
        """Order two cursors into a selection."""

        if a.compare(b) > 0:
            a, b = b, a
        return cls(a, b, reversed)

    @property
    def is_collapsed(self) -> bool:
        return self.start.compare(self.end) == 0

    def clone(self) -> "Selection":
        return Selection(self.start, self.end, self.reversed)

    def set_reversed(self, reversed: bool) -> "Selection":
        if reversed == self.reversed:
            return self
        return Selection(self.start, self.end, reversed)

    def absolute(self) -> "Selection":
        return self.set_reversed(False)

    def abs_equals(self, other: Optional["Selection"]) -> bool:
        if other is None:
            return False
        return (
            self.start.compare(other.start) == 0 and self.end.compare(other.end) == 0
        )

    def equals(self, other: Optional["Selection"]) -> bool:
        return other is not None and self.reversed == other.reversed and self.abs_equals(
            other
        )

    def collapse_to_end(self, reversed: Optional[bool] = None) -> "Selection":
        """Zero-width selection at the endpoint the move direction points to."""

        direction = self.reversed if reversed is None else reversed
        anchor = self.start if direction else self.end
        return Selection(anchor, anchor, direction)

    def collapse_to_start(self, reversed: Optional[bool] = None) -> "Selection":
        direction = self.reversed if reversed is None else reversed
        anchor = self.end if direction else self.start
        return Selection(anchor, anchor, direction)

    @property
    def directed_start(self) -> Cursor:
        return self.end if self.reversed else self.start

    @property
    def directed_end(self) -> Cursor:
        return self.start if self.reversed else self.end

    def single_node(self) -> Optional[Node]:
        """The node both endpoints sit in, if they share one."""

        return self.start.node if self.start.node is self.end.node else None

    def __repr__(self) -> str:
        arrow = "<-" if self.reversed else "->"
        return f"Selection({self.start!r} {arrow} {self.end!r})"


__all__ = ["Cursor", "Selection", "compare"]
