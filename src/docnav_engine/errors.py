"""Error taxonomy shared by the cursor model, walkers and the manager.

Only ``InvalidSelection`` is raised at callers. The others describe failures
that the manager and command layer report as results (``False``,
``MoveStatus``, ``CommandResult.error``) instead of throwing.
"""

from __future__ import annotations


class NavigationError(RuntimeError):
    """Base class for navigation failures."""


class InvalidSelection(NavigationError):
    """A cursor or selection was built from malformed input."""

    def __init__(self, message: str, *, cursor: object | None = None) -> None:
        super().__init__(message)
        self.cursor = cursor


class BoundaryReached(NavigationError):
    """No further content exists in the requested direction."""

    def __init__(self, message: str = "boundary reached", *, reversed: bool = False):
        super().__init__(message)
        self.reversed = reversed


class NoMatchFound(NavigationError):
    """A predicate search reached the document boundary without a match."""

    def __init__(self, message: str, *, category: str | None = None) -> None:
        super().__init__(message)
        self.category = category


class DetachedReference(NavigationError):
    """A node reference no longer belongs to the live document tree."""

    def __init__(self, message: str = "node is detached", *, node: object = None):
        super().__init__(message)
        self.node = node


__all__ = [
    "NavigationError",
    "InvalidSelection",
    "BoundaryReached",
    "NoMatchFound",
    "DetachedReference",
]
