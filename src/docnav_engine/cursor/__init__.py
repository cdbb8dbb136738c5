"""Cursor and selection model."""

from .cursor import Cursor, Selection, compare

__all__ = ["Cursor", "Selection", "compare"]
