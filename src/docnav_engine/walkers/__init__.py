"""Granularity walkers and the registry that orders them."""

from .base import Granularity, UnitWalker, Walker
from .braille import ITEM_SEPARATOR, VALUE_SPAN, BrailleLine, BrailleSpan
from .character import CharacterWalker
from .description import NavDescription, speak_all
from .layout_line import FlowRowWalker, LayoutLineWalker
from .object import ObjectWalker
from .paragraph import ParagraphWalker
from .registry import ORDER, GranularityRegistry
from .structural_line import StructuralLineWalker
from .word import SentenceWalker, WordWalker

__all__ = [
    "BrailleLine",
    "BrailleSpan",
    "CharacterWalker",
    "Granularity",
    "GranularityRegistry",
    "ITEM_SEPARATOR",
    "FlowRowWalker",
    "LayoutLineWalker",
    "NavDescription",
    "ORDER",
    "ObjectWalker",
    "ParagraphWalker",
    "SentenceWalker",
    "StructuralLineWalker",
    "UnitWalker",
    "VALUE_SPAN",
    "Walker",
    "WordWalker",
    "speak_all",
]
