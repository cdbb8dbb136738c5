"""Document tree, geometry and table model consumed by the navigation core."""

from .document import OBJECT_CHAR, Document, Piece, Run, Segment, leaf_length
from .geometry import EMPTY_RECT, FlowGeometry, GeometryOracle, Rect, StaticGeometry
from .node import TEXT_TAG, Node, element, text
from .tables import TableModel, find_table

__all__ = [
    "Document",
    "EMPTY_RECT",
    "FlowGeometry",
    "GeometryOracle",
    "Node",
    "OBJECT_CHAR",
    "Piece",
    "Rect",
    "Run",
    "Segment",
    "StaticGeometry",
    "TEXT_TAG",
    "TableModel",
    "element",
    "find_table",
    "leaf_length",
    "text",
]
