"""Row/column grid model for HTML and ARIA tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from . import roles
from .node import Node

Position = Tuple[int, int]


def find_table(node: Node) -> Optional[Node]:
    for ancestor in reversed(node.ancestors(include_self=True)):
        if roles.is_table(ancestor):
            return ancestor
    return None


def _span(node: Node, name: str) -> int:
    raw = node.get_attribute(name) or "1"
    return max(int(raw), 1) if raw.isdigit() else 1


def _rows(table: Node) -> Iterator[Node]:
    for child in table.children:
        if child.is_text:
            continue
        if roles.is_row(child):
            yield child
        elif not roles.is_table(child):
            yield from _rows(child)


def _cells(row: Node) -> Iterator[Node]:
    for child in row.children:
        if child.is_text:
            continue
        if roles.is_cell(child):
            yield child
        elif not (roles.is_row(child) or roles.is_table(child)):
            yield from _cells(child)


@dataclass
class TableModel:
    """Grid of cell nodes; a spanning cell occupies every slot it covers.

    Positions are 0-based here; the navigation layer presents them 1-based.
    """

    table: Node
    grid: List[List[Optional[Node]]] = field(default_factory=list)
    _origin: Dict[Node, Position] = field(default_factory=dict, repr=False)

    @classmethod
    def build(cls, table: Node) -> "TableModel":
        occupied: Dict[Position, Node] = {}
        origin: Dict[Node, Position] = {}
        row_total = 0
        col_total = 0
        for row_index, row in enumerate(_rows(table)):
            column = 0
            for cell in _cells(row):
                while (row_index, column) in occupied:
                    column += 1
                origin[cell] = (row_index, column)
                rowspan, colspan = _span(cell, "rowspan"), _span(cell, "colspan")
                for r in range(row_index, row_index + rowspan):
                    for c in range(column, column + colspan):
                        occupied[(r, c)] = cell
                column += colspan
            row_total = row_index + 1
        for r, c in occupied:
            row_total = max(row_total, r + 1)
            col_total = max(col_total, c + 1)
        grid = [
            [occupied.get((r, c)) for c in range(col_total)] for r in range(row_total)
        ]
        return cls(table=table, grid=grid, _origin=origin)

    @property
    def row_count(self) -> int:
        return len(self.grid)

    @property
    def col_count(self) -> int:
        return len(self.grid[0]) if self.grid else 0

    def cell_at(self, row: int, col: int) -> Optional[Node]:
        if 0 <= row < self.row_count and 0 <= col < self.col_count:
            return self.grid[row][col]
        return None

    def cell_containing(self, node: Node) -> Optional[Node]:
        for ancestor in reversed(node.ancestors(include_self=True)):
            if ancestor in self._origin:
                return ancestor
            if ancestor is self.table:
                break
        return None

    def position_of(self, node: Node) -> Optional[Position]:
        cell = self.cell_containing(node)
        return None if cell is None else self._origin[cell]

    def first_position(self) -> Optional[Position]:
        return self._scan(range(self.row_count), lambda r: range(self.col_count))

    def last_position(self) -> Optional[Position]:
        return self._scan(
            range(self.row_count - 1, -1, -1),
            lambda r: range(self.col_count - 1, -1, -1),
        )

    def _scan(self, rows, columns) -> Optional[Position]:
        for r in rows:
            for c in columns(r):
                if self.grid[r][c] is not None:
                    return (r, c)
        return None

    def row_cells(self, row: int) -> List[Tuple[int, Node]]:
        return self._unique((c, self.cell_at(row, c)) for c in range(self.col_count))

    def col_cells(self, col: int) -> List[Tuple[int, Node]]:
        return self._unique((r, self.cell_at(r, col)) for r in range(self.row_count))

    @staticmethod
    def _unique(pairs) -> List[Tuple[int, Node]]:
        seen: List[Node] = []
        found: List[Tuple[int, Node]] = []
        for index, cell in pairs:
            if cell is None or any(cell is other for other in seen):
                continue
            seen.append(cell)
            found.append((index, cell))
        return found

    def _by_id(self, ident: str) -> Optional[Node]:
        for node in self.table.depth_first():
            if node.get_attribute("id") == ident:
                return node
        return None

    def declared_headers(self, cell: Node) -> List[Node]:
        idents = (cell.get_attribute("headers") or "").split()
        return [node for node in map(self._by_id, idents) if node is not None]

    def row_header(self, row: int, col: int) -> Optional[Node]:
        """Header declared for the row of ``(row, col)``, if any."""

        cell = self.cell_at(row, col)
        if cell is None:
            return None
        declared = self.declared_headers(cell)
        if declared:
            for header in declared:
                position = self._origin.get(header)
                if position is not None and position[0] == row:
                    return header
            return None
        for index, candidate in self.row_cells(row):
            if index != col and _scoped(candidate, "row"):
                return candidate
        return None

    def col_header(self, row: int, col: int) -> Optional[Node]:
        cell = self.cell_at(row, col)
        if cell is None:
            return None
        declared = self.declared_headers(cell)
        if declared:
            for header in declared:
                position = self._origin.get(header)
                if position is not None and position[1] == col:
                    return header
            return None
        for index, candidate in self.col_cells(col):
            if index != row and (_scoped(candidate, "col") or self._header_row(index)):
                return candidate
        return None

    def guess_row_header(self, row: int, col: int) -> Optional[Node]:
        """First header-like cell in the row, else the row's first cell."""

        cells = [(c, cell) for c, cell in self.row_cells(row) if c != col]
        for _, cell in cells:
            if roles.is_header_cell(cell):
                return cell
        return cells[0][1] if cells and cells[0][0] == 0 else None

    def guess_col_header(self, row: int, col: int) -> Optional[Node]:
        cells = [(r, cell) for r, cell in self.col_cells(col) if r != row]
        for _, cell in cells:
            if roles.is_header_cell(cell):
                return cell
        return cells[0][1] if cells and cells[0][0] == 0 else None

    def _header_row(self, row: int) -> bool:
        cells = self.row_cells(row)
        return bool(cells) and all(
            cell.tag == "th" and not cell.has_attribute("scope") for _, cell in cells
        )


def _scoped(cell: Node, axis: str) -> bool:
    if cell.role == ("rowheader" if axis == "row" else "columnheader"):
        return True
    scope = (cell.get_attribute("scope") or "").lower()
    return cell.tag == "th" and scope in {axis, f"{axis}group"}


__all__ = ["Position", "TableModel", "find_table"]
