"""Table-mode coordinate state."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Optional

from docnav_engine.dom import Node, TableModel, find_table
from docnav_engine.runtime import telemetry


@dataclass(frozen=True, slots=True)
class TableState:
    """Where table mode stands; indices are 1-based and valid only ``in_table``."""

    in_table: bool = False
    row_index: int = 0
    col_index: int = 0
    row_count: int = 0
    col_count: int = 0
    table_node: Optional[Node] = None


NOT_IN_TABLE = TableState()


class TableNavigator:
    """Row/column stepping over a :class:`TableModel`.

    Failed moves return ``False`` and leave the state untouched.
    """

    def __init__(self) -> None:
        self.state = NOT_IN_TABLE
        self.model: Optional[TableModel] = None

    @property
    def in_table(self) -> bool:
        return self.state.in_table

    def enter(self, node: Node) -> bool:
        table = find_table(node)
        if table is None:
            return False
        model = TableModel.build(table)
        position = model.position_of(node) or model.first_position()
        if position is None:
            return False
        self.model = model
        self.state = TableState(
            in_table=True,
            row_index=position[0] + 1,
            col_index=position[1] + 1,
            row_count=model.row_count,
            col_count=model.col_count,
            table_node=table,
        )
        telemetry.record_event(
            "table.enter",
            data={"rows": model.row_count, "cols": model.col_count},
        )
        return True

    def exit(self) -> None:
        if self.state.in_table:
            telemetry.record_event("table.exit")
        self.state = NOT_IN_TABLE
        self.model = None

    def restore(self, state: TableState, model: Optional[TableModel]) -> None:
        self.state = state
        self.model = model

    def current_cell(self) -> Optional[Node]:
        if self.model is None or not self.state.in_table:
            return None
        return self.model.cell_at(self.state.row_index - 1, self.state.col_index - 1)

    def contains(self, node: Node) -> bool:
        table = self.state.table_node
        return table is not None and table.contains(node)

    def cell_contains(self, node: Node) -> bool:
        cell = self.current_cell()
        return cell is not None and cell.contains(node)

    def sync_to(self, node: Node) -> bool:
        """Re-point the coordinates at the cell holding ``node``."""

        if self.model is None:
            return False
        position = self.model.position_of(node)
        if position is None:
            return False
        self._set(position[0], position[1])
        return True

    def _set(self, row: int, col: int) -> None:
        self.state = replace(self.state, row_index=row + 1, col_index=col + 1)

    def _step(self, d_row: int, d_col: int) -> bool:
        if self.model is None or not self.state.in_table:
            return False
        row, col = self.state.row_index - 1, self.state.col_index - 1
        here = self.model.cell_at(row, col)
        while True:
            row, col = row + d_row, col + d_col
            if not (0 <= row < self.model.row_count and 0 <= col < self.model.col_count):
                return False
            cell = self.model.cell_at(row, col)
            if cell is not None and cell is not here:
                break
        self._set(row, col)
        return True

    def previous_row(self) -> bool:
        return self._step(-1, 0)

    def next_row(self) -> bool:
        return self._step(1, 0)

    def previous_col(self) -> bool:
        return self._step(0, -1)

    def next_col(self) -> bool:
        return self._step(0, 1)

    def _jump(self, find: Callable[[TableModel], Optional[tuple]]) -> bool:
        if self.model is None or not self.state.in_table:
            return False
        position = find(self.model)
        if position is None:
            return False
        self._set(*position)
        return True

    def go_to_first_cell(self) -> bool:
        return self._jump(lambda model: model.first_position())

    def go_to_last_cell(self) -> bool:
        return self._jump(lambda model: model.last_position())

    def go_to_row_first_cell(self) -> bool:
        row = self.state.row_index - 1
        return self._jump(lambda model: _edge(model.row_cells(row), lambda c: (row, c)))

    def go_to_row_last_cell(self) -> bool:
        row = self.state.row_index - 1
        return self._jump(
            lambda model: _edge(model.row_cells(row), lambda c: (row, c), last=True)
        )

    def go_to_col_first_cell(self) -> bool:
        col = self.state.col_index - 1
        return self._jump(lambda model: _edge(model.col_cells(col), lambda r: (r, col)))

    def go_to_col_last_cell(self) -> bool:
        col = self.state.col_index - 1
        return self._jump(
            lambda model: _edge(model.col_cells(col), lambda r: (r, col), last=True)
        )

    def _header(self, lookup: str) -> Optional[Node]:
        if self.model is None or not self.state.in_table:
            return None
        method = getattr(self.model, lookup)
        return method(self.state.row_index - 1, self.state.col_index - 1)

    def row_header(self) -> Optional[Node]:
        return self._header("row_header")

    def col_header(self) -> Optional[Node]:
        return self._header("col_header")

    def guess_row_header(self) -> Optional[Node]:
        return self._header("guess_row_header")

    def guess_col_header(self) -> Optional[Node]:
        return self._header("guess_col_header")


def _edge(cells, to_position, *, last: bool = False):
    if not cells:
        return None
    index, _ = cells[-1] if last else cells[0]
    return to_position(index)


__all__ = ["NOT_IN_TABLE", "TableNavigator", "TableState"]
