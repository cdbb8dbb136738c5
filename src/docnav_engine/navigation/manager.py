"""Navigation session: granularity, current selection and table mode."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from docnav_engine.config import NavigationConfig
from docnav_engine.cursor import Cursor, Selection
from docnav_engine.dom import Document, FlowGeometry, GeometryOracle, Node, TableModel, roles
from docnav_engine.errors import (
    BoundaryReached,
    DetachedReference,
    NavigationError,
    NoMatchFound,
)
from docnav_engine.messages import DefaultMessages, MessageTable
from docnav_engine.runtime import telemetry
from docnav_engine.search import Predicate
from docnav_engine.walkers import BrailleLine, Granularity, GranularityRegistry, NavDescription, Walker

from .delta import ancestor_delta
from .table_mode import TableNavigator, TableState


class MoveStatus(str, Enum):
    MOVED = "moved"
    BOUNDARY = "boundary"
    END_OF_CELL = "end_of_cell"
    DETACHED = "detached"
    NOT_IN_TABLE = "not_in_table"


@dataclass(frozen=True, slots=True)
class _Snapshot:
    current: Selection
    previous: Optional[Selection]
    delta: tuple
    table_state: TableState
    table_model: Optional[TableModel]


class NavigationManager:
    """Explicit navigation session over one document.

    Every move and search either fully succeeds or leaves the session exactly
    as it was. Failures are reported through return values,
    ``last_move_status`` and ``last_error``; nothing but malformed selections
    raises.
    """

    def __init__(
        self,
        document: Document,
        *,
        geometry: Optional[GeometryOracle] = None,
        config: Optional[NavigationConfig] = None,
        messages: Optional[MessageTable] = None,
        registry: Optional[GranularityRegistry] = None,
    ) -> None:
        self.document = document
        self.config = config or NavigationConfig()
        self.messages = messages or DefaultMessages()
        self.geometry = geometry or FlowGeometry(document, self.config.flow_width)
        self.registry = registry or GranularityRegistry.standard(
            document,
            self.messages,
            self.geometry,
            max_line_length=self.config.max_line_length,
        )
        self.granularity = Granularity(self.config.initial_granularity)
        self.current = Selection.collapsed(document.start_cursor())
        self.previous: Optional[Selection] = None
        self.delta: List[Node] = []
        self.table = TableNavigator()
        self.last_move_status = MoveStatus.MOVED
        self.last_error: Optional[NavigationError] = None
        self.logger = telemetry.get_logger("docnav_engine.navigation")
        self._disposed = False

    # ------------------------------------------------------------------
    # state helpers
    @property
    def walker(self) -> Walker:
        return self.registry.walker(self.granularity)

    def _ensure_live(self) -> None:
        if self._disposed:
            raise RuntimeError("navigation session has been disposed")

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(
            self.current,
            self.previous,
            tuple(self.delta),
            self.table.state,
            self.table.model,
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        self.current = snapshot.current
        self.previous = snapshot.previous
        self.delta = list(snapshot.delta)
        self.table.restore(snapshot.table_state, snapshot.table_model)

    def _commit(self, selection: Selection) -> None:
        self.previous = self.current
        self.current = selection
        self.delta = ancestor_delta(self.document, self.previous, selection)

    def _step(self, reversed: bool) -> bool:
        """One raw walker move; no table checks."""

        if not self.document.contains(self.current.start.node):
            self.last_error = DetachedReference(node=self.current.start.node)
            self.last_move_status = MoveStatus.DETACHED
            return False
        target = self.walker.next(self.current.set_reversed(reversed))
        if target is None:
            self.last_error = BoundaryReached(reversed=reversed)
            self.last_move_status = MoveStatus.BOUNDARY
            return False
        self._commit(target.set_reversed(reversed))
        return True

    def _state_metadata(self) -> Dict[str, object]:
        return {
            "granularity": self.granularity,
            "in_table": self.table.in_table,
            "status": self.last_move_status,
        }

    def _log_state(self, event: str) -> None:
        telemetry.emit(self.logger, "debug", f"navigation::{event}", self._state_metadata())

    def _reconcile_table(self) -> None:
        if not self.table.in_table:
            return
        node = self.current.start.node
        if not self.table.contains(node) or not self.table.sync_to(node):
            self.table.exit()

    # ------------------------------------------------------------------
    # granularity
    def up(self) -> Granularity:
        return self._set_granularity(self.registry.up(self.granularity))

    def down(self) -> Granularity:
        return self._set_granularity(self.registry.down(self.granularity))

    def set_granularity(self, granularity: Granularity) -> Granularity:
        return self._set_granularity(Granularity(granularity))

    def _set_granularity(self, granularity: Granularity) -> Granularity:
        self._ensure_live()
        if granularity is self.granularity:
            return granularity
        self.granularity = granularity
        synced = self.walker.sync(self.current)
        if synced is not None:
            self.current = synced
        self._log_state("granularity")
        return granularity

    def get_granularity_msg(self) -> str:
        return self.walker.get_granularity_msg()

    # ------------------------------------------------------------------
    # generic moves
    def next(self) -> bool:
        return self._move(reversed=False)

    def previous(self) -> bool:
        return self._move(reversed=True)

    def _move(self, *, reversed: bool) -> bool:
        self._ensure_live()
        self.last_error = None
        with telemetry.span(
            "navigation::move",
            component="navigation",
            logger=self.logger,
            metadata={"granularity": self.granularity.value, "reversed": reversed},
        ) as handle:
            snapshot = self._snapshot()
            if not self._step(reversed):
                handle.miss(self.last_move_status.value)
                return False
            if self.table.in_table and not self.check_cell_boundaries():
                self._restore(snapshot)
                self.last_move_status = MoveStatus.END_OF_CELL
                handle.miss("end_of_cell")
                return False
            self.last_move_status = MoveStatus.MOVED
            return True

    def check_cell_boundaries(self) -> bool:
        """Whether the selection is still inside the active table cell."""

        if not self.table.in_table:
            return True
        return self.table.cell_contains(self.current.start.node) and self.table.cell_contains(
            self.current.end.node
        )

    # ------------------------------------------------------------------
    # search
    def find_next(self, predicate: Predicate, *, reversed: bool = False) -> Optional[Node]:
        """Step until ``predicate`` matches the ancestor delta.

        On failure the session is restored to where the search started.
        """

        self._ensure_live()
        with telemetry.span(
            "navigation::find",
            component="navigation",
            logger=self.logger,
            metadata={
                "predicate": getattr(predicate, "__name__", "predicate"),
                "reversed": reversed,
            },
        ) as handle:
            snapshot = self._snapshot()
            steps = 0
            while self._step(reversed):
                steps += 1
                match = predicate(self.delta)
                if match is not None:
                    handle.add_metadata("steps", steps)
                    self._reconcile_table()
                    self.last_move_status = MoveStatus.MOVED
                    return match
            self._restore(snapshot)
            handle.miss("no_match")
            return None

    def find_previous(self, predicate: Predicate) -> Optional[Node]:
        return self.find_next(predicate, reversed=True)

    def find_next_matching(
        self, predicate: Predicate, *, reversed: bool = False, message: str = ""
    ) -> Optional[Node]:
        """Search, then step back and replay one forward move on success.

        The replay makes the landing description identical to stepwise
        arrival. A failed search sets ``last_error`` to :class:`NoMatchFound`.
        """

        self.last_error = None
        match = self.find_next(predicate, reversed=reversed)
        if match is None:
            self.last_error = NoMatchFound(
                message or "no match", category=getattr(predicate, "__name__", None)
            )
            return None
        if self._step(True):
            self._step(False)
            self._reconcile_table()
        self.last_move_status = MoveStatus.MOVED
        return match

    def find_previous_matching(
        self, predicate: Predicate, *, message: str = ""
    ) -> Optional[Node]:
        return self.find_next_matching(predicate, reversed=True, message=message)

    # ------------------------------------------------------------------
    # table mode
    def in_table_mode(self) -> bool:
        return self.table.in_table

    def enter_table(self) -> bool:
        self._ensure_live()
        with telemetry.span("navigation::enter_table", logger=self.logger) as handle:
            snapshot = self._snapshot()
            if not self.table.enter(self.current.start.node):
                handle.miss("no_table")
                return False
            if not self.table.cell_contains(self.current.start.node):
                if not self._land_in_cell():
                    self._restore(snapshot)
                    handle.miss("empty_table")
                    return False
            return True

    def exit_table(self) -> None:
        self.table.exit()

    def _land_in_cell(self) -> bool:
        cell = self.table.current_cell()
        if cell is None:
            return False
        leaves = self.document.leaves_in(cell)
        target = None
        if leaves:
            target = self.walker.sync(Selection.collapsed(Cursor(leaves[0], 0)))
        if target is None or not cell.contains(target.start.node):
            target = Selection.collapsed(Cursor(cell, 0))
        self._commit(target)
        return True

    def _table_move(self, name: str, step: Callable[[], bool]) -> bool:
        self._ensure_live()
        if not self.table.in_table:
            self.last_move_status = MoveStatus.NOT_IN_TABLE
            return False
        with telemetry.span(
            f"table::{name}", component="navigation", metadata={"move": name}
        ) as handle:
            if not step():
                self.last_move_status = MoveStatus.BOUNDARY
                handle.miss("edge")
                return False
            self._land_in_cell()
            self.last_move_status = MoveStatus.MOVED
            return True

    def previous_row(self) -> bool:
        return self._table_move("previous_row", self.table.previous_row)

    def next_row(self) -> bool:
        return self._table_move("next_row", self.table.next_row)

    def previous_col(self) -> bool:
        return self._table_move("previous_col", self.table.previous_col)

    def next_col(self) -> bool:
        return self._table_move("next_col", self.table.next_col)

    def go_to_first_cell(self) -> bool:
        return self._table_move("first_cell", self.table.go_to_first_cell)

    def go_to_last_cell(self) -> bool:
        return self._table_move("last_cell", self.table.go_to_last_cell)

    def go_to_row_first_cell(self) -> bool:
        return self._table_move("row_first_cell", self.table.go_to_row_first_cell)

    def go_to_row_last_cell(self) -> bool:
        return self._table_move("row_last_cell", self.table.go_to_row_last_cell)

    def go_to_col_first_cell(self) -> bool:
        return self._table_move("col_first_cell", self.table.go_to_col_first_cell)

    def go_to_col_last_cell(self) -> bool:
        return self._table_move("col_last_cell", self.table.go_to_col_last_cell)

    def get_row_index(self) -> int:
        return self.table.state.row_index

    def get_col_index(self) -> int:
        return self.table.state.col_index

    def get_row_count(self) -> int:
        return self.table.state.row_count

    def get_col_count(self) -> int:
        return self.table.state.col_count

    @staticmethod
    def _text(node: Optional[Node]) -> Optional[str]:
        if node is None:
            return None
        return roles.accessible_name(node) if not node.is_text else node.text.strip()

    def get_row_header_text(self) -> Optional[str]:
        return self._text(self.table.row_header())

    def get_col_header_text(self) -> Optional[str]:
        return self._text(self.table.col_header())

    def guess_row_header_text(self) -> Optional[str]:
        return self._text(self.table.guess_row_header())

    def guess_col_header_text(self) -> Optional[str]:
        return self._text(self.table.guess_col_header())

    # ------------------------------------------------------------------
    # syncing and focus
    def sync_to_node(self, node: Node) -> bool:
        """Rebase the selection onto ``node`` without changing granularity."""

        self._ensure_live()
        if not self.document.contains(node):
            self.last_error = DetachedReference(node=node)
            self.last_move_status = MoveStatus.DETACHED
            return False
        leaves = self.document.leaves_in(node)
        anchor = Cursor(leaves[0], 0) if leaves else Cursor(node, 0)
        return self.sync_to_selection(Selection.collapsed(anchor))

    def sync_to_selection(self, selection: Selection) -> bool:
        self._ensure_live()
        target = self.walker.sync(selection)
        if target is None:
            self.last_error = DetachedReference(node=selection.start.node)
            self.last_move_status = MoveStatus.DETACHED
            return False
        self._commit(target)
        self._reconcile_table()
        return True

    def force_sync(self) -> bool:
        """Re-sync to the focused element, or to the current selection."""

        self.document.invalidate()
        active = self.document.active_element
        if active is not None and self.document.contains(active):
            return self.sync_to_node(active)
        if not self.document.contains(self.current.start.node):
            return self.sync_to_node(self.document.root)
        return self.sync_to_selection(self.current)

    def set_focus(self) -> None:
        """Focus the nearest focusable ancestor of the current node."""

        node = self.get_current_node()
        target = None
        for candidate in reversed(node.ancestors(include_self=True)):
            if roles.is_focusable(candidate):
                target = candidate
                break
        self.document.focus(target)
        self.document.scroll_to(node)

    # ------------------------------------------------------------------
    # accessors
    def get_current_node(self) -> Node:
        return self.current.start.node

    def get_current_description(self) -> List[NavDescription]:
        return self.walker.get_description(self.previous, self.current)

    def get_current_braille(self) -> BrailleLine:
        return self.walker.get_braille(self.previous, self.current)

    def get_changed_ancestors(self) -> List[Node]:
        return list(self.delta)

    def dispose(self) -> None:
        if self._disposed:
            return
        self.table.exit()
        self.delta = []
        self.previous = None
        self._disposed = True
        self._log_state("dispose")


__all__ = ["MoveStatus", "NavigationManager"]
