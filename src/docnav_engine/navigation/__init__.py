"""Navigation session, table mode and ancestor deltas."""

from .delta import ancestor_delta
from .manager import MoveStatus, NavigationManager
from .table_mode import NOT_IN_TABLE, TableNavigator, TableState

__all__ = [
    "MoveStatus",
    "NOT_IN_TABLE",
    "NavigationManager",
    "TableNavigator",
    "TableState",
    "ancestor_delta",
]
