from __future__ import annotations

from docnav_engine.dom import Document, Node, TableModel
from docnav_engine.dom.html import load_html
from docnav_engine.navigation import MoveStatus, NavigationManager, TableNavigator

PEOPLE = (
    "<p id='before'>Before</p>"
    "<table>"
    "<tr><th>Name</th><th>Age</th><th>City</th></tr>"
    "<tr><td id='ann'>Ann</td><td>30</td><td>Oslo</td></tr>"
    "<tr><td>Bob</td><td>41</td><td>Rome</td></tr>"
    "</table>"
    "<p>After</p>"
)


def find(document: Document, tag: str) -> Node:
    return next(node for node in document.root.depth_first() if node.tag == tag)


def cell_named(document: Document, label: str) -> Node:
    return next(
        node
        for node in document.root.depth_first()
        if node.tag in {"td", "th"} and node.text_content() == label
    )


def make_manager(markup: str = PEOPLE) -> NavigationManager:
    return NavigationManager(load_html(markup))


def make_table_session(label: str = "Ann") -> NavigationManager:
    manager = make_manager()
    assert manager.sync_to_node(cell_named(manager.document, label))
    assert manager.enter_table()
    return manager


def current_text(manager: NavigationManager) -> str:
    return manager.document.text_of(manager.current)


def position(manager: NavigationManager) -> tuple[int, int]:
    return manager.get_row_index(), manager.get_col_index()


def test_enter_table_reports_one_based_coordinates() -> None:
    manager = make_table_session()

    assert manager.in_table_mode()
    assert position(manager) == (2, 1)
    assert (manager.get_row_count(), manager.get_col_count()) == (3, 3)
    assert current_text(manager) == "Ann"


def test_enter_table_outside_a_table_fails() -> None:
    manager = make_manager()
    manager.next()

    assert manager.enter_table() is False
    assert not manager.in_table_mode()
    assert current_text(manager) == "Before"


def test_cell_moves_land_in_the_new_cell() -> None:
    manager = make_table_session()

    assert manager.next_col()
    assert current_text(manager) == "30"
    assert manager.next_row()
    assert position(manager) == (3, 2)
    assert current_text(manager) == "41"
    assert manager.previous_col()
    assert current_text(manager) == "Bob"


def test_moves_past_the_edge_change_nothing() -> None:
    manager = make_table_session()
    assert manager.go_to_last_cell()
    assert position(manager) == (3, 3)
    before = manager.current

    assert manager.next_row() is False
    assert manager.next_col() is False

    assert position(manager) == (3, 3)
    assert manager.current is before
    assert manager.last_move_status is MoveStatus.BOUNDARY


def test_row_and_column_jumps() -> None:
    manager = make_table_session("30")

    assert manager.go_to_row_last_cell()
    assert current_text(manager) == "Oslo"
    assert manager.go_to_col_first_cell()
    assert current_text(manager) == "City"
    assert manager.go_to_col_last_cell()
    assert current_text(manager) == "Rome"
    assert manager.go_to_row_first_cell()
    assert current_text(manager) == "Bob"
    assert manager.go_to_first_cell()
    assert position(manager) == (1, 1)


def test_generic_moves_stop_at_the_cell_edge() -> None:
    manager = make_table_session()
    before = manager.current

    assert manager.next() is False

    assert manager.last_move_status is MoveStatus.END_OF_CELL
    assert manager.current is before
    assert manager.check_cell_boundaries()


def test_leaving_table_mode_frees_generic_moves() -> None:
    manager = make_table_session()
    manager.exit_table()

    assert manager.next()
    assert current_text(manager) == "30"
    assert manager.get_row_index() == 0


def test_table_moves_require_table_mode() -> None:
    manager = make_manager()

    assert manager.next_row() is False
    assert manager.last_move_status is MoveStatus.NOT_IN_TABLE


def test_header_row_supplies_column_headers() -> None:
    manager = make_table_session("30")

    assert manager.get_col_header_text() == "Age"
    assert manager.get_row_header_text() is None
    assert manager.guess_row_header_text() == "Ann"


def test_scoped_row_headers() -> None:
    manager = make_manager(
        "<table>"
        "<tr><td></td><th scope='col'>Q1</th></tr>"
        "<tr><th scope='row'>North</th><td id='x'>7</td></tr>"
        "</table>"
    )
    manager.sync_to_node(cell_named(manager.document, "7"))
    manager.enter_table()

    assert manager.get_row_header_text() == "North"
    assert manager.get_col_header_text() == "Q1"


def test_declared_headers_win_over_position() -> None:
    document = load_html(
        "<table>"
        "<tr><th id='h-a'>A</th><th id='h-b'>B</th></tr>"
        "<tr><td>1</td><td headers='h-a'>2</td></tr>"
        "</table>"
    )
    model = TableModel.build(find(document, "table"))

    assert model.col_header(1, 1) is None
    assert model.col_header(1, 0) is cell_named(document, "A")


def test_colspan_cells_fill_every_slot() -> None:
    document = load_html(
        "<table>"
        "<tr><td colspan='2'>Wide</td><td>C</td></tr>"
        "<tr><td>A</td><td>B</td><td>D</td></tr>"
        "</table>"
    )
    model = TableModel.build(find(document, "table"))
    wide = cell_named(document, "Wide")

    assert (model.row_count, model.col_count) == (2, 3)
    assert model.cell_at(0, 0) is wide
    assert model.cell_at(0, 1) is wide
    assert [index for index, _ in model.row_cells(0)] == [0, 2]

    navigator = TableNavigator()
    assert navigator.enter(cell_named(document, "B"))
    assert navigator.previous_row()
    assert navigator.current_cell() is wide
    assert navigator.next_col()
    assert navigator.current_cell() is cell_named(document, "C")


def test_rowspan_shifts_later_cells_right() -> None:
    document = load_html(
        "<table>"
        "<tr><td rowspan='2'>Tall</td><td>X</td></tr>"
        "<tr><td>Y</td></tr>"
        "</table>"
    )
    model = TableModel.build(find(document, "table"))

    assert model.position_of(cell_named(document, "Y")) == (1, 1)
    assert model.cell_at(1, 0) is cell_named(document, "Tall")

    navigator = TableNavigator()
    navigator.enter(cell_named(document, "Y"))
    assert navigator.previous_col()
    assert navigator.state.row_index == 2
    assert navigator.current_cell() is cell_named(document, "Tall")
    assert navigator.previous_col() is False


def test_jumping_out_of_the_table_exits_table_mode() -> None:
    manager = make_table_session()

    manager.sync_to_node(manager.document.get_element_by_id("before"))

    assert not manager.in_table_mode()
