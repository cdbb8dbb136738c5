"""Message keys and the English fallback table.

The engine only ever produces opaque keys; hosts translate them through any
object implementing :class:`MessageTable`.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Protocol

from docnav_engine.runtime import telemetry


class MessageTable(Protocol):
    def get(self, key: str, *args: object) -> str:
        ...


DEFAULT_MESSAGES: Dict[str, str] = {
    # granularities
    "character": "Character",
    "word": "Word",
    "sentence": "Sentence",
    "structural_line": "Line",
    "layout_line": "Layout line",
    "paragraph": "Paragraph",
    "object": "Object",
    # roles
    "role_button": "Button",
    "role_checkbox": "Check box",
    "role_combobox": "Combo box",
    "role_form": "Form",
    "role_heading": "Heading",
    "role_image": "Image",
    "role_landmark": "Landmark",
    "role_link": "Link",
    "role_list": "List",
    "role_radio": "Radio button",
    "role_slider": "Slider",
    "role_spinbutton": "Spin button",
    "role_table": "Table",
    "role_textbox": "Edit text",
    "role_blockquote": "Blockquote",
    "state_checked": "checked",
    "state_not_checked": "not checked",
    "heading_level": "Heading {0}",
    "space": "space",
    # braille abbreviations
    "braille_button": "btn",
    "braille_checkbox": "chk",
    "braille_combobox": "cbo",
    "braille_heading": "h{0}",
    "braille_image": "img",
    "braille_link": "lnk",
    "braille_radio": "rdo",
    "braille_slider": "sld",
    "braille_spinbutton": "spn",
    "braille_textbox": "ed",
    # table mode
    "inside_table": "Inside table ",
    "no_table_found": "No table found.",
    "leaving_table": "Leaving table. ",
    "not_inside_table": "Not inside table.",
    "end_of_cell": "End of cell. ",
    "no_cell_above": "No cell above.",
    "no_cell_below": "No cell below.",
    "no_cell_left": "No cell on left.",
    "no_cell_right": "No cell on right.",
    "row_header": "Row header: ",
    "col_header": "Column header: ",
    "no_headers": "No headers",
    "table_location": "Row {0} of {1}, Column {2} of {3}",
    "table_dimensions": "{0} rows, {1} columns",
    # search
    "no_next_heading": "No next heading.",
    "no_previous_heading": "No previous heading.",
    "no_next_heading_level": "No next level {0} heading.",
    "no_previous_heading_level": "No previous level {0} heading.",
    "no_next_not_link": "No next item that isn't a link.",
    "no_previous_not_link": "No previous item that isn't a link.",
    "no_next_landmark": "No next ARIA landmark.",
    "no_previous_landmark": "No previous ARIA landmark.",
    "no_next_jump": "No next jump point.",
    "no_previous_jump": "No previous jump point.",
    "no_next_edit_text": "No next editable text field.",
    "no_previous_edit_text": "No previous editable text field.",
    "no_next_radio": "No next radio button.",
    "no_previous_radio": "No previous radio button.",
    "no_next_combo_box": "No next combo box.",
    "no_previous_combo_box": "No previous combo box.",
    "no_next_form_field": "No next form field.",
    "no_previous_form_field": "No previous form field.",
    "no_next_list_item": "No next list item.",
    "no_previous_list_item": "No previous list item.",
    "no_next_blockquote": "No next blockquote.",
    "no_previous_blockquote": "No previous blockquote.",
    "no_next_graphic": "No next graphic.",
    "no_previous_graphic": "No previous graphic.",
    "no_next_slider": "No next slider.",
    "no_previous_slider": "No previous slider.",
    "no_next_button": "No next button.",
    "no_previous_button": "No previous button.",
    "no_next_table": "No next table.",
    "no_previous_table": "No previous table.",
    "no_next_list": "No next list.",
    "no_previous_list": "No previous list.",
    "no_next_link": "No next link.",
    "no_previous_link": "No previous link.",
    "no_next_checkbox": "No next checkbox.",
    "no_previous_checkbox": "No previous checkbox.",
    # boundaries
    "end_of_document": "End of document.",
    "start_of_document": "Start of document.",
    "no_actions": "No actions available.",
}


class DefaultMessages:
    """English strings with ``str.format`` substitution.

    Unknown keys resolve to the key itself so a missing translation is
    audible rather than fatal.
    """

    def __init__(self, overrides: Optional[Mapping[str, str]] = None) -> None:
        self._table = dict(DEFAULT_MESSAGES)
        if overrides:
            self._table.update(overrides)

    def get(self, key: str, *args: object) -> str:
        template = self._table.get(key)
        if template is None:
            telemetry.record_event(
                "messages.missing", level="warning", data={"key": key}
            )
            return key
        return template.format(*args) if args else template

    def __contains__(self, key: object) -> bool:
        return key in self._table


__all__ = ["DEFAULT_MESSAGES", "DefaultMessages", "MessageTable"]
