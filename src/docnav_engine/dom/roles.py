"""Tag and ARIA role semantics used by walkers, predicates and tables."""

from __future__ import annotations

from typing import Optional

from .node import Node

BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "body", "caption", "dd",
        "details", "dialog", "div", "dl", "dt", "fieldset", "figcaption",
        "figure", "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6",
        "header", "hr", "html", "li", "main", "nav", "ol", "p", "pre",
        "section", "summary", "table", "tbody", "td", "tfoot", "th", "thead",
        "tr", "ul",
    }
)

ATOMIC_TAGS = frozenset(
    {"img", "input", "select", "textarea", "hr", "progress", "meter", "iframe"}
)

SKIPPED_TAGS = frozenset({"head", "script", "style", "template", "noscript", "title"})

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

LANDMARK_ROLES = frozenset(
    {
        "application", "banner", "complementary", "contentinfo", "form",
        "main", "navigation", "search", "region",
    }
)

CONTROL_ROLES = frozenset(
    {
        "button", "checkbox", "combobox", "listbox", "menuitem",
        "menuitemcheckbox", "menuitemradio", "radio", "slider", "spinbutton",
        "textbox", "switch", "tab",
    }
)

TEXT_INPUT_TYPES = frozenset(
    {"", "text", "password", "email", "search", "tel", "url", "number"}
)

BUTTON_INPUT_TYPES = frozenset({"button", "submit", "reset", "image"})


def input_type(node: Node) -> str:
    return (node.get_attribute("type") or "").strip().lower()


def is_hidden(node: Node) -> bool:
    if node.tag in SKIPPED_TAGS:
        return True
    if node.has_attribute("hidden"):
        return True
    if node.get_attribute("aria-hidden") == "true":
        return True
    return node.tag == "input" and input_type(node) == "hidden"


def is_block(node: Node) -> bool:
    return not node.is_text and node.tag in BLOCK_TAGS


def is_atomic(node: Node) -> bool:
    return not node.is_text and node.tag in ATOMIC_TAGS


def is_editable_text(node: Node) -> bool:
    if node.tag == "textarea" or node.role == "textbox":
        return True
    return node.tag == "input" and input_type(node) in TEXT_INPUT_TYPES


def is_control(node: Node) -> bool:
    if node.role in CONTROL_ROLES:
        return True
    return node.tag in {"input", "select", "textarea", "button"}


def is_focusable(node: Node) -> bool:
    if node.is_text or node.has_attribute("disabled"):
        return False
    if node.tag == "a" and node.has_attribute("href"):
        return True
    return is_control(node) or node.has_attribute("tabindex")


def is_landmark(node: Node) -> bool:
    return not node.is_text and node.role in LANDMARK_ROLES


def heading_level(node: Node) -> Optional[int]:
    if node.tag in HEADING_TAGS:
        return int(node.tag[1])
    if node.role == "heading":
        level = node.get_attribute("aria-level") or "2"
        return int(level) if level.isdigit() else 2
    return None


def is_link(node: Node) -> bool:
    return node.role == "link" or node.tag == "a"


def is_table(node: Node) -> bool:
    return node.tag == "table" or node.role in {"table", "grid", "treegrid"}


def is_row(node: Node) -> bool:
    return node.tag == "tr" or node.role == "row"


def is_cell(node: Node) -> bool:
    return node.tag in {"td", "th"} or node.role in {
        "cell", "gridcell", "columnheader", "rowheader",
    }


def is_header_cell(node: Node) -> bool:
    return node.tag == "th" or node.role in {"columnheader", "rowheader"}


def is_list(node: Node) -> bool:
    return node.role == "list" or node.tag in {"ul", "ol"}


def is_list_item(node: Node) -> bool:
    return node.role == "listitem" or node.tag == "li"


def is_checked(node: Node) -> bool:
    aria = node.get_attribute("aria-checked")
    if aria is not None:
        return aria == "true"
    return node.checked


def control_role(node: Node) -> Optional[str]:
    """Message key of the role a leaf or inline element announces, if any."""

    role = node.role
    if role in {"checkbox", "menuitemcheckbox", "switch"}:
        return "role_checkbox"
    if role in {"radio", "menuitemradio"}:
        return "role_radio"
    if role in {"button", "slider", "combobox", "textbox", "link", "spinbutton"}:
        return f"role_{role}"
    if node.tag == "a":
        return "role_link" if node.has_attribute("href") else None
    if node.tag == "button":
        return "role_button"
    if node.tag == "select":
        return "role_combobox"
    if node.tag == "textarea":
        return "role_textbox"
    if node.tag == "img":
        return "role_image"
    if node.tag == "input":
        kind = input_type(node)
        if kind == "checkbox":
            return "role_checkbox"
        if kind == "radio":
            return "role_radio"
        if kind == "range":
            return "role_slider"
        if kind in BUTTON_INPUT_TYPES:
            return "role_button"
        if kind in TEXT_INPUT_TYPES:
            return "role_textbox"
    if heading_level(node) is not None:
        return "role_heading"
    return None


def container_role(node: Node) -> Optional[str]:
    """Message key announced when navigation enters ``node``."""

    if is_table(node):
        return "role_table"
    if is_list(node):
        return "role_list"
    if node.tag == "blockquote":
        return "role_blockquote"
    if is_landmark(node):
        return "role_landmark"
    if node.tag == "form":
        return "role_form"
    return None


def accessible_name(node: Node) -> str:
    """Best-effort label for an element (``aria-label``, ``alt``, title...)."""

    for attribute in ("aria-label", "alt", "title", "placeholder", "name"):
        value = node.get_attribute(attribute)
        if value:
            return value.strip()
    if node.tag == "input" and input_type(node) in BUTTON_INPUT_TYPES:
        return (node.value or node.get_attribute("value") or "").strip()
    return " ".join(node.text_content().split())


__all__ = [
    "ATOMIC_TAGS",
    "BLOCK_TAGS",
    "HEADING_TAGS",
    "LANDMARK_ROLES",
    "accessible_name",
    "container_role",
    "control_role",
    "heading_level",
    "input_type",
    "is_atomic",
    "is_block",
    "is_cell",
    "is_checked",
    "is_control",
    "is_editable_text",
    "is_focusable",
    "is_header_cell",
    "is_hidden",
    "is_landmark",
    "is_link",
    "is_list",
    "is_list_item",
    "is_row",
    "is_table",
]
