"""Named search categories: predicate plus "not found" message keys."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from . import predicates
from .predicates import Predicate


@dataclass(frozen=True, slots=True)
class SearchCategory:
    name: str
    predicate: Predicate
    no_next: str
    no_previous: str
    message_args: Tuple[object, ...] = ()

    def failure_key(self, reversed: bool) -> str:
        return self.no_previous if reversed else self.no_next


def _category(name: str, predicate: Predicate, key: str) -> SearchCategory:
    return SearchCategory(name, predicate, f"no_next_{key}", f"no_previous_{key}")


_CATEGORIES: Dict[str, SearchCategory] = {
    category.name: category
    for category in (
        _category("heading", predicates.heading, "heading"),
        _category("link", predicates.link, "link"),
        _category("not_link", predicates.not_link, "not_link"),
        _category("checkbox", predicates.checkbox, "checkbox"),
        _category("radio", predicates.radio, "radio"),
        _category("slider", predicates.slider, "slider"),
        _category("graphic", predicates.graphic, "graphic"),
        _category("button", predicates.button, "button"),
        _category("combo_box", predicates.combo_box, "combo_box"),
        _category("edit_text", predicates.edit_text, "edit_text"),
        _category("table", predicates.table, "table"),
        _category("list", predicates.list_, "list"),
        _category("list_item", predicates.list_item, "list_item"),
        _category("blockquote", predicates.blockquote, "blockquote"),
        _category("form_field", predicates.form_field, "form_field"),
        _category("landmark", predicates.landmark, "landmark"),
        _category("jump", predicates.jump, "jump"),
    )
}

for _level in range(1, 7):
    _CATEGORIES[f"heading{_level}"] = SearchCategory(
        name=f"heading{_level}",
        predicate=predicates.heading_level(_level),
        no_next="no_next_heading_level",
        no_previous="no_previous_heading_level",
        message_args=(_level,),
    )

CATEGORIES: Mapping[str, SearchCategory] = MappingProxyType(_CATEGORIES)


def get_category(name: str) -> SearchCategory:
    try:
        return CATEGORIES[name]
    except KeyError:
        raise KeyError(f"Unknown search category '{name}'") from None


__all__ = ["CATEGORIES", "SearchCategory", "get_category"]
