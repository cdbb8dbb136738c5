"""Speakable description units."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from docnav_engine.cursor import Selection
from docnav_engine.dom import Document, Node, roles
from docnav_engine.messages import MessageTable


@dataclass(frozen=True, slots=True)
class NavDescription:
    """One speakable unit: ``context`` then ``text``, ``user_value``, ``annotation``."""

    context: str = ""
    text: str = ""
    user_value: str = ""
    annotation: str = ""

    def speakable(self) -> str:
        parts = (self.context, self.text, self.user_value, self.annotation)
        return " ".join(part.strip() for part in parts if part and part.strip())

    def is_empty(self) -> bool:
        return not self.speakable()

    def with_context(self, context: str) -> "NavDescription":
        if not context:
            return self
        merged = f"{context} {self.context}".strip()
        return NavDescription(merged, self.text, self.user_value, self.annotation)


def speak_all(descriptions: Sequence[NavDescription]) -> str:
    return " ".join(d.speakable() for d in descriptions if not d.is_empty())


def _collapse(value: str) -> str:
    return " ".join(value.split())


def annotated_ancestor(leaf: Node) -> Optional[Node]:
    """Nearest inline ancestor whose role is announced (link, button, heading)."""

    for ancestor in reversed(leaf.ancestors()):
        if roles.is_block(ancestor) and roles.heading_level(ancestor) is None:
            return None
        if roles.control_role(ancestor) is not None:
            return ancestor
    return None


def role_annotation(node: Node, messages: MessageTable) -> str:
    level = roles.heading_level(node)
    if level is not None:
        return messages.get("heading_level", level)
    key = roles.control_role(node)
    return messages.get(key) if key else ""


def control_value(node: Node, messages: MessageTable) -> str:
    """Live value or state of an interactive element."""

    key = roles.control_role(node)
    if key in {"role_checkbox", "role_radio"}:
        return messages.get("state_checked" if roles.is_checked(node) else "state_not_checked")
    if node.tag == "select":
        chosen = [c for c in node.children if c.tag == "option" and c.has_attribute("selected")]
        options = chosen or [c for c in node.children if c.tag == "option"]
        if node.value is not None:
            return node.value
        return _collapse(options[0].text_content()) if options else ""
    if key in {"role_textbox", "role_slider", "role_spinbutton"}:
        if node.value is not None:
            return node.value
        return node.get_attribute("aria-valuenow") or node.get_attribute("value") or ""
    return ""


def control_name(node: Node) -> str:
    if node.tag == "input" and roles.input_type(node) in roles.TEXT_INPUT_TYPES:
        label = node.get_attribute("aria-label") or node.get_attribute("placeholder")
        return (label or node.get_attribute("name") or "").strip()
    return roles.accessible_name(node)


def describe_control(node: Node, messages: MessageTable) -> NavDescription:
    return NavDescription(
        text=control_name(node),
        user_value=control_value(node, messages),
        annotation=role_annotation(node, messages),
    )


def entered_context(
    previous: Optional[Selection], current: Selection, messages: MessageTable
) -> str:
    """Names of the containers ``current`` is inside that ``previous`` was not."""

    before = set()
    if previous is not None:
        before = {id(node) for node in previous.start.node.ancestors(include_self=True)}
    names = []
    for node in current.start.node.ancestors(include_self=True):
        if id(node) in before:
            continue
        key = roles.container_role(node)
        if key:
            names.append(messages.get(key))
    return " ".join(names)


def group_segments(document: Document, selection: Selection) -> List[Tuple[Optional[Node], list]]:
    """Split covered segments into text groups sharing one annotated ancestor.

    Atomic leaves always form a group of their own keyed by the leaf.
    """

    groups: List[Tuple[Optional[Node], list]] = []
    for segment in document.segments(selection):
        if not segment.leaf.is_text:
            groups.append((segment.leaf, [segment]))
            continue
        owner = annotated_ancestor(segment.leaf)
        if groups and groups[-1][0] is owner and groups[-1][1][-1].leaf.is_text:
            groups[-1][1].append(segment)
        else:
            groups.append((owner, [segment]))
    return groups


def describe_range(
    document: Document,
    messages: MessageTable,
    previous: Optional[Selection],
    current: Selection,
) -> List[NavDescription]:
    """Describe every leaf segment ``current`` covers, in document order."""

    descriptions: List[NavDescription] = []
    for owner, segments in group_segments(document, current):
        if owner is not None and not owner.is_text and roles.is_atomic(owner):
            descriptions.append(describe_control(owner, messages))
            continue
        words = _collapse(
            "".join(seg.leaf.text[seg.start : seg.end] for seg in segments)
        )
        if not words:
            continue
        annotation = role_annotation(owner, messages) if owner is not None else ""
        value = control_value(owner, messages) if owner is not None else ""
        descriptions.append(NavDescription(text=words, user_value=value, annotation=annotation))
    context = entered_context(previous, current, messages)
    if descriptions and context:
        descriptions[0] = descriptions[0].with_context(context)
    return descriptions


__all__ = [
    "NavDescription",
    "annotated_ancestor",
    "control_value",
    "describe_control",
    "describe_range",
    "entered_context",
    "group_segments",
    "role_annotation",
    "speak_all",
]
