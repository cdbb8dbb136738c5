"""Build a :class:`Document` from HTML markup with ``lxml.html``."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional, Union

import lxml.html
from lxml import etree

from docnav_engine.runtime import telemetry

from .document import Document
from .node import Node, text

_SPACES = re.compile(r"\s+")


def _normalise(value: Optional[str], preserve: bool) -> str:
    if not value:
        return ""
    return value if preserve else _SPACES.sub(" ", value)


def _convert(source: etree._Element, preserve: bool) -> Node:
    tag = str(source.tag).lower()
    preserve = preserve or tag in {"pre", "textarea"}
    node = Node(tag, attributes={str(k).lower(): str(v) for k, v in source.attrib.items()})
    if tag == "input":
        node.value = source.get("value", "")
        node.checked = source.get("checked") is not None
    leading = _normalise(source.text, preserve)
    if tag == "textarea":
        node.value = source.text or ""
    elif leading:
        node.append(text(leading))
    for child in source:
        if isinstance(child.tag, str):
            node.append(_convert(child, preserve))
        tail = _normalise(child.tail, preserve)
        if tail:
            node.append(text(tail))
    if node.value is not None:
        node.selection_start = node.selection_end = len(node.value)
    return node


def load_html(markup: Union[str, bytes]) -> Document:
    """Parse ``markup`` into a document; comments and PIs are dropped."""

    with telemetry.span("html::load", component="dom") as handle:
        parsed = lxml.html.document_fromstring(markup)
        etree.strip_elements(parsed, etree.Comment, etree.ProcessingInstruction, with_tail=False)
        title = parsed.findtext(".//title") or ""
        root = _convert(parsed, preserve=False)
        document = Document(root, title=title.strip())
        handle.add_metadata("leaves", len(document.leaves()))
    return document


def load_html_file(path: Union[str, Path]) -> Document:
    return load_html(Path(path).read_bytes())


__all__ = ["load_html", "load_html_file"]
