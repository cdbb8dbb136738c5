"""Textual host: adapter hooks and the runnable demo app (``app``)."""

from .controller import DocumentView, TextualNavAdapter, TextualUIHooks, render_document

__all__ = ["DocumentView", "TextualNavAdapter", "TextualUIHooks", "render_document"]
