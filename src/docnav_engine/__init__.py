"""Granularity-based document navigation engine for screen readers."""

__all__ = [
    "adapters",
    "commands",
    "config",
    "cursor",
    "dom",
    "errors",
    "messages",
    "navigation",
    "runtime",
    "search",
    "walkers",
]

__version__ = "0.1.0"
