"""Session configuration, overridable through ``DOCNAV_ENGINE_*`` variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional

ENV_PREFIX = "DOCNAV_ENGINE_"


@dataclass(frozen=True)
class NavigationConfig:
    """Tunables for one navigation session.

    ``initial_granularity`` holds a :class:`~docnav_engine.walkers.Granularity`
    value. ``max_line_length`` wraps long structural lines (``None`` keeps each
    run whole). Durations are milliseconds.
    """

    initial_granularity: str = "structural_line"
    max_line_length: Optional[int] = None
    guard_window_ms: float = 100.0
    focus_delay_ms: float = 0.0
    key_timeout_ms: int = 1000
    flow_width: int = 80

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "NavigationConfig":
        source = os.environ if environ is None else environ
        values = {}
        for item in fields(cls):
            raw = source.get(f"{ENV_PREFIX}{item.name.upper()}")
            if raw is None or raw == "":
                continue
            values[item.name] = _coerce(item.name, raw)
        return cls(**values)

    def with_overrides(self, **changes: object) -> "NavigationConfig":
        return replace(self, **changes)


def _coerce(name: str, raw: str) -> object:
    if name == "initial_granularity":
        return raw.strip().lower()
    if name == "max_line_length":
        value = int(raw)
        return value if value > 0 else None
    if name in {"guard_window_ms", "focus_delay_ms"}:
        return float(raw)
    return int(raw)


__all__ = ["ENV_PREFIX", "NavigationConfig"]
