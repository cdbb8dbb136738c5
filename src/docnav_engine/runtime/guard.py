"""Nestable "inside a user command" guard.

Navigation commands move focus and selection themselves; hosts consult
``is_busy()`` to ignore the focus/selection events those changes echo back.
Every ``mark()`` holds the guard for ``window_ms`` on its own, so overlapping
commands extend the busy period instead of cutting it short.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, List

from . import telemetry


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass(frozen=True, slots=True)
class ExpiryToken:
    generation: int
    deadline: float


class UserCommandGuard:
    """Depth counter whose increments each expire ``window_ms`` after entry."""

    def __init__(
        self,
        *,
        window_ms: float = 100.0,
        clock: Callable[[], float] = monotonic_ms,
    ) -> None:
        if window_ms < 0:
            raise ValueError("window_ms cannot be negative")
        self.window_ms = window_ms
        self._clock = clock
        self._tokens: List[ExpiryToken] = []
        self._generation = 0

    def mark(self) -> ExpiryToken:
        """Enter a user command; the returned token expires on its own."""

        self._generation += 1
        token = ExpiryToken(
            generation=self._generation,
            deadline=self._clock() + self.window_ms,
        )
        self._tokens.append(token)
        telemetry.record_event(
            "guard.mark",
            level="debug",
            data={"generation": token.generation, "level": len(self._tokens)},
        )
        return token

    @property
    def level(self) -> int:
        self._expire()
        return len(self._tokens)

    def is_busy(self) -> bool:
        return self.level > 0

    def _expire(self) -> None:
        now = self._clock()
        self._tokens = [token for token in self._tokens if token.deadline > now]


__all__ = ["ExpiryToken", "UserCommandGuard", "monotonic_ms"]
