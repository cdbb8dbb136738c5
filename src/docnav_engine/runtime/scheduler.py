"""Cooperative deferrals pumped by the host event loop."""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import Callable, List

from . import telemetry
from .guard import monotonic_ms


@dataclass(order=True, slots=True)
class Deferred:
    deadline: float
    sequence: int
    label: str = field(compare=False)
    callback: Callable[[], None] = field(compare=False)


class DeferredQueue:
    """Runs callbacks once their delay has elapsed, in deadline order.

    Nothing runs on its own: the host calls ``run_due()`` from its loop (the
    Textual adapter does so on an interval). Entries with equal deadlines run
    in the order they were scheduled.
    """

    def __init__(self, *, clock: Callable[[], float] = monotonic_ms) -> None:
        self._clock = clock
        self._heap: List[Deferred] = []
        self._sequence = 0

    def call_later(
        self, delay_ms: float, callback: Callable[[], None], *, label: str = ""
    ) -> Deferred:
        self._sequence += 1
        entry = Deferred(
            deadline=self._clock() + max(delay_ms, 0.0),
            sequence=self._sequence,
            label=label or getattr(callback, "__name__", "deferred"),
            callback=callback,
        )
        heapq.heappush(self._heap, entry)
        return entry

    def pending(self) -> int:
        return len(self._heap)

    def run_due(self) -> int:
        """Run every entry whose deadline has passed; return how many ran."""

        now = self._clock()
        ran = 0
        while self._heap and self._heap[0].deadline <= now:
            entry = heapq.heappop(self._heap)
            with telemetry.span(
                "scheduler::run", component="scheduler", metadata={"label": entry.label}
            ):
                entry.callback()
            ran += 1
        return ran


__all__ = ["Deferred", "DeferredQueue"]
