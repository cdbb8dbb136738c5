"""Runtime services: telemetry, the user-command guard and deferrals."""

from .guard import ExpiryToken, UserCommandGuard, monotonic_ms
from .scheduler import Deferred, DeferredQueue

__all__ = [
    "Deferred",
    "DeferredQueue",
    "ExpiryToken",
    "UserCommandGuard",
    "monotonic_ms",
]
