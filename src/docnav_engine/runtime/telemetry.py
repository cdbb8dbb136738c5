"""Telelog-backed logging and profiling for the navigation engine.

Each engine area logs through its own logger: ``docnav_engine.navigation``,
``docnav_engine.table``, ``docnav_engine.commands`` and so on. Events and
spans pick that logger from their own name, so ``table.exit`` and
``table::next_row`` both land in ``docnav_engine.table``.

A span closes with one line carrying its outcome:

``ok``   the block finished normally
``miss`` an expected, recoverable failure (document boundary, no match)
``fail`` the block raised; the exception still propagates
"""

from __future__ import annotations

import os
import re
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, MutableMapping, Optional, Tuple, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "DOCNAV_ENGINE_"
ROOT_LOGGER = "docnav_engine"
PRESETS: Tuple[str, ...] = ("development", "production", "performance", "quiet")

_AREA = re.compile(r"::|\.")
_TRUE = {"1", "true", "yes", "on"}
_OUTCOME_LEVELS = {"ok": "debug", "miss": "debug", "fail": "error"}

_LOGGER_CACHE: MutableMapping[str, Any] = {}
_ACTIVE_CONFIG: Optional[Any] = None


@dataclass(frozen=True)
class TelemetrySettings:
    """What to log and where, mapped onto a ``telelog.Config``."""

    level: str = "INFO"
    console: bool = True
    color: bool = True
    json: bool = False
    log_file: str = ""
    buffered: bool = False
    buffer_size: int = 2048

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TelemetrySettings":
        source = os.environ if environ is None else environ

        def flag(name: str) -> bool:
            return (source.get(f"{ENV_PREFIX}{name}") or "").lower() in _TRUE

        return cls(
            level=(source.get(f"{ENV_PREFIX}LOG_LEVEL") or "INFO").upper(),
            console=not flag("DISABLE_CONSOLE"),
            color=not flag("NO_COLOR"),
            json=flag("LOG_JSON"),
            log_file=source.get(f"{ENV_PREFIX}LOG_FILE") or "",
            buffered=flag("LOG_BUFFERED"),
            buffer_size=int(source.get(f"{ENV_PREFIX}LOG_BUFFER_SIZE") or "2048"),
        )

    @classmethod
    def preset(cls, name: str) -> "TelemetrySettings":
        log_file = os.getenv(f"{ENV_PREFIX}LOG_FILE") or ""
        key = name.lower()
        if key == "development":
            return cls(level="DEBUG")
        if key == "production":
            return cls(console=False, log_file=log_file or "docnav_engine.log", buffered=True)
        if key == "performance":
            return cls(
                level="DEBUG",
                console=False,
                json=True,
                buffered=True,
                log_file=log_file or "docnav_engine-perf.log",
            )
        if key == "quiet":
            # Hosts that own the terminal, such as the Textual app.
            return cls(level="WARNING", console=False)
        raise ValueError(f"Unknown preset '{name}'. Expected one of {', '.join(PRESETS)}.")

    def to_config(self) -> Any:
        config = tl.Config()
        config.with_min_level(self.level)
        config.with_console_output(self.console)
        if self.console:
            config.with_colored_output(self.color)
        config.with_json_format(self.json)
        if self.log_file:
            config.with_file_output(self.log_file)
        if self.buffered:
            config.with_buffering(True)
            config.with_buffer_size(self.buffer_size)
        config.with_profiling(True)
        return config


def configure(
    *,
    config: Optional[Any] = None,
    preset: Optional[str] = None,
    settings: Optional[TelemetrySettings] = None,
) -> None:
    """Replace the active telelog configuration.

    Accepts at most one of an explicit ``telelog.Config``, a preset name from
    :data:`PRESETS`, or :class:`TelemetrySettings`. With none of them the
    settings come from ``DOCNAV_ENGINE_*`` variables. Cached loggers are
    dropped so the next :func:`get_logger` call picks the new config up.
    """

    global _ACTIVE_CONFIG
    if sum(option is not None for option in (config, preset, settings)) > 1:
        raise ValueError("Provide only one of `config`, `preset` or `settings`.")

    if preset is not None:
        settings = TelemetrySettings.preset(preset)
    if config is None:
        config = (settings or TelemetrySettings.from_env()).to_config()

    _ACTIVE_CONFIG = config
    _LOGGER_CACHE.clear()


def _active_config() -> Any:
    if _ACTIVE_CONFIG is None:
        configure()
    return _ACTIVE_CONFIG


def logger_name_for(name: str) -> str:
    """Logger owning an event or span: the area before the first ``.`` or ``::``."""

    area = _AREA.split(name, maxsplit=1)[0]
    if not area or area == ROOT_LOGGER:
        return ROOT_LOGGER
    return f"{ROOT_LOGGER}.{area}"


def get_logger(name: Optional[str] = None) -> Any:
    logger_name = name or ROOT_LOGGER
    if logger_name not in _LOGGER_CACHE:
        _LOGGER_CACHE[logger_name] = tl.Logger.with_config(logger_name, _active_config())
    return _LOGGER_CACHE[logger_name]


def _stringify(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, set)):
        return repr(value)
    return str(value)


def emit(logger: Any, level: str, message: str, data: Mapping[str, Any]) -> None:
    """Write ``message`` with ``data`` as structured pairs where telelog allows."""

    name = str(level).lower()
    pairs = [(str(key), _stringify(value)) for key, value in data.items()]
    with_data = getattr(logger, f"{name}_with", None)
    if with_data is not None:
        with_data(message, pairs)
        return
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {dict(pairs)}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Emit ``event::<name>`` on the logger of the event's area."""

    log = get_logger(logger_name or logger_name_for(name))
    emit(log, level, f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    """Yielded by :func:`span`; collects metadata and the block's outcome."""

    logger: Any
    span_name: str
    component: str
    metadata: Dict[str, str] = field(default_factory=dict)
    outcome: str = "ok"
    reason: Optional[str] = None

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def miss(self, reason: str) -> None:
        self.outcome, self.reason = "miss", reason

    def fail(self, reason: str) -> None:
        self.outcome, self.reason = "fail", reason

    def close(self) -> None:
        payload: Dict[str, Any] = {
            "span": self.span_name,
            "component": self.component,
            **self.metadata,
        }
        if self.reason is not None:
            payload["reason"] = self.reason
        emit(self.logger, _OUTCOME_LEVELS[self.outcome], f"span::{self.outcome}", payload)


@contextmanager
def span(
    name: str,
    *,
    component: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    logger: Optional[Any] = None,
    logger_name: Optional[str] = None,
) -> Iterator[SpanHandle]:
    """Profile a block as a telelog component and log its outcome on exit.

    ``component`` defaults to the span's area (``navigation`` for
    ``navigation::move``). ``metadata`` is pushed as logger context while the
    block runs. Pass ``logger`` to write through an existing logger instead
    of the area's.
    """

    area = _AREA.split(name, maxsplit=1)[0]
    log = logger if logger is not None else get_logger(logger_name or logger_name_for(name))
    handle = SpanHandle(logger=log, span_name=name, component=component or area)
    for key, value in (metadata or {}).items():
        handle.add_metadata(key, value)

    with ExitStack() as stack:
        for key, value in handle.metadata.items():
            log.add_context(key, value)
            stack.callback(log.remove_context, key)
        stack.enter_context(log.track_component(handle.component))
        stack.enter_context(log.profile(name))
        try:
            yield handle
        except Exception as exc:
            handle.fail(f"{type(exc).__name__}: {exc}")
            raise
        finally:
            handle.close()


configure(preset=os.getenv(f"{ENV_PREFIX}PRESET") or None)

__all__ = [
    "ENV_PREFIX",
    "PRESETS",
    "ROOT_LOGGER",
    "SpanHandle",
    "TelemetrySettings",
    "configure",
    "emit",
    "get_logger",
    "logger_name_for",
    "record_event",
    "span",
]
