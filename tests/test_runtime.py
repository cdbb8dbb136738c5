from __future__ import annotations

from typing import List

import pytest

from docnav_engine.runtime import DeferredQueue, UserCommandGuard, telemetry
from docnav_engine.walkers import Granularity


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_guard_expires_after_its_window() -> None:
    clock = FakeClock(10.0)
    guard = UserCommandGuard(window_ms=100.0, clock=clock)

    guard.mark()

    clock.now = 109.0
    assert guard.is_busy()
    clock.now = 110.0
    assert not guard.is_busy()


def test_overlapping_marks_extend_the_busy_period() -> None:
    clock = FakeClock()
    guard = UserCommandGuard(window_ms=100.0, clock=clock)

    guard.mark()
    clock.now = 50.0
    guard.mark()
    assert guard.level == 2

    clock.now = 120.0
    assert guard.level == 1
    clock.now = 150.0
    assert not guard.is_busy()


def test_marks_at_zero_and_ten_keep_the_guard_busy_until_one_ten() -> None:
    clock = FakeClock()
    guard = UserCommandGuard(window_ms=100.0, clock=clock)

    guard.mark()
    clock.now = 10.0
    guard.mark()

    for now in (10.0, 50.0, 99.9, 100.0, 109.9):
        clock.now = now
        assert guard.is_busy(), now
    clock.now = 100.0
    assert guard.level == 1
    clock.now = 110.0
    assert not guard.is_busy()
    assert guard.level == 0


def test_guard_tokens_count_up() -> None:
    guard = UserCommandGuard(clock=FakeClock())

    first = guard.mark()
    second = guard.mark()

    assert second.generation == first.generation + 1


def test_guard_rejects_negative_window() -> None:
    with pytest.raises(ValueError):
        UserCommandGuard(window_ms=-1)


def test_deferred_queue_runs_due_entries_in_deadline_order() -> None:
    clock = FakeClock()
    queue = DeferredQueue(clock=clock)
    calls: List[str] = []

    queue.call_later(10, lambda: calls.append("late"))
    queue.call_later(5, lambda: calls.append("early"))
    queue.call_later(5, lambda: calls.append("early-second"))

    clock.now = 4
    assert queue.run_due() == 0
    clock.now = 10
    assert queue.run_due() == 3

    assert calls == ["early", "early-second", "late"]
    assert queue.pending() == 0


def test_deferred_queue_clamps_negative_delays() -> None:
    clock = FakeClock(100.0)
    queue = DeferredQueue(clock=clock)

    entry = queue.call_later(-50, lambda: None, label="focus")

    assert entry.deadline == 100.0
    assert entry.label == "focus"
    assert queue.run_due() == 1


def test_span_reraises_and_reports_failures() -> None:
    with pytest.raises(KeyError):
        with telemetry.span("tests::span", component="tests", metadata={"k": 1}) as handle:
            handle.add_metadata("step", 2)
            assert handle.metadata == {"k": "1", "step": "2"}
            raise KeyError("boom")

    assert handle.outcome == "fail"
    assert handle.reason == "KeyError: 'boom'"
    assert handle.component == "tests"


def test_configure_rejects_unknown_or_conflicting_options() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(preset="chatty")
    with pytest.raises(ValueError):
        telemetry.configure(config=object(), preset="quiet")


def test_record_event_accepts_structured_data() -> None:
    telemetry.configure(preset="quiet")

    telemetry.record_event("tests.event", data={"answer": 42})
    telemetry.record_event("tests.event", level="debug")


def test_span_records_misses_and_defaults_its_component() -> None:
    with telemetry.span("table::next_row", metadata={"granularity": Granularity.WORD}) as handle:
        handle.miss("edge")

    assert handle.component == "table"
    assert handle.outcome == "miss"
    assert handle.reason == "edge"
    assert handle.metadata == {"granularity": "word"}


def test_span_without_trouble_closes_ok() -> None:
    with telemetry.span("navigation::move", component="navigation") as handle:
        pass

    assert handle.outcome == "ok"
    assert handle.reason is None


def test_events_and_spans_log_under_their_area() -> None:
    assert telemetry.logger_name_for("table.exit") == "docnav_engine.table"
    assert telemetry.logger_name_for("navigation::move") == "docnav_engine.navigation"
    assert telemetry.logger_name_for("docnav_engine") == "docnav_engine"
    assert telemetry.logger_name_for("") == "docnav_engine"


def test_settings_from_env() -> None:
    settings = telemetry.TelemetrySettings.from_env(
        {
            "DOCNAV_ENGINE_LOG_LEVEL": "debug",
            "DOCNAV_ENGINE_DISABLE_CONSOLE": "yes",
            "DOCNAV_ENGINE_LOG_FILE": "nav.log",
        }
    )

    assert settings.level == "DEBUG"
    assert settings.console is False
    assert settings.log_file == "nav.log"
    assert settings.buffered is False
    assert telemetry.TelemetrySettings.from_env({}) == telemetry.TelemetrySettings()


def test_presets_resolve_to_settings() -> None:
    quiet = telemetry.TelemetrySettings.preset("Quiet")

    assert quiet.level == "WARNING"
    assert quiet.console is False
    assert telemetry.TelemetrySettings.preset("development").level == "DEBUG"
    assert set(telemetry.PRESETS) == {"development", "production", "performance", "quiet"}
    with pytest.raises(ValueError):
        telemetry.configure(preset="quiet", settings=quiet)
