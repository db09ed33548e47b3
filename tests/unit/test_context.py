"""Tests for the execution context and run configuration."""

import sys

import pytest
from pydantic import ValidationError

from testable_orchestrator.context import ExecutionContext, prepend_sys_path
from testable_orchestrator.models.config import RunConfig
from testable_orchestrator.models.testable import ReportEvent
from testable_orchestrator.reporting import History, LoggingReporter
from testable_orchestrator.testing.factories import leaf


def test_run_config_accepts_kebab_case_keys() -> None:
    """Accepts the documented configuration keys."""
    config = RunConfig.model_validate(
        {"parallel": True, "parallel-threads": 3, "fail-fast": True, "levels": 2}
    )

    assert config.parallel
    assert config.parallel_threads == 3
    assert config.fail_fast
    assert config.levels == 2


def test_run_config_accepts_field_names() -> None:
    """Accepts snake_case field names too."""
    config = RunConfig.model_validate({"parallel_threads": 4, "parallel_type": "ns"})

    assert config.parallel_threads == 4
    assert config.parallel_type == "ns"


def test_run_config_rejects_invalid_thread_count() -> None:
    """Worker pools need at least one thread."""
    with pytest.raises(ValidationError):
        RunConfig.model_validate({"parallel-threads": 0})


def test_for_worker_forks_config() -> None:
    """Workers see parallel disabled and one more nesting level."""
    context = ExecutionContext(config=RunConfig(parallel=True, levels=1))

    worker = context.for_worker()

    assert worker.config.parallel is False
    assert worker.config.levels == 2
    assert context.config.parallel is True
    assert context.config.levels == 1
    assert worker.registry is context.registry


def test_with_config() -> None:
    """Replaces configuration values on a copy."""
    context = ExecutionContext()

    changed = context.with_config(fail_fast=True)

    assert changed.fail_fast
    assert not context.fail_fast


def test_report_reaches_reporter_and_history() -> None:
    """Reported events go to the reporter and the history."""
    reported: list[ReportEvent] = []
    history = History()
    context = ExecutionContext(reporter=reported.append, history=history)
    event = ReportEvent(type="pass", testable=leaf("a"))

    context.report(event)

    assert reported == [event]
    assert history.events == [event]
    assert history.events_for("a") == [event]
    assert history.events_for("b") == []


def test_logging_reporter_logs_events(caplog: pytest.LogCaptureFixture) -> None:
    """Logs the event type, testable and message."""
    reporter = LoggingReporter()

    with caplog.at_level("DEBUG"):
        reporter(ReportEvent(type="error", testable=leaf("a"), message="boom"))

    assert "error a: boom" in caplog.text


def test_prepend_sys_path(monkeypatch: pytest.MonkeyPatch) -> None:
    """Adds the path once, at the front."""
    monkeypatch.setattr(sys, "path", ["existing"])

    prepend_sys_path("src")
    prepend_sys_path("src")

    assert sys.path == ["src", "existing"]
