"""Module tests loading and running plan files end to end.

Types are resolved through the installed entry points, as they would be for
a third-party plugin.
"""

import json
import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from testable_orchestrator.cli import run
from testable_orchestrator.context import ExecutionContext
from testable_orchestrator.models.config import RunConfig
from testable_orchestrator.models.result import Counts
from testable_orchestrator.models.testable import TestPlan
from testable_orchestrator.orchestrator import TestOrchestrator
from testable_orchestrator.plan_loader import load_test_plan
from testable_orchestrator.reporting import History
from testable_orchestrator.results import totals
from testable_orchestrator.traversal import flatten
from testable_orchestrator.types.registry import TypeRegistry

type WritePlanFn = Callable[[str], Path]

PLAN = """
tests:
  - id: unit
    type: testing.suite
    tests:
      - id: unit.core
        type: testing.module
        tests:
          - id: unit.core.a
            type: testing.leaf
          - id: unit.core.b
            type: testing.leaf
            outcome: fail
      - id: unit.io
        type: testing.module
        tests:
          - id: unit.io.a
            type: testing.leaf
          - id: unit.io.b
            type: testing.leaf
            meta:
              pending: true
      - id: unit.slow
        type: testing.module
        skip: true
        tests:
          - id: unit.slow.a
            type: testing.leaf
  - id: broken
    type: testing.suite
    load_raises: cannot import broken
  - id: after-broken
    type: testing.suite
    tests:
      - id: after-broken.a
        type: testing.leaf
"""

FAILING_PLAN = """
tests:
  - id: unit
    type: testing.suite
    tests:
      - id: unit.core
        type: testing.module
        tests:
          - id: unit.core.a
            type: testing.leaf
            outcome: fail
          - id: unit.core.b
            type: testing.leaf
      - id: unit.io
        type: testing.module
        tests:
          - id: unit.io.a
            type: testing.leaf
  - id: integration
    type: testing.suite
    tests:
      - id: integration.a
        type: testing.leaf
"""

BASE_CONFIG = RunConfig(parallel_type="testing.module", parallel_threads=2)


def run_plan(
    write_plan: WritePlanFn,
    content: str,
    config: RunConfig,
    history: History | None = None,
) -> TestPlan:
    """Run a plan file with a fresh registry resolving types on demand."""
    context = ExecutionContext(config=config, registry=TypeRegistry(), history=history)
    return TestOrchestrator(context=context).run(load_test_plan(write_plan(content)))


@pytest.mark.parametrize(
    "config",
    [BASE_CONFIG, BASE_CONFIG.model_copy(update={"parallel": True})],
    ids=["serial", "parallel"],
)
def test_runs_plan(write_plan: WritePlanFn, config: RunConfig) -> None:
    """Both strategies produce the same totals for the same plan."""
    result = run_plan(write_plan, PLAN, config, History())

    assert totals(result) == Counts(count=5, passed=2, failed=1, error=1, pending=1)
    assert [t.id for t in result.tests] == ["unit", "broken", "after-broken"]
    ids = [node.id for node in flatten(result)]
    assert "unit.slow" not in ids
    assert "unit.slow.a" not in ids
    assert result.tests[2].skip
    assert result.tests[2].counts is None


def test_parallel_modules_run_on_workers(write_plan: WritePlanFn) -> None:
    """Modules inside a suite run on pool threads, one level deeper."""
    history = History()
    config = BASE_CONFIG.model_copy(update={"parallel": True})

    result = run_plan(write_plan, PLAN, config, history)

    core = next(node for node in result.tests[0].tests if node.id == "unit.core")
    assert [getattr(leaf, "ran_at_level") for leaf in core.tests] == [1, 1]
    assert [getattr(leaf, "ran_parallel") for leaf in core.tests] == [False, False]
    errors = [event for event in history.events if event.type == "error"]
    assert [event.testable and event.testable.id for event in errors] == ["broken"]


def test_fail_fast_reports_load_error_first(write_plan: WritePlanFn) -> None:
    """A load error under fail-fast leads the results and stops the run."""
    config = BASE_CONFIG.model_copy(update={"fail_fast": True})

    result = run_plan(write_plan, PLAN, config)

    assert [t.id for t in result.tests] == ["broken", "unit", "after-broken"]
    assert totals(result) == Counts(count=1, error=1)
    assert result.tests[1].counts is None


def test_fail_fast_stops_after_first_failure(write_plan: WritePlanFn) -> None:
    """Under fail-fast nothing after the failing module runs."""
    config = BASE_CONFIG.model_copy(update={"fail_fast": True})

    result = run_plan(write_plan, FAILING_PLAN, config)

    assert totals(result) == Counts(count=1, failed=1)
    unit, integration = result.tests
    assert [t.counts for t in unit.tests[0].tests] == [
        Counts(count=1, failed=1),
        None,
    ]
    assert unit.tests[1].counts is None
    assert integration.counts is None


def test_cli_run(
    write_plan: WritePlanFn,
    capsys: pytest.CaptureFixture[str],
    caplog: pytest.LogCaptureFixture,
) -> None:
    """The CLI reports failures through its exit code and JSON output."""
    with caplog.at_level(logging.INFO):
        exit_code = run(write_plan(PLAN), RunConfig())

    assert exit_code == 1
    output = json.loads(capsys.readouterr().out)
    assert (output["total"], output["failed"], output["errors"]) == (5, 1, 1)
    assert {"id": "unit.core.b", "type": "testing.leaf", "status": "fail"} in output[
        "results"
    ]
    assert "Test Results Summary:" in caplog.text
