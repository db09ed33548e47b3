"""CLI entry point for running a test plan."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Literal

from pydantic import ValidationError

from testable_orchestrator.context import ExecutionContext
from testable_orchestrator.models.config import RunConfig
from testable_orchestrator.models.testable import Testable, TestPlan
from testable_orchestrator.orchestrator import RunAbortedError, TestOrchestrator
from testable_orchestrator.plan_loader import load_test_plan
from testable_orchestrator.reporting import LoggingReporter
from testable_orchestrator.results import totals
from testable_orchestrator.traversal import flatten

type Status = Literal["pass", "fail", "error", "pending", "skipped"]

STATUS_SYMBOLS: dict[Status, str] = {
    "pass": "✅",
    "fail": "❌",
    "error": "❗",
    "pending": "⏸️",
    "skipped": "⏭️",
}


def leaf_status(testable: Testable) -> Status:
    """Outcome of a leaf result, from its counts."""
    counts = testable.counts
    if counts is None:
        return "skipped"
    if counts.error:
        return "error"
    if counts.failed:
        return "fail"
    if counts.pending:
        return "pending"
    return "pass"


def leaf_results(result: TestPlan) -> list[Testable]:
    """Result nodes without children, in traversal order."""
    return [node for node in flatten(result) if not node.tests]


def log_results_summary(log: logging.Logger, result: TestPlan) -> None:
    """Log a formatted summary of the test results."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for testable in leaf_results(result):
        status = leaf_status(testable)
        log.info("%s %s: %s", STATUS_SYMBOLS[status], testable.id, status)
        if testable.load_error is not None:
            log.info("  Load error: %s", testable.load_error)

    counts = totals(result)
    log.info(
        "%d test(s), %d passed, %d failed, %d error(s), %d pending",
        counts.count,
        counts.passed,
        counts.failed,
        counts.error,
        counts.pending,
    )


def format_output(result: TestPlan) -> dict[str, Any]:
    """Format the test results for JSON output."""
    counts = totals(result)
    return {
        "total": counts.count,
        "passed": counts.passed,
        "failed": counts.failed,
        "errors": counts.error,
        "pending": counts.pending,
        "results": [
            {"id": testable.id, "type": testable.type, "status": leaf_status(testable)}
            for testable in leaf_results(result)
        ],
    }


def build_config(
    config_json: str | None,
    parallel: bool = False,
    parallel_threads: int | None = None,
    fail_fast: bool = False,
) -> RunConfig:
    """Merge the JSON configuration with the command line flags."""
    config = RunConfig.model_validate(json.loads(config_json) if config_json else {})
    overrides: dict[str, Any] = {}
    if parallel:
        overrides["parallel"] = True
    if parallel_threads is not None:
        overrides["parallel_threads"] = parallel_threads
    if fail_fast:
        overrides["fail_fast"] = True
    return config.model_copy(update=overrides)


def run(plan_path: Path, config: RunConfig) -> int:
    """Run a test plan file and return the exit code."""
    log = logging.getLogger("testable_orchestrator")

    log.info("Loading test plan: %s", plan_path)
    try:
        plan = load_test_plan(plan_path)
    except (FileNotFoundError, ValueError) as e:
        log.error("Could not load test plan: %s", e)
        return 2

    context = ExecutionContext(config=config, reporter=LoggingReporter())
    try:
        result = TestOrchestrator(context=context).run(plan)
    except RunAbortedError as e:
        log.error("Run aborted: %s", e)
        return 2

    log_results_summary(log, result)
    print(json.dumps(format_output(result), indent=2))

    return 1 if totals(result).has_failures else 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Load and run a tree of testables")
    parser.add_argument(
        "--plan",
        type=Path,
        required=True,
        help="Path to the test plan (YAML or JSON)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="JSON run configuration (parallel, parallel-threads, fail-fast, ...)",
    )
    parser.add_argument(
        "--parallel",
        action="store_true",
        help="Run eligible testables on a worker pool",
    )
    parser.add_argument(
        "--parallel-threads",
        type=int,
        default=None,
        help="Worker pool size",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop at the first failure",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = build_config(
            args.config,
            parallel=args.parallel,
            parallel_threads=args.parallel_threads,
            fail_fast=args.fail_fast,
        )
    except (json.JSONDecodeError, ValidationError) as e:
        parser.error(f"invalid --config: {e}")

    sys.exit(run(args.plan, config))


if __name__ == "__main__":  # pragma: no cover
    main()
