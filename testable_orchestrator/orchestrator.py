"""Test orchestrator driving a whole test plan through load and run."""

import logging
from dataclasses import dataclass, field

from testable_orchestrator.context import ExecutionContext
from testable_orchestrator.engine import run_testables
from testable_orchestrator.loader import load_testables
from testable_orchestrator.models.testable import TestPlan
from testable_orchestrator.results import rollup, totals

log = logging.getLogger(__name__)


class RunAbortedError(Exception):
    """Raised when an exception escapes the run and halts it."""


@dataclass(frozen=True, kw_only=True)
class TestOrchestrator:
    """Loads and runs the top-level testables of a test plan."""

    __test__ = False

    context: ExecutionContext = field(default_factory=ExecutionContext)

    def run(self, plan: TestPlan) -> TestPlan:
        """Load and run every testable of the plan.

        Args:
            plan: Top-level plan holding the raw testables

        Returns:
            Result plan whose counts are the sum over its testables

        Raises:
            RunAbortedError: If loading or running raised

        """
        if not plan.tests:
            log.info("No testables provided")
            return rollup(plan)

        try:
            log.info("Loading %d testable(s)...", len(plan.tests))
            loaded = load_testables(plan.tests, self.context)

            log.info(
                "Running %d testable(s) (parallel=%s, fail_fast=%s)...",
                len(loaded),
                self.context.config.parallel,
                self.context.fail_fast,
            )
            results = run_testables(loaded, self.context)
        except Exception as e:
            log.error("Test run aborted: %s", e, exc_info=e)
            raise RunAbortedError(str(e)) from e

        result = rollup(plan.model_copy(update={"tests": results}))
        counts = totals(result)
        log.info(
            "Test execution completed: %d test(s), %d failure(s), %d error(s)",
            counts.count,
            counts.failed,
            counts.error,
        )
        return result
