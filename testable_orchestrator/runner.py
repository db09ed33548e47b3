"""Run phase: execute a single test-plan node."""

import logging
import threading
import traceback

from testable_orchestrator.context import ExecutionContext
from testable_orchestrator.hooks import Hook
from testable_orchestrator.models.result import Counts
from testable_orchestrator.models.testable import ReportEvent, Testable
from testable_orchestrator.validation import validate_type

log = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed loading tests:"


def add_description(testable: Testable, description: str) -> Testable:
    """Return a copy of the testable described as ``"<id> (<description>)"``."""
    return testable.model_copy(
        update={"description": f"{testable.id} ({description})"}
    )


def exception_location(error: BaseException) -> tuple[str | None, int | None]:
    """File and line an exception points at.

    Syntax errors carry the location of the offending source; other
    exceptions use the innermost frame of their traceback.
    """
    if isinstance(error, SyntaxError):
        return error.filename, error.lineno
    frames = traceback.extract_tb(error.__traceback__)
    if not frames:
        return None, None
    return frames[-1].filename, frames[-1].lineno


def run(test_plan: Testable, context: ExecutionContext) -> Testable:
    """Run a test-plan node through its type's ``run`` operation.

    The operation is passed through the ``wrap-run`` hook before it is called.
    When a history is active, the result's events are replaced by the history
    events belonging to this node. Exceptions raised by the operation
    propagate.
    """
    validate_type(test_plan, context)

    operation = context.hooks.run_hook(Hook.WRAP_RUN, context.registry.run, context)
    result = operation(test_plan, context)

    if context.history is not None:
        result = result.model_copy(
            update={"events": context.history.events_for(test_plan.id)}
        )
    return result


def _report_load_error(testable: Testable, context: ExecutionContext) -> Testable:
    error = testable.load_error
    file, line = exception_location(error)
    event = ReportEvent(
        type="error",
        testable=testable,
        message=testable.load_error_message or LOAD_ERROR_MESSAGE,
        file=testable.load_error_file or file,
        line=testable.load_error_line or line,
        thread=threading.current_thread().name,
        actual=error,
    )
    events = [event.with_type("begin-suite"), event, event.with_type("end-suite")]
    for e in events:
        context.report(e)

    return testable.model_copy(
        update={"events": events, "counts": Counts(count=1, error=1)}
    )


def _report_pending(testable: Testable, context: ExecutionContext) -> Testable:
    event = ReportEvent(
        type="pending",
        testable=testable,
        file=testable.meta.get("file"),
        line=testable.meta.get("line"),
    )
    events = [event.with_type("begin-test"), event, event.with_type("end-test")]
    for e in events:
        context.report(e)

    return testable.model_copy(
        update={"events": events, "counts": Counts(count=1, pending=1)}
    )


def run_testable(testable: Testable, context: ExecutionContext) -> Testable:
    """Run a single node, honouring its load error, skip and pending state.

    The checks form a strict priority chain: a load error is reported as an
    error even if the node is also skipped or pending; a skipped node is
    returned unchanged; a pending node is reported as pending; a container
    without runnable children is returned unchanged. Only then is the node
    run and passed through the post-test hook.
    """
    testable = context.hooks.run_hook(Hook.PRE_TEST, testable, context)

    if testable.load_error is not None:
        return _report_load_error(testable, context)

    if testable.skip:
        return testable

    if testable.is_pending:
        return _report_pending(testable, context)

    context.registry.resolve(testable.type)
    if context.registry.is_container(testable.type) and all(
        child.skip for child in testable.tests
    ):
        return testable

    result = run(testable, context)
    return context.hooks.run_hook(Hook.POST_TEST, result, context)


def run_testable_with_retries(
    testable: Testable, context: ExecutionContext, attempts: int
) -> Testable:
    """Run a node, retrying when it raises.

    Every attempt runs the pre-test hook and reports to the reporter and
    history again. Events already reported by a failed attempt are not
    withdrawn, so the history may hold an unmatched ``begin-test``.

    Raises:
        Exception: The last exception, once all attempts have failed

    """
    for attempt in range(1, attempts + 1):
        try:
            return run_testable(testable, context)
        except Exception as e:
            if attempt >= attempts:
                raise
            log.warning(
                "Running %s failed (attempt %d/%d): %s",
                testable.id,
                attempt,
                attempts,
                e,
            )
    raise ValueError(f"attempts must be at least 1, got {attempts}")
