"""Execution engine: run a sequence of test-plan nodes in order or in parallel."""

import logging
import os
import queue
import threading
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor

from testable_orchestrator.context import ExecutionContext
from testable_orchestrator.models.testable import Testable
from testable_orchestrator.results import is_failed
from testable_orchestrator.runner import run_testable, run_testable_with_retries

log = logging.getLogger(__name__)

THREAD_NAME_PREFIX = "testable-runner"


def default_thread_count() -> int:
    """Pool size used when ``parallel_threads`` is not configured."""
    return 2 * ((os.cpu_count() or 1) + 1)


def _run_one(testable: Testable, context: ExecutionContext) -> Testable:
    attempts = context.config.run_attempts
    if attempts > 1:
        return run_testable_with_retries(testable, context, attempts)
    return run_testable(testable, context)


def run_testables_serial(
    testables: Sequence[Testable], context: ExecutionContext
) -> list[Testable]:
    """Run testables one after another, in order.

    Once a node carrying a load error is seen, every subsequent node without
    one is marked skipped, so it still produces a result but is not executed.
    When a result fails under fail-fast, or requests that the remaining nodes
    are skipped, execution stops: the returned list holds the completed
    results, the current result, then the remaining nodes unrun.
    """
    load_error_seen = False
    results: list[Testable] = []

    for index, testable in enumerate(testables):
        if testable.load_error is not None:
            load_error_seen = True
        elif load_error_seen:
            testable = testable.model_copy(update={"skip": True})

        result = _run_one(testable, context)

        if (context.fail_fast and is_failed(result)) or result.skip_remaining:
            remaining = testables[index + 1 :]
            log.info("Stopping after %s, %d node(s) not run", result.id, len(remaining))
            return [*results, result, *remaining]

        results.append(result)

    return results


def run_testables_parallel(
    testables: Sequence[Testable], context: ExecutionContext
) -> list[Testable]:
    """Run eligible testables on a worker pool, the others in order first.

    Nodes of the configured ``parallel_type`` are distributed across a thread
    pool; every other node is run beforehand with ``run_testables_serial``.
    Workers see a context with ``parallel`` disabled and ``levels``
    incremented. Worker results follow the serial results in completion
    order.

    Under fail-fast no new work is submitted once a failure has been seen;
    the unsubmitted nodes are appended unrun. Work already submitted always
    runs to completion.

    Raises:
        Exception: The first exception raised by a worker, once the pool has
            shut down

    """
    parallel_type = context.config.parallel_type
    eligible = [t for t in testables if t.type == parallel_type]
    others = [t for t in testables if t.type != parallel_type]

    results = run_testables_serial(others, context) if others else []
    if not eligible:
        return results

    if context.fail_fast and any(is_failed(r) for r in results):
        log.info("Failure before parallel work, %d node(s) not run", len(eligible))
        return [*results, *eligible]

    num_threads = context.config.parallel_threads or default_thread_count()
    worker_context = context.for_worker()
    slots = threading.BoundedSemaphore(num_threads)
    completed: queue.SimpleQueue[Future[Testable]] = queue.SimpleQueue()
    failure_seen = threading.Event()
    unsubmitted: list[Testable] = []

    def run_worker(testable: Testable) -> Testable:
        result = _run_one(testable, worker_context)
        if is_failed(result):
            failure_seen.set()
        return result

    # Must not raise: every finished future has to be queued and free its slot.
    def on_done(future: Future[Testable]) -> None:
        if future.exception() is not None:
            failure_seen.set()
        completed.put(future)
        slots.release()

    log.info("Running %d node(s) on %d thread(s)", len(eligible), num_threads)
    submitted = 0
    with ThreadPoolExecutor(
        max_workers=num_threads, thread_name_prefix=THREAD_NAME_PREFIX
    ) as pool:
        for index, testable in enumerate(eligible):
            slots.acquire()
            if context.fail_fast and failure_seen.is_set():
                slots.release()
                unsubmitted = eligible[index:]
                log.info("Failure seen, %d node(s) not submitted", len(unsubmitted))
                break
            future = pool.submit(run_worker, testable)
            future.add_done_callback(on_done)
            submitted += 1

    first_error: BaseException | None = None
    for _ in range(submitted):
        future = completed.get()
        if (error := future.exception()) is not None:
            log.error("Worker failed: %s", error, exc_info=error)
            first_error = first_error or error
            continue
        results.append(future.result())

    if first_error is not None:
        raise first_error

    return [*results, *unsubmitted]


def run_testables(
    testables: Sequence[Testable], context: ExecutionContext
) -> list[Testable]:
    """Run testables with the strategy selected by the ``parallel`` flag."""
    if context.config.parallel:
        return run_testables_parallel(testables, context)
    return run_testables_serial(testables, context)
