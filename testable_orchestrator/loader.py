"""Load phase: turn testables into test-plan nodes."""

import logging
from collections.abc import Sequence
from pathlib import Path

from testable_orchestrator.context import ExecutionContext
from testable_orchestrator.hooks import Hook
from testable_orchestrator.models.testable import Testable
from testable_orchestrator.validation import validate_type

log = logging.getLogger(__name__)


def load(testable: Testable, context: ExecutionContext) -> Testable:
    """Load a testable, producing a test-plan node.

    Validates the node, registers its search paths and calls its type's
    ``load`` between the pre- and post-load hooks. A failure while loading a
    suite or group is attached to the node as ``load_error``; a failing leaf
    re-raises.

    Args:
        testable: Raw testable node
        context: Execution context of the run

    Returns:
        The loaded node, the node unchanged if the pre-load hook marked it
        skipped, or the node with a ``load_error`` attached

    """
    validate_type(testable, context)

    for path in testable.test_paths:
        if not Path(path).exists():
            context.warn(f"In test_paths, no such file or directory: {path}")
        if not testable.skip_add_search_path:
            context.add_search_path(path)

    try:
        hooked = context.hooks.run_hook(Hook.PRE_LOAD_TEST, testable, context)
        if hooked.skip:
            return hooked
        test_plan = context.registry.load(hooked, context)
        return context.hooks.run_hook(Hook.POST_LOAD_TEST, test_plan, context)
    except Exception as e:
        if not context.registry.is_container(testable.type):
            raise
        log.debug("Loading %s failed: %s", testable.id, e)
        return testable.model_copy(update={"load_error": e})


def load_testables(
    testables: Sequence[Testable], context: ExecutionContext
) -> list[Testable]:
    """Load a sequence of testables in order.

    Nodes already skipped or carrying a load error are passed through. With
    fail-fast enabled, the first node whose load produces a load error is
    moved to the front and the remaining nodes are appended unloaded.
    """
    loaded: list[Testable] = []

    for index, testable in enumerate(testables):
        if testable.skip or testable.load_error is not None:
            result = testable
        else:
            result = load(testable, context)

        if context.fail_fast and result.load_error is not None:
            log.info("Load of %s failed, abandoning remaining loads", result.id)
            return [result, *loaded, *testables[index + 1 :]]

        loaded.append(result)

    return loaded
