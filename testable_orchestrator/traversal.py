"""Traversal of testable, test-plan and result trees."""

from collections.abc import Iterator

from testable_orchestrator.models.testable import Testable, TestPlan


def flatten(node: Testable | TestPlan) -> Iterator[Testable]:
    """Yield every non-skipped node of the tree, in pre-order.

    The node itself is included only when it is a testable; the synthetic
    top-level ``TestPlan`` yields just its descendants. Skipped nodes are
    pruned together with their subtrees.
    """
    if isinstance(node, Testable):
        yield node
    for child in node.tests:
        if not child.skip:
            yield from flatten(child)
