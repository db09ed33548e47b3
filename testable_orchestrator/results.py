"""Aggregation of result counts over a result tree."""

from collections.abc import Iterable

from testable_orchestrator.models.result import Counts
from testable_orchestrator.models.testable import Testable, TestPlan


def sum_counts(nodes: Iterable[Testable]) -> Counts:
    """Sum of the totals of the given nodes."""
    return sum((totals(node) for node in nodes), Counts())


def totals(node: Testable | TestPlan) -> Counts:
    """Counts of a node, summed over its children when it has none of its own."""
    if node.counts is not None:
        return node.counts
    return sum_counts(node.tests)


def is_failed(node: Testable | TestPlan) -> bool:
    """Whether a result counted any failure or error."""
    return totals(node).has_failures


def rollup[T: (Testable, TestPlan)](node: T) -> T:
    """Copy of a container result whose counts are the sum over its children."""
    return node.model_copy(update={"counts": sum_counts(node.tests)})
