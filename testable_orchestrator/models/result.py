"""Models for aggregate test results."""

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class Counts:
    """Aggregate counts of a result node.

    For container nodes the counts equal the sum over the children.
    """

    count: int = 0
    passed: int = 0
    failed: int = 0
    error: int = 0
    pending: int = 0

    def __add__(self, other: "Counts") -> "Counts":
        return Counts(
            count=self.count + other.count,
            passed=self.passed + other.passed,
            failed=self.failed + other.failed,
            error=self.error + other.error,
            pending=self.pending + other.pending,
        )

    @property
    def has_failures(self) -> bool:
        """Whether any failure or error was counted."""
        return self.failed + self.error > 0
