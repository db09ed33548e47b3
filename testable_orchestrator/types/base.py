"""Abstract base class for testable type implementations."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar, Literal

from pydantic import BaseModel

from testable_orchestrator.models.testable import Testable

if TYPE_CHECKING:
    from testable_orchestrator.context import ExecutionContext

type Kind = Literal["suite", "group", "leaf"]

CONTAINER_KINDS: frozenset[Kind] = frozenset({"suite", "group"})


class TestableType(ABC):
    """Implementation of one kind of testable.

    Subclasses implement the two lifecycle operations. ``kind`` places the type
    in the hierarchy: load errors of suite and group nodes are contained, leaf
    load errors propagate. ``schema``, when set, is a pydantic model the node
    must satisfy on top of the generic testable shape.
    """

    __test__ = False

    kind: ClassVar[Kind] = "leaf"
    schema: ClassVar[type[BaseModel] | None] = None

    @abstractmethod
    def load(self, testable: Testable, context: "ExecutionContext") -> Testable:
        """Load the concrete test, producing a test-plan node.

        Args:
            testable: Raw testable node
            context: Execution context of the run

        Returns:
            Extended copy of the node, ready to run

        """

    @abstractmethod
    def run(self, test_plan: Testable, context: "ExecutionContext") -> Testable:
        """Execute a loaded node, producing a result node.

        Args:
            test_plan: Node returned by ``load``
            context: Execution context of the run

        Returns:
            Extended copy of the node carrying events and counts

        """

    @property
    def is_container(self) -> bool:
        return self.kind in CONTAINER_KINDS
