"""Models for testable nodes, test plans and report events.

A single ``Testable`` model is used for all three lifecycle stages: the raw
testable, the loaded test-plan node and the result node. Each phase returns an
extended copy, never mutating its input.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Literal

from pydantic import ConfigDict, Field

from testable_orchestrator.models.base import Model
from testable_orchestrator.models.result import Counts

EventType = Literal[
    "begin-suite",
    "end-suite",
    "begin-test",
    "end-test",
    "pass",
    "fail",
    "error",
    "pending",
]


class Testable(Model):
    """A node of the testable tree.

    Type-specific fields (e.g. a loaded test body) are carried as extra
    attributes, which is why unknown fields are allowed.
    """

    __test__ = False

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Unique identifier, stable across load and run")
    type: str = Field(..., description="Type tag used to dispatch load and run")
    description: str | None = Field(default=None, description="Human description")
    tests: Sequence["Testable"] = Field(
        default_factory=list, description="Ordered child testables"
    )
    skip: bool = Field(default=False, description="Exclude from load and run")
    meta: Mapping[str, Any] = Field(
        default_factory=dict, description="Free-form metadata (file, line, pending)"
    )
    test_paths: Sequence[str] = Field(
        default_factory=list, description="Source search locations to register"
    )
    skip_add_search_path: bool = Field(
        default=False, description="Do not register test_paths as search locations"
    )
    pending: bool = Field(default=False, description="Report as pending, do not run")

    load_error: BaseException | None = Field(
        default=None, description="Failure captured while loading this node"
    )
    load_error_file: str | None = None
    load_error_line: int | None = None
    load_error_message: str | None = None

    events: Sequence["ReportEvent"] = Field(
        default_factory=list, description="Report events produced by running"
    )
    counts: Counts | None = Field(default=None, description="Aggregate result counts")
    skip_remaining: bool = Field(
        default=False, description="Request that the rest of the batch is not run"
    )

    @property
    def is_pending(self) -> bool:
        """Whether the node is marked pending directly or through metadata."""
        return self.pending or bool(self.meta.get("pending"))


class TestPlan(Model):
    """Synthetic top-level wrapper around the testables of a run.

    It carries no identifier, so traversal never yields it.
    """

    __test__ = False

    tests: Sequence[Testable] = Field(default_factory=list)
    counts: Counts | None = None


class ReportEvent(Model):
    """A report event handed to the external reporter."""

    type: EventType
    testable: Testable | None = None
    message: str | None = None
    file: str | None = None
    line: int | None = None
    thread: str | None = None
    actual: BaseException | None = None

    def with_type(self, event_type: EventType) -> "ReportEvent":
        """Return a copy of the event with a different type."""
        return self.model_copy(update={"type": event_type})


Testable.model_rebuild()
