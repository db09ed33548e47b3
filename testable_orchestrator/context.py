"""Execution context threaded through every load and run call."""

import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from testable_orchestrator.hooks import HookDispatcher, NullHooks
from testable_orchestrator.models.config import RunConfig
from testable_orchestrator.models.testable import ReportEvent
from testable_orchestrator.reporting import History, Reporter, null_reporter
from testable_orchestrator.types.registry import TypeRegistry, default_registry

log = logging.getLogger(__name__)


def log_warning(message: str) -> None:
    """Emit a user-facing warning."""
    log.warning(message)


def prepend_sys_path(path: str) -> None:
    """Make a source directory importable by later type resolution."""
    if path not in sys.path:
        sys.path.insert(0, path)


@dataclass(frozen=True, kw_only=True)
class ExecutionContext:
    """Everything a load or run call may read.

    The context is immutable. Descending into a worker pool derives a new
    context with ``for_worker`` instead of changing shared state.
    """

    config: RunConfig = field(default_factory=RunConfig)
    registry: TypeRegistry = field(default_factory=lambda: default_registry)
    hooks: HookDispatcher = field(default_factory=NullHooks)
    reporter: Reporter = null_reporter
    history: History | None = None
    warn: Callable[[str], None] = log_warning
    add_search_path: Callable[[str], None] = prepend_sys_path

    @property
    def fail_fast(self) -> bool:
        return self.config.fail_fast

    def report(self, event: ReportEvent) -> None:
        """Hand an event to the reporter and record it in the history."""
        self.reporter(event)
        if self.history is not None:
            self.history.record(event)

    def for_worker(self) -> "ExecutionContext":
        """Context seen by a pool worker: no nested pools, one level deeper."""
        config = self.config.model_copy(
            update={"parallel": False, "levels": self.config.levels + 1}
        )
        return replace(self, config=config)

    def with_config(self, **changes: object) -> "ExecutionContext":
        """Copy of the context with some configuration values replaced."""
        return replace(self, config=self.config.model_copy(update=changes))
