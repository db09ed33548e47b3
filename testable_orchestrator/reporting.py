"""Report event sinks: reporters and the event history."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from testable_orchestrator.models.testable import ReportEvent

log = logging.getLogger(__name__)

type Reporter = Callable[[ReportEvent], None]


def null_reporter(event: ReportEvent) -> None:
    """Discard the event."""


@dataclass(frozen=True, kw_only=True)
class LoggingReporter:
    """Reporter that logs every event."""

    level: int = logging.DEBUG

    def __call__(self, event: ReportEvent) -> None:
        log.log(
            self.level,
            "%s %s%s",
            event.type,
            event.testable.id if event.testable else "-",
            f": {event.message}" if event.message else "",
        )


@dataclass(frozen=True, kw_only=True)
class History:
    """Accumulates every reported event of a run.

    Appends come from worker threads as well; ``list.append`` is atomic so no
    extra locking is needed.
    """

    events: list[ReportEvent] = field(default_factory=list)

    def record(self, event: ReportEvent) -> None:
        """Add an event to the history."""
        self.events.append(event)

    def events_for(self, testable_id: str) -> Sequence[ReportEvent]:
        """Events whose testable has the given identifier."""
        return [
            event
            for event in self.events
            if event.testable is not None and event.testable.id == testable_id
        ]
