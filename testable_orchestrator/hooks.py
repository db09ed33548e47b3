"""Hook points invoked at fixed stages of the load/run pipeline."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from testable_orchestrator.context import ExecutionContext


class Hook(StrEnum):
    """Names of the pipeline hook points."""

    PRE_LOAD_TEST = "pre-load-test"
    POST_LOAD_TEST = "post-load-test"
    PRE_TEST = "pre-test"
    POST_TEST = "post-test"
    WRAP_RUN = "wrap-run"

    @property
    def method_name(self) -> str:
        """Plugin method implementing this hook (e.g. ``pre_load_test``)."""
        return self.value.replace("-", "_")


class HookDispatcher(Protocol):
    """Dispatches a hook to whatever extensions are installed."""

    def run_hook[T](self, hook: Hook, payload: T, context: "ExecutionContext") -> T:
        """Run the hook over the payload and return the (possibly new) payload."""
        ...


class NullHooks:
    """Dispatcher with no extensions; every hook is the identity."""

    def run_hook[T](self, hook: Hook, payload: T, context: "ExecutionContext") -> T:
        return payload


@dataclass(frozen=True, kw_only=True)
class PluginChain:
    """Threads a payload through each plugin that implements the hook.

    A plugin is any object; it takes part in a hook by defining a method named
    after it, e.g. ``def pre_test(self, testable, context)``. Plugins run in
    order, each receiving the previous plugin's output.
    """

    plugins: Sequence[Any] = field(default_factory=list)

    def run_hook[T](self, hook: Hook, payload: T, context: "ExecutionContext") -> T:
        for plugin in self.plugins:
            if (method := getattr(plugin, hook.method_name, None)) is not None:
                payload = method(payload, context)
        return payload
