"""Registry mapping type tags to testable type implementations."""

import importlib
import logging
import threading
from importlib.metadata import entry_points
from typing import TYPE_CHECKING

from testable_orchestrator.models.testable import Testable
from testable_orchestrator.types.base import Kind, TestableType

if TYPE_CHECKING:
    from testable_orchestrator.context import ExecutionContext

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "testable_orchestrator.types"

# Guards making a type's implementation available. Two threads resolving the
# same tag must not import or register it concurrently.
RESOLVE_LOCK = threading.RLock()


class MissingMethodError(Exception):
    """Raised when a type tag has no implementation for an operation."""

    def __init__(self, type_tag: str, method: str) -> None:
        super().__init__(f"No implementation of {method} for {type_tag!r}")
        self.type_tag = type_tag
        self.method = method


def candidate_modules(type_tag: str) -> list[str]:
    """Modules that may implement a type tag, by naming convention.

    ``"acme.types/widget"`` maps to ``acme.types.widget`` then ``acme.types``;
    a tag without a namespace maps to the module of the same name.
    """
    namespace, sep, name = type_tag.rpartition("/")
    if not sep:
        return [name]
    return [f"{namespace}.{name}", namespace]


class TypeRegistry:
    """Maps type tags to their ``TestableType`` implementation."""

    def __init__(self) -> None:
        self._types: dict[str, TestableType] = {}

    def register(self, type_tag: str, implementation: TestableType) -> None:
        """Register the implementation of a type tag."""
        log.debug("Registering testable type %s", type_tag)
        self._types[type_tag] = implementation

    def get(self, type_tag: str) -> TestableType | None:
        return self._types.get(type_tag)

    def kind(self, type_tag: str) -> Kind:
        """Hierarchy kind of a tag; unknown tags are treated as leaves."""
        implementation = self._types.get(type_tag)
        return implementation.kind if implementation is not None else "leaf"

    def is_container(self, type_tag: str) -> bool:
        implementation = self._types.get(type_tag)
        return implementation is not None and implementation.is_container

    def resolve(self, type_tag: str) -> bool:
        """Make a type's implementation available, if it can be found.

        Looks for an entry point named after the tag, then imports the modules
        given by the naming convention. An imported module registers its types
        through a ``register_types(registry)`` function.

        Returns:
            Whether the tag is registered afterwards

        """
        if type_tag in self._types:
            return True

        with RESOLVE_LOCK:
            if type_tag in self._types:
                return True

            for entry in entry_points(group=ENTRY_POINT_GROUP, name=type_tag):
                self.register(type_tag, entry.load())
                return True

            for module_name in candidate_modules(type_tag):
                try:
                    module = importlib.import_module(module_name)
                except ImportError:
                    log.debug("No module %s for type %s", module_name, type_tag)
                    continue
                register_types = getattr(module, "register_types", None)
                if register_types is not None:
                    register_types(self)
                if type_tag in self._types:
                    return True

        log.debug("Could not resolve testable type %s", type_tag)
        return False

    def _implementation(self, type_tag: str, method: str) -> TestableType:
        implementation = self._types.get(type_tag)
        if implementation is None:
            raise MissingMethodError(type_tag, method)
        return implementation

    def load(self, testable: Testable, context: "ExecutionContext") -> Testable:
        """Dispatch ``load`` on the testable's type."""
        return self._implementation(testable.type, "load").load(testable, context)

    def run(self, test_plan: Testable, context: "ExecutionContext") -> Testable:
        """Dispatch ``run`` on the test plan's type."""
        return self._implementation(test_plan.type, "run").run(test_plan, context)


default_registry = TypeRegistry()
