"""Fixtures for unit tests."""

from unittest.mock import Mock

import pytest

from testable_orchestrator.context import ExecutionContext
from testable_orchestrator.models.config import RunConfig
from testable_orchestrator.reporting import History
from testable_orchestrator.testing.types import MODULE, register_types
from testable_orchestrator.types.registry import TypeRegistry


@pytest.fixture
def registry() -> TypeRegistry:
    """Create a registry holding the fake types."""
    registry = TypeRegistry()
    register_types(registry)
    return registry


@pytest.fixture
def warnings() -> list[str]:
    """Collect warnings emitted through the context."""
    return []


@pytest.fixture
def search_paths() -> Mock:
    """Record search path registrations."""
    return Mock()


@pytest.fixture
def context(
    registry: TypeRegistry, warnings: list[str], search_paths: Mock
) -> ExecutionContext:
    """Create a context using the fake types and recording side effects."""
    return ExecutionContext(
        config=RunConfig(parallel_type=MODULE),
        registry=registry,
        warn=warnings.append,
        add_search_path=search_paths,
    )


@pytest.fixture
def history() -> History:
    """Create an empty event history."""
    return History()
