"""Validation of testable nodes against the generic and type-specific shapes."""

import logging
from typing import TYPE_CHECKING

from pydantic import Field, ValidationError

from testable_orchestrator.models.base import Model
from testable_orchestrator.models.testable import Testable

if TYPE_CHECKING:
    from testable_orchestrator.context import ExecutionContext

log = logging.getLogger(__name__)


class SchemaValidationError(Exception):
    """Raised when a node does not satisfy the generic testable shape."""


class GenericTestable(Model):
    """Minimal shape every testable must have."""

    id: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)


def validate_generic(node: Testable) -> None:
    """Assert the node has an identifier and a type tag.

    Raises:
        SchemaValidationError: If the node is not a valid generic testable

    """
    try:
        GenericTestable.model_validate(node, from_attributes=True)
    except ValidationError as e:
        node_id = getattr(node, "id", None)
        raise SchemaValidationError(f"Invalid testable {node_id!r}: {e}") from e


def validate_typed(node: Testable, context: "ExecutionContext") -> bool:
    """Validate the node against its type's schema.

    A mismatch is reported through ``context.warn`` rather than raised, so one
    misbehaving type does not halt the run. Validation is attempted up to
    ``validation_attempts`` times and the warning carries the last error.

    Returns:
        Whether the node satisfied the schema (or the type declares none)

    """
    implementation = context.registry.get(node.type)
    if implementation is None or implementation.schema is None:
        return True

    attempts = context.config.validation_attempts
    error: ValidationError | None = None
    for attempt in range(1, attempts + 1):
        try:
            implementation.schema.model_validate(node, from_attributes=True)
            return True
        except ValidationError as e:
            log.debug(
                "Validation of %s as %s failed (attempt %d/%d)",
                node.id,
                node.type,
                attempt,
                attempts,
            )
            error = e

    context.warn(f"Could not validate {node.id} as {node.type}.\n{error}")
    return False


def validate_type(node: Testable, context: "ExecutionContext") -> None:
    """Validate the generic shape, resolve the type, then validate the typed shape."""
    validate_generic(node)
    context.registry.resolve(node.type)
    validate_typed(node, context)
