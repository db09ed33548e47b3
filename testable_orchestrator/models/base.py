"""Shared configuration of the node and event models."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable model that may hold captured exceptions as field values.

    Phases never mutate a node; they return a ``model_copy`` carrying the
    new fields.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
