"""Run configuration."""

from pydantic import BaseModel, ConfigDict, Field


def _kebab(name: str) -> str:
    return name.replace("_", "-")


class RunConfig(BaseModel):
    """Configuration for a run.

    Accepts both snake_case field names and their kebab-case aliases
    (``parallel-threads``, ``fail-fast``, ...).
    """

    model_config = ConfigDict(frozen=True, alias_generator=_kebab, populate_by_name=True)

    parallel: bool = False
    parallel_threads: int | None = Field(default=None, ge=1)
    # Type tag whose instances may be distributed across the worker pool
    parallel_type: str = "module"
    levels: int = Field(default=0, ge=0)
    fail_fast: bool = False
    validation_attempts: int = Field(default=1, ge=1)
    run_attempts: int = Field(default=1, ge=1)
