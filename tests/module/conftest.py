"""Fixtures for module tests running whole plans through the default registry."""

from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def write_plan(tmp_path: Path) -> Callable[[str], Path]:
    """Write a YAML test plan and return its path."""

    def write(content: str) -> Path:
        plan_file = tmp_path / "plan.yaml"
        plan_file.write_text(content)
        return plan_file

    return write
