"""Loader for test plan files."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from testable_orchestrator.models.testable import TestPlan

log = logging.getLogger(__name__)


def load_test_plan(path: Path) -> TestPlan:
    """Load a test plan from a YAML or JSON file.

    The document is a mapping with a ``tests`` list of testables, each with at
    least an ``id`` and a ``type``.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is empty, not valid YAML or does not match
            the test plan schema

    """
    if not path.is_file():
        raise FileNotFoundError(f"Test plan not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty test plan: {path}")

    try:
        plan = TestPlan.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid test plan schema in {path}: {e}") from e

    log.debug("Loaded %d testable(s) from %s", len(plan.tests), path)
    return plan
