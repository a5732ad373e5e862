"""Loading of test suites from YAML or JSON files."""

import asyncio
import logging
from pathlib import Path
from typing import Any

import yaml

from suite_runner.models.suite import TestSuite

log = logging.getLogger(__name__)


async def load_suite(path: Path) -> TestSuite:
    """Load and validate a suite file.

    JSON files are read by the same parser since JSON is valid YAML.

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If the content is not a valid suite

    """
    if not path.is_file():
        raise FileNotFoundError(f"Suite file not found: {path}")

    data = await asyncio.to_thread(_read_yaml, path)
    suite = TestSuite.model_validate(data)
    log.info("Loaded suite %s (%d case(s)) from %s", suite.id, len(suite.cases), path)
    return suite


def _read_yaml(path: Path) -> Any:
    with path.open(encoding="utf-8") as f:
        return yaml.safe_load(f)
