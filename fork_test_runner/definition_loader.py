"""Load suite definitions from YAML files."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from fork_test_runner.models.definition import DefinitionError, SuiteDefinition

log = logging.getLogger(__name__)


def load_suite_definition(path: Path) -> SuiteDefinition:
    """Load and validate a suite definition.

    Args:
        path: Path to the YAML suite file

    Returns:
        Validated suite definition

    Raises:
        FileNotFoundError: If the file does not exist
        DefinitionError: If the file is not valid YAML or not a valid suite

    """
    log.debug("Loading suite definition from %s", path)
    text = path.read_text(encoding="utf-8")

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DefinitionError(f"{path}: invalid YAML: {exc}") from exc

    if not isinstance(raw, dict):
        raise DefinitionError(
            f"{path}: top-level value must be a mapping, got {type(raw).__name__}"
        )

    try:
        return SuiteDefinition.model_validate(raw)
    except ValidationError as exc:
        raise DefinitionError(f"{path}: invalid suite definition:\n{exc}") from exc
