"""Models for suite definitions loaded from YAML files."""

import pkgutil
import re
from collections.abc import Sequence

from pydantic import Field, field_validator

from fork_test_runner.models.base import Model
from fork_test_runner.models.suite import Action, Suite, Test

_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


class DefinitionError(Exception):
    """Raised when a suite definition cannot be loaded or resolved."""


def parse_duration(value: float | int | str) -> float:
    """Convert ``"300s"``, ``"5m"``, ``"1h"`` or plain seconds into seconds."""
    if isinstance(value, bool):
        raise ValueError("duration must be a number or a string like '5m'")
    if isinstance(value, int | float):
        seconds = float(value)
    else:
        match = _DURATION_PATTERN.match(value)
        if match is None:
            raise ValueError(f"invalid duration: {value!r}")
        number, unit = match.groups()
        seconds = float(number) * _DURATION_UNITS[unit or "s"]

    if seconds < 0:
        raise ValueError(f"duration must not be negative: {value!r}")
    return seconds


def resolve_action(path: str) -> Action:
    """Import the callable named by ``package.module:function``."""
    try:
        action = pkgutil.resolve_name(path)
    except (ImportError, AttributeError, ValueError) as exc:
        raise DefinitionError(f"cannot resolve action '{path}': {exc}") from exc

    if not callable(action):
        raise DefinitionError(f"action '{path}' is not callable")
    return action


class TestSpec(Model):
    """Individual test specification."""

    __test__ = False

    name: str | None = Field(default=None, description="Human-readable test name")
    run: str = Field(..., description="Import path of the run action")
    setup: str | None = Field(default=None, description="Import path of the setup")
    teardown: str | None = Field(
        default=None, description="Import path of the teardown"
    )
    timeout: float = Field(
        default=0, description="Timeout in seconds or as '30s'/'5m' (0 = default)"
    )

    @field_validator("timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: float | int | str) -> float:
        return parse_duration(value)

    def to_test(self) -> Test:
        return Test(
            name=self.name,
            run=resolve_action(self.run),
            setup=resolve_action(self.setup) if self.setup else None,
            teardown=resolve_action(self.teardown) if self.teardown else None,
            timeout=self.timeout,
        )


class SuiteDefinition(Model):
    """Complete suite definition loaded from a YAML file."""

    setup: str | None = Field(default=None, description="Import path of suite setup")
    teardown: str | None = Field(
        default=None, description="Import path of suite teardown"
    )
    tests: Sequence[TestSpec] = Field(
        default_factory=list, description="Tests in execution order"
    )

    def to_suite(self) -> Suite:
        """Resolve every import path and build the runtime suite.

        Raises:
            DefinitionError: If an import path cannot be resolved

        """
        return Suite(
            setup=resolve_action(self.setup) if self.setup else None,
            teardown=resolve_action(self.teardown) if self.teardown else None,
            tests=[spec.to_test() for spec in self.tests],
        )
