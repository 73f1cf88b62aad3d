"""Runtime descriptors for tests and suites."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fork_test_runner.reporter import Reporter

Action = Callable[["Reporter"], None]


@dataclass(frozen=True, kw_only=True)
class Test:
    """A single test: optional setup/teardown around a required run action.

    ``timeout`` is in seconds; ``0`` means the runner's default deadline.
    """

    __test__ = False

    run: Action
    setup: Action | None = None
    teardown: Action | None = None
    timeout: float = 0
    name: str | None = None

    def __post_init__(self) -> None:
        if not callable(self.run):
            raise TypeError(f"Test run action must be callable, got {self.run!r}")
        if self.timeout < 0:
            raise ValueError(f"Test timeout must not be negative: {self.timeout}")

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return getattr(self.run, "__qualname__", repr(self.run))


@dataclass(frozen=True, kw_only=True)
class Suite:
    """An ordered collection of tests with optional suite-level setup/teardown."""

    tests: Sequence[Test] = field(default_factory=tuple)
    setup: Action | None = None
    teardown: Action | None = None

    def __post_init__(self) -> None:
        # Freeze the sequence so the descriptors stay immutable once running.
        object.__setattr__(self, "tests", tuple(self.tests))
