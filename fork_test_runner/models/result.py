"""Models for reported outcomes and the suite verdict."""

from dataclasses import dataclass
from enum import Enum


class Kind(Enum):
    """Kind of a reported result."""

    INFO = "info"
    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"
    ERROR = "error"

    @property
    def label(self) -> str:
        """Severity label printed on every result line."""
        return self.name

    @property
    def is_terminal(self) -> bool:
        """Whether the kind is counted in the result channel."""
        return self is not Kind.INFO


class Verdict(Enum):
    """Final classification of a suite run.

    The value is the exit status of the run. POSIX keeps only the low 8 bits
    of a process exit status, so ``ERROR`` leaves the process as 255.
    """

    ERROR = -1
    PASSED = 0
    FAILED = 1
    SKIPPED = 2

    @property
    def exit_status(self) -> int:
        """Exit status as observed by the parent of the process."""
        return self.value & 0xFF


@dataclass(frozen=True, kw_only=True)
class SuiteSummary:
    """Snapshot of the result channel counters.

    ``aborted`` marks runs that ended through an infrastructure failure or a
    fatal error in the orchestrator's own process.
    """

    passed: int = 0
    failed: int = 0
    skipped: int = 0
    errors: int = 0
    aborted: bool = False

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.skipped + self.errors

    @property
    def verdict(self) -> Verdict:
        """Derive the verdict; skipped results take priority over failures."""
        if self.aborted:
            return Verdict.ERROR
        if self.skipped:
            return Verdict.SKIPPED
        if self.failed or self.errors:
            return Verdict.FAILED
        return Verdict.PASSED

    def lines(self) -> list[str]:
        """Render the human-readable summary block."""
        return [
            "Summary:",
            f"Passed:  {self.passed}",
            f"Failed:  {self.failed}",
            f"Skipped: {self.skipped}",
            f"Errors:  {self.errors}",
        ]
