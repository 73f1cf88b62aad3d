"""Single entry point through which tests announce their results."""

import logging
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

from fork_test_runner.channel import Phase, ResultChannel
from fork_test_runner.models.result import Kind
from fork_test_runner.models.suite import Action

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class SourceLocation:
    """File and line a result was reported from."""

    file: str
    line: int

    def __str__(self) -> str:
        return f"{Path(self.file).name}:{self.line}"


class FatalTestError(BaseException):
    """Raised after an ``ERROR`` report to stop the current process' work.

    Derives from ``BaseException`` so that ``except Exception`` blocks in test
    code cannot swallow it. A forked test process turns it into its exit
    status; the orchestrator turns it into the end of the run.
    """

    def __init__(self, message: str, phase: Phase | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.phase = phase


def format_result(location: SourceLocation, kind: Kind, message: str) -> str:
    """Render a single result line."""
    return f"{location} {kind.label} {message}"


def caller_location(stacklevel: int = 1) -> SourceLocation:
    """Location ``stacklevel`` frames above the function calling this one."""
    frame = sys._getframe(stacklevel + 1)
    return SourceLocation(file=frame.f_code.co_filename, line=frame.f_lineno)


class Reporter:
    """Prints results and records them in the shared result channel.

    Every action receives the reporter as its only argument. ``last_result``
    is local to the process that reported, so a forked test sees its own
    latest outcome only.
    """

    def __init__(self, channel: ResultChannel) -> None:
        self.channel = channel
        self.last_result: Kind | None = None

    def report(
        self,
        kind: Kind,
        message: str,
        *,
        location: SourceLocation | None = None,
        stacklevel: int = 1,
    ) -> None:
        """Print and count a result.

        Args:
            kind: Kind of the result
            message: Text printed after the severity label
            location: Explicit source location; defaults to the caller
            stacklevel: How many frames above the caller to attribute the
                result to when ``location`` is not given

        Raises:
            FatalTestError: For ``ERROR`` results, after the teardown matching
                the current phase has run

        """
        if location is None:
            location = caller_location(stacklevel)

        self._record(location, kind, message)

        if kind is Kind.ERROR:
            phase = self.channel.phase
            self._teardown_after_error(phase)
            raise FatalTestError(message, phase)

    def abort(self, message: str, *, stacklevel: int = 1) -> NoReturn:
        """Report an infrastructure failure without running any teardown.

        Raises:
            FatalTestError: Always

        """
        location = caller_location(stacklevel)
        self._record(location, Kind.ERROR, message)
        raise FatalTestError(message, self.channel.phase)

    def invoke(self, action: Action) -> None:
        """Call ``action`` and report any exception escaping it as ``ERROR``."""
        try:
            action(self)
        except Exception as exc:
            frame = traceback.extract_tb(exc.__traceback__)[-1]
            self.report(
                Kind.ERROR,
                f"Unhandled {type(exc).__name__}: {exc}",
                location=SourceLocation(file=frame.filename, line=frame.lineno or 0),
            )

    def _record(self, location: SourceLocation, kind: Kind, message: str) -> None:
        print(format_result(location, kind, message), flush=True)
        if kind.is_terminal:
            self.last_result = kind
            self.channel.increment(kind)

    def _teardown_after_error(self, phase: Phase) -> None:
        if phase is Phase.SUITE_SETUP:
            teardown = self.channel.suite.teardown
            teardown_phase = Phase.SUITE_TEARDOWN
        elif phase in (Phase.TEST_SETUP, Phase.TEST_RUN):
            test = self.channel.current_test
            teardown = test.teardown if test else None
            teardown_phase = Phase.TEST_TEARDOWN
        else:
            return

        if teardown is None:
            return

        log.debug("Running teardown after error in %s", phase.name)
        self.channel.phase = teardown_phase
        self.invoke(teardown)
