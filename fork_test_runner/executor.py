"""Runs each test inside its own forked process."""

import logging
import os
import sys

from fork_test_runner.channel import Phase, ResultChannel
from fork_test_runner.models.config import DEFAULT_TIMEOUT
from fork_test_runner.models.result import Verdict
from fork_test_runner.models.suite import Test
from fork_test_runner.monitor import SupervisionResult, TimeoutMonitor
from fork_test_runner.reporter import FatalTestError, Reporter

log = logging.getLogger(__name__)

CHILD_OK = 0
CHILD_ERROR = Verdict.ERROR.exit_status


class IsolatedExecutor:
    """Forks one child per test and supervises it until it is gone.

    Memory corruption or a crash inside a test stays confined to its child;
    the only state that crosses back is the shared result channel.
    """

    def __init__(
        self,
        *,
        channel: ResultChannel,
        reporter: Reporter,
        monitor: TimeoutMonitor,
        default_timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.channel = channel
        self.reporter = reporter
        self.monitor = monitor
        self.default_timeout = default_timeout
        self._pending: list[int] = []

    def run_isolated(self, test: Test) -> SupervisionResult:
        """Run ``test`` in a child process and wait for the child to end.

        Raises:
            FatalTestError: If the child cannot be spawned, reaped, or was
                killed by an unexpected signal

        """
        # Unflushed output would otherwise be written by both processes.
        _flush_output()

        try:
            pid = os.fork()
        except OSError as exc:
            self.reporter.abort(f"fork() error: {exc.strerror}")

        if pid == 0:
            status = CHILD_ERROR
            try:
                status = self._run_child(test)
            finally:
                try:
                    _flush_output()
                finally:
                    os._exit(status)

        timeout = test.timeout or self.default_timeout
        log.debug("Started %s in pid %d (timeout %.3fs)", test.display_name, pid, timeout)

        self._pending.append(pid)
        result = self.monitor.supervise(pid, timeout)
        self._pending.remove(pid)
        return result

    def reap_remaining(self) -> None:
        """Blocking reap of children that were spawned but never reaped."""
        for pid in list(self._pending):
            try:
                os.waitpid(pid, 0)
            except ChildProcessError:
                pass
            except OSError as exc:
                self.reporter.abort(f"waitpid({pid}) error: {exc.strerror}")
            self._pending.remove(pid)

    def _run_child(self, test: Test) -> int:
        try:
            self.channel.phase = Phase.TEST_SETUP
            if test.setup is not None:
                self.reporter.invoke(test.setup)

            self.channel.phase = Phase.TEST_RUN
            self.reporter.invoke(test.run)

            self.channel.phase = Phase.TEST_TEARDOWN
            if test.teardown is not None:
                self.reporter.invoke(test.teardown)
        except FatalTestError:
            return CHILD_ERROR
        return CHILD_OK


def _flush_output() -> None:
    sys.stdout.flush()
    sys.stderr.flush()
