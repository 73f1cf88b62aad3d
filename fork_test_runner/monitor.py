"""Deadline enforcement for forked test processes."""

import logging
import os
import signal
import time
from dataclasses import dataclass

from fork_test_runner.models.config import DEFAULT_POLL_INTERVAL
from fork_test_runner.models.result import Kind
from fork_test_runner.reporter import Reporter

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class SupervisionResult:
    """How a supervised child process ended."""

    pid: int
    status: int | None
    timed_out: bool

    @property
    def exit_code(self) -> int | None:
        if self.status is None or not os.WIFEXITED(self.status):
            return None
        return os.WEXITSTATUS(self.status)

    @property
    def signal_number(self) -> int | None:
        if self.status is None or not os.WIFSIGNALED(self.status):
            return None
        return os.WTERMSIG(self.status)


@dataclass(frozen=True, kw_only=True)
class TimeoutMonitor:
    """Polls a child process until it exits or its deadline expires."""

    reporter: Reporter
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def supervise(self, pid: int, timeout: float) -> SupervisionResult:
        """Wait for ``pid`` to exit, killing it once ``timeout`` seconds pass.

        Args:
            pid: Child process to supervise
            timeout: Deadline in seconds, measured from the start of polling

        Returns:
            The way the child ended

        Raises:
            FatalTestError: If the child cannot be reaped or was killed by a
                signal the monitor did not send

        """
        deadline = time.monotonic() + timeout
        timed_out = False
        reaped = False
        status: int | None = None

        while True:
            if time.monotonic() >= deadline:
                self.reporter.report(Kind.INFO, "Test timed out. Kill the process.")
                os.kill(pid, signal.SIGKILL)
                timed_out = True
                break

            try:
                if (status := self._poll(pid)) is not None:
                    reaped = True
                    break
            except ChildProcessError:
                log.debug("Child %d is no longer waitable", pid)
                break
            except OSError as exc:
                self.reporter.abort(f"waitpid({pid}) error: {exc.strerror}")

            time.sleep(self.poll_interval)

        if not reaped:
            status = self._reap(pid)

        result = SupervisionResult(pid=pid, status=status, timed_out=timed_out)
        log.debug(
            "Child %d finished: exit_code=%s signal=%s timed_out=%s",
            pid,
            result.exit_code,
            result.signal_number,
            timed_out,
        )

        if timed_out or result.signal_number is not None:
            self.reporter.channel.reset_lock()

        if not timed_out and (signum := result.signal_number) is not None:
            self.reporter.abort(
                f"Test child killed with signal {signum} ({_signal_name(signum)})"
            )

        return result

    def _poll(self, pid: int) -> int | None:
        """Non-blocking check; returns the wait status once the child exited."""
        waited, status = os.waitpid(pid, os.WNOHANG)
        if waited == 0:
            return None
        return status

    def _reap(self, pid: int) -> int | None:
        try:
            _, status = os.waitpid(pid, 0)
        except ChildProcessError:
            return None
        except OSError as exc:
            self.reporter.abort(f"waitpid({pid}) error: {exc.strerror}")
        return status


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return "unknown"
