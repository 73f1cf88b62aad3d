"""Suite orchestrator sequencing suite setup, isolated tests and teardown."""

import logging
from dataclasses import dataclass, field, replace

from fork_test_runner.channel import ChannelError, Phase, ResultChannel
from fork_test_runner.executor import IsolatedExecutor
from fork_test_runner.models.config import RunnerConfig
from fork_test_runner.models.result import Kind, SuiteSummary
from fork_test_runner.models.suite import Suite
from fork_test_runner.monitor import TimeoutMonitor
from fork_test_runner.reporter import (
    FatalTestError,
    Reporter,
    caller_location,
    format_result,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class SuiteOrchestrator:
    """Runs a suite test by test, each test in its own child process."""

    config: RunnerConfig = field(default_factory=RunnerConfig)

    def run(self, suite: Suite) -> SuiteSummary:
        """Run every test of ``suite`` and return the final counters.

        Suite setup and teardown run in the calling process. A fatal error in
        either of them, a crashing test or an infrastructure failure ends the
        run early with an aborted summary. After a crash or an infrastructure
        failure no further test runs, but remaining children are reaped and
        the suite teardown still runs before the run ends.

        Args:
            suite: Suite to run

        Returns:
            Snapshot of the counters taken before the channel was released

        """
        summary = SuiteSummary(aborted=True)
        try:
            with ResultChannel.allocate(suite) as channel:
                summary = self._run_in_channel(suite, channel)
        except ChannelError as exc:
            log.error("Result channel failure: %s", exc)
            print(format_result(caller_location(), Kind.ERROR, str(exc)), flush=True)
            return replace(summary, aborted=True)

        if not summary.aborted:
            print()
            for line in summary.lines():
                print(line)
        log.info("Suite finished: %s", summary.verdict.name)
        return summary

    def _run_in_channel(self, suite: Suite, channel: ResultChannel) -> SuiteSummary:
        reporter = Reporter(channel)
        executor = IsolatedExecutor(
            channel=channel,
            reporter=reporter,
            monitor=TimeoutMonitor(
                reporter=reporter,
                poll_interval=self.config.poll_interval,
            ),
            default_timeout=self.config.default_timeout,
        )

        log.info("Running suite of %d test(s)", len(suite.tests))
        try:
            self._run_phases(suite, channel, reporter, executor)
        except FatalTestError as exc:
            log.error("Suite aborted during %s: %s", _phase_name(exc), exc.message)
            return channel.snapshot(aborted=True)

        return channel.snapshot()

    def _run_phases(
        self,
        suite: Suite,
        channel: ResultChannel,
        reporter: Reporter,
        executor: IsolatedExecutor,
    ) -> None:
        channel.phase = Phase.SUITE_SETUP
        if suite.setup is not None:
            reporter.invoke(suite.setup)

        try:
            for index, test in enumerate(suite.tests):
                channel.enter_test(index)
                log.debug("Test %d/%d: %s", index + 1, len(suite.tests), test.display_name)
                executor.run_isolated(test)
        finally:
            channel.leave_test()
            executor.reap_remaining()
            channel.phase = Phase.SUITE_TEARDOWN
            if suite.teardown is not None:
                reporter.invoke(suite.teardown)


def run_suite(suite: Suite, config: RunnerConfig | None = None) -> int:
    """Run ``suite`` and return the exit status encoding its verdict."""
    orchestrator = SuiteOrchestrator(config=config or RunnerConfig())
    return orchestrator.run(suite).verdict.exit_status


def _phase_name(exc: FatalTestError) -> str:
    return exc.phase.name if exc.phase is not None else "startup"
