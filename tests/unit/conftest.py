"""Shared fixtures for unit tests."""

import signal
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from fork_test_runner.channel import ResultChannel
from fork_test_runner.models.config import RunnerConfig
from fork_test_runner.models.suite import Suite, Test
from fork_test_runner.reporter import Reporter
from fork_test_runner.testing.factories import RunnerConfigFactory
from fork_test_runner.testing.trail import EventTrail


def noop(rk: Reporter) -> None:
    """Action that does nothing."""


@pytest.fixture
def suite() -> Suite:
    """Suite with a single no-op test."""
    return Suite(tests=[Test(name="noop", run=noop)])


@pytest.fixture
def channel(suite: Suite) -> Iterator[ResultChannel]:
    """Result channel for the default suite."""
    with ResultChannel.allocate(suite) as channel:
        yield channel


@pytest.fixture
def reporter(channel: ResultChannel) -> Reporter:
    """Reporter bound to the default channel."""
    return Reporter(channel)


@pytest.fixture
def make_reporter() -> Iterator[Callable[[Suite], Reporter]]:
    """Build reporters for custom suites; their channels are closed afterwards."""
    channels: list[ResultChannel] = []

    def _make(suite: Suite) -> Reporter:
        channel = ResultChannel.allocate(suite)
        channels.append(channel)
        return Reporter(channel)

    yield _make

    for channel in channels:
        channel.close()


@pytest.fixture
def trail(tmp_path: Path) -> EventTrail:
    """Event trail stored in a temporary file."""
    return EventTrail(path=tmp_path / "trail.log")


@pytest.fixture
def fast_config() -> RunnerConfig:
    """Runner configuration with fast polling."""
    return RunnerConfigFactory.build()


class HangError(Exception):
    """Raised by ``hang_guard`` when a test blocks for too long."""


@pytest.fixture
def hang_guard() -> Iterator[None]:
    """Fail the test with HangError instead of blocking forever."""

    def _expire(signum: int, frame: object) -> None:
        raise HangError("test blocked for more than 60 seconds")

    previous = signal.signal(signal.SIGALRM, _expire)
    signal.alarm(60)
    yield
    signal.alarm(0)
    signal.signal(signal.SIGALRM, previous)
