"""Configuration for the suite runner."""

from pydantic import Field

from fork_test_runner.models.base import Model

DEFAULT_TIMEOUT = 600.0
DEFAULT_POLL_INTERVAL = 0.0001


class RunnerConfig(Model):
    """Settings shared by every test of a run."""

    default_timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Deadline in seconds for tests that do not set their own",
    )
    poll_interval: float = Field(
        default=DEFAULT_POLL_INTERVAL,
        gt=0,
        description="Seconds to sleep between non-blocking checks for child exit",
    )
