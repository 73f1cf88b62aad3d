"""Fork-per-test suite runner with shared-memory result aggregation."""

from fork_test_runner.models.result import Kind, SuiteSummary, Verdict
from fork_test_runner.models.suite import Suite, Test
from fork_test_runner.orchestrator import SuiteOrchestrator, run_suite
from fork_test_runner.reporter import FatalTestError, Reporter

__all__ = [
    "FatalTestError",
    "Kind",
    "Reporter",
    "Suite",
    "SuiteOrchestrator",
    "SuiteSummary",
    "Test",
    "Verdict",
    "run_suite",
]
