"""CLI entry point for running a suite."""

import argparse
import logging
import pkgutil
import sys
from pathlib import Path

from pydantic import ValidationError

from fork_test_runner.definition_loader import load_suite_definition
from fork_test_runner.models.config import RunnerConfig
from fork_test_runner.models.definition import DefinitionError
from fork_test_runner.models.suite import Suite
from fork_test_runner.orchestrator import run_suite

EXIT_USAGE = 2


def load_suite(target: str) -> Suite:
    """Load a suite from a YAML file or from a ``module:attribute`` import path.

    Raises:
        DefinitionError: If the target cannot be turned into a suite

    """
    path = Path(target)
    if path.suffix in {".yaml", ".yml"} or path.is_file():
        try:
            definition = load_suite_definition(path)
        except FileNotFoundError as exc:
            raise DefinitionError(f"suite file not found: {path}") from exc
        return definition.to_suite()

    try:
        suite = pkgutil.resolve_name(target)
    except (ImportError, AttributeError, ValueError) as exc:
        raise DefinitionError(f"cannot import suite '{target}': {exc}") from exc

    if not isinstance(suite, Suite):
        raise DefinitionError(
            f"'{target}' is a {type(suite).__name__}, not a Suite"
        )
    return suite


def parse_runner_config(runner_config_json: str | None) -> RunnerConfig:
    """Validate the JSON runner configuration given on the command line."""
    if not runner_config_json:
        return RunnerConfig()
    try:
        return RunnerConfig.model_validate_json(runner_config_json)
    except ValidationError as exc:
        raise DefinitionError(f"invalid runner configuration:\n{exc}") from exc


def run(target: str, runner_config_json: str | None = None) -> int:
    """Load the suite, run it and return the exit status."""
    log = logging.getLogger("fork_test_runner")

    try:
        config = parse_runner_config(runner_config_json)
        suite = load_suite(target)
    except DefinitionError as exc:
        log.error("%s", exc)
        return EXIT_USAGE

    log.info("Loaded suite %s with %d test(s)", target, len(suite.tests))
    return run_suite(suite, config)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run a test suite with one forked process per test"
    )
    parser.add_argument(
        "suite",
        help="Suite YAML file, or import path of a Suite object (module:attr)",
    )
    parser.add_argument(
        "--runner-config",
        default=None,
        help='JSON runner configuration, e.g. \'{"default_timeout": 30}\'',
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug information about spawned and reaped processes",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    sys.exit(run(args.suite, args.runner_config))


if __name__ == "__main__":  # pragma: no cover
    main()
