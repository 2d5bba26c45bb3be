"""Command-line interface for the deployment validator.

Provides argument parsing and main entry point for validating a
deployment from the command line.
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from cloudx_validator.checks import COMPLIANCE_CHECKS
from cloudx_validator.config import ConfigError, load_config, with_unique_object_key
from cloudx_validator.errors import HarnessError
from cloudx_validator.models import DeploymentConfig
from cloudx_validator.runner import DeploymentSession, ValidationRunner
from cloudx_validator.reporters import ConsoleReporter, JsonReporter, Reporter


class CompositeReporter(Reporter):
    """Reporter that delegates to multiple reporters."""

    def __init__(self, reporters: list[Reporter]):
        self._reporters = reporters

    def on_check_start(self, suite_name: str, check_id: str) -> None:
        for reporter in self._reporters:
            reporter.on_check_start(suite_name, check_id)

    def on_check_complete(self, suite_name: str, result) -> None:
        for reporter in self._reporters:
            reporter.on_check_complete(suite_name, result)

    def on_suite_start(self, suite_name: str) -> None:
        for reporter in self._reporters:
            reporter.on_suite_start(suite_name)

    def on_suite_complete(self, result) -> None:
        for reporter in self._reporters:
            reporter.on_suite_complete(result)

    def on_run_complete(self, results: dict) -> None:
        for reporter in self._reporters:
            reporter.on_run_complete(results)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="cloudx-validator",
        description="Validate a CloudX image-store deployment: compliance checks "
                    "and an object lifecycle scenario",
    )

    parser.add_argument(
        "-c", "--config",
        default="config.json",
        help="Path to configuration file (default: config.json)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress per-check output, show only summary",
    )

    parser.add_argument(
        "-j", "--json-output",
        metavar="PATH",
        help="Write JSON results to file",
    )

    parser.add_argument(
        "--checks",
        metavar="LIST",
        help="Comma-separated list of compliance check ids to run",
    )

    parser.add_argument(
        "--skip-compliance",
        action="store_true",
        help="Do not run the compliance checks",
    )

    parser.add_argument(
        "--skip-functional",
        action="store_true",
        help="Do not run the upload/download/list/delete scenario",
    )

    parser.add_argument(
        "--unique-key",
        action="store_true",
        help="Use a per-run object key for the functional scenario",
    )

    parser.add_argument(
        "--describe",
        action="store_true",
        help="Print the bucket's descriptor snapshot as JSON and exit",
    )

    parser.add_argument(
        "--github-actions",
        action="store_true",
        help="Enable GitHub Actions output mode",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every provider and HTTP call",
    )

    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    """Route log records through Rich at WARNING, or DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    if verbose:
        # Keep the SDK's own wire logging out of the way
        for noisy in ("botocore", "boto3", "urllib3", "httpcore"):
            logging.getLogger(noisy).setLevel(logging.WARNING)


def create_reporters(args: argparse.Namespace) -> list[Reporter]:
    """Create reporters based on command-line arguments."""
    reporters = []

    reporters.append(ConsoleReporter(quiet=args.quiet))

    if args.json_output or args.github_actions:
        reporters.append(JsonReporter(
            output_path=args.json_output,
            github_output=args.github_actions,
        ))

    return reporters


def select_checks(filter_str: str) -> list[str]:
    """Turn a comma-separated id list into known check ids.

    Raises:
        ValueError: If an id does not name a compliance check,
            or if no id is given.
    """
    ids = [c.strip() for c in filter_str.split(",") if c.strip()]
    if not ids:
        raise ValueError(
            f"No check ids given. Available: {', '.join(COMPLIANCE_CHECKS)}"
        )
    unknown = [c for c in ids if c not in COMPLIANCE_CHECKS]
    if unknown:
        raise ValueError(
            f"Unknown check id(s): {', '.join(unknown)}. "
            f"Available: {', '.join(COMPLIANCE_CHECKS)}"
        )
    return ids


def describe(config: DeploymentConfig) -> int:
    """Print the bucket descriptor snapshot as JSON."""
    session = DeploymentSession.from_config(config)
    try:
        descriptor = session.descriptors.describe_bucket(config.bucket_name)
    except HarnessError as e:
        print(f"Describe failed: {e}", file=sys.stderr)
        return 1
    finally:
        session.close()

    data = asdict(descriptor)
    data["tags"] = {key: value for key, value in sorted(descriptor.tags)}
    data["versioning_status"] = descriptor.versioning_status.value
    print(json.dumps(data, indent=2))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 for success, 1 for check failures, 2 for errors
    """
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    if args.unique_key:
        config = with_unique_object_key(config)

    if args.describe:
        return describe(config)

    check_ids = None
    if args.checks is not None:
        try:
            check_ids = select_checks(args.checks)
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 2

    if args.skip_compliance and args.skip_functional:
        print("Nothing to run: both suites are skipped", file=sys.stderr)
        return 2

    reporters = create_reporters(args)
    if len(reporters) == 1:
        reporter = reporters[0]
    else:
        reporter = CompositeReporter(reporters)

    runner = ValidationRunner(
        config,
        reporter=reporter,
        check_ids=check_ids,
        run_compliance=not args.skip_compliance,
        run_functional=not args.skip_functional,
    )
    result = runner.run()

    return 0 if result.all_passed else 1


if __name__ == "__main__":
    sys.exit(main())
