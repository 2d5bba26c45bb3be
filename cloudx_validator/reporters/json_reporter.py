"""JSON reporter for structured output and GitHub Actions integration."""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from cloudx_validator.reporters.base import Reporter
from cloudx_validator.models import CheckResult, CheckStatus, SuiteResult


class JsonReporter(Reporter):
    """JSON reporter for structured output.

    Args:
        output_path: Optional file path to write JSON output
        github_output: If True, write to GITHUB_OUTPUT for Actions
    """

    def __init__(
        self,
        output_path: Optional[str] = None,
        github_output: bool = False,
    ):
        self.output_path = output_path
        self.github_output = github_output

    def on_check_start(self, suite_name: str, check_id: str) -> None:
        """No-op for JSON reporter."""
        pass

    def on_check_complete(self, suite_name: str, result: CheckResult) -> None:
        """No-op - data comes from the suite results."""
        pass

    def on_suite_start(self, suite_name: str) -> None:
        """No-op for JSON reporter."""
        pass

    def on_suite_complete(self, result: SuiteResult) -> None:
        """No-op - data comes from the run results."""
        pass

    def on_run_complete(self, results: dict[str, SuiteResult]) -> dict:
        """Generates and outputs JSON data.

        Args:
            results: Dictionary of suite results

        Returns:
            The generated JSON data as a dictionary
        """
        output = self._generate_output(results)

        if self.output_path:
            self._write_to_file(output)

        if self.github_output:
            self._write_github_output(output)

        return output

    def _generate_output(self, results: dict[str, SuiteResult]) -> dict:
        timestamp = datetime.now(timezone.utc).isoformat()

        suites = {}
        counts = {status: 0 for status in CheckStatus}

        for suite_key, suite_result in results.items():
            checks = {}
            for check_id, check in suite_result.checks.items():
                counts[check.status] += 1
                check_data = {
                    "name": check.name,
                    "status": check.status.value,
                    "expected": check.expected,
                    "actual": check.actual,
                }
                if check.status != CheckStatus.PASS:
                    check_data["detail"] = check.detail
                checks[check_id] = check_data

            suites[suite_key] = {
                "name": suite_result.suite_name,
                "status": suite_result.status.value,
                "checks": checks,
                "duration_seconds": suite_result.duration_seconds,
            }

            if suite_result.error_message:
                suites[suite_key]["error"] = suite_result.error_message

        all_passed = bool(results) and all(
            s.status == CheckStatus.PASS for s in results.values()
        )

        return {
            "timestamp": timestamp,
            "suites": suites,
            "summary": {
                "total_checks": sum(counts.values()),
                "passed": counts[CheckStatus.PASS],
                "failed": counts[CheckStatus.FAIL],
                "errors": counts[CheckStatus.ERROR],
                "skipped": counts[CheckStatus.SKIP],
                "all_passed": all_passed,
            },
        }

    def _write_to_file(self, output: dict) -> None:
        path = Path(self.output_path)

        # Create parent directories if needed
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.output_path, "w") as f:
            json.dump(output, f, indent=2)

    def _write_github_output(self, output: dict) -> None:
        github_output_file = os.environ.get("GITHUB_OUTPUT")
        if not github_output_file:
            return

        with open(github_output_file, "a") as f:
            f.write(f"all_passed={str(output['summary']['all_passed']).lower()}\n")
            f.write(f"total_checks={output['summary']['total_checks']}\n")
            f.write(f"passed_checks={output['summary']['passed']}\n")
            f.write(f"failed_checks={output['summary']['failed']}\n")

            # Write full JSON as multiline output
            f.write("results<<EOF\n")
            f.write(json.dumps(output))
            f.write("\nEOF\n")
