"""Reporter interface for validation progress.

A run is one or two suites ("Deployment Validation", then "Application API
Functionality"). Compliance checks and lifecycle steps are both reported
as CheckResults through the same callbacks.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cloudx_validator.models import CheckResult, SuiteResult


class Reporter(ABC):
    """Receives suite and check events from ValidationRunner, in run order."""

    @abstractmethod
    def on_check_start(self, suite_name: str, check_id: str) -> None:
        """Called before a compliance check fetches its facets.

        Lifecycle steps have no start event: they run back to back and
        are reported once finished.
        """

    @abstractmethod
    def on_check_complete(self, suite_name: str, result: "CheckResult") -> None:
        """Called with the outcome of a compliance check or lifecycle step.

        Steps skipped after an earlier failure arrive here with SKIP status.
        """

    @abstractmethod
    def on_suite_start(self, suite_name: str) -> None:
        """Called before the first check of a suite."""

    @abstractmethod
    def on_suite_complete(self, result: "SuiteResult") -> None:
        """Called once per suite, also when the suite itself errored.

        An errored suite carries error_message and may hold no checks.
        """

    @abstractmethod
    def on_run_complete(self, results: dict[str, "SuiteResult"]) -> None:
        """Called after every selected suite finished, keyed by suite key."""
