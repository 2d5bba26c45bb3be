"""Main validation runner and orchestrator.

Coordinates validation of a deployment, managing:
- The compliance and functional suites
- Per-check failure isolation
- boto3 and HTTP client lifecycle
- Reporter callbacks
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from cloudx_validator.aws_clients import build_ec2_client, build_s3_client
from cloudx_validator.checks import CHECK_DEFINITIONS, COMPLIANCE_CHECKS, ComplianceExecutor
from cloudx_validator.config import resolve_object_key
from cloudx_validator.descriptors import ResourceDescriptorClient
from cloudx_validator.models import CheckResult, CheckStatus, DeploymentConfig, SuiteResult
from cloudx_validator.prober import ReachabilityProber
from cloudx_validator.scenario import ObjectLifecycleScenario, load_payload
from cloudx_validator.storage import ObjectStorageExerciser

logger = logging.getLogger(__name__)

COMPLIANCE_SUITE = "compliance"
FUNCTIONAL_SUITE = "functional"

SUITE_NAMES = {
    COMPLIANCE_SUITE: "Deployment Validation",
    FUNCTIONAL_SUITE: "Application API Functionality",
}


def suite_status(checks: dict[str, CheckResult]) -> CheckStatus:
    """Derive a suite's status: PASS only if every check passed."""
    if all(check.passed for check in checks.values()):
        return CheckStatus.PASS
    if any(check.status == CheckStatus.FAIL for check in checks.values()):
        return CheckStatus.FAIL
    return CheckStatus.ERROR


@dataclass
class RunResult:
    """Result of validating a deployment."""

    suites: dict[str, SuiteResult]
    total_duration: float
    timestamp: str = field(default_factory=lambda: time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()))

    @property
    def all_passed(self) -> bool:
        """Check if all suites passed."""
        return all(s.status == CheckStatus.PASS for s in self.suites.values())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        suites_dict = {}
        for key, suite in self.suites.items():
            checks_dict = {}
            for check_id, check in suite.checks.items():
                checks_dict[check_id] = {
                    "name": check.name,
                    "status": check.status.value,
                    "detail": check.detail,
                    "expected": check.expected,
                    "actual": check.actual,
                }

            suites_dict[key] = {
                "name": suite.suite_name,
                "status": suite.status.value,
                "checks": checks_dict,
                "duration_seconds": suite.duration_seconds,
                "error_message": suite.error_message,
            }

        all_checks = [c for s in self.suites.values() for c in s.checks.values()]

        return {
            "timestamp": self.timestamp,
            "suites": suites_dict,
            "summary": {
                "total_checks": len(all_checks),
                "passed": sum(1 for c in all_checks if c.status == CheckStatus.PASS),
                "failed": sum(1 for c in all_checks if c.status == CheckStatus.FAIL),
                "errors": sum(1 for c in all_checks if c.status == CheckStatus.ERROR),
                "skipped": sum(1 for c in all_checks if c.status == CheckStatus.SKIP),
                "all_passed": self.all_passed,
            },
        }


class DeploymentSession:
    """The clients used to validate a single deployment.

    Clients are passed in rather than shared through module globals, so a
    session can be assembled from fakes in tests.
    """

    def __init__(
        self,
        ec2_client: Any,
        s3_client: Any,
        http_client: httpx.Client,
        config: DeploymentConfig,
    ):
        """Initialize the session.

        Args:
            ec2_client: boto3 EC2 client
            s3_client: boto3 S3 client
            http_client: httpx client for reachability probes
            config: Deployment configuration
        """
        self.config = config
        self.http_client = http_client
        self.descriptors = ResourceDescriptorClient(ec2_client, s3_client)
        self.storage = ObjectStorageExerciser(s3_client, config.addressing_style)
        self.prober = ReachabilityProber(http_client)
        self.compliance = ComplianceExecutor(self.descriptors, self.prober, config)

    @classmethod
    def from_config(cls, config: DeploymentConfig) -> "DeploymentSession":
        """Build a session with real boto3 and httpx clients."""
        if config.http_timeout is None:
            http_client = httpx.Client()
        else:
            http_client = httpx.Client(timeout=config.http_timeout)

        return cls(
            ec2_client=build_ec2_client(config),
            s3_client=build_s3_client(config),
            http_client=http_client,
            config=config,
        )

    def close(self) -> None:
        self.http_client.close()

    def run_check_isolated(self, check_id: str) -> CheckResult:
        """Run one compliance check; any error becomes an ERROR result."""
        try:
            return self.compliance.run_check(check_id)
        except Exception as e:
            logger.debug("Check %s raised", check_id, exc_info=True)
            return CheckResult(
                check_id=check_id,
                name=CHECK_DEFINITIONS[check_id]["name"],
                status=CheckStatus.ERROR,
                detail=str(e) or type(e).__name__,
            )

    def build_scenario(self) -> ObjectLifecycleScenario:
        """Create the lifecycle scenario for this run's object key."""
        record = load_payload(
            self.config.payload_path,
            resolve_object_key(self.config),
            self.config.content_type,
        )
        return ObjectLifecycleScenario(
            storage=self.storage,
            bucket=self.config.bucket_name,
            record=record,
            location_pattern=self.config.location_pattern,
        )


class ValidationRunner:
    """Main runner that validates a deployment.

    Coordinates:
    - Running the compliance checks, each isolated from the others
    - Running the functional scenario, isolated from the compliance suite
    - Managing client lifecycle
    - Calling reporter callbacks for progress
    """

    def __init__(
        self,
        config: DeploymentConfig,
        reporter: Optional[Any] = None,
        check_ids: Optional[list[str]] = None,
        run_compliance: bool = True,
        run_functional: bool = True,
        session: Optional[DeploymentSession] = None,
    ):
        """Initialize the runner.

        Args:
            config: Deployment configuration
            reporter: Optional reporter for progress callbacks
            check_ids: Compliance checks to run (defaults to all)
            run_compliance: Run the compliance suite
            run_functional: Run the functional scenario
            session: Pre-built session (built from config when omitted)
        """
        self.config = config
        self.reporter = reporter
        self.check_ids = check_ids if check_ids is not None else list(COMPLIANCE_CHECKS)
        self.run_compliance = run_compliance
        self.run_functional = run_functional
        self._session = session

    def run(self) -> RunResult:
        """Run the selected suites.

        Returns:
            RunResult containing one SuiteResult per suite run
        """
        start_time = time.time()
        results: dict[str, SuiteResult] = {}

        session = self._session or DeploymentSession.from_config(self.config)

        try:
            if self.run_compliance:
                results[COMPLIANCE_SUITE] = self._run_suite(
                    COMPLIANCE_SUITE, self._run_compliance_suite, session
                )
            if self.run_functional:
                results[FUNCTIONAL_SUITE] = self._run_suite(
                    FUNCTIONAL_SUITE, self._run_functional_suite, session
                )
        finally:
            if self._session is None:
                session.close()

        run_result = RunResult(suites=results, total_duration=time.time() - start_time)

        if self.reporter:
            self.reporter.on_run_complete(results)

        return run_result

    def _run_suite(self, suite_key: str, body, session: DeploymentSession) -> SuiteResult:
        suite_name = SUITE_NAMES[suite_key]
        if self.reporter:
            self.reporter.on_suite_start(suite_name)

        start_time = time.time()
        checks: dict[str, CheckResult] = {}
        try:
            body(session, suite_name, checks)
            result = SuiteResult(
                suite_key=suite_key,
                suite_name=suite_name,
                status=suite_status(checks),
                checks=checks,
                duration_seconds=time.time() - start_time,
            )
        except Exception as e:
            result = SuiteResult(
                suite_key=suite_key,
                suite_name=suite_name,
                status=CheckStatus.ERROR,
                checks=checks,
                duration_seconds=time.time() - start_time,
                error_message=str(e),
            )

        if self.reporter:
            self.reporter.on_suite_complete(result)
        return result

    def _run_compliance_suite(
        self,
        session: DeploymentSession,
        suite_name: str,
        checks: dict[str, CheckResult],
    ) -> None:
        for check_id in self.check_ids:
            if self.reporter:
                self.reporter.on_check_start(suite_name, check_id)

            result = session.run_check_isolated(check_id)
            checks[check_id] = result

            if self.reporter:
                self.reporter.on_check_complete(suite_name, result)

    def _run_functional_suite(
        self,
        session: DeploymentSession,
        suite_name: str,
        checks: dict[str, CheckResult],
    ) -> None:
        scenario = session.build_scenario()

        def record(result: CheckResult) -> None:
            checks[result.check_id] = result
            if self.reporter:
                self.reporter.on_check_complete(suite_name, result)

        scenario.run(on_step_complete=record)
