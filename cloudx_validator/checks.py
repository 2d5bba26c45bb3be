"""Compliance check definitions and execution logic.

This module contains:
- CHECK_DEFINITIONS: the compliance checks run against a deployment
- Pure predicates turning descriptor facets into CheckResults
- ComplianceExecutor: fetches the facets each check needs and evaluates it

Every check performs its own fetch; no descriptor is shared between checks.
"""

import re
from typing import Optional

from cloudx_validator.descriptors import ResourceDescriptorClient
from cloudx_validator.errors import NoPublicEndpointError, NotConfiguredError
from cloudx_validator.models import (
    CheckResult,
    CheckStatus,
    DeploymentConfig,
    EncryptionRule,
    SubnetDescriptor,
    VersioningStatus,
)
from cloudx_validator.prober import ProbeOutcome, ReachabilityProber

CHECK_DEFINITIONS = {
    # === NETWORK ===
    "public_subnet": {
        "id": "public_subnet",
        "name": "Instance in public subnet",
        "description": "The instance's subnet must map public IPs on launch.",
    },
    "http_public_ip": {
        "id": "http_public_ip",
        "name": "HTTP reachable via public IP",
        "description": "The application must answer HTTP 200 on the instance's public IP.",
    },
    "http_public_dns": {
        "id": "http_public_dns",
        "name": "HTTP reachable via public DNS",
        "description": "The application must answer HTTP 200 on the instance's public DNS name.",
    },
    # === BUCKET ===
    "bucket_not_empty": {
        "id": "bucket_not_empty",
        "name": "Bucket lists objects",
        "description": "The bucket must be accessible and contain at least one object.",
    },
    "bucket_naming": {
        "id": "bucket_naming",
        "name": "Bucket naming convention",
        "description": "The bucket name must follow cloudximage-imagestorebucket{unique id}.",
    },
    "bucket_tag": {
        "id": "bucket_tag",
        "name": "Bucket tagged cloudx: qa",
        "description": "The bucket must carry the required tag.",
    },
    "bucket_encryption": {
        "id": "bucket_encryption",
        "name": "Bucket uses SSE-S3",
        "description": "Default encryption must include an AES256 rule.",
    },
    "bucket_versioning": {
        "id": "bucket_versioning",
        "name": "Bucket versioning disabled",
        "description": "Versioning must be unset or disabled.",
    },
    "bucket_public_access": {
        "id": "bucket_public_access",
        "name": "Bucket public access disabled",
        "description": "The bucket policy must not make the bucket public.",
    },
}

COMPLIANCE_CHECKS = list(CHECK_DEFINITIONS)

BUCKET_NAME_PATTERN = r"^cloudximage-imagestorebucket[a-zA-Z0-9-]+$"
REQUIRED_TAG = ("cloudx", "qa")
REQUIRED_SSE_ALGORITHM = "AES256"
PASSING_VERSIONING = {VersioningStatus.UNSET, VersioningStatus.DISABLED}


def _result(
    check_id: str,
    passed: bool,
    detail: str,
    expected: Optional[str] = None,
    actual: Optional[str] = None,
) -> CheckResult:
    return CheckResult(
        check_id=check_id,
        name=CHECK_DEFINITIONS[check_id]["name"],
        status=CheckStatus.PASS if passed else CheckStatus.FAIL,
        detail=detail,
        expected=expected,
        actual=actual,
    )


def check_public_subnet(subnet: SubnetDescriptor) -> CheckResult:
    """The subnet must assign public IPs on launch."""
    actual = f"MapPublicIpOnLaunch={subnet.map_public_ip_on_launch}"
    if subnet.map_public_ip_on_launch:
        return _result(
            "public_subnet", True,
            f"Subnet {subnet.subnet_id} maps public IPs on launch",
            "MapPublicIpOnLaunch=True", actual,
        )
    return _result(
        "public_subnet", False,
        f"Subnet {subnet.subnet_id} does not map public IPs on launch",
        "MapPublicIpOnLaunch=True", actual,
    )


def check_http_reachability(check_id: str, outcome: ProbeOutcome) -> CheckResult:
    """The probed URL must be an http:// URL that answered HTTP 200."""
    if not outcome.url.startswith("http://"):
        return _result(
            check_id, False,
            f"Invalid URL retrieved: {outcome.url}",
            "http:// URL", outcome.url,
        )
    if outcome.reachable:
        return _result(check_id, True, f"{outcome.url} answered HTTP 200", "HTTP 200", "HTTP 200")
    return _result(
        check_id, False,
        f"HTTP GET {outcome.url} failed: {outcome.reason}",
        "HTTP 200", outcome.reason,
    )


def check_bucket_not_empty(bucket: str, keys: list[str]) -> CheckResult:
    """The bucket must list at least one object."""
    if keys:
        return _result(
            "bucket_not_empty", True,
            f"Bucket {bucket} lists {len(keys)} object(s)",
            "> 0 objects", str(len(keys)),
        )
    return _result(
        "bucket_not_empty", False,
        f"Bucket {bucket} lists no objects",
        "> 0 objects", "0",
    )


def check_bucket_naming(
    bucket: str,
    pattern: str = BUCKET_NAME_PATTERN,
) -> CheckResult:
    """The bucket name must match the naming convention pattern."""
    if re.match(pattern, bucket):
        return _result(
            "bucket_naming", True,
            f"Bucket name {bucket} matches {pattern}",
            pattern, bucket,
        )
    return _result(
        "bucket_naming", False,
        f"Bucket name {bucket} does not match {pattern}",
        pattern, bucket,
    )


def check_required_tag(
    bucket: str,
    tags: frozenset[tuple[str, str]],
    required: tuple[str, str] = REQUIRED_TAG,
) -> CheckResult:
    """The bucket's tag set must contain the required (key, value) pair."""
    expected = f"{required[0]}: {required[1]}"
    actual = ", ".join(f"{k}: {v}" for k, v in sorted(tags)) or "no tags"
    if required in tags:
        return _result("bucket_tag", True, f"Bucket {bucket} is tagged {expected}", expected, actual)
    return _result(
        "bucket_tag", False,
        f"Bucket {bucket} is missing tag {expected} (found {actual})",
        expected, actual,
    )


def check_encryption(
    bucket: str,
    rules: Optional[list[EncryptionRule]],
    algorithm: str = REQUIRED_SSE_ALGORITHM,
) -> CheckResult:
    """Default encryption must include a rule with the required algorithm.

    rules is None when the bucket has no encryption configuration.
    """
    if rules is None:
        return _result(
            "bucket_encryption", False,
            f"Bucket {bucket} has no encryption configuration",
            algorithm, "not configured",
        )

    actual = ", ".join(rule.algorithm for rule in rules) or "no rules"
    if any(rule.algorithm == algorithm for rule in rules):
        return _result(
            "bucket_encryption", True,
            f"Bucket {bucket} encrypts with {algorithm}",
            algorithm, actual,
        )
    return _result(
        "bucket_encryption", False,
        f"Bucket {bucket} has no {algorithm} encryption rule (found {actual})",
        algorithm, actual,
    )


def check_versioning(bucket: str, status: VersioningStatus) -> CheckResult:
    """Versioning must be unset or disabled.

    SUSPENDED fails: the bucket had versioning enabled and still keeps the
    versions written meanwhile.
    """
    expected = "Unset or Disabled"
    if status in PASSING_VERSIONING:
        return _result(
            "bucket_versioning", True,
            f"Bucket {bucket} versioning is {status.value}",
            expected, status.value,
        )
    return _result(
        "bucket_versioning", False,
        f"Bucket {bucket} versioning is {status.value}",
        expected, status.value,
    )


def check_public_access(bucket: str, is_public: bool) -> CheckResult:
    """The bucket must not be public."""
    if not is_public:
        return _result(
            "bucket_public_access", True,
            f"Bucket {bucket} is not public",
            "IsPublic=False", "IsPublic=False",
        )
    return _result(
        "bucket_public_access", False,
        f"Bucket {bucket} policy status reports IsPublic=True",
        "IsPublic=False", "IsPublic=True",
    )


class ComplianceExecutor:
    """Runs compliance checks against a deployment.

    Fetches the facets each check needs through the descriptor client and
    evaluates the matching predicate. Errors the check cannot interpret
    propagate to the caller.
    """

    def __init__(
        self,
        descriptors: ResourceDescriptorClient,
        prober: ReachabilityProber,
        config: DeploymentConfig,
    ):
        """Initialize the executor.

        Args:
            descriptors: Client for instance, subnet and bucket facets
            prober: HTTP reachability prober
            config: Deployment configuration
        """
        self.descriptors = descriptors
        self.prober = prober
        self.config = config

    def run_check(self, check_id: str) -> CheckResult:
        """Run one compliance check by id.

        Raises:
            ValueError: If check_id is not a known check.
        """
        if check_id not in CHECK_DEFINITIONS:
            raise ValueError(f"Unknown check_id: {check_id}")

        bucket = self.config.bucket_name

        if check_id == "public_subnet":
            instance = self.descriptors.get_instance(self.config.instance_id)
            return check_public_subnet(self.descriptors.get_subnet(instance.subnet_id))

        elif check_id == "http_public_ip":
            return self._run_reachability(check_id, "ip")

        elif check_id == "http_public_dns":
            return self._run_reachability(check_id, "dns")

        elif check_id == "bucket_not_empty":
            return check_bucket_not_empty(bucket, self.descriptors.list_bucket_objects(bucket))

        elif check_id == "bucket_naming":
            return check_bucket_naming(bucket, self.config.bucket_name_pattern)

        elif check_id == "bucket_tag":
            return check_required_tag(
                bucket, self.descriptors.get_bucket_tags(bucket), self.config.required_tag
            )

        elif check_id == "bucket_encryption":
            try:
                rules: Optional[list[EncryptionRule]] = self.descriptors.get_bucket_encryption(bucket)
            except NotConfiguredError:
                rules = None
            return check_encryption(bucket, rules, self.config.required_sse_algorithm)

        elif check_id == "bucket_versioning":
            return check_versioning(bucket, self.descriptors.get_bucket_versioning(bucket))

        else:
            return check_public_access(
                bucket, self.descriptors.get_bucket_public_access_status(bucket)
            )

    def _run_reachability(self, check_id: str, via: str) -> CheckResult:
        try:
            url = self.descriptors.get_public_endpoint(self.config.instance_id, via=via)
        except NoPublicEndpointError as e:
            return _result(check_id, False, str(e), "public endpoint", "none")
        return check_http_reachability(check_id, self.prober.attempt(url))
