"""Data models for the CloudX deployment validator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class CheckStatus(Enum):
    """Status of a check, a scenario step or a whole suite."""

    PASS = "pass"
    FAIL = "fail"
    ERROR = "error"
    SKIP = "skip"


class VersioningStatus(Enum):
    """Bucket versioning state as reported by the provider.

    UNSET is kept apart from DISABLED: a bucket that never had versioning
    configured returns no status at all.
    """

    ENABLED = "Enabled"
    SUSPENDED = "Suspended"
    DISABLED = "Disabled"
    UNSET = "Unset"


@dataclass
class DeploymentConfig:
    """Identifiers and settings for the deployment under validation."""

    instance_id: str
    bucket_name: str
    region_name: str = "us-east-1"
    endpoint_url: Optional[str] = None
    addressing_style: str = "virtual"
    payload_path: str = "assets/test.jpg"
    object_key: str = "uploaded-image.jpg"
    content_type: str = "image/jpeg"
    unique_object_key: bool = False
    location_pattern: str = r"^https://.*\.amazonaws\.com"
    bucket_name_pattern: str = r"^cloudximage-imagestorebucket[a-zA-Z0-9-]+$"
    required_tag: tuple[str, str] = ("cloudx", "qa")
    required_sse_algorithm: str = "AES256"
    http_timeout: Optional[float] = None


@dataclass(frozen=True)
class InstanceDescriptor:
    """Snapshot of a compute instance's network attributes."""

    instance_id: str
    subnet_id: str
    public_ip: Optional[str] = None
    public_dns: Optional[str] = None


@dataclass(frozen=True)
class SubnetDescriptor:
    """Snapshot of a subnet's launch attributes."""

    subnet_id: str
    map_public_ip_on_launch: bool


@dataclass(frozen=True)
class EncryptionRule:
    """One server-side encryption rule of a bucket."""

    algorithm: str
    kms_key_id: Optional[str] = None
    bucket_key_enabled: bool = False


@dataclass(frozen=True)
class BucketDescriptor:
    """All facets of a bucket, each fetched by its own call.

    encryption_rules is None when the bucket has no encryption configuration.
    """

    bucket_name: str
    tags: frozenset[tuple[str, str]]
    encryption_rules: Optional[list[EncryptionRule]]
    versioning_status: VersioningStatus
    is_public: bool
    object_keys: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ObjectRecord:
    """A harness-owned object: key, payload and content type."""

    key: str
    data: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class CheckResult:
    """Result of a single compliance check or scenario step."""

    check_id: str
    name: str
    status: CheckStatus
    detail: str = ""
    expected: Optional[str] = None
    actual: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASS


@dataclass
class SuiteResult:
    """Aggregated results for one suite (compliance or functional)."""

    suite_key: str
    suite_name: str
    status: CheckStatus
    checks: dict[str, CheckResult] = field(default_factory=dict)
    duration_seconds: float = 0.0
    error_message: Optional[str] = None
