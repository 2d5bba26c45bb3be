"""Error taxonomy for the deployment validator.

Expected absence (NotConfiguredError, NoPublicEndpointError) is kept apart
from real failures (ProviderQueryError and the data-plane errors) so checks
can interpret the former and let the latter propagate.
"""

from typing import Optional


class HarnessError(Exception):
    """Base class for all errors raised by the validator's clients."""

    pass


class ProviderQueryError(HarnessError):
    """Raised when a remote read fails or times out."""

    def __init__(self, facet: str, message: str):
        super().__init__(f"Error fetching {facet}: {message}")
        self.facet = facet
        self.provider_message = message


class NotFoundError(HarnessError):
    """Raised when a referenced resource or object does not exist."""

    def __init__(self, resource: str, message: str):
        super().__init__(f"{resource} not found: {message}")
        self.resource = resource


class NotConfiguredError(HarnessError):
    """Raised when an optional facet is absent, e.g. no encryption config."""

    def __init__(self, facet: str, resource: str):
        super().__init__(f"{facet} is not configured for {resource}")
        self.facet = facet
        self.resource = resource


class NoPublicEndpointError(HarnessError):
    """Raised when an instance exposes neither a public IP nor a public DNS."""

    def __init__(self, instance_id: str, attribute: Optional[str] = None):
        if attribute:
            message = f"Instance {instance_id} has no {attribute}"
        else:
            message = f"Instance {instance_id} has no public IP or DNS name"
        super().__init__(message)
        self.instance_id = instance_id
        self.attribute = attribute


class UnreachableError(HarnessError):
    """Raised when a probe does not observe HTTP 200."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url} is not reachable: {reason}")
        self.url = url
        self.reason = reason


class DataPlaneError(HarnessError):
    """Base class for object storage read/write failures."""

    action = "access"

    def __init__(self, bucket: str, key: str, message: str):
        super().__init__(f"Failed to {self.action} s3://{bucket}/{key}: {message}")
        self.bucket = bucket
        self.key = key


class UploadError(DataPlaneError):
    action = "upload"


class DownloadError(DataPlaneError):
    action = "download"


class DeleteError(DataPlaneError):
    action = "delete"
