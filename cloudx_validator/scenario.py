"""Object lifecycle scenario: upload, download, list, delete.

The four steps share one object key through an explicit ScenarioState and
run strictly in order, since each step's precondition is the previous
step's postcondition. A failing step ends the scenario; the steps after it
are reported as skipped rather than dropped.

Objects the harness did not create are never written or deleted: upload
fails when its key is already present in the bucket.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from cloudx_validator.errors import HarnessError
from cloudx_validator.models import CheckResult, CheckStatus, ObjectRecord
from cloudx_validator.storage import ObjectStorageExerciser

logger = logging.getLogger(__name__)

STEP_DEFINITIONS = {
    "upload": {
        "id": "upload",
        "name": "Upload image to bucket",
        "description": "Upload the fixture under an unused key; the returned location must be a storage URL.",
    },
    "download": {
        "id": "download",
        "name": "Download image from bucket",
        "description": "Download the key; bytes must be non-empty and equal the upload.",
    },
    "list": {
        "id": "list",
        "name": "List uploaded images",
        "description": "List the bucket; the uploaded key must be present.",
    },
    "delete": {
        "id": "delete",
        "name": "Delete image from bucket",
        "description": "Delete the key; a re-list must no longer contain it.",
    },
}

SCENARIO_STEPS = ["upload", "download", "list", "delete"]


class StepFailed(Exception):
    """Raised by a step when its assertion does not hold."""

    def __init__(self, detail: str, expected: Optional[str] = None, actual: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.expected = expected
        self.actual = actual


@dataclass
class ScenarioState:
    """State carried from one step to the next."""

    record: ObjectRecord
    location: Optional[str] = None
    downloaded: Optional[bytes] = None
    uploaded: bool = False
    deleted: bool = False
    completed_steps: list[str] = field(default_factory=list)


def load_payload(path: str, key: str, content_type: str) -> ObjectRecord:
    """Read the local fixture into an ObjectRecord.

    Raises:
        FileNotFoundError: If the fixture does not exist.
        ValueError: If the fixture is empty.
    """
    data = Path(path).read_bytes()
    if not data:
        raise ValueError(f"Payload fixture is empty: {path}")
    return ObjectRecord(key=key, data=data, content_type=content_type)


class ObjectLifecycleScenario:
    """Runs the upload -> download -> list -> delete lifecycle on one key.

    Args:
        storage: Object storage exerciser bound to the bucket's client
        bucket: Bucket name
        record: The harness-owned object to create and destroy
        location_pattern: Regex the upload location must match
    """

    def __init__(
        self,
        storage: ObjectStorageExerciser,
        bucket: str,
        record: ObjectRecord,
        location_pattern: str = r"^https://.*\.amazonaws\.com",
    ):
        self.storage = storage
        self.bucket = bucket
        self.location_pattern = location_pattern
        self.state = ScenarioState(record=record)
        self._steps: dict[str, Callable[[], str]] = {
            "upload": self._upload,
            "download": self._download,
            "list": self._list,
            "delete": self._delete,
        }

    def run(self, on_step_complete: Optional[Callable[[CheckResult], None]] = None) -> list[CheckResult]:
        """Run every step in order and return one result per step.

        Args:
            on_step_complete: Optional callback invoked with each result.
        """
        results: list[CheckResult] = []
        blocked_by: Optional[str] = None

        try:
            for step_id in SCENARIO_STEPS:
                if blocked_by:
                    result = self._step_result(
                        step_id,
                        CheckStatus.SKIP,
                        f"Not run: step '{blocked_by}' did not pass",
                    )
                else:
                    result = self.run_step(step_id)
                    if not result.passed:
                        blocked_by = step_id

                results.append(result)
                if on_step_complete:
                    on_step_complete(result)
        finally:
            self.cleanup()

        return results

    def run_step(self, step_id: str) -> CheckResult:
        """Run a single step, converting its failure into a CheckResult.

        Raises:
            ValueError: If step_id is not a known step.
        """
        step = self._steps.get(step_id)
        if step is None:
            raise ValueError(f"Unknown step_id: {step_id}")

        try:
            detail = step()
        except StepFailed as e:
            return self._step_result(step_id, CheckStatus.FAIL, e.detail, e.expected, e.actual)
        except HarnessError as e:
            return self._step_result(step_id, CheckStatus.ERROR, str(e))

        self.state.completed_steps.append(step_id)
        return self._step_result(step_id, CheckStatus.PASS, detail)

    def cleanup(self) -> None:
        """Delete the harness-owned object if the scenario left it behind."""
        if not self.state.uploaded or self.state.deleted:
            return

        key = self.state.record.key
        try:
            self.storage.delete(self.bucket, key)
            self.state.deleted = True
        except HarnessError as e:
            logger.warning("Cleanup of s3://%s/%s failed: %s", self.bucket, key, e)

    # === STEPS ===

    def _upload(self) -> str:
        record = self.state.record
        if self.storage.exists(self.bucket, record.key):
            raise StepFailed(
                f"Key {record.key} already exists in bucket {self.bucket}; refusing to overwrite",
                f"{record.key} absent before upload",
                "already exists",
            )

        location = self.storage.put(self.bucket, record.key, record.data, record.content_type)
        self.state.uploaded = True
        self.state.location = location

        if not re.match(self.location_pattern, location):
            raise StepFailed(
                f"Upload location {location} does not match {self.location_pattern}",
                self.location_pattern,
                location,
            )
        return f"Uploaded {len(record.data)} bytes to {location}"

    def _download(self) -> str:
        record = self.state.record
        data = self.storage.get(self.bucket, record.key)
        self.state.downloaded = data

        if not data:
            raise StepFailed(
                f"Downloaded s3://{self.bucket}/{record.key} is empty",
                "> 0 bytes",
                "0 bytes",
            )
        if data != record.data:
            raise StepFailed(
                f"Downloaded s3://{self.bucket}/{record.key} differs from the uploaded payload",
                f"{len(record.data)} bytes (uploaded payload)",
                f"{len(data)} bytes",
            )
        return f"Downloaded {len(data)} bytes matching the upload"

    def _list(self) -> str:
        key = self.state.record.key
        keys = self.storage.list(self.bucket)

        if key not in keys:
            raise StepFailed(
                f"Key {key} not listed in bucket {self.bucket} ({len(keys)} object(s) listed)",
                f"{key} listed",
                "not listed",
            )
        return f"Key {key} listed among {len(keys)} object(s)"

    def _delete(self) -> str:
        key = self.state.record.key
        self.storage.delete(self.bucket, key)
        self.state.deleted = True

        keys = self.storage.list(self.bucket)
        if key in keys:
            raise StepFailed(
                f"Key {key} still listed in bucket {self.bucket} after delete",
                f"{key} absent",
                "still listed",
            )
        return f"Key {key} deleted and no longer listed"

    def _step_result(
        self,
        step_id: str,
        status: CheckStatus,
        detail: str,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
    ) -> CheckResult:
        return CheckResult(
            check_id=step_id,
            name=STEP_DEFINITIONS[step_id]["name"],
            status=status,
            detail=detail,
            expected=expected,
            actual=actual,
        )
