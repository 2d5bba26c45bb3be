"""Object storage exerciser: put, get, list and delete against a bucket.

Each operation is a single S3 round trip, except list(), which follows
every continuation page. Compatibility note: S3 answers
DeleteObject with 204 whether or not the key exists, so delete() of an
absent key succeeds; S3-compatible providers that reject it surface their
error as DeleteError.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote, urlparse

from botocore.exceptions import BotoCoreError, ClientError

from cloudx_validator.descriptors import error_code, list_object_keys
from cloudx_validator.errors import (
    DeleteError,
    DownloadError,
    NotFoundError,
    UploadError,
)

logger = logging.getLogger(__name__)

MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class ObjectStorageExerciser:
    """Performs data-plane operations on an S3 bucket.

    Args:
        s3_client: boto3 S3 client
        addressing_style: "virtual" or "path"; only shapes the returned
            upload location, the client's own config drives requests
    """

    def __init__(self, s3_client: Any, addressing_style: str = "virtual"):
        self.s3_client = s3_client
        self.addressing_style = addressing_style

    def object_location(self, bucket: str, key: str) -> str:
        """Build the public URL of an object from the client's endpoint."""
        endpoint = urlparse(self.s3_client.meta.endpoint_url)
        quoted_key = quote(key, safe="/")

        if self.addressing_style == "path":
            return f"{endpoint.scheme}://{endpoint.netloc}/{bucket}/{quoted_key}"

        return f"{endpoint.scheme}://{bucket}.{endpoint.netloc}/{quoted_key}"

    def put(self, bucket: str, key: str, data: bytes, content_type: str) -> str:
        """Upload an object and return its location URL.

        Raises:
            UploadError: On transport or permission failure.
        """
        logger.debug("put_object s3://%s/%s (%d bytes)", bucket, key, len(data))
        try:
            self.s3_client.put_object(
                Bucket=bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            raise UploadError(bucket, key, str(e)) from e

        return self.object_location(bucket, key)

    def get(self, bucket: str, key: str) -> bytes:
        """Download an object's bytes.

        Raises:
            NotFoundError: If the key does not exist.
            DownloadError: On any other failure.
        """
        logger.debug("get_object s3://%s/%s", bucket, key)
        try:
            response = self.s3_client.get_object(Bucket=bucket, Key=key)
            return response["Body"].read()
        except ClientError as e:
            if error_code(e) in MISSING_KEY_CODES:
                raise NotFoundError(f"Object s3://{bucket}/{key}", str(e)) from e
            raise DownloadError(bucket, key, str(e)) from e
        except BotoCoreError as e:
            raise DownloadError(bucket, key, str(e)) from e

    def list(self, bucket: str, prefix: Optional[str] = None) -> list[str]:
        """Return every object key in the bucket, or under prefix when given."""
        return list_object_keys(self.s3_client, bucket, prefix)

    def exists(self, bucket: str, key: str) -> bool:
        """Return True if exactly this key is present in the bucket."""
        return key in self.list(bucket, prefix=key)

    def delete(self, bucket: str, key: str) -> None:
        """Delete an object.

        Raises:
            DeleteError: If the provider rejects the delete.
        """
        logger.debug("delete_object s3://%s/%s", bucket, key)
        try:
            self.s3_client.delete_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise DeleteError(bucket, key, str(e)) from e
