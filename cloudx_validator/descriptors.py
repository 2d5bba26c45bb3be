"""Read-only resource descriptors for the deployment under validation.

Each method returns a fresh snapshot: nothing is cached and nothing is
retried. Object listings follow every continuation page. Provider failures surface as
ProviderQueryError naming the facet; expected absences (no encryption
configuration, no tag set, no bucket policy) are mapped explicitly.
"""

import logging
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError

from cloudx_validator.errors import (
    NoPublicEndpointError,
    NotConfiguredError,
    NotFoundError,
    ProviderQueryError,
)
from cloudx_validator.models import (
    BucketDescriptor,
    EncryptionRule,
    InstanceDescriptor,
    SubnetDescriptor,
    VersioningStatus,
)

logger = logging.getLogger(__name__)

ENDPOINT_ATTRIBUTES = {
    "ip": "public IP address",
    "dns": "public DNS name",
}


def error_code(exc: Exception) -> str:
    """Return the AWS error code from a botocore exception, if present."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code", "")
    return ""


def list_object_keys(s3_client: Any, bucket: str, prefix: Optional[str] = None) -> list[str]:
    """Return every key in a bucket, walking all list_objects_v2 pages.

    Raises:
        ProviderQueryError: If any page cannot be fetched.
    """
    params = {"Bucket": bucket}
    if prefix:
        params["Prefix"] = prefix

    logger.debug("list_objects_v2 %s prefix=%s", bucket, prefix)
    paginator = s3_client.get_paginator("list_objects_v2")
    try:
        return [
            item["Key"]
            for page in paginator.paginate(**params)
            for item in page.get("Contents", [])
        ]
    except (ClientError, BotoCoreError) as e:
        raise ProviderQueryError(f"objects of bucket {bucket}", str(e)) from e


class ResourceDescriptorClient:
    """Fetches descriptor facets for instances, subnets and buckets.

    Args:
        ec2_client: boto3 EC2 client
        s3_client: boto3 S3 client
    """

    def __init__(self, ec2_client: Any, s3_client: Any):
        self.ec2_client = ec2_client
        self.s3_client = s3_client

    # === COMPUTE ===

    def get_instance(self, instance_id: str) -> InstanceDescriptor:
        """Describe a single instance.

        Raises:
            NotFoundError: If the id resolves to zero or several instances.
            ProviderQueryError: If the provider call fails.
        """
        logger.debug("describe_instances %s", instance_id)
        try:
            response = self.ec2_client.describe_instances(InstanceIds=[instance_id])
        except ClientError as e:
            if error_code(e).startswith("InvalidInstanceID"):
                raise NotFoundError(f"Instance {instance_id}", str(e)) from e
            raise ProviderQueryError(f"instance {instance_id}", str(e)) from e
        except BotoCoreError as e:
            raise ProviderQueryError(f"instance {instance_id}", str(e)) from e

        instances = [
            instance
            for reservation in response.get("Reservations", [])
            for instance in reservation.get("Instances", [])
        ]
        if len(instances) != 1:
            raise NotFoundError(
                f"Instance {instance_id}",
                f"expected exactly one match, got {len(instances)}",
            )

        instance = instances[0]
        return InstanceDescriptor(
            instance_id=instance.get("InstanceId", instance_id),
            subnet_id=instance.get("SubnetId", ""),
            # EC2 reports a missing DNS name as an empty string
            public_ip=instance.get("PublicIpAddress") or None,
            public_dns=instance.get("PublicDnsName") or None,
        )

    def get_subnet(self, subnet_id: str) -> SubnetDescriptor:
        """Describe a single subnet.

        Raises:
            NotFoundError: If the id resolves to zero or several subnets.
            ProviderQueryError: If the provider call fails.
        """
        logger.debug("describe_subnets %s", subnet_id)
        try:
            response = self.ec2_client.describe_subnets(SubnetIds=[subnet_id])
        except ClientError as e:
            if error_code(e).startswith("InvalidSubnetID"):
                raise NotFoundError(f"Subnet {subnet_id}", str(e)) from e
            raise ProviderQueryError(f"subnet {subnet_id}", str(e)) from e
        except BotoCoreError as e:
            raise ProviderQueryError(f"subnet {subnet_id}", str(e)) from e

        subnets = response.get("Subnets", [])
        if len(subnets) != 1:
            raise NotFoundError(
                f"Subnet {subnet_id}",
                f"expected exactly one match, got {len(subnets)}",
            )

        return SubnetDescriptor(
            subnet_id=subnets[0].get("SubnetId", subnet_id),
            map_public_ip_on_launch=bool(subnets[0].get("MapPublicIpOnLaunch", False)),
        )

    def get_public_endpoint(self, instance_id: str, via: Optional[str] = None) -> str:
        """Return the instance's public HTTP URL.

        The public IP is preferred over the DNS name. Passing via="ip" or
        via="dns" restricts the lookup to that attribute.

        Raises:
            NoPublicEndpointError: If the requested attribute(s) are not set.
            ValueError: If via is not None, "ip" or "dns".
        """
        if via is not None and via not in ENDPOINT_ATTRIBUTES:
            raise ValueError(f"Unknown endpoint attribute: {via}")

        instance = self.get_instance(instance_id)

        if via in (None, "ip") and instance.public_ip:
            return f"http://{instance.public_ip}"
        if via in (None, "dns") and instance.public_dns:
            return f"http://{instance.public_dns}"

        raise NoPublicEndpointError(
            instance_id, ENDPOINT_ATTRIBUTES[via] if via else None
        )

    # === STORAGE ===

    def list_bucket_objects(self, bucket: str) -> list[str]:
        """Return the object keys of a bucket (empty when the bucket is empty)."""
        return list_object_keys(self.s3_client, bucket)

    def get_bucket_tags(self, bucket: str) -> frozenset[tuple[str, str]]:
        """Return the bucket's tags as (key, value) pairs."""
        logger.debug("get_bucket_tagging %s", bucket)
        try:
            response = self.s3_client.get_bucket_tagging(Bucket=bucket)
        except ClientError as e:
            if error_code(e) == "NoSuchTagSet":
                return frozenset()
            raise ProviderQueryError(f"tags of bucket {bucket}", str(e)) from e
        except BotoCoreError as e:
            raise ProviderQueryError(f"tags of bucket {bucket}", str(e)) from e

        return frozenset(
            (tag["Key"], tag["Value"]) for tag in response.get("TagSet", [])
        )

    def get_bucket_encryption(self, bucket: str) -> list[EncryptionRule]:
        """Return the bucket's default encryption rules in provider order.

        Raises:
            NotConfiguredError: If the bucket has no encryption configuration.
            ProviderQueryError: If the provider call fails.
        """
        logger.debug("get_bucket_encryption %s", bucket)
        try:
            response = self.s3_client.get_bucket_encryption(Bucket=bucket)
        except ClientError as e:
            if error_code(e) == "ServerSideEncryptionConfigurationNotFoundError":
                raise NotConfiguredError("Encryption", f"bucket {bucket}") from e
            raise ProviderQueryError(f"encryption of bucket {bucket}", str(e)) from e
        except BotoCoreError as e:
            raise ProviderQueryError(f"encryption of bucket {bucket}", str(e)) from e

        rules = []
        configuration = response.get("ServerSideEncryptionConfiguration", {})
        for rule in configuration.get("Rules", []):
            default = rule.get("ApplyServerSideEncryptionByDefault", {})
            rules.append(
                EncryptionRule(
                    algorithm=default.get("SSEAlgorithm", ""),
                    kms_key_id=default.get("KMSMasterKeyID"),
                    bucket_key_enabled=bool(rule.get("BucketKeyEnabled", False)),
                )
            )
        return rules

    def get_bucket_versioning(self, bucket: str) -> VersioningStatus:
        """Return the bucket's versioning status, UNSET when never configured."""
        logger.debug("get_bucket_versioning %s", bucket)
        try:
            response = self.s3_client.get_bucket_versioning(Bucket=bucket)
        except (ClientError, BotoCoreError) as e:
            raise ProviderQueryError(f"versioning of bucket {bucket}", str(e)) from e

        status = response.get("Status")
        if not status:
            return VersioningStatus.UNSET

        try:
            return VersioningStatus(status)
        except ValueError as e:
            raise ProviderQueryError(
                f"versioning of bucket {bucket}", f"unknown status {status!r}"
            ) from e

    def get_bucket_public_access_status(self, bucket: str) -> bool:
        """Return True if the bucket policy makes the bucket public.

        A bucket without any policy is reported as not public.
        """
        logger.debug("get_bucket_policy_status %s", bucket)
        try:
            response = self.s3_client.get_bucket_policy_status(Bucket=bucket)
        except ClientError as e:
            if error_code(e) == "NoSuchBucketPolicy":
                return False
            raise ProviderQueryError(f"public access status of bucket {bucket}", str(e)) from e
        except BotoCoreError as e:
            raise ProviderQueryError(f"public access status of bucket {bucket}", str(e)) from e

        return bool(response.get("PolicyStatus", {}).get("IsPublic", False))

    def describe_bucket(self, bucket: str) -> BucketDescriptor:
        """Fetch every facet of a bucket, one call per facet.

        Facets may reflect slightly different points in time.
        """
        try:
            encryption_rules: Optional[list[EncryptionRule]] = self.get_bucket_encryption(bucket)
        except NotConfiguredError:
            encryption_rules = None

        return BucketDescriptor(
            bucket_name=bucket,
            tags=self.get_bucket_tags(bucket),
            encryption_rules=encryption_rules,
            versioning_status=self.get_bucket_versioning(bucket),
            is_public=self.get_bucket_public_access_status(bucket),
            object_keys=self.list_bucket_objects(bucket),
        )
