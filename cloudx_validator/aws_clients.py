"""boto3 client factories for the deployment validator.

Builds the EC2 and S3 clients the descriptor client and the storage
exerciser are given. Both are configured with a single attempt per call:
the validator reports the current state of the deployment, so a transient
provider failure surfaces as a failure instead of being retried away.
"""

import boto3
from botocore.client import Config

from cloudx_validator.models import DeploymentConfig

# "standard" mode counts the first call, so 1 means no retries at all
NO_RETRIES = {"max_attempts": 1, "mode": "standard"}


def build_ec2_client(config: DeploymentConfig):
    """Build a boto3 EC2 client for the deployment's region.

    Args:
        config: Deployment configuration with the region to query.

    Returns:
        A boto3 EC2 client.
    """
    return boto3.client(
        "ec2",
        region_name=config.region_name,
        config=Config(retries=NO_RETRIES),
    )


def build_s3_client(config: DeploymentConfig):
    """Build a boto3 S3 client for the deployment's bucket.

    Args:
        config: Deployment configuration containing region, optional
               endpoint override and addressing style.

    Returns:
        A boto3 S3 client.
    """
    boto_config = Config(
        signature_version="s3v4",
        s3={"addressing_style": config.addressing_style},
        retries=NO_RETRIES,
    )

    return boto3.client(
        "s3",
        endpoint_url=config.endpoint_url,
        region_name=config.region_name,
        config=boto_config,
    )
