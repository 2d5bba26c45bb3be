"""Tests for the boto3 client factories."""

from unittest.mock import MagicMock, patch

import pytest

from cloudx_validator.aws_clients import build_ec2_client, build_s3_client
from cloudx_validator.models import DeploymentConfig


@pytest.fixture
def deployment_config() -> DeploymentConfig:
    """Create a sample deployment config for testing."""
    return DeploymentConfig(
        instance_id="i-06d7f74cd3d37089a",
        bucket_name="cloudximage-imagestorebucketabc",
        region_name="eu-west-1",
    )


class TestBuildS3Client:
    """Tests for build_s3_client function."""

    @patch("cloudx_validator.aws_clients.boto3.client")
    def test_first_argument_is_s3(self, mock_boto_client: MagicMock, deployment_config):
        """Verify first argument to boto3.client is 's3'."""
        build_s3_client(deployment_config)

        assert mock_boto_client.call_args.args[0] == "s3"

    @patch("cloudx_validator.aws_clients.boto3.client")
    def test_region_and_endpoint(self, mock_boto_client: MagicMock, deployment_config):
        """Verify region and endpoint override are passed to boto3."""
        build_s3_client(deployment_config)

        call_kwargs = mock_boto_client.call_args.kwargs
        assert call_kwargs["region_name"] == "eu-west-1"
        assert call_kwargs["endpoint_url"] is None

    @patch("cloudx_validator.aws_clients.boto3.client")
    def test_no_credentials_passed(self, mock_boto_client: MagicMock, deployment_config):
        """Credentials come from boto3's default chain, never from config."""
        build_s3_client(deployment_config)

        call_kwargs = mock_boto_client.call_args.kwargs
        assert "aws_access_key_id" not in call_kwargs
        assert "aws_secret_access_key" not in call_kwargs

    @patch("cloudx_validator.aws_clients.boto3.client")
    def test_single_attempt(self, mock_boto_client: MagicMock, deployment_config):
        """The SDK must not retry failed calls."""
        build_s3_client(deployment_config)

        config = mock_boto_client.call_args.kwargs["config"]
        assert config.retries["max_attempts"] == 1

    @patch("cloudx_validator.aws_clients.boto3.client")
    def test_addressing_style(self, mock_boto_client: MagicMock, deployment_config):
        """Verify the addressing style is configured."""
        build_s3_client(deployment_config)

        config = mock_boto_client.call_args.kwargs["config"]
        assert config.s3["addressing_style"] == "virtual"

    @patch("cloudx_validator.aws_clients.boto3.client")
    def test_returns_client(self, mock_boto_client: MagicMock, deployment_config):
        """Verify function returns the boto3 client."""
        mock_client = MagicMock()
        mock_boto_client.return_value = mock_client

        assert build_s3_client(deployment_config) is mock_client


class TestBuildEc2Client:
    """Tests for build_ec2_client function."""

    @patch("cloudx_validator.aws_clients.boto3.client")
    def test_ec2_client_for_region(self, mock_boto_client: MagicMock, deployment_config):
        """Verify an EC2 client is built for the configured region."""
        build_ec2_client(deployment_config)

        assert mock_boto_client.call_args.args[0] == "ec2"
        assert mock_boto_client.call_args.kwargs["region_name"] == "eu-west-1"

    @patch("cloudx_validator.aws_clients.boto3.client")
    def test_single_attempt(self, mock_boto_client: MagicMock, deployment_config):
        """The SDK must not retry failed calls."""
        build_ec2_client(deployment_config)

        config = mock_boto_client.call_args.kwargs["config"]
        assert config.retries["max_attempts"] == 1
