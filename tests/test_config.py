"""Tests for configuration loading module."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from cloudx_validator.config import (
    ConfigError,
    load_config,
    load_from_env,
    load_from_json,
    resolve_object_key,
    with_unique_object_key,
)
from cloudx_validator.models import DeploymentConfig

VALID_CONFIG = {
    "instance_id": "i-06d7f74cd3d37089a",
    "bucket_name": "cloudximage-imagestorebucketf57d958e",
}


def write_config(tmp_path: Path, data) -> str:
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(data))
    return str(config_file)


class TestLoadFromJson:
    """Tests for load_from_json function."""

    def test_minimal_config(self, tmp_path: Path):
        """Only instance_id and bucket_name are required."""
        config = load_from_json(write_config(tmp_path, VALID_CONFIG))

        assert config.instance_id == "i-06d7f74cd3d37089a"
        assert config.bucket_name == "cloudximage-imagestorebucketf57d958e"
        assert config.region_name == "us-east-1"

    def test_all_fields(self, tmp_path: Path):
        """Optional fields override the defaults."""
        data = dict(
            VALID_CONFIG,
            region_name="eu-central-1",
            endpoint_url="http://localhost:4566",
            addressing_style="path",
            payload_path="fixtures/cat.jpg",
            object_key="qa/cat.jpg",
            unique_object_key=True,
            required_tag={"key": "team", "value": "qa"},
            http_timeout=12,
        )

        config = load_from_json(write_config(tmp_path, data))

        assert config.region_name == "eu-central-1"
        assert config.endpoint_url == "http://localhost:4566"
        assert config.addressing_style == "path"
        assert config.payload_path == "fixtures/cat.jpg"
        assert config.object_key == "qa/cat.jpg"
        assert config.unique_object_key is True
        assert config.required_tag == ("team", "qa")
        assert config.http_timeout == 12.0

    def test_missing_file_raises_error(self, tmp_path: Path):
        """Raise ConfigError when config file doesn't exist."""
        with pytest.raises(ConfigError, match="Config file not found"):
            load_from_json(str(tmp_path / "nonexistent.json"))

    def test_malformed_json_raises_error(self, tmp_path: Path):
        """Raise ConfigError when config file contains invalid JSON."""
        config_file = tmp_path / "config.json"
        config_file.write_text("{ invalid json }")

        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_from_json(str(config_file))

    def test_non_object_raises_error(self, tmp_path: Path):
        """The top level must be a JSON object."""
        with pytest.raises(ConfigError, match="JSON object"):
            load_from_json(write_config(tmp_path, ["not", "an", "object"]))

    @pytest.mark.parametrize("field", ["instance_id", "bucket_name"])
    def test_missing_required_field(self, tmp_path: Path, field: str):
        """Raise ConfigError naming the missing field."""
        data = dict(VALID_CONFIG)
        del data[field]

        with pytest.raises(ConfigError, match=field):
            load_from_json(write_config(tmp_path, data))

    def test_invalid_addressing_style(self, tmp_path: Path):
        """Unknown addressing styles are rejected."""
        data = dict(VALID_CONFIG, addressing_style="sideways")

        with pytest.raises(ConfigError, match="addressing_style"):
            load_from_json(write_config(tmp_path, data))

    def test_invalid_pattern(self, tmp_path: Path):
        """A pattern that does not compile is rejected up front."""
        data = dict(VALID_CONFIG, location_pattern="^https://[")

        with pytest.raises(ConfigError, match="location_pattern"):
            load_from_json(write_config(tmp_path, data))

    @pytest.mark.parametrize(
        "field, value",
        [
            ("location_pattern", 5),
            ("bucket_name_pattern", ["^cloudx"]),
            ("object_key", 42),
            ("bucket_name", {"name": "cloudximage"}),
            ("instance_id", 123),
        ],
    )
    def test_non_string_field_rejected(self, tmp_path: Path, field, value):
        """Wrongly typed values are reported as configuration errors."""
        data = dict(VALID_CONFIG, **{field: value})

        with pytest.raises(ConfigError, match=field):
            load_from_json(write_config(tmp_path, data))

    def test_null_optional_field_keeps_default(self, tmp_path: Path):
        data = dict(VALID_CONFIG, endpoint_url=None)

        assert load_from_json(write_config(tmp_path, data)).endpoint_url is None

    def test_invalid_required_tag(self, tmp_path: Path):
        """required_tag must be an object with key and value."""
        data = dict(VALID_CONFIG, required_tag="cloudx=qa")

        with pytest.raises(ConfigError, match="required_tag"):
            load_from_json(write_config(tmp_path, data))

    @pytest.mark.parametrize("timeout", ["soon", 0, -5])
    def test_invalid_http_timeout(self, tmp_path: Path, timeout):
        """http_timeout must be a positive number."""
        data = dict(VALID_CONFIG, http_timeout=timeout)

        with pytest.raises(ConfigError, match="http_timeout"):
            load_from_json(write_config(tmp_path, data))


class TestLoadFromEnv:
    """Tests for load_from_env function."""

    def test_valid_env_config(self):
        """Load the deployment from environment variables."""
        env = {
            "CLOUDX_INSTANCE_ID": "i-abc",
            "CLOUDX_BUCKET_NAME": "cloudximage-imagestorebucket1",
            "CLOUDX_REGION": "us-west-2",
            "CLOUDX_OBJECT_KEY": "ci/uploaded.jpg",
            "CLOUDX_UNIQUE_OBJECT_KEY": "true",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_from_env()

        assert config.instance_id == "i-abc"
        assert config.bucket_name == "cloudximage-imagestorebucket1"
        assert config.region_name == "us-west-2"
        assert config.object_key == "ci/uploaded.jpg"
        assert config.unique_object_key is True

    def test_region_falls_back_to_aws_region(self):
        """AWS_REGION is used when CLOUDX_REGION is not set."""
        env = {
            "CLOUDX_INSTANCE_ID": "i-abc",
            "CLOUDX_BUCKET_NAME": "bucket",
            "AWS_REGION": "ap-south-1",
        }
        with patch.dict(os.environ, env, clear=True):
            assert load_from_env().region_name == "ap-south-1"

    def test_region_defaults_to_us_east_1(self):
        """Without any region variable, us-east-1 is used."""
        env = {"CLOUDX_INSTANCE_ID": "i-abc", "CLOUDX_BUCKET_NAME": "bucket"}
        with patch.dict(os.environ, env, clear=True):
            assert load_from_env().region_name == "us-east-1"

    def test_missing_bucket_raises_error(self):
        """Raise ConfigError when the bucket variable is missing."""
        with patch.dict(os.environ, {"CLOUDX_INSTANCE_ID": "i-abc"}, clear=True):
            with pytest.raises(ConfigError, match="CLOUDX_BUCKET_NAME"):
                load_from_env()

    def test_missing_instance_raises_error(self):
        """Raise ConfigError when the instance variable is missing."""
        with patch.dict(os.environ, {"CLOUDX_BUCKET_NAME": "bucket"}, clear=True):
            with pytest.raises(ConfigError, match="CLOUDX_INSTANCE_ID"):
                load_from_env()

    def test_invalid_boolean(self):
        """Unparseable booleans are rejected."""
        env = {
            "CLOUDX_INSTANCE_ID": "i-abc",
            "CLOUDX_BUCKET_NAME": "bucket",
            "CLOUDX_UNIQUE_OBJECT_KEY": "maybe",
        }
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ConfigError, match="boolean"):
                load_from_env()


class TestLoadConfig:
    """Tests for load_config priority logic."""

    def test_env_takes_priority(self, tmp_path: Path):
        """Environment variables win over config.json."""
        config_path = write_config(tmp_path, VALID_CONFIG)
        env = {"CLOUDX_INSTANCE_ID": "i-from-env", "CLOUDX_BUCKET_NAME": "env-bucket"}

        with patch.dict(os.environ, env, clear=True):
            config = load_config(config_path)

        assert config.instance_id == "i-from-env"

    def test_falls_back_to_json(self, tmp_path: Path):
        """config.json is used when no CLOUDX_* variables are set."""
        config_path = write_config(tmp_path, VALID_CONFIG)

        with patch.dict(os.environ, {}, clear=True):
            config = load_config(config_path)

        assert config.instance_id == "i-06d7f74cd3d37089a"

    def test_nothing_configured_raises_error(self, tmp_path: Path):
        """Raise ConfigError when neither source exists."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigError, match="No deployment configured"):
                load_config(str(tmp_path / "missing.json"))


class TestObjectKey:
    """Tests for the functional scenario's object key."""

    def test_fixed_key_by_default(self):
        """Without unique_object_key the configured key is used as is."""
        config = DeploymentConfig(instance_id="i-1", bucket_name="b")
        assert resolve_object_key(config) == "uploaded-image.jpg"

    def test_unique_key_keeps_extension(self):
        """A unique key inserts a suffix before the extension."""
        config = with_unique_object_key(DeploymentConfig(instance_id="i-1", bucket_name="b"))

        key = resolve_object_key(config)

        assert key.startswith("uploaded-image-")
        assert key.endswith(".jpg")
        assert len(key) == len("uploaded-image-") + 8 + len(".jpg")

    def test_unique_keys_differ_between_runs(self):
        """Two resolutions yield different keys."""
        config = with_unique_object_key(DeploymentConfig(instance_id="i-1", bucket_name="b"))
        assert resolve_object_key(config) != resolve_object_key(config)

    def test_unique_key_keeps_prefix(self):
        """Key prefixes survive the suffix insertion."""
        config = DeploymentConfig(
            instance_id="i-1", bucket_name="b", object_key="qa/image.png", unique_object_key=True
        )
        key = resolve_object_key(config)

        assert key.startswith("qa/image-")
        assert key.endswith(".png")
