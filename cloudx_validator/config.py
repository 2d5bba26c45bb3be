"""Configuration loading for the deployment validator.

Supports two configuration sources:
1. Environment variables (for CI/CD) - takes priority
2. config.json file (for local development)

Environment Variables:
    CLOUDX_INSTANCE_ID=i-06d7f74cd3d37089a
    CLOUDX_BUCKET_NAME=cloudximage-imagestorebucketf57d958e-1q4qdfiex9dn
    CLOUDX_REGION=us-east-1              (falls back to AWS_REGION)
    CLOUDX_ENDPOINT_URL=...              (optional, for S3-compatible stacks)
    CLOUDX_PAYLOAD_PATH=assets/test.jpg  (optional)
    CLOUDX_OBJECT_KEY=uploaded-image.jpg (optional)
    CLOUDX_UNIQUE_OBJECT_KEY=true        (optional)

Credentials are never read here; boto3 resolves them from its default chain.
"""

import json
import os
import re
import uuid
from dataclasses import replace
from pathlib import Path, PurePosixPath
from typing import Any

from cloudx_validator.models import DeploymentConfig


class ConfigError(Exception):
    """Raised when configuration loading fails."""

    pass


# Required fields for a deployment configuration
REQUIRED_FIELDS = [
    "instance_id",
    "bucket_name",
]

ADDRESSING_STYLES = ("virtual", "path", "auto")

OPTIONAL_STRING_FIELDS = (
    "region_name",
    "endpoint_url",
    "addressing_style",
    "payload_path",
    "object_key",
    "content_type",
    "location_pattern",
    "bucket_name_pattern",
    "required_sse_algorithm",
)

ENV_PREFIX = "CLOUDX_"
DEFAULT_REGION = "us-east-1"


def _parse_string(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"Invalid '{field}': expected a string, got {value!r}")
    return value


def _parse_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("1", "true", "yes", "on"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("0", "false", "no", "off", ""):
        return False
    raise ConfigError(f"Invalid boolean for '{field}': {value!r}")


def _parse_required_tag(value: Any) -> tuple[str, str]:
    if not isinstance(value, dict) or "key" not in value or "value" not in value:
        raise ConfigError(
            "Invalid 'required_tag'. Expected an object with 'key' and 'value'"
        )
    return (str(value["key"]), str(value["value"]))


def validate_config(config: DeploymentConfig) -> DeploymentConfig:
    """Check value formats that would otherwise fail deep inside a check.

    Raises:
        ConfigError: If a pattern does not compile or a setting is out of range.
    """
    if config.addressing_style not in ADDRESSING_STYLES:
        raise ConfigError(
            f"Invalid addressing_style '{config.addressing_style}'. "
            f"Expected one of: {', '.join(ADDRESSING_STYLES)}"
        )

    for name in ("location_pattern", "bucket_name_pattern"):
        pattern = getattr(config, name)
        try:
            re.compile(pattern)
        except re.error as e:
            raise ConfigError(f"Invalid regular expression for '{name}': {e}") from e

    if config.http_timeout is not None and config.http_timeout <= 0:
        raise ConfigError("'http_timeout' must be a positive number of seconds")

    if not config.object_key:
        raise ConfigError("'object_key' must not be empty")

    return config


def load_from_json(config_path: str) -> DeploymentConfig:
    """Load the deployment configuration from a JSON file.

    Args:
        config_path: Path to the config.json file.

    Returns:
        The parsed DeploymentConfig.

    Raises:
        ConfigError: If file doesn't exist, contains invalid JSON,
                    or is missing required fields.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a JSON object")

    for field in REQUIRED_FIELDS:
        if not data.get(field):
            raise ConfigError(f"Missing required field '{field}'")

    kwargs: dict[str, Any] = {
        field: _parse_string(data[field], field) for field in REQUIRED_FIELDS
    }

    for key in OPTIONAL_STRING_FIELDS:
        if data.get(key) is not None:
            kwargs[key] = _parse_string(data[key], key)

    if "unique_object_key" in data:
        kwargs["unique_object_key"] = _parse_bool(data["unique_object_key"], "unique_object_key")

    if "required_tag" in data:
        kwargs["required_tag"] = _parse_required_tag(data["required_tag"])

    if data.get("http_timeout") is not None:
        try:
            kwargs["http_timeout"] = float(data["http_timeout"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid 'http_timeout': {data['http_timeout']!r}") from e

    return validate_config(DeploymentConfig(**kwargs))


def load_from_env() -> DeploymentConfig:
    """Load the deployment configuration from CLOUDX_* environment variables.

    Raises:
        ConfigError: If a required variable is missing or malformed.
    """
    instance_id = os.environ.get(f"{ENV_PREFIX}INSTANCE_ID")
    if not instance_id:
        raise ConfigError(f"Missing environment variable: {ENV_PREFIX}INSTANCE_ID")

    bucket_name = os.environ.get(f"{ENV_PREFIX}BUCKET_NAME")
    if not bucket_name:
        raise ConfigError(f"Missing environment variable: {ENV_PREFIX}BUCKET_NAME")

    region = (
        os.environ.get(f"{ENV_PREFIX}REGION")
        or os.environ.get("AWS_REGION")
        or DEFAULT_REGION
    )

    kwargs: dict[str, Any] = {
        "instance_id": instance_id,
        "bucket_name": bucket_name,
        "region_name": region,
    }

    optional_vars = {
        "ENDPOINT_URL": "endpoint_url",
        "ADDRESSING_STYLE": "addressing_style",
        "PAYLOAD_PATH": "payload_path",
        "OBJECT_KEY": "object_key",
    }
    for suffix, attr in optional_vars.items():
        value = os.environ.get(f"{ENV_PREFIX}{suffix}")
        if value:
            kwargs[attr] = value

    unique = os.environ.get(f"{ENV_PREFIX}UNIQUE_OBJECT_KEY")
    if unique is not None:
        kwargs["unique_object_key"] = _parse_bool(unique, f"{ENV_PREFIX}UNIQUE_OBJECT_KEY")

    return validate_config(DeploymentConfig(**kwargs))


def has_env_config() -> bool:
    """Check if the deployment is identified through environment variables."""
    return any(
        os.environ.get(f"{ENV_PREFIX}{name}") for name in ("INSTANCE_ID", "BUCKET_NAME")
    )


def load_config(config_path: str = "config.json") -> DeploymentConfig:
    """Load the deployment configuration with environment priority.

    Priority order:
    1. Environment variables (if CLOUDX_INSTANCE_ID or CLOUDX_BUCKET_NAME is set)
    2. config.json file

    Raises:
        ConfigError: If neither source identifies a deployment.
    """
    if has_env_config():
        return load_from_env()

    if Path(config_path).exists():
        return load_from_json(config_path)

    raise ConfigError(
        "No deployment configured. Set CLOUDX_INSTANCE_ID and CLOUDX_BUCKET_NAME "
        "or create a config.json file."
    )


def resolve_object_key(config: DeploymentConfig) -> str:
    """Return the object key the functional scenario should use.

    With unique_object_key enabled, a short random suffix is inserted before
    the extension so concurrent runs do not share a key.
    """
    if not config.unique_object_key:
        return config.object_key

    key = PurePosixPath(config.object_key)
    return str(key.with_name(f"{key.stem}-{uuid.uuid4().hex[:8]}{key.suffix}"))


def with_unique_object_key(config: DeploymentConfig) -> DeploymentConfig:
    """Return a copy of config with unique_object_key switched on."""
    return replace(config, unique_object_key=True)
