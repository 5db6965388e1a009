"""
Client configuration for the BOS Python SDK

Provides the client configuration structure and loaders for JSON documents,
JSON files and ``BOS_*`` environment variables.
"""

import json
import os
from typing import Any, Dict, Mapping, Optional, Union
from dataclasses import dataclass, fields
from pathlib import Path

from ..exceptions import ConfigError, ValidationError
from ..signing.signing_config import DEFAULT_EXPIRY_SECONDS
from ..version import __version__

BOS_HOST = 'bcebos.com'

REQUIRED_KEYS = ('access_key', 'secret_key', 'bucket', 'region')

# Environment variable -> config key. Later names win over earlier aliases.
ENV_VARIABLES = {
    'BOS_KEY': 'access_key',
    'BOS_ACCESS_KEY': 'access_key',
    'BOS_SECRET': 'secret_key',
    'BOS_SECRET_KEY': 'secret_key',
    'BOS_BUCKET': 'bucket',
    'BOS_REGION': 'region',
    'BOS_ENDPOINT_DOMAIN': 'endpoint_domain',
    'BOS_SCHEME': 'scheme',
    'BOS_CONNECT_TIMEOUT': 'connect_timeout',
    'BOS_TIMEOUT': 'timeout',
    'BOS_VERIFY_SSL': 'verify_ssl',
    'BOS_EXPIRY_SECONDS': 'default_expiry_seconds',
}


@dataclass
class ClientConfig:
    """
    Configuration for a BOS bucket client

    Attributes:
        access_key: Access key id
        secret_key: Secret access key
        bucket: Bucket name
        region: Region code (e.g. ``gz``, ``bj``)
        endpoint_domain: Storage domain appended to ``{bucket}.{region}``
        scheme: URL scheme
        connect_timeout: Connect timeout in seconds
        timeout: Read timeout in seconds (None waits indefinitely)
        verify_ssl: Whether to verify TLS certificates
        default_expiry_seconds: Default token validity
        user_agent: ``User-Agent`` header sent with every request
    """
    access_key: str
    secret_key: str
    bucket: str
    region: str
    endpoint_domain: str = BOS_HOST
    scheme: str = 'https'
    connect_timeout: float = 10.0
    timeout: Optional[float] = None
    verify_ssl: bool = True
    default_expiry_seconds: int = DEFAULT_EXPIRY_SECONDS
    user_agent: str = f'BOS-Python-SDK/{__version__}'

    def __post_init__(self):
        """Validate client configuration."""
        missing = [key for key in REQUIRED_KEYS if not getattr(self, key)]
        if missing:
            raise ValidationError(
                f"Invalid config, missing: {','.join(missing)}",
                "MISSING_CONFIG",
                {"missing": missing}
            )

        if self.scheme not in ('http', 'https'):
            raise ValidationError(f"Unsupported scheme: {self.scheme}")

        if self.connect_timeout <= 0:
            raise ValidationError("Connect timeout must be positive")

        if self.timeout is not None and self.timeout <= 0:
            raise ValidationError("Timeout must be positive")

        if self.default_expiry_seconds <= 0:
            raise ValidationError("Default expiry must be positive")

    @property
    def host(self) -> str:
        """Virtual-hosted bucket endpoint, ``{bucket}.{region}.{domain}``."""
        return f'{self.bucket}.{self.region}.{self.endpoint_domain}'

    @property
    def timeouts(self):
        """Timeout argument for ``requests``."""
        return (self.connect_timeout, self.timeout)


def _coerce_value(key: str, value: Any) -> Any:
    """Convert string values (from the environment) to the field's type."""
    if not isinstance(value, str):
        return value
    if key in ('connect_timeout', 'timeout'):
        return float(value)
    if key == 'default_expiry_seconds':
        return int(value)
    if key == 'verify_ssl':
        return value.strip().lower() not in ('0', 'false', 'no', 'off')
    return value


def load_config_from_dict(data: Mapping[str, Any]) -> ClientConfig:
    """
    Build a client configuration from a mapping.

    Unknown keys are ignored; missing required keys are reported together.

    Raises:
        ValidationError: If required keys are missing or values are invalid
        ConfigError: If a value cannot be converted
    """
    known = {f.name for f in fields(ClientConfig)}
    values: Dict[str, Any] = {}
    try:
        for key, value in data.items():
            if key in known and value is not None:
                values[key] = _coerce_value(key, value)
    except ValueError as e:
        raise ConfigError(f"Invalid configuration value: {e}", "INVALID_VALUE") from e

    missing = [key for key in REQUIRED_KEYS if not values.get(key)]
    if missing:
        raise ValidationError(
            f"Invalid config, missing: {','.join(missing)}",
            "MISSING_CONFIG",
            {"missing": missing}
        )

    return ClientConfig(**values)


def load_config_from_json(json_string: str) -> ClientConfig:
    """Load client configuration from a JSON document."""
    try:
        data = json.loads(json_string)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR") from e

    if not isinstance(data, dict):
        raise ConfigError("Configuration JSON must be an object", "INVALID_FORMAT")

    return load_config_from_dict(data)


def load_config_from_file(file_path: Union[str, Path]) -> ClientConfig:
    """Load client configuration from a JSON file."""
    try:
        with open(Path(file_path), 'r', encoding='utf-8') as f:
            json_string = f.read()
    except OSError as e:
        raise ConfigError(f"Failed to read configuration file: {e}", "FILE_ERROR") from e

    return load_config_from_json(json_string)


def load_config_from_env(
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any
) -> ClientConfig:
    """
    Load client configuration from ``BOS_*`` environment variables.

    Args:
        environ: Environment mapping (defaults to ``os.environ``)
        **overrides: Values taking precedence over the environment

    Returns:
        ClientConfig: Loaded configuration
    """
    if environ is None:
        environ = os.environ

    data: Dict[str, Any] = {}
    for variable, key in ENV_VARIABLES.items():
        if environ.get(variable):
            data[key] = environ[variable]

    data.update({k: v for k, v in overrides.items() if v is not None})
    return load_config_from_dict(data)
