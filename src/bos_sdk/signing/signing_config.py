"""
Configuration management for request signing

This module provides the signer configuration, a fluent builder for it and
validation helpers.
"""

from typing import Optional
from dataclasses import dataclass

from .types import (
    Credential,
    SigningError,
    SigningErrorCodes,
    TimestampGenerator,
)


DEFAULT_EXPIRY_SECONDS = 1800


@dataclass
class SigningConfig:
    """
    Configuration for request signing

    Attributes:
        credential: Access key pair
        default_expiry_seconds: Token validity used when a request does not
            override it
        timestamp_generator: Optional clock returning the signing time
    """
    credential: Credential
    default_expiry_seconds: int = DEFAULT_EXPIRY_SECONDS
    timestamp_generator: Optional[TimestampGenerator] = None


def validate_signing_config(config: SigningConfig) -> None:
    """
    Validate a signing configuration.

    Args:
        config: Configuration to validate

    Raises:
        SigningError: If the configuration is unusable
    """
    if not isinstance(config, SigningConfig):
        raise SigningError(
            "Config must be a SigningConfig instance",
            SigningErrorCodes.INVALID_CONFIG,
            {"config_type": str(type(config))}
        )

    if not isinstance(config.credential, Credential):
        raise SigningError(
            "Credential must be a Credential instance",
            SigningErrorCodes.INVALID_CREDENTIAL
        )

    expiry = config.default_expiry_seconds
    if isinstance(expiry, bool) or not isinstance(expiry, int) or expiry <= 0:
        raise SigningError(
            f"Default expiry must be a positive integer: {expiry}",
            SigningErrorCodes.INVALID_EXPIRY,
            {"default_expiry_seconds": expiry}
        )

    if config.timestamp_generator is not None and not callable(config.timestamp_generator):
        raise SigningError(
            "Timestamp generator must be callable",
            SigningErrorCodes.INVALID_CONFIG
        )


class SigningConfigBuilder:
    """
    Builder for creating signing configurations with fluent API
    """

    def __init__(self):
        self._access_key: Optional[str] = None
        self._secret_key: Optional[str] = None
        self._credential: Optional[Credential] = None
        self._default_expiry: int = DEFAULT_EXPIRY_SECONDS
        self._timestamp_generator: Optional[TimestampGenerator] = None

    def access_key(self, access_key: str) -> 'SigningConfigBuilder':
        """Set the access key id."""
        self._access_key = access_key
        return self

    def secret_key(self, secret_key: str) -> 'SigningConfigBuilder':
        """Set the secret access key."""
        self._secret_key = secret_key
        return self

    def credential(self, credential: Credential) -> 'SigningConfigBuilder':
        """Use an existing credential instead of separate keys."""
        self._credential = credential
        return self

    def default_expiry(self, seconds: int) -> 'SigningConfigBuilder':
        """Set the default token validity in seconds."""
        self._default_expiry = seconds
        return self

    def timestamp_generator(self, generator: TimestampGenerator) -> 'SigningConfigBuilder':
        """Set a custom clock."""
        self._timestamp_generator = generator
        return self

    def build(self) -> SigningConfig:
        """
        Build the signing configuration.

        Returns:
            SigningConfig: Validated configuration

        Raises:
            SigningError: If keys are missing or invalid
        """
        credential = self._credential
        if credential is None:
            try:
                credential = Credential(self._access_key, self._secret_key)
            except ValueError as e:
                raise SigningError(
                    f"Invalid credential: {e}",
                    SigningErrorCodes.INVALID_CREDENTIAL
                ) from e

        config = SigningConfig(
            credential=credential,
            default_expiry_seconds=self._default_expiry,
            timestamp_generator=self._timestamp_generator
        )
        validate_signing_config(config)
        return config


def create_signing_config() -> SigningConfigBuilder:
    """
    Create a new signing configuration builder.

    Returns:
        SigningConfigBuilder: New builder instance
    """
    return SigningConfigBuilder()
