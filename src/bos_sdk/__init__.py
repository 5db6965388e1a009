"""
BOS Python SDK
bce-auth-v1 request signing and a bucket client for Baidu Object Storage
"""

from .version import __version__
from .exceptions import (
    BosSDKError,
    ValidationError,
    ConfigError,
    ServerCommunicationError,
    BosError,
)
from .config import (
    ClientConfig,
    load_config_from_dict,
    load_config_from_json,
    load_config_from_file,
    load_config_from_env,
)
from .http_client import (
    BosClient,
    create_client,
    build_query,
    parse_headers,
)
from .signing import (
    # Core signing functionality
    Authorizer,
    create_authorizer,
    authorize,
    build_auth_prefix,
    derive_signing_key,
    sign,
    # Types
    Credential,
    SigningRequest,
    SigningOptions,
    AuthorizationResult,
    SigningError,
    # Configuration
    DEFAULT_EXPIRY_SECONDS,
    SigningConfig,
    SigningConfigBuilder,
    create_signing_config,
    # HTTP Integration
    BceAuth,
)

__all__ = [
    '__version__',
    # Exceptions
    'BosSDKError',
    'ValidationError',
    'ConfigError',
    'ServerCommunicationError',
    'BosError',
    # Configuration
    'ClientConfig',
    'load_config_from_dict',
    'load_config_from_json',
    'load_config_from_file',
    'load_config_from_env',
    # HTTP client
    'BosClient',
    'create_client',
    'build_query',
    'parse_headers',
    # Signing
    'Authorizer',
    'create_authorizer',
    'authorize',
    'build_auth_prefix',
    'derive_signing_key',
    'sign',
    'Credential',
    'SigningRequest',
    'SigningOptions',
    'AuthorizationResult',
    'SigningError',
    'DEFAULT_EXPIRY_SECONDS',
    'SigningConfig',
    'SigningConfigBuilder',
    'create_signing_config',
    'BceAuth',
]
