"""
BOS Python SDK - Request Signing Module

bce-auth-v1 request authorization. This module selects the headers to sign,
builds the canonical request and derives the ``Authorization`` token through
a two-stage HMAC-SHA256 chain.
"""

from .types import (
    Credential,
    SigningRequest,
    SigningOptions,
    HeaderSelection,
    AuthorizationResult,
    SigningError,
    SigningErrorCodes,
)

from .headers import (
    HEADERS_TO_SIGN,
    BCE_HEADER_PREFIX,
    is_default_signed_header,
    select_headers_to_sign,
)

from .canonical_request import (
    CanonicalRequestBuilder,
    build_canonical_request,
    get_canonical_uri,
    get_canonical_query_string,
    get_canonical_headers,
    get_signed_headers,
)

from .authorizer import (
    AUTH_VERSION,
    Authorizer,
    create_authorizer,
    authorize,
    build_auth_prefix,
    derive_signing_key,
    sign,
    assemble_token,
)

from .signing_config import (
    DEFAULT_EXPIRY_SECONDS,
    SigningConfig,
    SigningConfigBuilder,
    create_signing_config,
    validate_signing_config,
)

from .integration import (
    BceAuth,
    split_url,
)

from .utils import (
    uri_encode,
    generate_timestamp,
    format_auth_timestamp,
    format_http_date,
    normalize_header_name,
    calculate_content_md5,
)

# Public API exports
__all__ = [
    # Core signing functionality
    'Authorizer',
    'create_authorizer',
    'authorize',
    'build_auth_prefix',
    'derive_signing_key',
    'sign',
    'assemble_token',
    'AUTH_VERSION',
    # Types
    'Credential',
    'SigningRequest',
    'SigningOptions',
    'HeaderSelection',
    'AuthorizationResult',
    'SigningError',
    'SigningErrorCodes',
    # Header selection
    'HEADERS_TO_SIGN',
    'BCE_HEADER_PREFIX',
    'is_default_signed_header',
    'select_headers_to_sign',
    # Canonicalization
    'CanonicalRequestBuilder',
    'build_canonical_request',
    'get_canonical_uri',
    'get_canonical_query_string',
    'get_canonical_headers',
    'get_signed_headers',
    # Configuration
    'DEFAULT_EXPIRY_SECONDS',
    'SigningConfig',
    'SigningConfigBuilder',
    'create_signing_config',
    'validate_signing_config',
    # Utilities
    'uri_encode',
    'generate_timestamp',
    'format_auth_timestamp',
    'format_http_date',
    'normalize_header_name',
    'calculate_content_md5',
    # HTTP Integration
    'BceAuth',
    'split_url',
]
