"""
bce-auth-v1 request authorizer

This module derives the ``Authorization`` header value for a BOS request.
A short-lived signing key is derived from the secret key and the token
prefix, and the canonical request is then signed with that key:

    signing_key = hex(HMAC-SHA256(secret_key, auth_prefix))
    signature   = hex(HMAC-SHA256(signing_key, canonical_request))

The signer holds only an immutable configuration, so one instance can be
shared freely between threads.
"""

import logging
from typing import Any, Mapping, Optional, Union

from cryptography.hazmat.primitives import hashes, hmac

from .types import (
    AuthorizationResult,
    Credential,
    HeaderDict,
    QueryDict,
    SigningError,
    SigningErrorCodes,
    SigningOptions,
    SigningRequest,
)
from .utils import format_auth_timestamp, generate_timestamp, to_hex
from .headers import select_headers_to_sign
from .canonical_request import CanonicalRequestBuilder
from .signing_config import (
    DEFAULT_EXPIRY_SECONDS,
    SigningConfig,
    validate_signing_config,
)

logger = logging.getLogger(__name__)

AUTH_VERSION = 'bce-auth-v1'

OptionsLike = Union[SigningOptions, Mapping[str, Any], None]


def _hmac_sha256_hex(key: str, message: str) -> str:
    mac = hmac.HMAC(key.encode('utf-8'), hashes.SHA256())
    mac.update(message.encode('utf-8'))
    return to_hex(mac.finalize())


def build_auth_prefix(access_key: str, timestamp: str, expired_in: int) -> str:
    """
    Build the token prefix.

    Args:
        access_key: Public access key id
        timestamp: Signing time, ``YYYY-MM-DDTHH:MM:SSZ``
        expired_in: Validity in seconds

    Returns:
        str: ``bce-auth-v1/{access_key}/{timestamp}/{expired_in}``
    """
    return f'{AUTH_VERSION}/{access_key}/{timestamp}/{expired_in}'


def derive_signing_key(secret_key: str, auth_prefix: str) -> str:
    """
    Derive the per-request signing key.

    Args:
        secret_key: Secret access key
        auth_prefix: Token prefix scoping the key to identity and time

    Returns:
        str: Lowercase hex HMAC-SHA256 digest, used as-is as the next key
    """
    return _hmac_sha256_hex(secret_key, auth_prefix)


def sign(signing_key: str, canonical_request: str) -> str:
    """
    Sign a canonical request.

    Args:
        signing_key: Hex signing key from :func:`derive_signing_key`
        canonical_request: Canonical request string

    Returns:
        str: Lowercase hex HMAC-SHA256 signature
    """
    return _hmac_sha256_hex(signing_key, canonical_request)


def assemble_token(auth_prefix: str, signed_headers: str, signature: str) -> str:
    """Join prefix, signed header list and signature into the final token."""
    return f'{auth_prefix}/{signed_headers}/{signature}'


class Authorizer:
    """
    bce-auth-v1 signer

    Produces a time-bounded authorization token for a request from its
    method, path, query and headers.
    """

    def __init__(self, config: SigningConfig):
        """
        Initialize the authorizer with configuration.

        Args:
            config: Signing configuration

        Raises:
            SigningError: If configuration is invalid
        """
        validate_signing_config(config)
        self.config = config

    @classmethod
    def from_keys(
        cls,
        access_key: str,
        secret_key: str,
        default_expiry_seconds: int = DEFAULT_EXPIRY_SECONDS
    ) -> 'Authorizer':
        """Create an authorizer straight from an access key pair."""
        try:
            credential = Credential(access_key, secret_key)
        except ValueError as e:
            raise SigningError(
                f"Invalid credential: {e}",
                SigningErrorCodes.INVALID_CREDENTIAL
            ) from e
        return cls(SigningConfig(credential, default_expiry_seconds))

    @property
    def access_key(self) -> str:
        return self.config.credential.access_key

    def authorize(
        self,
        method: str,
        path: str,
        query: Optional[QueryDict] = None,
        headers: Optional[HeaderDict] = None,
        options: OptionsLike = None
    ) -> str:
        """
        Produce the ``Authorization`` header value for a request.

        Args:
            method: HTTP method
            path: Request path
            query: Query parameters (None values are valueless flags)
            headers: Headers as they will be sent
            options: ``SigningOptions`` or a mapping with ``sign_headers``
                and ``expired_in``

        Returns:
            str: Authorization token
        """
        request = SigningRequest(
            method=method,
            path=path,
            query=query or {},
            headers=headers or {},
            options=SigningOptions.coerce(options)
        )
        return self.sign_request(request).token

    def sign_request(self, request: SigningRequest) -> AuthorizationResult:
        """
        Sign a request and return every intermediate value.

        Args:
            request: Request to sign

        Returns:
            AuthorizationResult: Token and the values it was built from
        """
        selection = select_headers_to_sign(request.headers, request.options.sign_headers)
        builder = CanonicalRequestBuilder(request, selection)

        canonical_request = builder.build()
        signed_headers = builder.signed_headers()

        expired_in = request.options.expired_in or self.config.default_expiry_seconds

        # Sampled once; the prefix and the reported timestamp must agree.
        timestamp = format_auth_timestamp(self._now())
        auth_prefix = build_auth_prefix(self.access_key, timestamp, expired_in)

        signing_key = derive_signing_key(self.config.credential.secret_key, auth_prefix)
        signature = sign(signing_key, canonical_request)

        logger.debug(f"Canonical request for {request.method} {request.path}:\n{canonical_request}")

        return AuthorizationResult(
            token=assemble_token(auth_prefix, signed_headers, signature),
            auth_prefix=auth_prefix,
            canonical_request=canonical_request,
            signed_headers=signed_headers,
            signature=signature,
            timestamp=timestamp
        )

    def _now(self):
        generator = self.config.timestamp_generator or generate_timestamp
        return generator()


def create_authorizer(config: SigningConfig) -> Authorizer:
    """
    Create a new authorizer.

    Args:
        config: Signing configuration

    Returns:
        Authorizer: Configured authorizer instance
    """
    return Authorizer(config)


def authorize(
    credential: Credential,
    method: str,
    path: str,
    query: Optional[QueryDict] = None,
    headers: Optional[HeaderDict] = None,
    options: OptionsLike = None
) -> str:
    """
    Sign a single request with the given credential.

    Returns:
        str: Authorization token
    """
    authorizer = create_authorizer(SigningConfig(credential))
    return authorizer.authorize(method, path, query, headers, options)
