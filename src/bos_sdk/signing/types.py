"""
Type definitions for request signing functionality

This module provides the data classes exchanged between the stages of the
bce-auth-v1 signing pipeline: credentials, per-request options, the request
to sign, the header selection and the final authorization result.
"""

from datetime import datetime
from typing import Dict, Iterable, Mapping, Optional, Union, Callable, Any
from dataclasses import dataclass, field

from requests.structures import CaseInsensitiveDict


@dataclass(frozen=True)
class Credential:
    """
    Access key pair used to sign requests

    Attributes:
        access_key: Public access key id, embedded in every token
        secret_key: Secret access key, only ever used as HMAC key material
    """
    access_key: str
    secret_key: str = field(repr=False)

    def __post_init__(self):
        """Validate credential after initialization"""
        if not isinstance(self.access_key, str) or not self.access_key:
            raise ValueError("Access key must be a non-empty string")

        if not isinstance(self.secret_key, str) or not self.secret_key:
            raise ValueError("Secret key must be a non-empty string")


@dataclass
class SigningOptions:
    """
    Signing options for individual requests

    Attributes:
        sign_headers: Extra header names to bind into the signature
        expired_in: Token validity in seconds (signer default when None)
    """
    sign_headers: Iterable[str] = ()
    expired_in: Optional[int] = None

    def __post_init__(self):
        """Normalize header names and validate expiry"""
        if isinstance(self.sign_headers, str):
            self.sign_headers = [self.sign_headers]
        self.sign_headers = frozenset(h.strip().lower() for h in self.sign_headers)

        if self.expired_in is not None:
            if isinstance(self.expired_in, bool) or not isinstance(self.expired_in, int):
                raise ValueError("Expiry must be an integer number of seconds")
            if self.expired_in <= 0:
                raise ValueError("Expiry must be positive")

    @classmethod
    def coerce(cls, options: Union['SigningOptions', Mapping[str, Any], None]) -> 'SigningOptions':
        """Build options from an instance, a ``{sign_headers, expired_in}`` mapping or None."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        try:
            return cls(
                sign_headers=options.get('sign_headers') or (),
                expired_in=options.get('expired_in'),
            )
        except ValueError as e:
            raise SigningError(
                str(e),
                SigningErrorCodes.INVALID_EXPIRY,
                {"expired_in": options.get('expired_in')}
            ) from e


QueryValue = Union[str, int, None]
QueryDict = Mapping[str, QueryValue]
HeaderDict = Mapping[str, str]
TimestampGenerator = Callable[[], datetime]


@dataclass
class SigningRequest:
    """
    Request to be signed

    Attributes:
        method: HTTP method, used verbatim (conventionally upper case)
        path: Object path, with or without the leading slash
        query: Query parameters; a None value is a valueless flag
        headers: Headers exactly as they will be sent on the wire
        options: Per-request signing options
    """
    method: str
    path: str
    query: QueryDict = field(default_factory=dict)
    headers: HeaderDict = field(default_factory=dict)
    options: SigningOptions = field(default_factory=SigningOptions)

    def __post_init__(self):
        """Validate request after initialization"""
        if not isinstance(self.method, str) or not self.method:
            raise SigningError(
                "Request method cannot be empty",
                SigningErrorCodes.INVALID_METHOD,
                {"method": self.method}
            )

        if self.query is None:
            self.query = {}
        if self.headers is None:
            self.headers = {}

        if not isinstance(self.query, Mapping):
            raise SigningError(
                "Query must be a mapping",
                SigningErrorCodes.INVALID_QUERY,
                {"query_type": str(type(self.query))}
            )

        if not isinstance(self.headers, Mapping):
            raise SigningError(
                "Headers must be a mapping",
                SigningErrorCodes.INVALID_HEADERS,
                {"headers_type": str(type(self.headers))}
            )

        self.options = SigningOptions.coerce(self.options)


@dataclass
class HeaderSelection:
    """
    Headers chosen for signing

    Attributes:
        selected: Signed headers, original names kept, case-insensitive lookup
        has_explicit_signed_header: True when any header was signed only
            because the caller asked for it
    """
    selected: CaseInsensitiveDict
    has_explicit_signed_header: bool = False


@dataclass
class AuthorizationResult:
    """
    Outcome of one signing operation

    Attributes:
        token: Value for the ``Authorization`` header
        auth_prefix: ``bce-auth-v1/{ak}/{timestamp}/{expiry}``
        canonical_request: The exact string that was signed
        signed_headers: Semicolon separated header list ("" when implicit)
        signature: Lowercase hex HMAC-SHA256 signature
        timestamp: Signing time as embedded in the token
    """
    token: str
    auth_prefix: str
    canonical_request: str
    signed_headers: str
    signature: str
    timestamp: str


class SigningError(Exception):
    """
    Error class for signing operations

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Optional additional error details
    """

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.code}, details: {self.details})"
        return f"{self.message} (code: {self.code})"

    def __repr__(self) -> str:
        return f"SigningError(message='{self.message}', code='{self.code}', details={self.details})"


class SigningErrorCodes:
    """Standard error codes for signing operations"""

    # Configuration errors
    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    INVALID_EXPIRY = "INVALID_EXPIRY"

    # Request errors
    INVALID_METHOD = "INVALID_METHOD"
    INVALID_QUERY = "INVALID_QUERY"
    INVALID_HEADERS = "INVALID_HEADERS"
