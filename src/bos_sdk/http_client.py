"""
HTTP client for BOS bucket operations

This module provides the transport layer around the bce-auth-v1 authorizer:
it fills in the mandatory headers, signs the request, dispatches it with
``requests`` and maps error responses onto SDK exceptions.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import requests

from .config import ClientConfig
from .exceptions import BosError, ServerCommunicationError, ValidationError
from .signing.authorizer import Authorizer, OptionsLike
from .signing.canonical_request import get_canonical_uri
from .signing.signing_config import SigningConfig
from .signing.types import Credential, SigningError
from .signing.utils import (
    calculate_content_md5,
    format_http_date,
    normalize_header_name,
    to_bytes,
    uri_encode,
)

logger = logging.getLogger(__name__)

RETURN_FORMATS = ('body', 'text', 'body-json', 'headers', 'both')

SUPPORTED_ACLS = ('private', 'public-read')

Body = Union[str, bytes, None]


def build_query(query: Mapping[str, Any]) -> str:
    """
    Build a URL query string in insertion order.

    Args:
        query: Query parameters; None values become bare keys

    Returns:
        str: Encoded query string without the leading ``?``
    """
    parts = []
    for key, value in query.items():
        if value is None:
            parts.append(uri_encode(key))
        else:
            parts.append(f'{uri_encode(key)}={uri_encode(value)}')
    return '&'.join(parts)


def parse_headers(response: requests.Response) -> Dict[str, Union[str, List[str]]]:
    """
    Flatten response headers.

    A header sent once maps to its string value, a repeated header to the
    list of its values in order.
    """
    raw_headers = getattr(response.raw, 'headers', None)
    if raw_headers is None or not hasattr(raw_headers, 'getlist'):
        return dict(response.headers)

    headers: Dict[str, Union[str, List[str]]] = {}
    for name in raw_headers.keys():
        if name in headers:
            continue
        values = raw_headers.getlist(name)
        headers[name] = values[0] if len(values) == 1 else list(values)
    return headers


def _merge_option(options: Dict[str, Any], key: str, values: Mapping[str, Any]) -> None:
    merged = dict(options.get(key) or {})
    merged.update(values)
    options[key] = merged


class BosClient:
    """
    HTTP client for a single BOS bucket.

    Every request is signed with bce-auth-v1. Transport failures and error
    responses surface as :class:`ServerCommunicationError`, structured API
    errors as :class:`BosError`.
    """

    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None):
        """
        Initialize the HTTP client.

        Args:
            config: Client configuration
            session: Optional existing requests session to use
        """
        self.config = config
        self.authorizer = Authorizer(SigningConfig(
            credential=Credential(config.access_key, config.secret_key),
            default_expiry_seconds=config.default_expiry_seconds
        ))
        self.session = session or self._create_session()

        logger.info(f"Initialized BOS client for bucket endpoint: {config.host}")

    def _create_session(self) -> requests.Session:
        """Create HTTP session with default headers."""
        session = requests.Session()
        session.headers.update({
            'User-Agent': self.config.user_agent
        })
        return session

    def build_headers(
        self,
        method: str,
        path: str,
        query: Mapping[str, Any],
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[bytes] = None,
        authorize: OptionsLike = None
    ) -> Dict[str, str]:
        """
        Complete and sign the outgoing headers.

        Sets ``Host``, then ``Date``, ``Content-Length``, ``Content-MD5`` and
        ``Authorization`` unless the caller already supplied them.

        Returns:
            dict: Headers ready to send

        Raises:
            ValidationError: If the request cannot be signed
        """
        headers = {
            name: value for name, value in (headers or {}).items()
            if normalize_header_name(name) != 'host'
        }
        present = {normalize_header_name(name) for name in headers}

        headers['Host'] = self.config.host

        if 'date' not in present:
            headers['Date'] = format_http_date()

        if 'content-length' not in present:
            headers['Content-Length'] = str(len(body) if body is not None else 0)

        if 'content-md5' not in present and body:
            headers['Content-MD5'] = calculate_content_md5(body)

        if 'authorization' not in present:
            try:
                headers['Authorization'] = self.authorizer.authorize(
                    method, path, query, headers, authorize
                )
            except SigningError as e:
                raise ValidationError(e.message, e.code, e.details) from e

        return headers

    def build_url(self, path: str, query: Mapping[str, Any]) -> str:
        """Build the request URL for a path on the configured bucket."""
        url = f'{self.config.scheme}://{self.config.host}{get_canonical_uri(path)}'
        if query:
            url += '?' + build_query(query)
        return url

    def request(
        self,
        method: str,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Body = None,
        authorize: OptionsLike = None,
        return_format: Optional[str] = None,
        **request_kwargs
    ) -> Any:
        """
        Make a signed request against the bucket.

        Args:
            method: HTTP method
            path: Object path
            query: Query parameters (None values are valueless flags)
            headers: Extra request headers
            body: Request body
            authorize: Signing options (``sign_headers``, ``expired_in``)
            return_format: ``body`` (bytes, default), ``text``,
                ``body-json``, ``headers`` or ``both``
            **request_kwargs: Additional arguments for requests

        Returns:
            The response shaped according to ``return_format``

        Raises:
            BosError: On structured API error responses
            ServerCommunicationError: On HTTP or network errors
        """
        if return_format is not None and return_format not in RETURN_FORMATS:
            raise ValidationError(f"Unsupported return format: {return_format}")

        path = '/' + path.lstrip('/')
        query = dict(query or {})
        body_bytes = to_bytes(body) if body is not None else None

        headers = self.build_headers(method, path, query, headers, body_bytes, authorize)
        url = self.build_url(path, query)

        request_kwargs.setdefault('timeout', self.config.timeouts)
        request_kwargs.setdefault('verify', self.config.verify_ssl)

        try:
            logger.debug(f"Making {method} request to {url}")
            response = self.session.request(
                method, url, headers=headers, data=body_bytes, **request_kwargs
            )
        except requests.exceptions.Timeout as e:
            raise ServerCommunicationError(f"Request timeout: {e}", "TIMEOUT") from e
        except requests.exceptions.ConnectionError as e:
            raise ServerCommunicationError(f"Connection error: {e}", "CONNECTION_ERROR") from e
        except requests.exceptions.RequestException as e:
            raise ServerCommunicationError(f"Request failed: {e}", "REQUEST_ERROR") from e

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise self._translate_error_response(response) from e

        return self.process_return(response, return_format)

    def _translate_error_response(self, response: requests.Response) -> ServerCommunicationError:
        """Map a non-2xx response onto the matching SDK exception."""
        status = response.status_code
        try:
            error_data = response.json()
        except ValueError:
            error_data = None

        if isinstance(error_data, dict) and 'code' in error_data and 'message' in error_data:
            logger.warning(
                f"BOS request failed with {status}: {error_data['code']} "
                f"(request id: {error_data.get('requestId')})"
            )
            return BosError(
                error_data['message'],
                error_data['code'],
                http_status=status,
                request_id=error_data.get('requestId'),
                details={'url': response.url}
            )

        logger.warning(f"BOS request failed with {status}: {response.reason}")
        return ServerCommunicationError(
            f"HTTP {status}: {response.reason}",
            "HTTP_ERROR",
            http_status=status,
            details={'url': response.url}
        )

    def process_return(self, response: requests.Response, return_format: Optional[str] = None) -> Any:
        """
        Shape the response according to the requested format.

        Raises:
            ServerCommunicationError: If a JSON body cannot be decoded
        """
        if return_format == 'body-json':
            try:
                return response.json()
            except ValueError as e:
                raise ServerCommunicationError(
                    f"Invalid JSON response: {e}", "INVALID_RESPONSE",
                    http_status=response.status_code
                ) from e
        if return_format == 'headers':
            return parse_headers(response)
        if return_format == 'both':
            return {
                'headers': parse_headers(response),
                'body': response.content,
            }
        if return_format == 'text':
            return response.text
        return response.content

    def get_object(self, path: str, **options) -> Any:
        """Get an object's content."""
        return self.request('GET', path, **options)

    def get_object_meta(self, path: str, **options) -> Any:
        """Get an object's metadata headers."""
        options.setdefault('return_format', 'headers')
        return self.request('HEAD', path, **options)

    def put_object(self, path: str, content: Body, **options) -> Any:
        """Upload an object."""
        options['body'] = content
        options.setdefault('return_format', 'headers')
        return self.request('PUT', path, **options)

    def copy_object(self, source: str, dest: str, **options) -> Any:
        """Copy an object within the bucket."""
        source_path = get_canonical_uri(f"{self.config.bucket}/{source.lstrip('/')}")
        _merge_option(options, 'headers', {'x-bce-copy-source': source_path})
        options.setdefault('return_format', 'body-json')
        return self.request('PUT', dest, **options)

    def fetch_object(self, path: str, source: str, **options) -> Any:
        """Have the server fetch a remote URL into an object."""
        _merge_option(options, 'query', {'fetch': None})
        _merge_option(options, 'headers', {'x-bce-fetch-source': source})
        options.setdefault('return_format', 'body-json')
        return self.request('POST', path, **options)

    def append_object(self, path: str, content: Body, **options) -> Any:
        """Append content to an appendable object."""
        _merge_option(options, 'query', {'append': None})
        options['body'] = content
        options.setdefault('return_format', 'headers')
        return self.request('POST', path, **options)

    def delete_object(self, path: str, **options) -> Any:
        """Delete an object."""
        options.setdefault('return_format', 'headers')
        return self.request('DELETE', path, **options)

    def delete_objects(self, paths: Iterable[str], **options) -> Any:
        """Delete several objects in one request."""
        objects = [{'key': path.lstrip('/')} for path in paths]
        _merge_option(options, 'query', {'delete': None})
        options['body'] = json.dumps({'objects': objects})
        options.setdefault('return_format', 'headers')
        return self.request('POST', '/', **options)

    def get_object_acl(self, path: str, **options) -> Any:
        """Get an object's ACL."""
        _merge_option(options, 'query', {'acl': None})
        options.setdefault('return_format', 'body-json')
        return self.request('GET', path, **options)

    def put_object_acl(self, path: str, acl: str, **options) -> Any:
        """
        Set an object's canned ACL.

        Args:
            path: Object path
            acl: ``private`` or ``public-read``

        Raises:
            ValidationError: If the ACL is not supported
        """
        if acl not in SUPPORTED_ACLS:
            raise ValidationError(
                f"Unsupported acl: {acl}, either private or public-read",
                "INVALID_ACL",
                {"acl": acl}
            )

        _merge_option(options, 'headers', {'x-bce-acl': acl})
        _merge_option(options, 'query', {'acl': None})
        options.setdefault('return_format', 'headers')
        return self.request('PUT', path, **options)

    def delete_object_acl(self, path: str, **options) -> Any:
        """Remove an object's ACL so it inherits the bucket ACL."""
        _merge_option(options, 'query', {'acl': None})
        options.setdefault('return_format', 'headers')
        return self.request('DELETE', path, **options)

    def get_bucket_acl(self, **options) -> Any:
        """Get the bucket ACL."""
        _merge_option(options, 'query', {'acl': None})
        options.setdefault('return_format', 'body-json')
        return self.request('GET', '/', **options)

    def list_objects(self, **options) -> Any:
        """List objects; pass ``query`` for ``prefix``, ``delimiter``, ``marker``, ``maxKeys``."""
        options.setdefault('return_format', 'body-json')
        return self.request('GET', '/', **options)

    def close(self):
        """Close the HTTP session."""
        if hasattr(self, 'session'):
            self.session.close()
            logger.debug("HTTP session closed")

    def __enter__(self) -> 'BosClient':
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


def create_client(
    access_key: str,
    secret_key: str,
    bucket: str,
    region: str,
    **kwargs
) -> BosClient:
    """
    Create a BOS client with default configuration.

    Args:
        access_key: Access key id
        secret_key: Secret access key
        bucket: Bucket name
        region: Region code
        **kwargs: Further :class:`ClientConfig` fields

    Returns:
        BosClient: Configured client
    """
    config = ClientConfig(
        access_key=access_key,
        secret_key=secret_key,
        bucket=bucket,
        region=region,
        **kwargs
    )
    return BosClient(config)
