"""
Canonical request construction for bce-auth-v1 signatures

This module builds the deterministic string that gets signed:

    METHOD \\n canonical URI \\n canonical query string \\n canonical headers

Query pairs and header lines are sorted on their fully formatted form, not
on the key alone, so that the server can reproduce the exact same string.
"""

from typing import Iterable, Mapping

from .types import (
    HeaderSelection,
    QueryDict,
    SigningError,
    SigningErrorCodes,
    SigningRequest,
)
from .utils import uri_encode, normalize_header_name


def get_canonical_uri(path: str) -> str:
    """
    Build the canonical URI for an object path.

    Args:
        path: Request path, leading slashes optional

    Returns:
        str: Encoded path with exactly one leading ``/`` and literal separators
    """
    path = '/' + path.lstrip('/')
    return uri_encode(path).replace('%2F', '/')


def format_query_pair(key: str, value) -> str:
    """Format one query parameter; None stands for a valueless flag."""
    if value is None:
        return uri_encode(key)
    return f'{uri_encode(key)}={uri_encode(value)}'


def get_canonical_query_string(query: QueryDict) -> str:
    """
    Build the canonical query string.

    Args:
        query: Query parameters

    Returns:
        str: Sorted ``key=value`` pairs joined with ``&`` ("" for no query)
    """
    pairs = sorted(format_query_pair(key, value) for key, value in query.items())
    return '&'.join(pairs)


def format_header_line(name: str, value) -> str:
    """Format one canonical header line."""
    if value is None:
        raise SigningError(
            f"Header value cannot be None: {name}",
            SigningErrorCodes.INVALID_HEADERS,
            {"header": name}
        )
    if isinstance(value, bytes):
        value = value.decode('latin-1')
    return f'{uri_encode(normalize_header_name(name))}:{uri_encode(str(value).strip())}'


def get_canonical_headers(headers: Mapping[str, str]) -> str:
    """
    Build the canonical header block.

    Args:
        headers: Headers selected for signing

    Returns:
        str: Sorted ``name:value`` lines joined with newlines
    """
    lines = sorted(format_header_line(name, value) for name, value in headers.items())
    return '\n'.join(lines)


def get_signed_headers(names: Iterable[str]) -> str:
    """
    Build the signed header list embedded in the token.

    Args:
        names: Names of every signed header

    Returns:
        str: Lower-cased, encoded, sorted names joined with ``;``
    """
    return ';'.join(sorted(uri_encode(normalize_header_name(name)) for name in names))


def build_canonical_request(
    method: str,
    path: str,
    query: QueryDict,
    selected_headers: Mapping[str, str]
) -> str:
    """
    Assemble the canonical request string.

    Args:
        method: HTTP method, used verbatim
        path: Request path
        query: Query parameters
        selected_headers: Headers chosen for signing

    Returns:
        str: Canonical request
    """
    return '\n'.join([
        method,
        get_canonical_uri(path),
        get_canonical_query_string(query),
        get_canonical_headers(selected_headers),
    ])


class CanonicalRequestBuilder:
    """
    Canonical request builder for a single signing request
    """

    def __init__(self, request: SigningRequest, selection: HeaderSelection):
        self.request = request
        self.selection = selection

    def build(self) -> str:
        """Build the canonical request string."""
        return build_canonical_request(
            self.request.method,
            self.request.path,
            self.request.query,
            self.selection.selected
        )

    def signed_headers(self) -> str:
        """
        Header list for the token.

        Empty unless at least one header was signed on explicit request.
        """
        if not self.selection.has_explicit_signed_header:
            return ''
        return get_signed_headers(self.selection.selected.keys())
