"""
Header selection for request signing

Decides which outgoing headers are bound into the signature. The four
mandatory headers and every ``x-bce-`` header are always signed; any other
header is signed only when the caller explicitly asks for it.
"""

from typing import Iterable, Mapping

from requests.structures import CaseInsensitiveDict

from .types import HeaderSelection, SigningError, SigningErrorCodes
from .utils import normalize_header_name


HEADERS_TO_SIGN = (
    'host',
    'content-length',
    'content-type',
    'content-md5',
)

BCE_HEADER_PREFIX = 'x-bce-'


def is_default_signed_header(name: str) -> bool:
    """
    Check whether a header is signed regardless of caller options.

    Args:
        name: Header name in any casing

    Returns:
        bool: True for mandatory and ``x-bce-`` namespaced headers
    """
    normalized = normalize_header_name(name)
    return normalized in HEADERS_TO_SIGN or normalized.startswith(BCE_HEADER_PREFIX)


def select_headers_to_sign(
    headers: Mapping[str, str],
    sign_headers: Iterable[str] = ()
) -> HeaderSelection:
    """
    Partition request headers into signed and unsigned ones.

    Args:
        headers: Headers as they will be sent on the wire
        sign_headers: Extra header names to sign (case-insensitive)

    Returns:
        HeaderSelection: Selected headers (original names and values kept)
            and whether any of them was selected only by explicit request
    """
    explicit = {normalize_header_name(h) for h in sign_headers}

    selected = CaseInsensitiveDict()
    has_explicit_signed_header = False

    for name, value in headers.items():
        if not isinstance(name, str):
            raise SigningError(
                f"Header name must be a string, got {type(name)}",
                SigningErrorCodes.INVALID_HEADERS,
                {"header": repr(name)}
            )

        if is_default_signed_header(name):
            selected[name] = value
        elif normalize_header_name(name) in explicit:
            selected[name] = value
            has_explicit_signed_header = True

    return HeaderSelection(
        selected=selected,
        has_explicit_signed_header=has_explicit_signed_header
    )
